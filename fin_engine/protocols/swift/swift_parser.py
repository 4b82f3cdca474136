"""
SWIFT Block Tokenizer

Splits raw FIN text into its five blocks.

Blocks 1 and 2 are returned as raw payload strings for the header codec.
Blocks 3 and 5 (and block 4 in the ``{4:{177:..}{451:0}}`` service layout) are
split into ``{name:value}`` sub-blocks by brace-depth counting. Block 4 text
values are free text that may contain braces, so the text block ends at the
first ``-}`` that starts a line instead, and is split into tags on lines
beginning with ``:name:``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fin_engine.protocols.swift.swift_errors import (
    DuplicateBlock,
    MalformedTagLine,
    UnknownBlock,
    UnterminatedBlock,
)
from fin_engine.protocols.swift.swift_message import SwiftBlock3, SwiftBlock4, SwiftBlock5
from fin_engine.protocols.swift.tag_sequence import Tag

logger = logging.getLogger(__name__)

BLOCK_NUMBERS = (1, 2, 3, 4, 5)
TEXT_BLOCK_TERMINATOR = "\n-}"


@dataclass
class BlockPosition:
    """Position of a block in the message."""

    block_number: int
    start: int
    end: int
    content: str


@dataclass
class RawBlocks:
    """Tokenizer output: header payloads plus tag sequences."""

    block1: Optional[str] = None
    block2: Optional[str] = None
    block3: Optional[SwiftBlock3] = None
    block4: Optional[SwiftBlock4] = None
    block5: Optional[SwiftBlock5] = None
    positions: List[BlockPosition] = field(default_factory=list)

    def has_block(self, number: int) -> bool:
        return getattr(self, f"block{number}") is not None


class BlockTokenizer:
    """
    Tokenizer for SWIFT FIN messages.

    Handles:
    - Block markers ``{1:`` to ``{5:``
    - Nested ``{name:value}`` sub-blocks in blocks 3 and 5
    - Brace-safe text block scanning with multi-line values
    - LF and CRLF line breaks
    """

    # Block 4 tag line: 2-3 alphanumerics plus an optional letter option
    TAG_LINE_PATTERN = re.compile(r"^:([0-9A-Za-z]{2,3}[A-Z]?):")

    def __init__(self, lenient: bool = False):
        """
        Initialize tokenizer.

        Args:
            lenient: If True, skip or truncate malformed parts instead of raising
        """
        self.lenient = lenient

    def tokenize(self, raw_message: Optional[str]) -> RawBlocks:
        """
        Split a raw FIN message into blocks.

        Args:
            raw_message: Raw message text containing one message

        Returns:
            RawBlocks with absent blocks left as None

        Raises:
            UnknownBlock: Block identifier outside 1-5 (strict mode)
            UnterminatedBlock: Opening brace without a matching close (strict mode)
            MalformedTagLine: Tag line or sub-block violating the tag grammar (strict mode)
            DuplicateBlock: Same block number twice (strict mode)
        """
        result = RawBlocks()
        raw = raw_message or ""
        pos = 0

        while pos < len(raw):
            start = raw.find("{", pos)
            if start == -1:
                break

            marker = self._read_block_marker(raw, start)
            if marker is None:
                # Lenient mode skipping past an unreadable marker
                pos = start + 1
                continue
            number, payload_start = marker
            if number is None:
                # Lenient mode skipping a whole unknown block
                end = self._find_block_end(raw, start)
                if end == -1:
                    break
                pos = end + 1
                continue

            if number == 4:
                end, block = self._scan_text_block(raw, start, payload_start)
                content = raw[payload_start:end]
            else:
                end = self._find_block_end(raw, start)
                if end == -1:
                    if not self.lenient:
                        raise UnterminatedBlock(number, start)
                    end = len(raw)
                content = raw[payload_start:end]
                block = self._build_block(number, content, payload_start)

            if result.has_block(number):
                if not self.lenient:
                    raise DuplicateBlock(number, start)
                logger.debug(f"Ignoring repeated block {number} at offset {start}")
            else:
                setattr(result, f"block{number}", block)
                result.positions.append(
                    BlockPosition(
                        block_number=number,
                        start=start,
                        end=min(end + 1, len(raw)),
                        content=content,
                    )
                )

            pos = end + 1

        logger.debug(f"Tokenized {len(result.positions)} block(s)")
        return result

    def _read_block_marker(
        self, raw: str, start: int
    ) -> Optional[Tuple[Optional[int], int]]:
        """Read ``N:`` after an opening brace.

        Returns the block number (None for an unknown block skipped in lenient
        mode) and the payload offset, or None for an unreadable marker in
        lenient mode.
        """
        pos = start + 1
        while pos < len(raw) and raw[pos] not in ":{}":
            pos += 1

        if pos >= len(raw):
            if not self.lenient:
                raise UnterminatedBlock(None, start)
            return None

        identifier = raw[start + 1:pos]
        if raw[pos] != ":":
            if not self.lenient:
                raise UnknownBlock(identifier, start)
            return None

        if identifier.isdigit() and int(identifier) in BLOCK_NUMBERS:
            return int(identifier), pos + 1

        if not self.lenient:
            raise UnknownBlock(identifier, start)
        logger.debug(f"Skipping unknown block {identifier!r} at offset {start}")
        return None, pos + 1

    def _find_block_end(self, text: str, start: int) -> int:
        """Find the closing brace matching the one at ``start``, or -1."""
        depth = 0
        pos = start

        while pos < len(text):
            char = text[pos]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1

        return -1

    def _build_block(self, number: int, content: str, offset: int):
        if number in (1, 2):
            return content
        tags = self._split_sub_blocks(content, number, offset)
        if number == 3:
            return SwiftBlock3(tags)
        return SwiftBlock5(tags)

    def _split_sub_blocks(self, content: str, block_number: int, offset: int) -> List[Tag]:
        """Split ``{name:value}{name:value}`` into tags."""
        tags: List[Tag] = []
        pos = 0

        while pos < len(content):
            char = content[pos]
            if char != "{":
                if not char.isspace() and not self.lenient:
                    raise MalformedTagLine(
                        content[pos:], block=block_number, position=offset + pos
                    )
                pos += 1
                continue

            end = self._find_block_end(content, pos)
            if end == -1:
                if not self.lenient:
                    raise UnterminatedBlock(block_number, offset + pos)
                end = len(content)
            inner = content[pos + 1:end]

            name, colon, value = inner.partition(":")
            if not colon or not name or not name.isalnum():
                if not self.lenient:
                    raise MalformedTagLine(
                        inner, block=block_number, position=offset + pos
                    )
                logger.debug(f"Skipping malformed sub-block {inner!r} in block {block_number}")
            else:
                tags.append(Tag(name, value))
            pos = end + 1

        return tags

    def _scan_text_block(
        self, raw: str, start: int, payload_start: int
    ) -> Tuple[int, SwiftBlock4]:
        """Locate the end of block 4 and split it into tags.

        Returns the offset of the block's closing brace and the block.
        """
        if raw.startswith("{", payload_start):
            end = self._find_block_end(raw, start)
            if end == -1:
                if not self.lenient:
                    raise UnterminatedBlock(4, start)
                end = len(raw)
            tags = self._split_sub_blocks(raw[payload_start:end], 4, payload_start)
            return end, SwiftBlock4(tags, sub_block_form=True)

        if raw.startswith("-}", payload_start):
            return payload_start + 1, SwiftBlock4()

        terminator = raw.find(TEXT_BLOCK_TERMINATOR, payload_start)
        if terminator != -1:
            body = raw[payload_start:terminator]
            end = terminator + len(TEXT_BLOCK_TERMINATOR) - 1
        elif not self.lenient:
            raise UnterminatedBlock(4, start)
        else:
            fallback = raw.find("-}", payload_start)
            if fallback != -1:
                body = raw[payload_start:fallback]
                end = fallback + 1
            else:
                body = raw[payload_start:]
                end = len(raw)

        separator = "\r\n" if body.startswith("\r\n") or body.endswith("\r") else "\n"
        if body.endswith("\r"):
            body = body[:-1]

        tags = self._split_tag_lines(body, payload_start)
        return end, SwiftBlock4(tags, line_separator=separator)

    def _split_tag_lines(self, body: str, offset: int) -> List[Tag]:
        """Split the text block body into tags on ``:name:`` lines."""
        tags: List[Tag] = []
        current_name: Optional[str] = None
        current_lines: List[str] = []

        def flush():
            if current_name is not None:
                value = "\n".join(current_lines)
                if value.endswith("\r"):
                    value = value[:-1]
                tags.append(Tag(current_name, value))

        for line_number, line in enumerate(body.split("\n")):
            text = line[:-1] if line.endswith("\r") else line

            if text.startswith(":"):
                match = self.TAG_LINE_PATTERN.match(text)
                if match:
                    flush()
                    current_name = match.group(1)
                    current_lines = [line[match.end():]]
                    continue
                if not self.lenient:
                    raise MalformedTagLine(text, line_number=line_number, position=offset)

            if current_name is None:
                if text.strip() and not self.lenient:
                    raise MalformedTagLine(text, line_number=line_number, position=offset)
                continue

            current_lines.append(line)

        flush()
        return tags


def tokenize(raw_message: Optional[str], lenient: bool = False) -> RawBlocks:
    """Convenience wrapper around :class:`BlockTokenizer`."""
    return BlockTokenizer(lenient=lenient).tokenize(raw_message)
