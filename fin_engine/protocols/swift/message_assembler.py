"""
SWIFT Message Assembler

Top-level decode/encode entry points: tokenizes raw FIN text, decodes the
fixed-width headers and leaves blocks 3-5 as tag sequences.
"""

import logging
from typing import Optional

from fin_engine.core.config import Config
from fin_engine.protocols.swift.header_codec import decode_block1, decode_block2
from fin_engine.protocols.swift.swift_message import SwiftMessage
from fin_engine.protocols.swift.swift_parser import BlockTokenizer

logger = logging.getLogger(__name__)


class MessageAssembler:
    """Decodes and encodes complete FIN messages."""

    def __init__(self, lenient: bool = False, line_separator: str = "\n"):
        """
        Initialize assembler.

        Args:
            lenient: Default decode policy when ``decode`` is not told otherwise
            line_separator: Line break for text blocks built in code
        """
        self.lenient = lenient
        self.line_separator = line_separator

    @classmethod
    def from_config(cls, config: Config) -> "MessageAssembler":
        return cls(lenient=config.lenient, line_separator=config.parser.line_separator)

    def decode(self, raw_message: Optional[str], lenient: Optional[bool] = None) -> SwiftMessage:
        """
        Decode a raw FIN message.

        Args:
            raw_message: Raw text of exactly one message
            lenient: Overrides the assembler default for this call

        Returns:
            Decoded SwiftMessage; blocks missing from the input are None

        Raises:
            SwiftParseError: On malformed input in strict mode
        """
        lenient = self.lenient if lenient is None else lenient
        raw = BlockTokenizer(lenient=lenient).tokenize(raw_message)

        message = SwiftMessage(
            block1=decode_block1(raw.block1, lenient) if raw.block1 is not None else None,
            block2=decode_block2(raw.block2, lenient) if raw.block2 is not None else None,
            block3=raw.block3,
            block4=raw.block4,
            block5=raw.block5,
        )
        logger.debug(
            f"Decoded MT{message.message_type} ({'lenient' if lenient else 'strict'})"
        )
        return message

    def encode(self, message: SwiftMessage) -> str:
        """Reassemble blocks in order 1-5, leaving out absent and empty blocks."""
        return message.to_swift(self.line_separator)


def parse_swift_message(raw_message: Optional[str], lenient: bool = False) -> SwiftMessage:
    """
    Convenience function to decode a FIN message.

    Args:
        raw_message: Raw message text
        lenient: Best-effort decoding that never raises on irregular input

    Returns:
        Decoded SwiftMessage
    """
    return MessageAssembler(lenient=lenient).decode(raw_message)


def to_swift(message: SwiftMessage, line_separator: str = "\n") -> str:
    """Convenience function to encode a FIN message."""
    return MessageAssembler(line_separator=line_separator).encode(message)
