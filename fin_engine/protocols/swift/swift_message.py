"""
SWIFT FIN Message Structure

A FIN message has up to five blocks:
- Block 1: Basic Header (fixed width, see header_codec)
- Block 2: Application Header (fixed width, input or output)
- Block 3: User Header - {3:{108:MUR}{121:UETR}}
- Block 4: Text Block - {4:\\n:20:REF\\n:32A:...\\n-}
- Block 5: Trailer - {5:{CHK:checksum}}

Blocks 3, 4 and 5 are tag sequences. Field-level decomposition is deferred:
:meth:`SwiftMessage.field` wraps a tag in a :class:`Field` on demand.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

from fin_engine.protocols.swift.field_pattern import Field
from fin_engine.protocols.swift.header_codec import MessageDirection, SwiftBlock1, SwiftBlock2, SwiftBlock2Input
from fin_engine.protocols.swift.swift_codes import SwiftBlockType, get_message_category
from fin_engine.protocols.swift.tag_sequence import Tag, TagSequence

logger = logging.getLogger(__name__)


class _SubBlockSequence(TagSequence):
    """Tag sequence written as ``{name:value}`` sub-blocks."""

    block_type = SwiftBlockType.USER_HEADER

    def to_value(self) -> str:
        return "".join(tag.to_sub_block() for tag in self)

    def to_swift(self) -> str:
        """Render the block; empty blocks render as an empty string."""
        if self.is_empty():
            return ""
        return "{" + f"{self.block_type.number}:{self.to_value()}" + "}"


class SwiftBlock3(_SubBlockSequence):
    """
    Block 3: User Header Block

    Format: {3:{103:TGT}{108:MUR}{119:STP}{121:UETR}}
    """

    block_type = SwiftBlockType.USER_HEADER

    @property
    def mur(self) -> Optional[str]:
        """Message user reference (tag 108)."""
        return self.tag_value("108")

    @property
    def uetr(self) -> Optional[str]:
        """Unique end-to-end transaction reference (tag 121)."""
        return self.tag_value("121")

    @property
    def service_type_id(self) -> Optional[str]:
        return self.tag_value("111")

    @property
    def validation_flag(self) -> Optional[str]:
        return self.tag_value("119")

    @property
    def is_stp(self) -> bool:
        flag = self.validation_flag
        return flag is not None and flag.upper() == "STP"

    def generate_mur(
        self, overwrite_if_exist: bool = False, now: Optional[datetime] = None
    ) -> str:
        """
        Stamp a message user reference (tag 108) from the current time.

        The reference is ``yyMMddHHmmss`` followed by four digits of
        milliseconds. An existing tag 108 is overwritten only when
        ``overwrite_if_exist`` is set; otherwise a new tag is appended.

        Returns:
            The generated reference
        """
        now = now or datetime.now()
        mur = now.strftime("%y%m%d%H%M%S") + f"{now.microsecond // 1000:04d}"

        existing = self.first_by_name("108")
        if existing is not None and overwrite_if_exist:
            logger.debug(f"Block 3 MUR {existing.value!r} overwritten with {mur!r}")
            existing.value = mur
        else:
            self.append(Tag("108", mur))
        return mur


class SwiftBlock5(_SubBlockSequence):
    """
    Block 5: Trailer Block

    Format: {5:{MAC:12345678}{CHK:123456789ABC}}
    """

    block_type = SwiftBlockType.TRAILER

    @property
    def checksum(self) -> Optional[str]:
        return self.tag_value("CHK")

    @property
    def is_possible_duplicate(self) -> bool:
        return self.contains_tag("PDE")

    @property
    def is_training(self) -> bool:
        return self.contains_tag("TNG")


class SwiftBlock4(TagSequence):
    """
    Block 4: Text Block

    Format: {4:\\n:20:REF\\n:32A:230115EUR1000,00\\n-}

    ``line_separator`` is the line break seen while decoding (``None`` for a
    block built in code). ``sub_block_form`` marks the ``{4:{177:..}{451:0}}``
    layout of ACK/NAK service messages. Neither takes part in equality.
    """

    block_type = SwiftBlockType.TEXT

    def __init__(
        self,
        tags: Optional[Iterable[Tag]] = None,
        line_separator: Optional[str] = None,
        sub_block_form: bool = False,
    ):
        super().__init__(tags)
        self.line_separator = line_separator
        self.sub_block_form = sub_block_form

    def to_value(self, line_separator: str = "\n") -> str:
        if self.sub_block_form:
            return "".join(tag.to_sub_block() for tag in self)
        separator = self.line_separator or line_separator
        lines = "".join(tag.to_swift() + separator for tag in self)
        return f"{separator}{lines}-"

    def to_swift(self, line_separator: str = "\n") -> str:
        return "{4:" + self.to_value(line_separator) + "}"


def _present(block):
    """A block counts as absent when it is None or holds nothing."""
    if block is None or block.is_empty():
        return None
    return block


@dataclass(eq=False)
class SwiftMessage:
    """
    Complete SWIFT FIN message.

    Every block is optional; ``None`` marks a block that is absent on the wire.
    """

    block1: Optional[SwiftBlock1] = None
    block2: Optional[SwiftBlock2] = None
    block3: Optional[SwiftBlock3] = None
    block4: Optional[SwiftBlock4] = None
    block5: Optional[SwiftBlock5] = None

    def blocks(self) -> Iterator[Any]:
        """Present blocks in wire order."""
        for block in (self.block1, self.block2, self.block3, self.block4, self.block5):
            if block is not None:
                yield block

    def to_swift(self, line_separator: str = "\n") -> str:
        """Convert to the FIN wire format (does not modify the message)."""
        parts = []
        for block in self.blocks():
            if isinstance(block, SwiftBlock4):
                parts.append(block.to_swift(line_separator))
            else:
                parts.append(block.to_swift())
        return "".join(parts)

    # Header views

    @property
    def message_type(self) -> Optional[str]:
        """Get message type (e.g., '103', '202')."""
        if self.block2 is None:
            return None
        return self.block2.message_type

    @property
    def category(self) -> Optional[str]:
        return get_message_category(self.message_type)

    @property
    def direction(self) -> Optional[MessageDirection]:
        if self.block2 is None:
            return None
        return self.block2.direction

    @property
    def is_input(self) -> bool:
        return self.direction == MessageDirection.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction == MessageDirection.OUTPUT

    @property
    def sender(self) -> Optional[str]:
        """Sender logical terminal address."""
        if self.is_output:
            return self.block2.sender_address
        if self.block1 is not None:
            return self.block1.logical_terminal
        return None

    @property
    def receiver(self) -> Optional[str]:
        """Receiver logical terminal address."""
        if isinstance(self.block2, SwiftBlock2Input):
            return self.block2.receiver_address
        if self.is_output and self.block1 is not None:
            return self.block1.logical_terminal
        return None

    @property
    def is_service_message(self) -> bool:
        """ACK/NAK and other service messages (service id 21)."""
        return self.block1 is not None and self.block1.service_id == "21"

    @property
    def is_ack(self) -> bool:
        return self.is_service_message and self._tag_451() == "0"

    @property
    def is_nack(self) -> bool:
        return self.is_service_message and self._tag_451() == "1"

    def _tag_451(self) -> Optional[str]:
        if self.block4 is None:
            return None
        return self.block4.tag_value("451")

    @property
    def mur(self) -> Optional[str]:
        return self.block3.mur if self.block3 is not None else None

    @property
    def uetr(self) -> Optional[str]:
        return self.block3.uetr if self.block3 is not None else None

    @property
    def reference(self) -> Optional[str]:
        """Transaction reference (field 20)."""
        field = self.field("20")
        return field.value if field is not None else None

    # Fields

    def field(self, name: str) -> Optional[Field]:
        """First field named ``name`` in block 4, else block 3, else block 5."""
        for block in (self.block4, self.block3, self.block5):
            if block is not None:
                tag = block.first_by_name(name)
                if tag is not None:
                    return Field.from_tag(tag)
        return None

    def fields(self, name: str) -> List[Field]:
        """Every block 4 field named ``name``, in wire order."""
        if self.block4 is None:
            return []
        return [Field.from_tag(tag) for tag in self.block4.tags_by_name(name)]

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict snapshot of the message."""

        def tag_list(block):
            if block is None:
                return None
            return [{"name": t.name, "value": t.value} for t in block]

        def header(block):
            if block is None:
                return None
            values = {k: v for k, v in vars(block).items() if v is not None}
            values["direction"] = getattr(block, "direction", None)
            if values["direction"] is not None:
                values["direction"] = values["direction"].value
            else:
                del values["direction"]
            return values

        return {
            "message_type": self.message_type,
            "sender": self.sender,
            "receiver": self.receiver,
            "block1": header(self.block1),
            "block2": header(self.block2),
            "block3": tag_list(self.block3),
            "block4": tag_list(self.block4),
            "block5": tag_list(self.block5),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SwiftMessage):
            return NotImplemented
        return (
            _present(self.block1) == _present(other.block1)
            and _present(self.block2) == _present(other.block2)
            and _present(self.block3) == _present(other.block3)
            and self.block4 == other.block4
            and _present(self.block5) == _present(other.block5)
        )

    __hash__ = None

    def __str__(self) -> str:
        return f"SwiftMessage(MT{self.message_type}, ref={self.reference})"
