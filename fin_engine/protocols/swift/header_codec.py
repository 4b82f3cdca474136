"""
SWIFT Header Codec

Fixed-width codecs for the basic header (block 1) and the application header
(block 2, input and output variants).

Block 1:        F01BANKBEBBAXXX1234567890
- F             application id
- 01            service id
- BANKBEBBAXXX  logical terminal address
- 1234          session number
- 567890        sequence number

Block 2 input:  I103BANKDEFFXXXXU3003
- I, 103, receiver address, then optional priority, delivery monitoring and
  obsolescence period

Block 2 output: O1031200230117BANKBEBBAXXX12345678902301171201N
- O, 103, input time, MIR (date, sender address, session, sequence),
  output date, output time, optional priority

Decoding is strict by default: lengths and the direction marker must match or
:class:`MalformedHeader` is raised. Lenient decoding slices whatever is present,
leaves missing fields as ``None`` and hands any tail beyond the fixed widths to
the last field, so it never raises.

Blocks are immutable. Use the builders (or ``dataclasses.replace``) to derive
new values.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar, FrozenSet, List, Optional, Sequence, Tuple, Union

from fin_engine.protocols.swift.swift_codes import DeliveryMonitoring, MessagePriority, SwiftBlockType
from fin_engine.protocols.swift.swift_errors import MalformedHeader

logger = logging.getLogger(__name__)


class MessageDirection(Enum):
    """Message direction indicator."""

    INPUT = "I"  # Message sent to SWIFT
    OUTPUT = "O"  # Message received from SWIFT


def strip_block_prefix(raw: Optional[str], block_number: int) -> str:
    """Remove an optional ``"N:"`` self-identification prefix."""
    if not raw:
        return ""
    prefix = f"{block_number}:"
    if raw.startswith(prefix):
        return raw[len(prefix):]
    return raw


def _slice_fields(payload: str, widths: Sequence[int], lenient: bool) -> List[Optional[str]]:
    """Consume fixed-width slices left to right.

    A field whose offset is past the end of the payload is ``None``. A field cut
    short keeps the characters that are present. In lenient mode the last field
    takes the whole remaining tail.
    """
    values: List[Optional[str]] = []
    offset = 0
    last = len(widths) - 1
    for index, width in enumerate(widths):
        if offset >= len(payload):
            values.append(None)
        elif lenient and index == last:
            values.append(payload[offset:])
        else:
            values.append(payload[offset:offset + width])
        offset += width
    return values


class _HeaderBlock:
    """Shared behaviour of the fixed-width header dataclasses."""

    block_type: ClassVar[SwiftBlockType]

    def field_values(self) -> Tuple[Optional[str], ...]:
        return tuple(getattr(self, f.name) for f in fields(self))

    def is_empty(self) -> bool:
        return all(value is None for value in self.field_values())

    def to_value(self) -> Optional[str]:
        """Encoded payload, or ``None`` when every field is absent."""
        return encode_header(self)

    def to_swift(self) -> str:
        value = self.to_value()
        if value is None:
            return ""
        return "{" + f"{self.block_type.number}:{value}" + "}"


# Block 1

BLOCK1_WIDTHS = (1, 2, 12, 4, 6)
BLOCK1_LENGTH = sum(BLOCK1_WIDTHS)


@dataclass(frozen=True)
class SwiftBlock1(_HeaderBlock):
    """Block 1: Basic Header Block."""

    application_id: Optional[str] = None
    service_id: Optional[str] = None
    logical_terminal: Optional[str] = None
    session_number: Optional[str] = None
    sequence_number: Optional[str] = None

    block_type: ClassVar[SwiftBlockType] = SwiftBlockType.BASIC_HEADER

    @property
    def bic(self) -> Optional[str]:
        """Eight-character BIC of the logical terminal."""
        if self.logical_terminal is None:
            return None
        return self.logical_terminal[:8]

    @property
    def terminal_code(self) -> Optional[str]:
        if self.logical_terminal is None or len(self.logical_terminal) < 9:
            return None
        return self.logical_terminal[8]

    @property
    def branch_code(self) -> Optional[str]:
        if self.logical_terminal is None or len(self.logical_terminal) < 12:
            return None
        return self.logical_terminal[9:12]

    @classmethod
    def from_content(cls, content: Optional[str], lenient: bool = False) -> "SwiftBlock1":
        return decode_block1(content, lenient)

    @classmethod
    def builder(cls) -> "SwiftBlock1Builder":
        return SwiftBlock1Builder()


def decode_block1(raw: Optional[str], lenient: bool = False) -> SwiftBlock1:
    """Decode a block 1 payload, with or without its ``"1:"`` prefix.

    Args:
        raw: Block payload such as ``"F01BANKBEBBAXXX1234567890"``
        lenient: Decode whatever is present instead of raising

    Returns:
        Decoded basic header

    Raises:
        MalformedHeader: In strict mode, if the payload is not exactly 25 characters
    """
    payload = strip_block_prefix(raw, 1)
    if not lenient and len(payload) != BLOCK1_LENGTH:
        raise MalformedHeader(
            f"Block 1 must be {BLOCK1_LENGTH} characters, got {len(payload)}",
            block=1,
            raw_content=raw,
        )

    return SwiftBlock1(*_slice_fields(payload, BLOCK1_WIDTHS, lenient))


# Block 2 input

BLOCK2_INPUT_WIDTHS = (3, 12, 1, 1, 3)
BLOCK2_INPUT_LENGTHS: FrozenSet[int] = frozenset({16, 17, 18, 21})


@dataclass(frozen=True)
class SwiftBlock2Input(_HeaderBlock):
    """Block 2: Application Header Block, input (sent to SWIFT)."""

    message_type: Optional[str] = None
    receiver_address: Optional[str] = None
    message_priority: Optional[str] = None
    delivery_monitoring: Optional[str] = None
    obsolescence_period: Optional[str] = None

    block_type: ClassVar[SwiftBlockType] = SwiftBlockType.APPLICATION_HEADER
    direction: ClassVar[MessageDirection] = MessageDirection.INPUT

    @property
    def receiver_bic(self) -> Optional[str]:
        if self.receiver_address is None:
            return None
        return self.receiver_address[:8]

    @property
    def priority_type(self) -> Optional[MessagePriority]:
        return MessagePriority.from_code(self.message_priority)

    @property
    def delivery_monitoring_type(self) -> Optional[DeliveryMonitoring]:
        return DeliveryMonitoring.from_code(self.delivery_monitoring)

    @classmethod
    def from_content(cls, content: Optional[str], lenient: bool = False) -> "SwiftBlock2Input":
        return decode_block2_input(content, lenient)

    @classmethod
    def builder(cls) -> "SwiftBlock2InputBuilder":
        return SwiftBlock2InputBuilder()


def decode_block2_input(raw: Optional[str], lenient: bool = False) -> SwiftBlock2Input:
    """Decode an input application header.

    Args:
        raw: Payload such as ``"I103BANKDEFFXXXXU3003"`` (``"2:"`` prefix optional)
        lenient: Decode whatever is present instead of raising

    Raises:
        MalformedHeader: In strict mode, on a bad length or a marker other than ``I``
    """
    payload = strip_block_prefix(raw, 2)
    if not lenient:
        if len(payload) not in BLOCK2_INPUT_LENGTHS:
            raise MalformedHeader(
                f"Block 2 input length must be one of "
                f"{sorted(BLOCK2_INPUT_LENGTHS)}, got {len(payload)}",
                block=2,
                raw_content=raw,
            )
        if payload[0].upper() != MessageDirection.INPUT.value:
            raise MalformedHeader(
                f"Block 2 input must start with 'I', got {payload[0]!r}",
                block=2,
                raw_content=raw,
            )

    return SwiftBlock2Input(*_slice_fields(payload[1:], BLOCK2_INPUT_WIDTHS, lenient))


# Block 2 output

BLOCK2_OUTPUT_WIDTHS = (3, 4, 6, 12, 4, 6, 6, 4, 1)
BLOCK2_OUTPUT_LENGTHS: FrozenSet[int] = frozenset({46, 47})


@dataclass(frozen=True)
class SwiftBlock2Output(_HeaderBlock):
    """Block 2: Application Header Block, output (received from SWIFT)."""

    message_type: Optional[str] = None
    input_time: Optional[str] = None
    mir_date: Optional[str] = None
    sender_address: Optional[str] = None
    mir_session_number: Optional[str] = None
    mir_sequence_number: Optional[str] = None
    output_date: Optional[str] = None
    output_time: Optional[str] = None
    message_priority: Optional[str] = None

    block_type: ClassVar[SwiftBlockType] = SwiftBlockType.APPLICATION_HEADER
    direction: ClassVar[MessageDirection] = MessageDirection.OUTPUT

    @property
    def mir(self) -> Optional[str]:
        """Message input reference: date, sender address, session, sequence."""
        parts = (
            self.mir_date,
            self.sender_address,
            self.mir_session_number,
            self.mir_sequence_number,
        )
        if all(part is None for part in parts):
            return None
        return "".join(part for part in parts if part is not None)

    @property
    def sender_bic(self) -> Optional[str]:
        if self.sender_address is None:
            return None
        return self.sender_address[:8]

    @property
    def priority_type(self) -> Optional[MessagePriority]:
        return MessagePriority.from_code(self.message_priority)

    @classmethod
    def from_content(cls, content: Optional[str], lenient: bool = False) -> "SwiftBlock2Output":
        return decode_block2_output(content, lenient)

    @classmethod
    def builder(cls) -> "SwiftBlock2OutputBuilder":
        return SwiftBlock2OutputBuilder()


def decode_block2_output(raw: Optional[str], lenient: bool = False) -> SwiftBlock2Output:
    """Decode an output application header.

    Raises:
        MalformedHeader: In strict mode, on a bad length or a marker other than ``O``
    """
    payload = strip_block_prefix(raw, 2)
    if not lenient:
        if len(payload) not in BLOCK2_OUTPUT_LENGTHS:
            raise MalformedHeader(
                f"Block 2 output length must be one of "
                f"{sorted(BLOCK2_OUTPUT_LENGTHS)}, got {len(payload)}",
                block=2,
                raw_content=raw,
            )
        if payload[0].upper() != MessageDirection.OUTPUT.value:
            raise MalformedHeader(
                f"Block 2 output must start with 'O', got {payload[0]!r}",
                block=2,
                raw_content=raw,
            )

    return SwiftBlock2Output(*_slice_fields(payload[1:], BLOCK2_OUTPUT_WIDTHS, lenient))


SwiftBlock2 = Union[SwiftBlock2Input, SwiftBlock2Output]


def decode_block2(raw: Optional[str], lenient: bool = False) -> SwiftBlock2:
    """Decode block 2, choosing input or output from its direction marker.

    In lenient mode a missing or unknown marker is decoded as an input header.
    """
    payload = strip_block_prefix(raw, 2)
    marker = payload[:1].upper()
    if marker == MessageDirection.OUTPUT.value:
        return decode_block2_output(raw, lenient)
    if marker == MessageDirection.INPUT.value or lenient:
        if marker != MessageDirection.INPUT.value:
            logger.debug(f"Block 2 direction marker {marker!r} decoded as input")
        return decode_block2_input(raw, lenient)
    raise MalformedHeader(
        f"Block 2 must start with 'I' or 'O', got {payload[:1]!r}",
        block=2,
        raw_content=raw,
    )


# Encoding

def encode_block1(block: SwiftBlock1) -> Optional[str]:
    return encode_header(block)


def encode_block2(block: SwiftBlock2) -> Optional[str]:
    return encode_header(block)


def encode_header(block: _HeaderBlock) -> Optional[str]:
    """Concatenate present fields in their fixed order.

    Block 2 values are prefixed with their direction marker. A block whose
    fields are all absent encodes to ``None`` so that it is left out of the
    assembled message.
    """
    if block.is_empty():
        return None
    value = "".join(v for v in block.field_values() if v is not None)
    direction = getattr(block, "direction", None)
    if direction is not None:
        value = direction.value + value
    return value


# Builders

class _HeaderBuilder:
    """Collects field values and builds an immutable header block."""

    block_class: ClassVar[type]

    def __init__(self, block: Optional[_HeaderBlock] = None):
        self._values = {}
        if block is not None:
            self._values = {f.name: getattr(block, f.name) for f in fields(block)}

    def reset(self):
        """Reset the builder."""
        self._values = {}
        return self

    def _set(self, name: str, value: Optional[str]):
        self._values[name] = value
        return self

    def build(self):
        return self.block_class(**self._values)


class SwiftBlock1Builder(_HeaderBuilder):
    """Builder for :class:`SwiftBlock1`."""

    block_class = SwiftBlock1

    def set_application_id(self, value: Optional[str]) -> "SwiftBlock1Builder":
        return self._set("application_id", value)

    def set_service_id(self, value: Optional[str]) -> "SwiftBlock1Builder":
        return self._set("service_id", value)

    def set_logical_terminal(self, value: Optional[str]) -> "SwiftBlock1Builder":
        return self._set("logical_terminal", value)

    def set_session_number(self, value: Optional[str]) -> "SwiftBlock1Builder":
        return self._set("session_number", value)

    def set_sequence_number(self, value: Optional[str]) -> "SwiftBlock1Builder":
        return self._set("sequence_number", value)


class SwiftBlock2InputBuilder(_HeaderBuilder):
    """Builder for :class:`SwiftBlock2Input`."""

    block_class = SwiftBlock2Input

    def set_message_type(self, value: Optional[str]) -> "SwiftBlock2InputBuilder":
        return self._set("message_type", value)

    def set_receiver_address(self, value: Optional[str]) -> "SwiftBlock2InputBuilder":
        return self._set("receiver_address", value)

    def set_message_priority(
        self, value: Union[MessagePriority, str, None]
    ) -> "SwiftBlock2InputBuilder":
        if isinstance(value, MessagePriority):
            value = value.code
        return self._set("message_priority", value)

    def set_delivery_monitoring(
        self, value: Union[DeliveryMonitoring, str, None]
    ) -> "SwiftBlock2InputBuilder":
        if isinstance(value, DeliveryMonitoring):
            value = value.code
        return self._set("delivery_monitoring", value)

    def set_obsolescence_period(self, value: Optional[str]) -> "SwiftBlock2InputBuilder":
        return self._set("obsolescence_period", value)


class SwiftBlock2OutputBuilder(_HeaderBuilder):
    """Builder for :class:`SwiftBlock2Output`."""

    block_class = SwiftBlock2Output

    def set_message_type(self, value: Optional[str]) -> "SwiftBlock2OutputBuilder":
        return self._set("message_type", value)

    def set_input_time(self, value: Optional[str]) -> "SwiftBlock2OutputBuilder":
        return self._set("input_time", value)

    def set_mir(self, value: Optional[str]) -> "SwiftBlock2OutputBuilder":
        """Set the 28-character message input reference in one go."""
        parts = _slice_fields(value or "", (6, 12, 4, 6), False)
        self._set("mir_date", parts[0])
        self._set("sender_address", parts[1])
        self._set("mir_session_number", parts[2])
        return self._set("mir_sequence_number", parts[3])

    def set_sender_address(self, value: Optional[str]) -> "SwiftBlock2OutputBuilder":
        return self._set("sender_address", value)

    def set_output_date(self, value: Optional[str]) -> "SwiftBlock2OutputBuilder":
        return self._set("output_date", value)

    def set_output_time(self, value: Optional[str]) -> "SwiftBlock2OutputBuilder":
        return self._set("output_time", value)

    def set_message_priority(
        self, value: Union[MessagePriority, str, None]
    ) -> "SwiftBlock2OutputBuilder":
        if isinstance(value, MessagePriority):
            value = value.code
        return self._set("message_priority", value)
