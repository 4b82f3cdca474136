"""
SWIFT FIN (MT) Message Support

Supports:
- Block tokenizing (blocks 1-5) in strict and lenient modes
- Fixed-width header codecs with immutable blocks and builders
- Ordered tag sequences for blocks 3, 4 and 5
- Pattern-driven field component split/join and typed access
- Structural validation
"""

from fin_engine.protocols.swift.swift_codes import (
    FIELD_PATTERNS,
    SWIFT_MESSAGE_CATEGORIES,
    DeliveryMonitoring,
    MessagePriority,
    PatternTriple,
    SwiftBlockType,
    SwiftCharacterSet,
    get_message_category,
    get_pattern_triple,
)
from fin_engine.protocols.swift.swift_errors import (
    ComponentCoercionFailure,
    DuplicateBlock,
    FieldPatternError,
    MalformedHeader,
    MalformedTagLine,
    SwiftParseError,
    UnknownBlock,
    UnterminatedBlock,
)
from fin_engine.protocols.swift.tag_sequence import Tag, TagSequence
from fin_engine.protocols.swift.header_codec import (
    MessageDirection,
    SwiftBlock1,
    SwiftBlock1Builder,
    SwiftBlock2Input,
    SwiftBlock2InputBuilder,
    SwiftBlock2Output,
    SwiftBlock2OutputBuilder,
    decode_block1,
    decode_block2,
    decode_block2_input,
    decode_block2_output,
    encode_block1,
    encode_block2,
    encode_header,
)
from fin_engine.protocols.swift.field_pattern import (
    Field,
    FieldPatternEngine,
    get_boolean,
    get_component,
    get_date,
    get_decimal,
    get_number,
    join_components,
    register_parser_rule,
    split_components,
    validate_value,
    with_boolean,
    with_component,
    with_number,
)
from fin_engine.protocols.swift.swift_message import (
    SwiftBlock3,
    SwiftBlock4,
    SwiftBlock5,
    SwiftMessage,
)
from fin_engine.protocols.swift.swift_parser import BlockTokenizer, RawBlocks, tokenize
from fin_engine.protocols.swift.message_assembler import (
    MessageAssembler,
    parse_swift_message,
    to_swift,
)
from fin_engine.protocols.swift.swift_validator import SwiftValidator, validate_message

__all__ = [
    # Codes
    "FIELD_PATTERNS",
    "SWIFT_MESSAGE_CATEGORIES",
    "DeliveryMonitoring",
    "MessagePriority",
    "PatternTriple",
    "SwiftBlockType",
    "SwiftCharacterSet",
    "get_message_category",
    "get_pattern_triple",
    # Errors
    "ComponentCoercionFailure",
    "DuplicateBlock",
    "FieldPatternError",
    "MalformedHeader",
    "MalformedTagLine",
    "SwiftParseError",
    "UnknownBlock",
    "UnterminatedBlock",
    # Tag sequences
    "Tag",
    "TagSequence",
    # Headers
    "MessageDirection",
    "SwiftBlock1",
    "SwiftBlock1Builder",
    "SwiftBlock2Input",
    "SwiftBlock2InputBuilder",
    "SwiftBlock2Output",
    "SwiftBlock2OutputBuilder",
    "decode_block1",
    "decode_block2",
    "decode_block2_input",
    "decode_block2_output",
    "encode_block1",
    "encode_block2",
    "encode_header",
    # Fields
    "Field",
    "FieldPatternEngine",
    "get_boolean",
    "get_component",
    "get_date",
    "get_decimal",
    "get_number",
    "join_components",
    "register_parser_rule",
    "split_components",
    "validate_value",
    "with_boolean",
    "with_component",
    "with_number",
    # Messages
    "SwiftBlock3",
    "SwiftBlock4",
    "SwiftBlock5",
    "SwiftMessage",
    "BlockTokenizer",
    "RawBlocks",
    "tokenize",
    "MessageAssembler",
    "parse_swift_message",
    "to_swift",
    "SwiftValidator",
    "validate_message",
]
