"""
FIN Engine

Decoder and encoder for SWIFT FIN (MT) messages.
"""

from fin_engine.protocols.swift import (
    Field,
    MessageAssembler,
    SwiftMessage,
    SwiftParseError,
    SwiftValidator,
    parse_swift_message,
    to_swift,
)

__version__ = "1.0.0"

__all__ = [
    "Field",
    "MessageAssembler",
    "SwiftMessage",
    "SwiftParseError",
    "SwiftValidator",
    "parse_swift_message",
    "to_swift",
    "__version__",
]
