"""
SWIFT FIN Decode Errors

Header and tokenizer errors are raised to the caller of decode in strict mode.
Lenient decoding never raises them.
"""

from typing import Any, Dict, Optional

from fin_engine.core.exceptions import FinEngineException


class SwiftParseError(FinEngineException):
    """Base error for malformed FIN input."""

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        raw_content: Optional[str] = None,
        error_code: str = "SWIFT_PARSE_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        if position is not None:
            context["position"] = position
        super().__init__(message, error_code=error_code, context=context)
        self.position = position
        self.raw_content = raw_content


class MalformedHeader(SwiftParseError):
    """A fixed-width header (block 1 or 2) violates its length or marker rules."""

    def __init__(self, message: str, block: int, raw_content: Optional[str] = None):
        super().__init__(
            message,
            raw_content=raw_content,
            error_code="SWIFT_MALFORMED_HEADER",
            context={"block": block, "length": len(raw_content or "")},
        )
        self.block = block


class UnknownBlock(SwiftParseError):
    """A block identifier outside 1-5."""

    def __init__(self, identifier: str, position: Optional[int] = None):
        super().__init__(
            f"Unknown block identifier: {identifier!r}",
            position=position,
            error_code="SWIFT_UNKNOWN_BLOCK",
            context={"identifier": identifier},
        )
        self.identifier = identifier


class UnterminatedBlock(SwiftParseError):
    """An opening brace with no matching close before end of input."""

    def __init__(self, block: Optional[int], position: Optional[int] = None):
        label = f"block {block}" if block is not None else "block"
        super().__init__(
            f"Unterminated {label}",
            position=position,
            error_code="SWIFT_UNTERMINATED_BLOCK",
            context={"block": block} if block is not None else {},
        )
        self.block = block


class MalformedTagLine(SwiftParseError):
    """A tag line (or sub-block) that does not match the tag-name grammar."""

    def __init__(
        self,
        line: str,
        line_number: Optional[int] = None,
        block: int = 4,
        position: Optional[int] = None,
    ):
        context: Dict[str, Any] = {"block": block}
        if line_number is not None:
            context["line_number"] = line_number
        super().__init__(
            f"Malformed tag line: {line[:40]!r}",
            position=position,
            raw_content=line,
            error_code="SWIFT_MALFORMED_TAG_LINE",
            context=context,
        )
        self.line = line
        self.line_number = line_number
        self.block = block


class DuplicateBlock(SwiftParseError):
    """The same block number appears twice in one message."""

    def __init__(self, block: int, position: Optional[int] = None):
        super().__init__(
            f"Duplicate block {block}",
            position=position,
            error_code="SWIFT_DUPLICATE_BLOCK",
            context={"block": block},
        )
        self.block = block


class FieldPatternError(FinEngineException, ValueError):
    """Unknown parser letter or malformed validator grammar."""

    def __init__(self, message: str, pattern: Optional[str] = None):
        super().__init__(
            message,
            error_code="SWIFT_FIELD_PATTERN_ERROR",
            context={"pattern": pattern} if pattern is not None else {},
        )
        self.pattern = pattern


class ComponentCoercionFailure(FinEngineException, ValueError):
    """A component value that cannot be converted to or from its declared type.

    Read accessors turn this into an absent (``None``) result; write accessors
    let it propagate to the caller that supplied the bad value.
    """

    def __init__(self, message: str, component: Optional[int] = None, value: Any = None):
        context: Dict[str, Any] = {}
        if component is not None:
            context["component"] = component
        if value is not None:
            context["value"] = value
        super().__init__(
            message, error_code="SWIFT_COMPONENT_COERCION", context=context
        )
        self.component = component
        self.value = value
