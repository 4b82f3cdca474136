"""
SWIFT Field Pattern Engine

Splits a field value into components and joins them back, driven by the
field's pattern triple:

- parser pattern: one letter per component, each naming an extraction rule
  applied to the unconsumed rest of the value (``"SN"``: alpha prefix, then
  numeric rest)
- components pattern: one type letter per component (``N`` number, ``I``
  amount, ``L`` boolean, ``D`` date, anything else is a string)
- validator pattern: SWIFT format notation (``"1a5!n"``) checked on its own,
  never used for extraction

The last parser letter always takes whatever input is left, so joining the
components of any split value gives back that value. A letter reached once the
input is used up yields ``None``; a letter that matches nothing while input
remains yields ``""``.

Typed access goes through the free functions ``get_*``/``with_*`` over an
immutable :class:`Field`.
"""

import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from fin_engine.protocols.swift.swift_codes import GENERIC_PATTERN, PatternTriple, SwiftCharacterSet, get_pattern_triple
from fin_engine.protocols.swift.swift_errors import ComponentCoercionFailure, FieldPatternError
from fin_engine.protocols.swift.tag_sequence import Tag

# (remaining input, is last letter) -> consumed prefix
ParserRule = Callable[[str, bool], str]


def _leading_run(remaining: str, predicate: Callable[[str], bool]) -> str:
    end = 0
    while end < len(remaining) and predicate(remaining[end]):
        end += 1
    return remaining[:end]


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def alpha_prefix_rule(remaining: str, is_last: bool) -> str:
    """``S``: the longest leading run of non-numeric characters."""
    if is_last:
        return remaining
    return _leading_run(remaining, lambda ch: not _is_digit(ch))


def numeric_rule(remaining: str, is_last: bool) -> str:
    """``N``: the leading run of digits, or the whole rest as last letter."""
    if is_last:
        return remaining
    return _leading_run(remaining, _is_digit)


PARSER_RULES: Dict[str, ParserRule] = {
    "S": alpha_prefix_rule,
    "N": numeric_rule,
}


class FieldPatternEngine:
    """Pattern-letter dispatch over a table of extraction rules."""

    def __init__(self, rules: Optional[Dict[str, ParserRule]] = None):
        self._rules: Dict[str, ParserRule] = dict(PARSER_RULES if rules is None else rules)

    def register(self, letter: str, rule: ParserRule) -> None:
        if len(letter) != 1:
            raise FieldPatternError("Parser letters are single characters", letter)
        self._rules[letter] = rule

    @property
    def letters(self) -> Tuple[str, ...]:
        return tuple(sorted(self._rules))

    def split(self, raw_value: Optional[str], parser_pattern: str) -> List[Optional[str]]:
        """Split ``raw_value`` into one component per parser letter.

        Raises:
            FieldPatternError: Empty pattern, or an unknown letter reached while
                input remains
        """
        if not parser_pattern:
            raise FieldPatternError("Parser pattern must not be empty", parser_pattern)

        components: List[Optional[str]] = []
        remaining = raw_value or ""
        last = len(parser_pattern) - 1
        for index, letter in enumerate(parser_pattern):
            if not remaining:
                components.append(None)
                continue

            rule = self._rules.get(letter)
            if rule is None:
                raise FieldPatternError(
                    f"Unknown parser pattern letter {letter!r}", parser_pattern
                )

            chunk = rule(remaining, index == last)
            if not remaining.startswith(chunk):
                raise FieldPatternError(
                    f"Parser rule {letter!r} must consume a prefix of its input",
                    parser_pattern,
                )
            components.append(chunk)
            remaining = remaining[len(chunk):]

        return components

    @staticmethod
    def join(components: Sequence[Optional[str]]) -> str:
        """Concatenate the present components in order."""
        return "".join(c for c in components if c is not None)


_default_engine = FieldPatternEngine()


def register_parser_rule(letter: str, rule: ParserRule) -> None:
    """Register a parser letter on the shared engine."""
    _default_engine.register(letter, rule)


def split_components(raw_value: Optional[str], parser_pattern: str) -> List[Optional[str]]:
    return _default_engine.split(raw_value, parser_pattern)


def join_components(components: Sequence[Optional[str]]) -> str:
    return FieldPatternEngine.join(components)


# Validator grammar

LINE_BREAK = r"(?:\r\n|\n)"

SPECIAL_TOKENS: Dict[str, str] = {
    "BOOL": r"(?:Y|N)",
    "DATE2": r"[0-9]{2}(?:0[1-9]|1[0-2])(?:0[1-9]|[12][0-9]|3[01])",
    "DATE4": r"[0-9]{4}(?:0[1-9]|1[0-2])(?:0[1-9]|[12][0-9]|3[01])",
    "HHMM": r"(?:[01][0-9]|2[0-3])[0-5][0-9]",
    "CUR": r"[A-Z]{3}",
    "BIC": r"[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}(?:[A-Z0-9]{3})?",
}

_QUANTIFIED = re.compile(r"(\d+)(?:(!)|\*(\d+))?([A-Za-z])")


def _charset_regex(code: str, validator_pattern: str) -> str:
    charset = SwiftCharacterSet.from_code(code)
    if charset is None:
        raise FieldPatternError(f"Unknown character set {code!r}", validator_pattern)
    return charset.pattern


def _decimal_regex(length: int, exact: bool) -> str:
    span = f"{{{length}}}" if exact else f"{{1,{length}}}"
    return f"(?=[0-9,]{span}(?![0-9,]))[0-9]+,[0-9]*"


def _quantified_regex(match, validator_pattern: str) -> str:
    count, exact, line_length, code = match.groups()
    count = int(count)
    if code == "d" and line_length is None:
        return _decimal_regex(count, bool(exact))

    chars = _charset_regex(code, validator_pattern)
    if line_length is not None:
        line = f"{chars}{{1,{int(line_length)}}}"
        if count == 1:
            return line
        return f"{line}(?:{LINE_BREAK}{line}){{0,{count - 1}}}"
    if exact:
        return f"{chars}{{{count}}}"
    return f"{chars}{{1,{count}}}"


def _compile_sequence(pattern: str, pos: int, depth: int) -> Tuple[str, int]:
    parts: List[str] = []
    while pos < len(pattern):
        ch = pattern[pos]
        if ch == "[":
            inner, pos = _compile_sequence(pattern, pos + 1, depth + 1)
            parts.append(f"(?:{inner})?")
        elif ch == "]":
            if depth == 0:
                raise FieldPatternError("Unbalanced ']' in validator pattern", pattern)
            return "".join(parts), pos + 1
        elif ch == "<":
            end = pattern.find(">", pos)
            if end < 0:
                raise FieldPatternError("Unterminated '<' in validator pattern", pattern)
            name = pattern[pos + 1:end]
            if name not in SPECIAL_TOKENS:
                raise FieldPatternError(f"Unknown validator token <{name}>", pattern)
            parts.append(SPECIAL_TOKENS[name])
            pos = end + 1
        elif ch == "$":
            parts.append(LINE_BREAK)
            pos += 1
        elif ch.isdigit():
            match = _QUANTIFIED.match(pattern, pos)
            if match is None:
                raise FieldPatternError(
                    f"Bad length notation at offset {pos}", pattern
                )
            parts.append(_quantified_regex(match, pattern))
            pos = match.end()
        else:
            parts.append(re.escape(ch))
            pos += 1

    if depth > 0:
        raise FieldPatternError("Unbalanced '[' in validator pattern", pattern)
    return "".join(parts), pos


@lru_cache(maxsize=256)
def compile_validator(validator_pattern: str) -> "re.Pattern":
    """Compile SWIFT format notation into a regular expression.

    Supported: ``n!c`` exactly n, ``nc`` up to n, ``n*mc`` up to n lines of up
    to m, ``[...]`` optional (nestable), ``$`` line break, ``<TOKEN>`` specials
    and literal punctuation.
    """
    regex, _ = _compile_sequence(validator_pattern, 0, 0)
    return re.compile(regex)


def validate_value(value: Optional[str], validator_pattern: str) -> Optional[str]:
    """Check a value against its validator pattern.

    Returns:
        Error message or None if valid (an empty pattern accepts anything)
    """
    if not validator_pattern:
        return None
    if value is None:
        return "Value is missing"
    if compile_validator(validator_pattern).fullmatch(value) is None:
        return f"Value {value!r} does not match format {validator_pattern}"
    return None


# Coercion

_INTEGER = re.compile(r"[0-9]+")
_SWIFT_DECIMAL = re.compile(r"[0-9]+,[0-9]*")

Number = Union[int, Decimal]


def parse_number(text: Optional[str]) -> Number:
    """Parse a base-10 integer or a SWIFT decimal (``"1234,56"``).

    Only ASCII digits are accepted, whatever the locale.
    """
    if text is not None:
        if _INTEGER.fullmatch(text):
            return int(text)
        if _SWIFT_DECIMAL.fullmatch(text):
            return Decimal(text.replace(",", "."))
    raise ComponentCoercionFailure(f"Not a number: {text!r}", value=text)


def format_number(number: Union[Number, str], amount: bool = False) -> str:
    """Render a non-negative number in SWIFT notation.

    Amounts always carry the decimal comma (``1000`` -> ``"1000,"``).
    """
    if isinstance(number, str):
        number = parse_number(number)
    if isinstance(number, bool) or not isinstance(number, (int, Decimal)):
        raise ComponentCoercionFailure(
            f"Unsupported number type {type(number).__name__}", value=number
        )
    if isinstance(number, Decimal) and not number.is_finite():
        raise ComponentCoercionFailure(f"Not a finite number: {number}", value=number)
    if number < 0:
        raise ComponentCoercionFailure(f"Negative number: {number}", value=number)

    if isinstance(number, int) and not amount:
        return str(number)
    text = format(Decimal(number), "f")
    if "." in text:
        return text.replace(".", ",")
    return text + "," if amount else text


_TRUE_VALUES = ("Y", "TRUE")
_FALSE_VALUES = ("N", "FALSE")


def parse_boolean(text: Optional[str]) -> bool:
    if text is not None:
        upper = text.upper()
        if upper in _TRUE_VALUES:
            return True
        if upper in _FALSE_VALUES:
            return False
    raise ComponentCoercionFailure(f"Not a boolean: {text!r}", value=text)


def format_boolean(flag: bool) -> str:
    if not isinstance(flag, bool):
        raise ComponentCoercionFailure(
            f"Expected bool, got {type(flag).__name__}", value=flag
        )
    return "Y" if flag else "N"


def parse_date(text: Optional[str]) -> date:
    """Parse ``YYMMDD`` or ``YYYYMMDD``."""
    formats = {6: "%y%m%d", 8: "%Y%m%d"}
    if text is not None and text.isdigit() and len(text) in formats:
        try:
            return datetime.strptime(text, formats[len(text)]).date()
        except ValueError:
            pass
    raise ComponentCoercionFailure(f"Not a date: {text!r}", value=text)


# Field value

@dataclass(frozen=True)
class Field:
    """A tag value interpreted through its pattern triple."""

    name: str
    value: Optional[str]
    patterns: PatternTriple = GENERIC_PATTERN

    @classmethod
    def of(cls, name: str, value: Optional[str]) -> "Field":
        """Create a field using the pattern triple registered for ``name``."""
        return cls(name, value, get_pattern_triple(name) or GENERIC_PATTERN)

    @classmethod
    def from_tag(cls, tag: Tag) -> "Field":
        return cls.of(tag.name, tag.value)

    @classmethod
    def from_components(
        cls,
        name: str,
        components: Sequence[Optional[str]],
        patterns: Optional[PatternTriple] = None,
    ) -> "Field":
        patterns = patterns or get_pattern_triple(name) or GENERIC_PATTERN
        return cls(name, join_components(components), patterns)

    @property
    def components(self) -> List[Optional[str]]:
        return split_components(self.value, self.patterns.parser)

    @property
    def component_count(self) -> int:
        return len(self.patterns.parser)

    def component(self, number: int) -> Optional[str]:
        """Component by 1-based position."""
        self._check_position(number)
        return self.components[number - 1]

    def component_type(self, number: int) -> str:
        self._check_position(number)
        types = self.patterns.components
        return types[number - 1] if number <= len(types) else "S"

    def validate(self) -> Optional[str]:
        """Error message when the value breaks the validator pattern, else None."""
        return validate_value(self.value, self.patterns.validator)

    @property
    def is_valid(self) -> bool:
        return self.validate() is None

    def to_tag(self) -> Tag:
        return Tag(self.name, self.value)

    def _check_position(self, number: int) -> None:
        if not 1 <= number <= self.component_count:
            raise IndexError(
                f"Field {self.name} has {self.component_count} components, "
                f"no component {number}"
            )


def get_component(field: Field, number: int) -> Optional[str]:
    return field.component(number)


def get_number(field: Field, number: int) -> Optional[Number]:
    """Numeric component, or None when absent or not a number."""
    try:
        return parse_number(field.component(number))
    except ComponentCoercionFailure:
        return None


def get_decimal(field: Field, number: int) -> Optional[Decimal]:
    value = get_number(field, number)
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def get_boolean(field: Field, number: int) -> Optional[bool]:
    try:
        return parse_boolean(field.component(number))
    except ComponentCoercionFailure:
        return None


def get_date(field: Field, number: int) -> Optional[date]:
    try:
        return parse_date(field.component(number))
    except ComponentCoercionFailure:
        return None


def with_component(field: Field, number: int, value: Optional[str]) -> Field:
    """Copy of ``field`` with one component replaced."""
    field._check_position(number)
    components = field.components
    components[number - 1] = value
    return replace(field, value=join_components(components))


def with_number(field: Field, number: int, value: Union[Number, str]) -> Field:
    """Copy of ``field`` with a numeric component.

    Raises:
        ComponentCoercionFailure: If ``value`` is not a non-negative number
    """
    amount = field.component_type(number) == "I"
    try:
        text = format_number(value, amount=amount)
    except ComponentCoercionFailure as e:
        raise ComponentCoercionFailure(e.message, component=number, value=value)
    return with_component(field, number, text)


def with_boolean(field: Field, number: int, flag: bool) -> Field:
    """Copy of ``field`` with a boolean component (``Y``/``N``).

    Raises:
        ComponentCoercionFailure: If ``flag`` is not a bool
    """
    try:
        text = format_boolean(flag)
    except ComponentCoercionFailure as e:
        raise ComponentCoercionFailure(e.message, component=number, value=flag)
    return with_component(field, number, text)
