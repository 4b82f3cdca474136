"""
SWIFT FIN Codes and Constants

Defines:
- Block types (1-5)
- Header code values (priority, delivery monitoring)
- Character set rules
- Field pattern triples keyed by field name
- Message categories
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional


class SwiftBlockType(Enum):
    """SWIFT message block types."""

    BASIC_HEADER = (1, "Basic Header Block")
    APPLICATION_HEADER = (2, "Application Header Block")
    USER_HEADER = (3, "User Header Block")
    TEXT = (4, "Text Block")
    TRAILER = (5, "Trailer Block")

    def __init__(self, number: int, description: str):
        self._number = number
        self._description = description

    @property
    def number(self) -> int:
        return self._number

    @property
    def description(self) -> str:
        return self._description

    @classmethod
    def from_number(cls, number: int) -> Optional["SwiftBlockType"]:
        for block_type in cls:
            if block_type.number == number:
                return block_type
        return None


class MessagePriority(Enum):
    """Block 2 message priority codes."""

    SYSTEM = ("S", "System")
    URGENT = ("U", "Urgent")
    NORMAL = ("N", "Normal")

    def __init__(self, code: str, label: str):
        self._code = code
        self._label = label

    @property
    def code(self) -> str:
        return self._code

    @property
    def label(self) -> str:
        return self._label

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["MessagePriority"]:
        for priority in cls:
            if priority.code == code:
                return priority
        return None


class DeliveryMonitoring(Enum):
    """Block 2 input delivery monitoring codes."""

    NON_DELIVERY_WARNING = ("1", "Non-Delivery Warning")
    DELIVERY_NOTIFICATION = ("2", "Delivery Notification")
    NON_DELIVERY_WARNING_AND_DELIVERY_NOTIFICATION = (
        "3",
        "Non-Delivery Warning and Delivery Notification",
    )

    def __init__(self, code: str, label: str):
        self._code = code
        self._label = label

    @property
    def code(self) -> str:
        return self._code

    @property
    def label(self) -> str:
        return self._label

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["DeliveryMonitoring"]:
        for monitoring in cls:
            if monitoring.code == code:
                return monitoring
        return None


# Block 1 application identifiers: F = FIN, A = GPA, L = GPA logins
APPLICATION_IDS = ("F", "A", "L")
# Block 1 service identifiers: 01 = FIN/GPA, 21 = ACK/NAK
SERVICE_IDS = ("01", "21")

# Priorities accepted per delivery monitoring code
PRIORITY_MONITORING_RULES: Dict[str, tuple] = {
    "U": ("1", "3"),
    "N": ("2",),
}


class SwiftCharacterSet(Enum):
    """SWIFT character sets used by validator patterns."""

    # Digits
    NUMERIC = ("n", r"[0-9]")
    # Uppercase letters
    ALPHA = ("a", r"[A-Z]")
    # Upper and lowercase letters
    ALPHA_MIXED = ("A", r"[A-Za-z]")
    # Uppercase letters and digits
    ALPHANUM = ("c", r"[A-Z0-9]")
    # Upper and lowercase letters and digits
    ALPHANUM_MIXED = ("B", r"[A-Za-z0-9]")
    # Character set X
    SWIFT_X = ("x", r"[A-Za-z0-9/\-?:().,'+ ]")
    # Character set Y (EDIFACT level A)
    SWIFT_Y = ("y", r"[A-Z0-9.,\-()/='+:?!\"%&*<>; ]")
    # Character set Z (information service)
    SWIFT_Z = ("z", r"[A-Za-z0-9.,\-()/='+:?!\"%&*<>;{@#_ ]")
    # Decimal digits with comma
    DECIMAL = ("d", r"[0-9,]")
    # Hexadecimal
    HEX = ("h", r"[0-9A-F]")
    # Blank space
    SPACE = ("e", r" ")

    def __init__(self, code: str, pattern: str):
        self._code = code
        self._pattern = pattern

    @property
    def code(self) -> str:
        return self._code

    @property
    def pattern(self) -> str:
        return self._pattern

    @classmethod
    def from_code(cls, code: str) -> Optional["SwiftCharacterSet"]:
        for charset in cls:
            if charset.code == code:
                return charset
        return None


class PatternTriple(NamedTuple):
    """Declarative description of a field value.

    ``parser`` drives component extraction, ``components`` types each
    extracted component and ``validator`` is the SWIFT format notation used
    for validation only.
    """

    parser: str
    components: str
    validator: str


GENERIC_PATTERN = PatternTriple("S", "S", "")

_BIC_OPTION = "[[/1!a][/34x]$]4!a2!a2!c[3!c]"
_BALANCE = PatternTriple("SNSN", "cDCI", "1!a6!n3!a15d")
_CURRENCY_AMOUNT = PatternTriple("SN", "CI", "3!a15d")

FIELD_PATTERNS: Dict[str, PatternTriple] = {
    # Block 3
    "103": PatternTriple("S", "S", "3!a"),
    "108": PatternTriple("S", "S", "16x"),
    "111": PatternTriple("N", "N", "3!n"),
    "113": PatternTriple("S", "S", "4!x"),
    "118": PatternTriple("S", "L", "<BOOL>"),
    "119": PatternTriple("S", "S", "8c"),
    "121": PatternTriple("S", "S", "36!x"),
    "132": PatternTriple("SN", "cN", "1a5!n"),
    # Block 4
    "12": PatternTriple("N", "N", "3!n"),
    "13C": PatternTriple("S", "S", "/8c/4!n1!x4!n"),
    "20": PatternTriple("S", "S", "16x"),
    "21": PatternTriple("S", "S", "16x"),
    "23B": PatternTriple("S", "S", "4!c"),
    "23E": PatternTriple("S", "S", "4!c[/30x]"),
    "25": PatternTriple("S", "S", "35x"),
    "26T": PatternTriple("S", "S", "3!c"),
    "28C": PatternTriple("S", "S", "5n[/5n]"),
    "32A": PatternTriple("NSN", "DCI", "6!n3!a15d"),
    "32B": _CURRENCY_AMOUNT,
    "33B": _CURRENCY_AMOUNT,
    "36": PatternTriple("N", "I", "12d"),
    "50K": PatternTriple("S", "S", "[/34x$]4*35x"),
    "52A": PatternTriple("S", "S", _BIC_OPTION),
    "53A": PatternTriple("S", "S", _BIC_OPTION),
    "54A": PatternTriple("S", "S", _BIC_OPTION),
    "56A": PatternTriple("S", "S", _BIC_OPTION),
    "57A": PatternTriple("S", "S", _BIC_OPTION),
    "58A": PatternTriple("S", "S", _BIC_OPTION),
    "59": PatternTriple("S", "S", "[/34x$]4*35x"),
    "59A": PatternTriple("S", "S", "[/34x$]<BIC>"),
    "60F": _BALANCE,
    "60M": _BALANCE,
    "62F": _BALANCE,
    "62M": _BALANCE,
    "64": _BALANCE,
    "65": _BALANCE,
    "70": PatternTriple("S", "S", "4*35x"),
    "71A": PatternTriple("S", "S", "3!a"),
    "71F": _CURRENCY_AMOUNT,
    "71G": _CURRENCY_AMOUNT,
    "72": PatternTriple("S", "S", "6*35x"),
    "77B": PatternTriple("S", "S", "3*35x"),
    "79": PatternTriple("S", "S", "35*50x"),
    "86": PatternTriple("S", "S", "6*65x"),
    # ACK/NAK text block
    "177": PatternTriple("N", "N", "10!n"),
    "405": PatternTriple("S", "S", "3!c"),
    "451": PatternTriple("N", "N", "1!n"),
    # Block 5
    "CHK": PatternTriple("S", "S", "12!h"),
    "MAC": PatternTriple("S", "S", "8!h"),
    "PAC": PatternTriple("S", "S", "8!h"),
}


def get_pattern_triple(name: str) -> Optional[PatternTriple]:
    """Look up the pattern triple for a field name (case-insensitive)."""
    if not name:
        return None
    return FIELD_PATTERNS.get(name.upper())


# Message categories
SWIFT_MESSAGE_CATEGORIES: Dict[str, str] = {
    "0": "System Messages",
    "1": "Customer Payments and Cheques",
    "2": "Financial Institution Transfers",
    "3": "Treasury Markets - FX, MM, Derivatives",
    "4": "Collections and Cash Letters",
    "5": "Securities Markets",
    "6": "Treasury Markets - Precious Metals and Syndications",
    "7": "Documentary Credits and Guarantees",
    "8": "Travellers Cheques",
    "9": "Cash Management and Customer Status",
}


def get_message_category(message_type: Optional[str]) -> Optional[str]:
    """Get category description for a message type."""
    if not message_type:
        return None

    mt_code = message_type.upper().replace("MT", "")
    if mt_code and mt_code[0].isdigit():
        return SWIFT_MESSAGE_CATEGORIES.get(mt_code[0])
    return None
