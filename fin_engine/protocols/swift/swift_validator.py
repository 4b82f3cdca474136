"""
SWIFT Message Validator

Structural and format validation of decoded FIN messages:
- Header code values (blocks 1 and 2)
- Field values against their validator patterns (blocks 3, 4 and 5)
- Text block lines that would read back as a block terminator

Decoding never depends on validation; a message that decodes can still fail here.
"""

import re
from typing import Any, Optional

from fin_engine.core.config import ValidationConfig
from fin_engine.protocols.validators.base_validator import (
    BaseValidator,
    ValidationResult,
    ValidationSeverity,
    validate_logical_terminal,
)
from fin_engine.protocols.swift.field_pattern import Field
from fin_engine.protocols.swift.header_codec import SwiftBlock1, SwiftBlock2Input, SwiftBlock2Output
from fin_engine.protocols.swift.swift_codes import (
    APPLICATION_IDS,
    PRIORITY_MONITORING_RULES,
    SERVICE_IDS,
    get_pattern_triple,
)
from fin_engine.protocols.swift.swift_message import SwiftMessage
from fin_engine.protocols.swift.tag_sequence import TagSequence


class SwiftValidator(BaseValidator):
    """
    Validator for SWIFT FIN messages.

    Validates:
    - Block 1 application/service ids, logical terminal, session and sequence
    - Block 2 message type, addresses, priority and delivery monitoring
    - Tag values in blocks 3-5 that have a registered pattern triple
    """

    NUMERIC_PATTERN = re.compile(r"^[0-9]+$")
    TERMINATOR_LINE_PATTERN = re.compile(r"\n-}")

    def __init__(
        self,
        strict: bool = False,
        validate_bics: bool = True,
        validate_fields: bool = True,
        warn_unknown_fields: bool = False,
    ):
        """
        Initialize the SWIFT validator.

        Args:
            strict: If True, warnings also make the result invalid
            validate_bics: Check BICs embedded in logical terminal addresses
            validate_fields: Check tag values against their validator patterns
            warn_unknown_fields: Warn about tags without a registered pattern
        """
        super().__init__(strict)
        self.validate_bics = validate_bics
        self.validate_fields = validate_fields
        self.warn_unknown_fields = warn_unknown_fields

    @classmethod
    def from_config(cls, config: ValidationConfig, strict: bool = False) -> "SwiftValidator":
        return cls(
            strict=strict,
            validate_bics=config.validate_bics,
            validate_fields=config.validate_fields,
            warn_unknown_fields=config.warn_unknown_fields,
        )

    @property
    def name(self) -> str:
        return "SwiftValidator"

    @property
    def version(self) -> str:
        return "1.0"

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate a decoded FIN message.

        Args:
            data: SwiftMessage

        Returns:
            ValidationResult with any errors or warnings
        """
        result = self._create_result()

        if not isinstance(data, SwiftMessage):
            result.add_error(
                "SWIFT_INVALID_INPUT",
                "Input must be a SwiftMessage",
                severity=ValidationSeverity.CRITICAL,
            )
            return result

        if data.block1 is None or data.block1.is_empty():
            result.add_error(
                "SWIFT_MISSING_BLOCK1",
                "Basic header (block 1) is required",
                severity=ValidationSeverity.CRITICAL,
            )
        else:
            self._validate_block1(data.block1, result)

        if data.block2 is not None and not data.block2.is_empty():
            if isinstance(data.block2, SwiftBlock2Output):
                self._validate_block2_output(data.block2, result)
            else:
                self._validate_block2_input(data.block2, result)

        if data.block4 is None:
            result.add_error(
                "SWIFT_MISSING_BLOCK4",
                "Text block (block 4) is required",
                severity=ValidationSeverity.CRITICAL,
            )
        else:
            self._validate_text_block(data.block4, result)

        if self.validate_fields:
            for number, block in ((3, data.block3), (4, data.block4), (5, data.block5)):
                if block is not None:
                    self._validate_tags(number, block, result)

        return self._finish(result)

    def _validate_block1(self, header: SwiftBlock1, result: ValidationResult) -> None:
        """Validate basic header (block 1)."""
        if header.application_id not in APPLICATION_IDS:
            result.add_error(
                "SWIFT_INVALID_APP_ID",
                f"Invalid application ID: {header.application_id}",
                field="block1/application_id",
            )

        if header.service_id not in SERVICE_IDS:
            result.add_error(
                "SWIFT_INVALID_SERVICE_ID",
                f"Invalid service ID: {header.service_id}",
                field="block1/service_id",
            )

        self._check_address(
            header.logical_terminal, "SWIFT_INVALID_LT_ADDRESS", "block1/logical_terminal", result
        )
        self._check_digits(header.session_number, 4, "SWIFT_INVALID_SESSION", "block1/session_number", result)
        self._check_digits(header.sequence_number, 6, "SWIFT_INVALID_SEQUENCE", "block1/sequence_number", result)

    def _validate_block2_input(self, header: SwiftBlock2Input, result: ValidationResult) -> None:
        """Validate input application header (block 2)."""
        self._check_digits(header.message_type, 3, "SWIFT_INVALID_MSG_TYPE", "block2/message_type", result)
        self._check_address(
            header.receiver_address, "SWIFT_INVALID_RECEIVER", "block2/receiver_address", result
        )

        if header.message_priority is not None and header.priority_type is None:
            result.add_error(
                "SWIFT_INVALID_PRIORITY",
                f"Invalid priority: {header.message_priority}",
                field="block2/message_priority",
            )

        if header.delivery_monitoring is not None and header.delivery_monitoring_type is None:
            result.add_error(
                "SWIFT_INVALID_MONITORING",
                f"Invalid delivery monitoring: {header.delivery_monitoring}",
                field="block2/delivery_monitoring",
            )

        if header.obsolescence_period is not None:
            self._check_digits(
                header.obsolescence_period, 3, "SWIFT_INVALID_OBSOLESCENCE",
                "block2/obsolescence_period", result,
            )

        allowed = PRIORITY_MONITORING_RULES.get(header.message_priority or "")
        if allowed is not None and header.delivery_monitoring not in allowed + (None,):
            result.add_warning(
                "SWIFT_PRIORITY_MONITORING_MISMATCH",
                f"Delivery monitoring {header.delivery_monitoring} is not used with "
                f"priority {header.message_priority}",
                field="block2/delivery_monitoring",
            )

    def _validate_block2_output(self, header: SwiftBlock2Output, result: ValidationResult) -> None:
        """Validate output application header (block 2)."""
        self._check_digits(header.message_type, 3, "SWIFT_INVALID_MSG_TYPE", "block2/message_type", result)
        self._check_digits(header.input_time, 4, "SWIFT_INVALID_INPUT_TIME", "block2/input_time", result)
        self._check_digits(header.mir_date, 6, "SWIFT_INVALID_MIR", "block2/mir_date", result)
        self._check_address(
            header.sender_address, "SWIFT_INVALID_SENDER", "block2/sender_address", result
        )
        self._check_digits(header.output_date, 6, "SWIFT_INVALID_OUTPUT_DATE", "block2/output_date", result)
        self._check_digits(header.output_time, 4, "SWIFT_INVALID_OUTPUT_TIME", "block2/output_time", result)

        if header.message_priority is not None and header.priority_type is None:
            result.add_error(
                "SWIFT_INVALID_PRIORITY",
                f"Invalid priority: {header.message_priority}",
                field="block2/message_priority",
            )

    def _validate_text_block(self, block: TagSequence, result: ValidationResult) -> None:
        """Flag values that would end the text block early when re-read."""
        for tag in block:
            if tag.value and self.TERMINATOR_LINE_PATTERN.search(
                tag.value.replace("\r\n", "\n")
            ):
                result.add_error(
                    "SWIFT_AMBIGUOUS_TERMINATOR",
                    f"Field {tag.name} has a line starting with '-}}'",
                    field=f"block4/{tag.name}",
                )

    def _validate_tags(self, number: int, block: TagSequence, result: ValidationResult) -> None:
        """Check every tag that has a registered validator pattern."""
        for tag in block:
            patterns = get_pattern_triple(tag.name)
            if patterns is None:
                if self.warn_unknown_fields:
                    result.add_warning(
                        "SWIFT_UNKNOWN_FIELD",
                        f"No format registered for field {tag.name}",
                        field=f"block{number}/{tag.name}",
                    )
                continue

            error = Field(tag.name, tag.value, patterns).validate()
            if error:
                result.add_error(
                    "SWIFT_INVALID_FIELD_FORMAT",
                    f"Field {tag.name}: {error}",
                    field=f"block{number}/{tag.name}",
                    format=patterns.validator,
                )

    def _check_digits(
        self,
        value: Optional[str],
        length: int,
        code: str,
        field: str,
        result: ValidationResult,
    ) -> None:
        if value is None or len(value) != length or not self.NUMERIC_PATTERN.match(value):
            result.add_error(code, f"Expected {length} digits, got {value!r}", field=field)

    def _check_address(
        self, address: Optional[str], code: str, field: str, result: ValidationResult
    ) -> None:
        if address is None or len(address) != 12:
            result.add_error(
                code, f"Address must be 12 characters, got {address!r}", field=field
            )
            return
        if self.validate_bics:
            error = validate_logical_terminal(address)
            if error:
                result.add_error(code, f"Invalid address {address}: {error}", field=field)


def validate_message(message: SwiftMessage, strict: bool = False) -> ValidationResult:
    """Convenience function to validate a decoded message."""
    return SwiftValidator(strict=strict).validate(message)
