"""
Tests for SWIFT message validation.
"""

import pytest

from fin_engine.core.config import ValidationConfig
from fin_engine.protocols.swift import (
    SwiftBlock1,
    SwiftBlock2Input,
    SwiftBlock4,
    SwiftMessage,
    SwiftValidator,
    Tag,
    parse_swift_message,
    validate_message,
)
from fin_engine.protocols.validators import (
    ValidationResult,
    ValidationSeverity,
    validate_bic,
    validate_logical_terminal,
)


def _message(block1="F01BANKBEBBAXXX1234567890", block2="I103BANKDEFFXXXXU3003", text=":20:REF"):
    return parse_swift_message("{1:" + block1 + "}{2:" + block2 + "}{4:\n" + text + "\n-}")


class TestSwiftValidator:
    """Tests for structural message validation."""

    @pytest.fixture
    def validator(self):
        """Create validator."""
        return SwiftValidator()

    def test_valid_mt103(self, validator, mt103_raw):
        """Test that the sample MT103 is valid."""
        result = validator.validate(parse_swift_message(mt103_raw))
        assert result.is_valid, result.error_codes()
        assert result.warnings == []
        assert result.validator_name == "SwiftValidator"

    def test_valid_mt940(self, validator, mt940_raw):
        """Test that the sample output statement is valid."""
        result = validator.validate(parse_swift_message(mt940_raw))
        assert result.is_valid, result.error_codes()

    def test_valid_ack(self, validator, ack_raw):
        """Test that the sample ACK is valid."""
        result = validator.validate(parse_swift_message(ack_raw))
        assert result.is_valid, result.error_codes()

    def test_not_a_message(self, validator):
        """Test that other input is rejected as critical."""
        result = validator.validate("{1:F01}")
        assert result.error_codes() == ["SWIFT_INVALID_INPUT"]
        assert result.has_critical_errors

    def test_missing_blocks(self, validator):
        """Test that blocks 1 and 4 are required."""
        result = validator.validate(SwiftMessage())
        assert set(result.error_codes()) == {"SWIFT_MISSING_BLOCK1", "SWIFT_MISSING_BLOCK4"}
        assert result.has_critical_errors

    def test_invalid_basic_header_codes(self, validator):
        """Test application and service id checks."""
        result = validator.validate(_message(block1="X99BANKBEBBAXXX1234567890"))
        assert "SWIFT_INVALID_APP_ID" in result.error_codes()
        assert "SWIFT_INVALID_SERVICE_ID" in result.error_codes()

    def test_invalid_session_and_sequence(self, validator):
        """Test digit checks on session and sequence numbers."""
        result = validator.validate(_message(block1="F01BANKBEBBAXXX12A45678X0"))
        assert "SWIFT_INVALID_SESSION" in result.error_codes()
        assert "SWIFT_INVALID_SEQUENCE" in result.error_codes()

    def test_invalid_logical_terminal(self, validator):
        """Test logical terminal BIC checks."""
        result = validator.validate(_message(block1="F01bankbebbaxxx1234567890"))
        assert "SWIFT_INVALID_LT_ADDRESS" in result.error_codes()

    def test_bic_checks_can_be_disabled(self):
        """Test that only the address length is checked without BIC checks."""
        validator = SwiftValidator(validate_bics=False)
        result = validator.validate(_message(block1="F01bankbebbaxxx1234567890"))
        assert "SWIFT_INVALID_LT_ADDRESS" not in result.error_codes()

    def test_invalid_application_header(self, validator):
        """Test message type, priority and monitoring checks."""
        result = validator.validate(_message(block2="I1X3BANKDEFFXXXXZ9"))
        codes = result.error_codes()
        assert "SWIFT_INVALID_MSG_TYPE" in codes
        assert "SWIFT_INVALID_PRIORITY" in codes
        assert "SWIFT_INVALID_MONITORING" in codes

    def test_priority_monitoring_mismatch_warning(self, validator):
        """Test the warning for monitoring not used with a priority."""
        result = validator.validate(_message(block2="I103BANKDEFFXXXXN1003"))
        assert result.is_valid
        assert result.warning_codes() == ["SWIFT_PRIORITY_MONITORING_MISMATCH"]

    def test_strict_mode_fails_on_warnings(self):
        """Test that strict validation treats warnings as errors."""
        result = SwiftValidator(strict=True).validate(_message(block2="I103BANKDEFFXXXXN1003"))
        assert not result.is_valid
        assert result.error_count == 0
        assert result.warning_count == 1

    def test_invalid_output_header(self, validator, mt940_raw):
        """Test output header time checks."""
        raw = mt940_raw.replace(
            "O9401200230117BANKDEFFXXXX12345678902301171201N",
            "O940AB00230117BANKDEFFXXXX1234567890230117XX01N",
        )
        codes = validator.validate(parse_swift_message(raw)).error_codes()
        assert "SWIFT_INVALID_INPUT_TIME" in codes
        assert "SWIFT_INVALID_OUTPUT_TIME" in codes

    def test_invalid_field_format(self, validator):
        """Test that field values are checked against their format."""
        result = validator.validate(_message(text=":20:REF\n:32A:2301EUR1000"))
        assert result.error_codes() == ["SWIFT_INVALID_FIELD_FORMAT"]
        error = result.errors[0]
        assert error.field_name == "block4/32A"
        assert error.details["format"] == "6!n3!a15d"
        assert error.severity is ValidationSeverity.ERROR

    def test_field_checks_can_be_disabled(self):
        """Test skipping field format checks."""
        validator = SwiftValidator(validate_fields=False)
        result = validator.validate(_message(text=":20:REF\n:32A:2301EUR1000"))
        assert result.is_valid

    def test_unknown_field_warning(self, mt940_raw):
        """Test warnings for fields without a registered format."""
        validator = SwiftValidator(warn_unknown_fields=True)
        result = validator.validate(parse_swift_message(mt940_raw))
        assert result.is_valid
        assert set(result.warning_codes()) == {"SWIFT_UNKNOWN_FIELD"}
        assert {w.field_name for w in result.warnings} == {"block4/61"}

    def test_ambiguous_terminator(self, validator):
        """Test flagging a value line that would end the text block."""
        message = SwiftMessage(
            block1=SwiftBlock1("F", "01", "BANKBEBBAXXX", "1234", "567890"),
            block2=SwiftBlock2Input("103", "BANKDEFFXXXX"),
            block4=SwiftBlock4([Tag("20", "REF"), Tag("79", "LINE1\n-}LINE2")]),
        )
        result = validator.validate(message)
        assert "SWIFT_AMBIGUOUS_TERMINATOR" in result.error_codes()

    def test_from_config(self):
        """Test building a validator from configuration."""
        config = ValidationConfig(validate_bics=False, warn_unknown_fields=True)
        validator = SwiftValidator.from_config(config, strict=True)
        assert validator.strict
        assert not validator.validate_bics
        assert validator.warn_unknown_fields

    def test_validate_message_helper(self, mt103_raw):
        """Test the convenience function."""
        assert validate_message(parse_swift_message(mt103_raw)).is_valid

    def test_result_to_dict(self, validator):
        """Test result serialization."""
        data = validator.validate(SwiftMessage()).to_dict()
        assert data["is_valid"] is False
        assert data["validator_name"] == "SwiftValidator"
        assert data["errors"][0]["severity"] == "CRITICAL"


class TestValidationHelpers:
    """Tests for BIC and address helpers."""

    def test_validate_bic(self):
        """Test BIC format checks."""
        assert validate_bic("BANKBEBB") is None
        assert validate_bic("BANKBEBBXXX") is None
        assert validate_bic("") is not None
        assert validate_bic("BANKBE") is not None
        assert validate_bic("BAN1BEBB") is not None
        assert validate_bic("BANK12BB") is not None

    def test_validate_logical_terminal(self):
        """Test logical terminal address checks."""
        assert validate_logical_terminal("BANKBEBBAXXX") is None
        assert validate_logical_terminal("BANKBEBBXXX") is not None
        assert validate_logical_terminal("BANKBEBBA-XX") is not None

    def test_result_merge(self):
        """Test merging results."""
        first = ValidationResult()
        second = ValidationResult()
        second.add_error("X", "broken")
        second.add_warning("W", "odd")
        first.merge(second)
        assert not first.is_valid
        assert first.error_codes() == ["X"]
        assert first.warning_codes() == ["W"]
