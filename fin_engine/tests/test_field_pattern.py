"""
Tests for field component decomposition.

Tests cover:
- Parser pattern split and join
- Validator pattern grammar
- Number, boolean and date coercion
- Typed component access on fields
"""

from datetime import date
from decimal import Decimal

import pytest

from fin_engine.protocols.swift import (
    ComponentCoercionFailure,
    Field,
    FieldPatternEngine,
    FieldPatternError,
    PatternTriple,
    Tag,
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
from fin_engine.protocols.swift import field_pattern
from fin_engine.protocols.swift.field_pattern import (
    compile_validator,
    format_boolean,
    format_number,
    parse_boolean,
    parse_date,
    parse_number,
)


class TestSplitJoin:
    """Tests for parser pattern extraction."""

    def test_date_currency_amount(self):
        """Test splitting a value date, currency and amount."""
        assert split_components("230115EUR1000,00", "NSN") == ["230115", "EUR", "1000,00"]

    def test_alpha_then_number(self):
        """Test a letter prefix followed by digits."""
        assert split_components("A12345", "SN") == ["A", "12345"]

    def test_missing_trailing_component_is_none(self):
        """Test that letters reached after the input runs out give None."""
        assert split_components("EUR", "SN") == ["EUR", None]
        assert split_components("230115", "NSN") == ["230115", None, None]

    def test_empty_match_is_empty_string(self):
        """Test that a letter matching nothing while input remains gives ""."""
        assert split_components("123", "SN") == ["", "123"]

    def test_no_value(self):
        """Test that a missing value gives all-None components."""
        assert split_components(None, "SN") == [None, None]
        assert split_components("", "S") == [None]

    def test_last_letter_takes_remainder(self):
        """Test that the final letter keeps any trailing text."""
        assert split_components("EUR10,00/EXTRA", "SN") == ["EUR", "10,00/EXTRA"]

    def test_join(self):
        """Test joining skips absent components."""
        assert join_components(["EUR", None]) == "EUR"
        assert join_components(["", "123"]) == "123"
        assert join_components([None, None]) == ""

    def test_split_then_join_restores_value(self):
        """Test that joining a split value gives the value back."""
        for value, pattern in [
            ("C230116EUR1000,00", "SNSN"),
            ("/ACCOUNT\nNAME", "S"),
            ("99ABC", "SN"),
            ("ABC", "NSN"),
        ]:
            assert join_components(split_components(value, pattern)) == value

    def test_empty_pattern(self):
        """Test that an empty parser pattern is rejected."""
        with pytest.raises(FieldPatternError):
            split_components("X", "")

    def test_unknown_letter(self):
        """Test that an unknown letter fails only when it has input to read."""
        with pytest.raises(FieldPatternError):
            split_components("X", "Q")
        assert split_components("", "Q") == [None]

    def test_custom_rule(self):
        """Test registering a rule on a separate engine."""
        engine = FieldPatternEngine()
        engine.register("T", lambda rest, last: rest if last else rest[:2])
        assert engine.split("ABCD", "TT") == ["AB", "CD"]
        assert "T" in engine.letters
        assert "T" not in FieldPatternEngine().letters

    def test_register_on_shared_engine(self, monkeypatch):
        """Test that registered letters are used by split_components."""
        monkeypatch.setattr(field_pattern, "_default_engine", FieldPatternEngine())
        register_parser_rule("T", lambda rest, last: rest if last else rest[:3])
        assert split_components("EURUSD", "TT") == ["EUR", "USD"]

    def test_rule_must_take_a_prefix(self):
        """Test that a rule returning foreign text is rejected."""
        engine = FieldPatternEngine()
        engine.register("Z", lambda rest, last: "nope")
        with pytest.raises(FieldPatternError):
            engine.split("ABC", "ZS")

    def test_register_rejects_long_letters(self):
        """Test that parser letters are single characters."""
        with pytest.raises(FieldPatternError):
            FieldPatternEngine().register("AB", lambda rest, last: rest)


class TestValidatorGrammar:
    """Tests for the SWIFT format notation."""

    def test_exact_length(self):
        """Test n!c fixed lengths."""
        assert validate_value("12345", "5!n") is None
        assert validate_value("1234", "5!n") is not None
        assert validate_value("1234A", "5!n") is not None

    def test_maximum_length(self):
        """Test nc maximum lengths."""
        assert validate_value("REF123", "16x") is None
        assert validate_value("R" * 17, "16x") is not None

    def test_multi_line(self):
        """Test n*mc line limits."""
        assert validate_value("LINE1\nLINE2", "4*35x") is None
        assert validate_value("LINE1\r\nLINE2", "4*35x") is None
        assert validate_value("\n".join(["L"] * 5), "4*35x") is not None
        assert validate_value("L" * 36, "4*35x") is not None

    def test_optional_sections(self):
        """Test optional and nested optional groups."""
        assert validate_value("JANE DOE", "[/34x$]4*35x") is None
        assert validate_value("/87654321\nJANE DOE", "[/34x$]4*35x") is None
        bic_option = "[[/1!a][/34x]$]4!a2!a2!c[3!c]"
        assert validate_value("BANKBEBB", bic_option) is None
        assert validate_value("BANKBEBBXXX", bic_option) is None
        assert validate_value("/C/12345\nBANKBEBB", bic_option) is None
        assert validate_value("BANKBE", bic_option) is not None

    def test_special_tokens(self):
        """Test named tokens."""
        assert validate_value("Y", "<BOOL>") is None
        assert validate_value("X", "<BOOL>") is not None
        assert validate_value("230115", "<DATE2>") is None
        assert validate_value("231315", "<DATE2>") is not None
        assert validate_value("20230115", "<DATE4>") is None
        assert validate_value("2359", "<HHMM>") is None
        assert validate_value("2400", "<HHMM>") is not None
        assert validate_value("EUR", "<CUR>") is None
        assert validate_value("BANKBEBBXXX", "<BIC>") is None

    def test_decimal(self):
        """Test decimal amounts with a mandatory comma."""
        assert validate_value("1000,00", "15d") is None
        assert validate_value("1000,", "15d") is None
        assert validate_value("1000", "15d") is not None
        assert validate_value("1,2,3", "15d") is not None
        assert validate_value("1" * 15 + ",", "15d") is not None

    def test_composite_format(self):
        """Test a date, currency and amount format."""
        assert validate_value("230115EUR1000,00", "6!n3!a15d") is None
        assert validate_value("230115eur1000,00", "6!n3!a15d") is not None

    def test_literal_characters(self):
        """Test literal punctuation in a format."""
        assert validate_value("/SNDTIME/1200+0100", "/8c/4!n1!x4!n") is None

    def test_empty_pattern_and_missing_value(self):
        """Test the degenerate cases."""
        assert validate_value("anything", "") is None
        assert validate_value(None, "16x") == "Value is missing"

    @pytest.mark.parametrize("pattern", ["[3!n", "3!n]", "<FOO>", "<BOOL", "3!q"])
    def test_malformed_patterns(self, pattern):
        """Test that malformed formats are rejected."""
        with pytest.raises(FieldPatternError):
            compile_validator(pattern)


class TestCoercion:
    """Tests for number, boolean and date conversion."""

    def test_parse_number(self):
        """Test integers and SWIFT decimals."""
        assert parse_number("123") == 123
        assert parse_number("1000,50") == Decimal("1000.50")
        assert parse_number("1000,") == Decimal("1000")

    @pytest.mark.parametrize("text", [None, "", "12a", "1.5", "-1", "١٢"])
    def test_parse_number_rejects(self, text):
        """Test that non-numbers raise a coercion failure."""
        with pytest.raises(ComponentCoercionFailure):
            parse_number(text)

    def test_format_number(self):
        """Test SWIFT number rendering."""
        assert format_number(5) == "5"
        assert format_number(1000, amount=True) == "1000,"
        assert format_number(Decimal("1000.50")) == "1000,50"
        assert format_number("1000,5", amount=True) == "1000,5"

    @pytest.mark.parametrize("value", [-1, Decimal("-0.5"), True, 1.5, Decimal("NaN")])
    def test_format_number_rejects(self, value):
        """Test that negatives, bools, floats and NaN are rejected."""
        with pytest.raises(ComponentCoercionFailure):
            format_number(value)

    def test_booleans(self):
        """Test boolean parsing and rendering."""
        assert parse_boolean("Y") is True
        assert parse_boolean("false") is False
        assert format_boolean(True) == "Y"
        assert format_boolean(False) == "N"
        with pytest.raises(ComponentCoercionFailure):
            parse_boolean("maybe")
        with pytest.raises(ComponentCoercionFailure):
            format_boolean(1)

    def test_dates(self):
        """Test two and four digit year dates."""
        assert parse_date("230115") == date(2023, 1, 15)
        assert parse_date("20230115") == date(2023, 1, 15)
        with pytest.raises(ComponentCoercionFailure):
            parse_date("231315")
        with pytest.raises(ComponentCoercionFailure):
            parse_date("2301")


class TestField:
    """Tests for typed field access."""

    def test_components_of_32a(self):
        """Test splitting a value date/currency/amount field."""
        field = Field.of("32A", "230115EUR1000,00")
        assert field.components == ["230115", "EUR", "1000,00"]
        assert field.component_count == 3
        assert get_component(field, 2) == "EUR"
        assert field.component_type(3) == "I"
        assert field.is_valid

    def test_component_positions_are_one_based(self):
        """Test out-of-range positions."""
        field = Field.of("32A", "230115EUR1000,00")
        with pytest.raises(IndexError):
            field.component(0)
        with pytest.raises(IndexError):
            field.component(4)

    def test_typed_getters(self):
        """Test date, amount and number accessors."""
        field = Field.of("32A", "230115EUR1000,00")
        assert get_date(field, 1) == date(2023, 1, 15)
        assert get_decimal(field, 3) == Decimal("1000.00")
        assert get_number(field, 1) == 230115

    def test_typed_getters_yield_none_on_failure(self):
        """Test that read coercion failures give None instead of raising."""
        field = Field.of("32A", "991399EUR1000,00")
        assert get_number(field, 2) is None
        assert get_date(field, 1) is None
        assert get_decimal(Field.of("33B", "EUR"), 2) is None

    def test_boolean_field(self):
        """Test a boolean header field."""
        field = Field.of("118", "Y")
        assert get_boolean(field, 1) is True
        assert with_boolean(field, 1, False).value == "N"
        assert get_boolean(Field.of("118", "MAYBE"), 1) is None

    def test_with_number_amount(self):
        """Test that amount components keep the decimal comma."""
        field = Field.of("32A", "230115EUR1000,00")
        updated = with_number(field, 3, 2500)
        assert updated.value == "230115EUR2500,"
        assert field.value == "230115EUR1000,00"
        assert with_number(field, 3, Decimal("12.5")).value == "230115EUR12,5"

    def test_with_number_rejects_bad_values(self):
        """Test that write coercion failures raise."""
        field = Field.of("32A", "230115EUR1000,00")
        with pytest.raises(ComponentCoercionFailure) as exc_info:
            with_number(field, 3, -5)
        assert exc_info.value.component == 3
        with pytest.raises(ComponentCoercionFailure):
            with_boolean(Field.of("118", "Y"), 1, "Y")

    def test_with_component_fills_missing(self):
        """Test setting an absent trailing component."""
        field = Field.of("33B", "EUR")
        assert field.components == ["EUR", None]
        assert with_component(field, 2, "10,").value == "EUR10,"

    def test_incomplete_field_fails_validation(self):
        """Test that a truncated value is reported by validate."""
        field = Field.of("32A", "230115")
        assert field.components == ["230115", None, None]
        assert field.validate() is not None

    def test_balance_field(self):
        """Test a statement balance field."""
        field = Field.of("60F", "C230116EUR1000,00")
        assert field.components == ["C", "230116", "EUR", "1000,00"]
        assert get_date(field, 2) == date(2023, 1, 16)

    def test_unknown_field_uses_generic_pattern(self):
        """Test that unregistered names hold a single string component."""
        field = Field.of("99Z", "ANY TEXT 123")
        assert field.components == ["ANY TEXT 123"]
        assert field.is_valid

    def test_name_lookup_is_case_insensitive(self):
        """Test that lowercase names find their patterns."""
        assert Field.of("32a", "230115EUR1,").patterns == Field.of("32A", "x").patterns

    def test_from_components_and_tags(self):
        """Test building fields from components and tags."""
        field = Field.from_components("32A", ["230115", "EUR", "1000,00"])
        assert field.value == "230115EUR1000,00"
        assert Field.from_tag(Tag("20", "REF")).to_tag() == Tag("20", "REF")

    def test_explicit_patterns(self):
        """Test a field with its own pattern triple."""
        field = Field("X", "AB12", PatternTriple("SN", "SN", "2!a2!n"))
        assert field.components == ["AB", "12"]
        assert field.is_valid
