"""
Tests for configuration loading and the exception hierarchy.
"""

import logging

import pytest

from fin_engine.core import config as config_module
from fin_engine.core.config import (
    Config,
    Environment,
    LogLevel,
    ParseMode,
    ParserConfig,
    get_config,
    load_config,
    set_config,
)
from fin_engine.core.exceptions import ConfigurationException, FinEngineException
from fin_engine.protocols.swift import MalformedHeader, SwiftParseError


class TestConfig:
    """Tests for configuration sources."""

    def test_defaults(self):
        """Test default settings."""
        config = Config()
        assert config.parser.mode is ParseMode.STRICT
        assert not config.lenient
        assert config.parser.line_separator == "\n"
        assert config.validation.validate_bics
        assert config.service_name == "fin-engine"

    def test_load_from_file(self, tmp_path):
        """Test loading a YAML file."""
        path = tmp_path / "fin.yaml"
        path.write_text(
            "environment: testing\n"
            "log_level: debug\n"
            "json_logs: true\n"
            "parser:\n"
            "  mode: LENIENT\n"
            "  line_separator: CRLF\n"
            "validation:\n"
            "  warn_unknown_fields: true\n"
        )
        config = Config.load_from_file(path)
        assert config.environment is Environment.TESTING
        assert config.log_level is LogLevel.DEBUG
        assert config.json_logs
        assert config.lenient
        assert config.parser.line_separator == "\r\n"
        assert config.validation.warn_unknown_fields
        assert config.validation.validate_fields

    def test_empty_file_gives_defaults(self, tmp_path):
        """Test that an empty file is accepted."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config.load_from_file(path) == Config()

    def test_missing_file(self, tmp_path):
        """Test that a missing file is reported."""
        with pytest.raises(ConfigurationException):
            Config.load_from_file(tmp_path / "missing.yaml")

    @pytest.mark.parametrize(
        "content",
        [
            "parser: [unclosed",
            "- just\n- a list\n",
            "parser:\n  mode: fast\n",
            "parser:\n  unknown_option: 1\n",
            "environment: moon\n",
        ],
    )
    def test_invalid_file_content(self, tmp_path, content):
        """Test that bad YAML or bad values raise ConfigurationException."""
        path = tmp_path / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ConfigurationException):
            Config.load_from_file(path)

    def test_load_from_env(self, monkeypatch):
        """Test loading from environment variables."""
        monkeypatch.setenv("FIN_ENGINE_ENVIRONMENT", "staging")
        monkeypatch.setenv("FIN_ENGINE_LOG_LEVEL", "warning")
        monkeypatch.setenv("FIN_ENGINE_DEBUG", "true")
        monkeypatch.setenv("FIN_ENGINE_PARSE_MODE", "lenient")
        monkeypatch.setenv("FIN_ENGINE_LINE_SEPARATOR", "LF")
        config = Config.load_from_env()
        assert config.environment is Environment.STAGING
        assert config.log_level is LogLevel.WARNING
        assert config.debug
        assert config.lenient
        assert config.parser.line_separator == "\n"

    def test_load_from_env_invalid(self, monkeypatch):
        """Test that bad environment values raise ConfigurationException."""
        monkeypatch.setenv("FIN_ENGINE_LOG_LEVEL", "loud")
        with pytest.raises(ConfigurationException):
            Config.load_from_env()

    def test_to_dict_round_trip(self):
        """Test that a dict snapshot loads back to the same settings."""
        config = Config()
        config.parser = ParserConfig(mode="lenient", line_separator="\r\n")
        assert Config._from_dict(config.to_dict()) == config

    def test_validate_rejects_bad_separator(self):
        """Test separator validation."""
        config = Config()
        config.parser.line_separator = "\r"
        with pytest.raises(ConfigurationException):
            config.validate()

    def test_global_config(self, monkeypatch, tmp_path):
        """Test setting and loading the global configuration."""
        monkeypatch.setattr(config_module, "_config", None)
        assert get_config() == Config.load_from_env()

        config = Config()
        config.parser.mode = ParseMode.LENIENT
        set_config(config)
        assert get_config() is config

        path = tmp_path / "fin.yaml"
        path.write_text("service_name: statements\n")
        loaded = load_config(path)
        assert get_config() is loaded
        assert loaded.service_name == "statements"

    def test_validation_flags_from_quoted_yaml(self, tmp_path):
        """Test that quoted booleans in the validation section are coerced."""
        path = tmp_path / "fin.yaml"
        path.write_text(
            "validation:\n"
            "  validate_bics: \"false\"\n"
            "  validate_fields: \"no\"\n"
            "  warn_unknown_fields: \"true\"\n"
        )
        validation = Config.load_from_file(path).validation
        assert validation.validate_bics is False
        assert validation.validate_fields is False
        assert validation.warn_unknown_fields is True

    def test_effective_log_level(self):
        """Test that debug mode forces DEBUG logging."""
        config = Config(log_level=LogLevel.ERROR)
        assert config.effective_log_level is LogLevel.ERROR
        config.debug = True
        assert config.effective_log_level is LogLevel.DEBUG

    def test_service_fields(self, test_config):
        """Test the identity stamped on log events."""
        assert test_config.service_fields() == {
            "service": "fin-engine",
            "service_version": "1.0.0",
            "environment": "testing",
        }

    def test_debug_in_production_warns(self, caplog):
        """Test that debug mode in production is reported."""
        config = Config(environment=Environment.PRODUCTION, debug=True)
        with caplog.at_level(logging.WARNING, logger="fin_engine.core.config"):
            config.validate()
        assert "Debug mode enabled in production" in caplog.text

    def test_set_config_validates(self):
        """Test that invalid settings are not installed."""
        config = Config()
        config.service_name = ""
        with pytest.raises(ConfigurationException):
            set_config(config)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_base_exception_str(self):
        """Test message, code and context rendering."""
        error = FinEngineException("boom", error_code="E1", context={"k": 1})
        assert str(error) == "boom (Code: E1, Context: {'k': 1})"
        assert str(FinEngineException("boom")) == "boom (Code: FIN_ENGINE_ERROR)"

    def test_configuration_exception(self):
        """Test configuration errors carry their key."""
        error = ConfigurationException("bad", config_key="parser.mode")
        assert error.error_code == "CONFIG_ERROR"
        assert error.context == {"config_key": "parser.mode"}

    def test_parse_errors_share_the_base(self):
        """Test that decode errors are engine exceptions."""
        error = MalformedHeader("short", block=1, raw_content="F01")
        assert isinstance(error, SwiftParseError)
        assert isinstance(error, FinEngineException)
        assert error.context == {"block": 1, "length": 3}
