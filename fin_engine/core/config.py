"""
FIN Engine - Configuration Management

Settings come from a YAML file or from ``FIN_ENGINE_*`` environment variables.

The codec itself never reads the global configuration: decode entry points take
an explicit ``lenient`` flag, and only the command line (or a caller that opts
in) resolves that flag from :class:`Config`.
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigurationException

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level names accepted by the logging setup."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ParseMode(str, Enum):
    """Decode policy applied at the decode entry point."""

    STRICT = "strict"
    LENIENT = "lenient"

    @property
    def lenient(self) -> bool:
        return self is ParseMode.LENIENT


LINE_SEPARATORS = ("\n", "\r\n")
_SEPARATOR_NAMES = {"lf": "\n", "crlf": "\r\n"}


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass
class ParserConfig:
    """Decoder settings."""

    mode: ParseMode = ParseMode.STRICT
    # Used when encoding a block 4 built in code (decoded blocks keep their own)
    line_separator: str = "\n"

    def __post_init__(self):
        if not isinstance(self.mode, ParseMode):
            try:
                self.mode = ParseMode(str(self.mode).lower())
            except ValueError:
                raise ConfigurationException(
                    f"Unknown parse mode: {self.mode}", config_key="parser.mode"
                )
        self.line_separator = _SEPARATOR_NAMES.get(
            str(self.line_separator).lower(), self.line_separator
        )

    @property
    def lenient(self) -> bool:
        return self.mode.lenient


@dataclass
class ValidationConfig:
    """Structural validation switches."""

    validate_bics: bool = True
    validate_fields: bool = True
    # Fields without a known pattern are reported as warnings when enabled
    warn_unknown_fields: bool = False

    def __post_init__(self):
        self.validate_bics = _flag(self.validate_bics)
        self.validate_fields = _flag(self.validate_fields)
        self.warn_unknown_fields = _flag(self.warn_unknown_fields)


@dataclass
class Config:
    """Top-level FIN engine settings."""

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False
    service_name: str = "fin-engine"
    version: str = "1.0.0"

    parser: ParserConfig = field(default_factory=ParserConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @property
    def lenient(self) -> bool:
        return self.parser.lenient

    @property
    def effective_log_level(self) -> LogLevel:
        """``DEBUG`` when debug mode is on, otherwise ``log_level``."""
        return LogLevel.DEBUG if self.debug else self.log_level

    def service_fields(self) -> Dict[str, Any]:
        """Identity fields stamped on structured log events."""
        return {
            "service": self.service_name,
            "service_version": self.version,
            "environment": self.environment.value,
        }

    @classmethod
    def load_from_file(cls, config_path: Union[str, Path]) -> "Config":
        """Read settings from a YAML document."""
        path = Path(config_path)
        if not path.is_file():
            raise ConfigurationException(f"Configuration file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigurationException(f"Cannot read {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Configuration file must contain a mapping: {path}"
            )

        logger.debug(f"Loaded configuration from {path}")
        return cls._from_dict(data)

    @classmethod
    def load_from_env(cls, prefix: str = "FIN_ENGINE_") -> "Config":
        """Read settings from ``<prefix>*`` environment variables."""
        data: Dict[str, Any] = {}
        for key in ("environment", "debug", "log_level", "json_logs", "service_name"):
            raw = os.environ.get(prefix + key.upper())
            if raw is not None:
                data[key] = raw

        parser: Dict[str, Any] = {}
        if os.environ.get(prefix + "PARSE_MODE"):
            parser["mode"] = os.environ[prefix + "PARSE_MODE"]
        if os.environ.get(prefix + "LINE_SEPARATOR"):
            parser["line_separator"] = os.environ[prefix + "LINE_SEPARATOR"]
        if parser:
            data["parser"] = parser

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls()
        try:
            if "environment" in data:
                config.environment = Environment(str(data["environment"]).lower())
            if "log_level" in data:
                config.log_level = LogLevel(str(data["log_level"]).upper())
            for key in ("debug", "json_logs"):
                if key in data:
                    setattr(config, key, _flag(data[key]))
            if "service_name" in data:
                config.service_name = str(data["service_name"])

            config.parser = ParserConfig(**(data.get("parser") or {}))
            config.validation = ValidationConfig(**(data.get("validation") or {}))
        except (TypeError, ValueError) as e:
            raise ConfigurationException(f"Invalid configuration value: {e}")
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Plain snapshot that ``_from_dict`` accepts back."""
        data = asdict(self)
        data["environment"] = self.environment.value
        data["log_level"] = self.log_level.value
        data["parser"]["mode"] = self.parser.mode.value
        return data

    def validate(self) -> None:
        """Raise ConfigurationException listing every bad setting."""
        problems = []
        if self.parser.line_separator not in LINE_SEPARATORS:
            problems.append(
                f"Line separator must be LF or CRLF, got {self.parser.line_separator!r}"
            )
        if not self.service_name:
            problems.append("Service name must not be empty")

        if problems:
            raise ConfigurationException("Invalid configuration: " + "; ".join(problems))

        if self.environment is Environment.PRODUCTION and self.debug:
            logger.warning("Debug mode enabled in production")


_config: Optional[Config] = None


def get_config() -> Config:
    """Return the process-wide configuration, loading it from the environment once."""
    global _config
    if _config is None:
        _config = Config.load_from_env()
    return _config


def set_config(config: Config) -> None:
    """Validate and install the process-wide configuration."""
    global _config
    config.validate()
    _config = config


def load_config(config_path: Union[str, Path]) -> Config:
    """Load a YAML file and install it as the process-wide configuration."""
    config = Config.load_from_file(config_path)
    set_config(config)
    return config
