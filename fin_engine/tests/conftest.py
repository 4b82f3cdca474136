"""
FIN Engine - Pytest Configuration and Fixtures

This module provides shared sample messages and configuration for all tests.
"""

import logging

import pytest

from fin_engine.core import config as config_module
from fin_engine.core.config import Config, Environment


MT103_MESSAGE = (
    "{1:F01BANKBEBBAXXX1234567890}"
    "{2:I103BANKDEFFXXXXU3003}"
    "{3:{108:MUR123}{121:eb6305c9-1f7f-49de-aed0-16487c27b42d}}"
    "{4:\n"
    ":20:REF123\n"
    ":23B:CRED\n"
    ":32A:230115EUR1000,00\n"
    ":50K:/12345678\n"
    "JOHN DOE\n"
    ":59:/87654321\n"
    "JANE DOE\n"
    ":71A:SHA\n"
    "-}"
    "{5:{CHK:123456789ABC}}"
)

MT940_MESSAGE = (
    "{1:F01BANKBEBBAXXX1234567890}"
    "{2:O9401200230117BANKDEFFXXXX12345678902301171201N}"
    "{4:\n"
    ":20:STMT001\n"
    ":25:123456789\n"
    ":28C:1/1\n"
    ":60F:C230116EUR1000,00\n"
    ":61:2301170117C500,00NTRFNONREF\n"
    ":86:INCOMING PAYMENT\n"
    ":61:2301170117D100,00NTRFNONREF\n"
    ":86:CARD SETTLEMENT\n"
    ":62F:C230117EUR1400,00\n"
    "-}"
)

ACK_MESSAGE = (
    "{1:F21BANKBEBBAXXX1234567890}"
    "{4:{177:2301171200}{451:0}}"
)


@pytest.fixture
def mt103_raw():
    """Raw MT103 input message."""
    return MT103_MESSAGE


@pytest.fixture
def mt940_raw():
    """Raw MT940 output message with repeated statement lines."""
    return MT940_MESSAGE


@pytest.fixture
def ack_raw():
    """Raw ACK service message."""
    return ACK_MESSAGE


@pytest.fixture
def test_config():
    """Create test configuration."""
    config = Config()
    config.environment = Environment.TESTING
    return config


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore logging handlers and the global configuration after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    saved_config = config_module._config
    yield
    root.handlers = handlers
    root.setLevel(level)
    config_module._config = saved_config
