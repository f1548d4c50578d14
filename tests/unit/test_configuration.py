# ============================================================================
# FILE: tests/unit/test_configuration.py
# ============================================================================
"""
Unit tests for settings and logging configuration.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from clins_engine.config import (
    FHIRSettings,
    LoggingSettings,
    ValidationSettings,
    fhir_settings,
    validation_settings,
)
from clins_engine.utils.exceptions import ConfigurationError
from clins_engine.utils.logging import JsonFormatter, LogAdapter, log_performance, setup_logging


# ============================================================================
# SETTINGS
# ============================================================================

def test_configuration_defaults():
    """Test that configuration loads with the documented defaults"""
    assert fhir_settings.FHIR_VERSION == "R4B"
    assert FHIRSettings().FHIR_STRICT_COMPLIANCE is False
    assert validation_settings.FACILITY_CODE_LENGTH == 10
    assert ValidationSettings().REQUIRE_JAPANESE_NARRATIVE is True
    assert LoggingSettings().LOG_FILE is None


def test_environment_override(monkeypatch):
    """Test that settings are read from environment variables"""
    monkeypatch.setenv("FHIR_STRICT_COMPLIANCE", "true")
    monkeypatch.setenv("MIN_REFERRAL_REASON_LENGTH", "20")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    assert FHIRSettings().FHIR_STRICT_COMPLIANCE is True
    assert ValidationSettings().MIN_REFERRAL_REASON_LENGTH == 20
    assert LoggingSettings().LOG_LEVEL == "DEBUG"


def test_settings_bounds():
    """Test that out-of-range settings are rejected"""
    with pytest.raises(ValidationError):
        ValidationSettings(FACILITY_CODE_LENGTH=2)
    with pytest.raises(ValidationError):
        ValidationSettings(MAX_LENGTH_OF_STAY_DAYS=0)


# ============================================================================
# LOGGING
# ============================================================================

def test_json_formatter_includes_document_context():
    """Test JSON log lines with document correlation fields"""
    record = logging.LogRecord(
        name="clins_engine.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="紹介状を変換しました",
        args=(),
        exc_info=None
    )
    record.document_id = "REF-1"
    record.document_type = "referral"

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["message"] == "紹介状を変換しました"
    assert data["document_id"] == "REF-1"
    assert data["document_type"] == "referral"


def test_log_adapter_adds_context(caplog):
    """Test that the adapter attaches document fields to every record"""
    logger = logging.getLogger("clins_engine.test.adapter")
    adapter = LogAdapter(logger, {"document_id": "DS-1", "document_type": "discharge-summary"})

    with caplog.at_level(logging.INFO, logger="clins_engine.test.adapter"):
        adapter.info("assembled")

    assert caplog.records[0].document_id == "DS-1"


def test_log_performance_reraises(caplog):
    """Test that the performance decorator logs and re-raises failures"""
    logger = logging.getLogger("clins_engine.test.performance")

    @log_performance(logger, "Failing step")
    def failing():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="clins_engine.test.performance"):
        with pytest.raises(RuntimeError):
            failing()

    assert "Failing step failed" in caplog.text


def test_setup_logging_rejects_unknown_level():
    """Test that an unknown level name is a configuration error"""
    with pytest.raises(ConfigurationError):
        setup_logging(level="VERBOSE")
