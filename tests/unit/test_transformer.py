# ============================================================================
# FILE: tests/unit/test_transformer.py
# ============================================================================
"""
Integration tests for the document transformer: record in, bundle or
error report out.
"""

import pytest

from clins_engine.constants import code_systems as cs
from clins_engine.core import DocumentTransformer, transform_document
from clins_engine.models import parse_document_record
from clins_engine.utils.exceptions import DocumentValidationError, InputShapeError


def _resource_types(bundle):
    return [entry.resource.__class__.__name__ for entry in bundle.entry]


def test_valid_referral_produces_bundle(transformer, referral_payload):
    """Test a valid referral end to end"""
    result = transformer.transform_payload(referral_payload)

    assert result.success
    assert result.errors == []
    types = _resource_types(result.bundle)
    assert types[0] == "Composition"
    assert len(types) >= 4
    for resource_type in ("Patient", "Practitioner", "ServiceRequest"):
        assert resource_type in types

    patient = result.bundle.entry[types.index("Patient")].resource
    assert patient.identifier[0].value == "P001"

    organizations = [
        entry.resource for entry in result.bundle.entry
        if entry.resource.__class__.__name__ == "Organization"
    ]
    assert "1311234567" in [org.identifier[0].value for org in organizations]


def test_invalid_discharge_produces_no_bundle(transformer, discharge_payload):
    """Test that admission after discharge yields exactly one error and no bundle"""
    discharge_payload["admissionDate"] = "2024-03-10"
    discharge_payload["dischargeDate"] = "2024-03-01"

    result = transformer.transform_payload(discharge_payload)

    assert not result.success
    assert result.bundle is None
    assert len(result.errors) == 1
    assert "date" in result.errors[0]


def test_valid_discharge_and_checkup(transformer, discharge_payload, checkup_payload):
    """Test the other document kinds end to end"""
    discharge = transformer.transform_payload(discharge_payload)
    checkup = transformer.transform_payload(checkup_payload)

    assert discharge.success
    assert "Encounter" in _resource_types(discharge.bundle)
    assert checkup.success
    assert checkup.bundle.entry[0].resource.type.coding[0].code == "53576-5"


def test_warnings_carried_on_success(transformer, checkup_payload):
    """Test that compliance warnings are reported alongside the bundle"""
    result = transformer.transform_payload(checkup_payload)

    assert result.success
    assert any("text only" in warning for warning in result.warnings)


def test_strict_mode_rejects_warnings(fixed_clock, checkup_payload):
    """Test that strict compliance turns warnings into a failed transform"""
    result = DocumentTransformer(clock=fixed_clock, strict=True).transform_payload(checkup_payload)

    assert not result.success
    assert result.bundle is None
    assert any("text only" in error for error in result.errors)


def test_transform_record(transformer, referral_payload):
    """Test transforming an already decoded record"""
    record = parse_document_record(referral_payload)

    first = transformer.transform(record)
    second = transformer.transform(record)

    assert first.success and second.success
    assert first.bundle.id != second.bundle.id


def test_raise_for_errors(transformer, referral_payload):
    """Test the optional exception for failed transforms"""
    referral_payload["referralReason"] = ""
    result = transformer.transform_payload(referral_payload)

    with pytest.raises(DocumentValidationError) as exc_info:
        result.raise_for_errors()

    assert "Referral reason is required" in exc_info.value.errors


def test_result_to_dict(transformer, referral_payload):
    """Test the transport form of a result"""
    data = transformer.transform_payload(referral_payload).to_dict()

    assert data["success"] is True
    assert data["documentType"] == "referral"
    assert data["validation"]["isValid"] is True
    assert data["bundle"]["type"] == "document"


def test_malformed_payload_raises(transformer, referral_payload):
    """Test that a malformed payload aborts instead of returning a result"""
    referral_payload["requestedServices"] = "3B035000002327201"

    with pytest.raises(InputShapeError):
        transformer.transform_payload(referral_payload)


def test_transform_document_helper(fixed_clock, referral_payload):
    """Test the convenience function"""
    result = transform_document(referral_payload, "referral", clock=fixed_clock)
    assert result.success


def test_valueless_observation_is_advisory(transformer, discharge_payload):
    """Test that a missing observation value warns but still yields a bundle"""
    discharge_payload["observations"].append(
        {"code": {"system": cs.LOINC, "code": "8867-4", "display": "Heart rate"}, "category": "vital-signs"}
    )

    result = transformer.transform_payload(discharge_payload)

    assert result.success
    assert result.bundle is not None
    assert result.errors == []
    assert "observations[1] has no value" in result.warnings
