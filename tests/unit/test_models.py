# ============================================================================
# FILE: tests/unit/test_models.py
# ============================================================================
"""
Unit tests for input record decoding and the validation result.
"""

from datetime import date, timezone

import pytest
from pydantic import ValidationError

from clins_engine.constants import DocumentType
from clins_engine.models import (
    CheckupRecord,
    CodedConcept,
    ReferralRecord,
    ValidationResult,
    parse_document_record,
)
from clins_engine.utils.exceptions import InputShapeError


def test_parse_referral_payload(referral_payload):
    """Test decoding a camelCase referral payload"""
    record = parse_document_record(referral_payload)

    assert isinstance(record, ReferralRecord)
    assert record.kind == DocumentType.REFERRAL
    assert record.patient.id == "P001"
    assert record.patient.birth_date == date(1980, 4, 1)
    assert record.requested_services[0].coding[0].code == "3B035000002327201"


def test_parse_snake_case_keys():
    """Test that snake_case keys are accepted as well"""
    record = parse_document_record({
        "document_type": "referral",
        "id": "REF-1",
        "status": "draft",
        "created_at": "2024-05-01T09:00:00",
        "referral_reason": "精査のため紹介",
    })

    assert record.referral_reason == "精査のため紹介"
    assert record.created_at.tzinfo == timezone.utc


def test_document_type_argument(checkup_payload):
    """Test that the kind may be given separately from the payload"""
    del checkup_payload["documentType"]
    record = parse_document_record(checkup_payload, DocumentType.CHECKUP)

    assert isinstance(record, CheckupRecord)
    assert record.checkup_date == date(2024, 5, 10)


def test_conflicting_document_type(referral_payload):
    """Test that a requested kind must agree with the payload"""
    with pytest.raises(InputShapeError):
        parse_document_record(referral_payload, "checkup")


def test_missing_and_unknown_document_type(referral_payload):
    """Test missing and unsupported document kinds"""
    del referral_payload["documentType"]
    with pytest.raises(InputShapeError):
        parse_document_record(referral_payload)
    with pytest.raises(InputShapeError):
        parse_document_record(referral_payload, "prescription")


def test_unknown_field_rejected(referral_payload):
    """Test that unknown fields are rejected at the boundary"""
    referral_payload["faxNumber"] = "03-0000-0000"

    with pytest.raises(InputShapeError) as exc_info:
        parse_document_record(referral_payload)

    assert any("faxNumber" in detail for detail in exc_info.value.details)


def test_invalid_era_date_rejected(referral_payload):
    """Test that an impossible era birth date is an input error"""
    referral_payload["patient"]["birthDate"] = "平成31年5月1日"

    with pytest.raises(InputShapeError):
        parse_document_record(referral_payload)


def test_non_mapping_payload():
    """Test that a list payload is rejected"""
    with pytest.raises(InputShapeError):
        parse_document_record([{"documentType": "referral"}])


def test_records_are_immutable(referral_payload):
    """Test that decoded records cannot be modified"""
    record = parse_document_record(referral_payload)

    with pytest.raises(ValidationError):
        record.referral_reason = "changed"


def test_coded_concept_shorthand():
    """Test the single-coding and plain-text concept shorthands"""
    concept = CodedConcept.model_validate({"system": "http://loinc.org", "code": "8480-6", "display": "SBP"})
    assert concept.coding[0].system == "http://loinc.org"
    assert concept.label == "SBP"

    text_only = CodedConcept.model_validate("ペニシリン")
    assert text_only.coding == []
    assert text_only.label == "ペニシリン"
    assert not text_only.is_empty

    assert CodedConcept().is_empty


def test_coding_requires_code():
    """Test that a coding cannot have an empty code"""
    with pytest.raises(ValidationError):
        CodedConcept.model_validate({"system": "http://loinc.org", "code": ""})


def test_validation_result_merge():
    """Test that merged results keep their order and validity"""
    first = ValidationResult()
    first.add_warning("w1")
    assert first.is_valid

    second = ValidationResult()
    second.add_error("e1")
    second.add_warning("w2")

    first.merge(second)

    assert not first.is_valid
    assert first.errors == ["e1"]
    assert first.warnings == ["w1", "w2"]
    assert first.to_dict() == {"isValid": False, "errors": ["e1"], "warnings": ["w1", "w2"]}
