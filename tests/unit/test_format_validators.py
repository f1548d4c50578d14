# ============================================================================
# FILE: tests/unit/test_format_validators.py
# ============================================================================
"""
Unit tests for Japanese identifier and code format validators.
"""

from clins_engine.validators.format_validators import (
    classify_insurance_number,
    classify_medical_license,
    classify_phone_number,
    is_external_reference,
    is_same_document_reference,
    validate_facility_code,
    validate_hot_code,
    validate_icd10_code,
    validate_insurance_number,
    validate_jlac10_code,
    validate_medical_license,
    validate_phone_number,
    validate_postal_code,
    validate_prefecture_code,
    validate_reference,
    validate_yj_code,
)


# ============================================================================
# LICENSES
# ============================================================================

def test_physician_license():
    """Test six-digit physician license numbers"""
    assert classify_medical_license("123456") == "physician"
    assert classify_medical_license("12-3456") == "physician"
    assert not validate_medical_license("001234")
    assert not validate_medical_license("12345")


def test_nurse_license():
    """Test eight-digit nurse licenses with a prefecture prefix"""
    assert classify_medical_license("13012345") == "nurse"
    assert classify_medical_license("48012345") is None
    assert classify_medical_license("13000000") is None


def test_dentist_and_pharmacist_license():
    """Test letter-prefixed license numbers"""
    assert classify_medical_license("D123456") == "dentist"
    assert classify_medical_license("d123456") == "dentist"
    assert classify_medical_license("P123456") == "pharmacist"
    assert classify_medical_license("Z123456") is None
    assert classify_medical_license("D000000") is None


def test_license_rejects_empty_values():
    """Test that missing license numbers are invalid, not errors"""
    assert not validate_medical_license(None)
    assert not validate_medical_license("")


# ============================================================================
# FACILITIES AND INSURANCE
# ============================================================================

def test_facility_code():
    """Test medical institution codes"""
    assert validate_facility_code("1311234567")
    assert validate_facility_code("13-1-1234567")
    assert not validate_facility_code("4811234567")
    assert not validate_facility_code("1300000000")
    assert not validate_facility_code("131123456")


def test_facility_code_custom_length():
    """Test that the expected length can be overridden"""
    assert validate_facility_code("131234567", length=9)
    assert not validate_facility_code("1311234567", length=9)


def test_prefecture_code():
    """Test JIS prefecture codes"""
    assert validate_prefecture_code("01")
    assert validate_prefecture_code("47")
    assert not validate_prefecture_code("00")
    assert not validate_prefecture_code("48")


def test_insurance_number_schemes():
    """Test insurer scheme classification"""
    assert classify_insurance_number("138123") == "national_health"
    assert classify_insurance_number("39131234") == "late_elderly"
    assert classify_insurance_number("31123456") == "mutual_aid"
    assert classify_insurance_number("06123456") == "employee"
    assert classify_insurance_number("1234567890") == "long_term_care"


def test_insurance_number_invalid():
    """Test invalid insurer numbers"""
    assert classify_insurance_number("39991234") is None
    assert classify_insurance_number("99123456") is None
    assert classify_insurance_number("0000000000") is None
    assert not validate_insurance_number("12AB5678")
    assert not validate_insurance_number(None)


# ============================================================================
# CONTACT DETAILS
# ============================================================================

def test_postal_code():
    """Test postal code validation with and without separators"""
    assert validate_postal_code("1000001")
    assert validate_postal_code("100-0001")
    assert validate_postal_code("〒100-0001")
    assert validate_postal_code("１００－０００１")
    assert not validate_postal_code("0100001")
    assert not validate_postal_code("100001")


def test_phone_number_types():
    """Test phone number classification"""
    assert classify_phone_number("03-1234-5678") == "landline"
    assert classify_phone_number("090-1234-5678") == "mobile"
    assert classify_phone_number("0120-123-456") == "toll_free"
    assert classify_phone_number("0800-123-4567") == "toll_free"
    assert classify_phone_number("050-1234-5678") == "ip"
    assert classify_phone_number("+81-3-1234-5678") == "landline"


def test_phone_number_invalid():
    """Test invalid phone numbers"""
    assert not validate_phone_number("1234-5678")
    assert not validate_phone_number("03-1234-567")
    assert not validate_phone_number("")
    assert not validate_phone_number(None)


# ============================================================================
# CLINICAL CODES
# ============================================================================

def test_medication_codes():
    """Test HOT and YJ code formats"""
    assert validate_hot_code("103835401")
    assert not validate_hot_code("10383540")
    assert validate_yj_code("1149019F1560")
    assert not validate_yj_code("11490191560F")


def test_jlac10_code():
    """Test 17-character JLAC10 codes"""
    assert validate_jlac10_code("3B035000002327201")
    assert validate_jlac10_code("3b035000002327201")
    assert not validate_jlac10_code("3B0350000023272")


def test_icd10_code():
    """Test ICD-10 codes, including full-width input"""
    assert validate_icd10_code("K35")
    assert validate_icd10_code("K35.8")
    assert validate_icd10_code("Ｅ１１．９")
    assert not validate_icd10_code("35.8")
    assert not validate_icd10_code("")


# ============================================================================
# REFERENCES
# ============================================================================

def test_references():
    """Test same-document and external reference syntax"""
    assert is_same_document_reference("urn:uuid:0b3c5b8e-6f3e-4c1a-9d59-3f0f6b1c2a10")
    assert is_same_document_reference("Patient/P001")
    assert not is_same_document_reference("urn:uuid:not-a-uuid")

    assert is_external_reference("https://example.jp/fhir/Patient/1")
    assert is_external_reference("urn:oid:1.2.392.100495.20.3.51")
    assert not is_external_reference("Patient/P001")

    assert validate_reference("Patient/P001")
    assert not validate_reference("patient P001")
    assert not validate_reference(None)
