# ============================================================================
# src/clins_engine/validators/format_validators.py
# ============================================================================
"""
Japanese Identifier and Code Format Validators

Pure predicates for locale-specific artifacts:
1. Medical license numbers (physician, nurse/midwife, pharmacist, dentist)
2. Medical institution (facility) codes
3. Insurer numbers (five schemes)
4. Postal codes and phone numbers
5. Clinical code families (HOT, YJ, JLAC10, ICD-10)
6. FHIR reference syntax

Every validator strips separators, checks length and character classes,
checks embedded sub-ranges, and returns a bool (or a classification or
None). None of them raise; wording failure messages is left to callers.
"""

import re
from typing import Optional

from ..config import validation_settings
from ..utils.text import format_phone_number, normalize_width, strip_separators

PREFECTURE_MIN = 1
PREFECTURE_MAX = 47

_SIX_DIGITS = re.compile(r"^\d{6}$")
_EIGHT_DIGITS = re.compile(r"^\d{8}$")
_LETTER_SIX_DIGITS = re.compile(r"^[A-Z]\d{6}$")
_PHARMACIST_PREFIXES = "PYABCEFGH"

_HOT_CODE = re.compile(r"^\d{9}$")
_YJ_CODE = re.compile(r"^\d{7}[A-Z][0-9A-Z]\d{3}$")
_JLAC10_CODE = re.compile(r"^[0-9A-Z]{17}$")
_ICD10_CODE = re.compile(r"^[A-Z]\d{2,3}(\.\d{1,4})?$")

_UUID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
_RELATIVE_REFERENCE = re.compile(r"^[A-Z][A-Za-z]+/[A-Za-z0-9\-.]{1,64}$")
_URN_UUID_REFERENCE = re.compile(rf"^urn:uuid:{_UUID}$")
_ABSOLUTE_REFERENCE = re.compile(r"^(https?://[^\s/]+/\S*|urn:oid:[0-2](\.\d+)+)$")

EMPLOYEE_LAW_CODES = frozenset({"01", "02", "03", "04", "06", "07", "63", "72", "73", "74", "75"})
MUTUAL_AID_LAW_CODES = frozenset({"31", "32", "33", "34"})
LATE_ELDERLY_LAW_CODE = "39"
MOBILE_PREFIXES = ("070", "080", "090")


def _is_prefecture(code: str) -> bool:
    return code.isdigit() and PREFECTURE_MIN <= int(code) <= PREFECTURE_MAX


def validate_prefecture_code(value: Optional[str]) -> bool:
    """Two-digit JIS prefecture code, 01 (Hokkaido) to 47 (Okinawa)."""
    digits = strip_separators(value)
    return len(digits) == 2 and _is_prefecture(digits)


# ============================================================================
# LICENSES
# ============================================================================

def classify_medical_license(value: Optional[str]) -> Optional[str]:
    """
    Identify the license sub-format.

    - 6 digits, leading graduation-year pair 01-99: physician
    - 8 digits, prefecture prefix 01-47, non-zero sequence: nurse/midwife
    - 'D' + 6 digits: dentist
    - pharmacist prefix letter + 6 digits: pharmacist

    Returns:
        'physician', 'nurse', 'dentist', 'pharmacist' or None if invalid
    """
    license_number = strip_separators(value).upper()

    if _SIX_DIGITS.match(license_number):
        return "physician" if license_number[:2] != "00" else None

    if _EIGHT_DIGITS.match(license_number):
        if _is_prefecture(license_number[:2]) and license_number[2:] != "000000":
            return "nurse"
        return None

    if _LETTER_SIX_DIGITS.match(license_number) and license_number[1:] != "000000":
        if license_number[0] == "D":
            return "dentist"
        if license_number[0] in _PHARMACIST_PREFIXES:
            return "pharmacist"

    return None


def validate_medical_license(value: Optional[str]) -> bool:
    return classify_medical_license(value) is not None


# ============================================================================
# FACILITIES AND INSURANCE
# ============================================================================

def validate_facility_code(value: Optional[str], length: Optional[int] = None) -> bool:
    """
    Medical institution code: prefecture prefix + institution number.

    Args:
        value: Code, separators allowed
        length: Total digit count; defaults to FACILITY_CODE_LENGTH
    """
    expected_length = length or validation_settings.FACILITY_CODE_LENGTH
    code = strip_separators(value)

    if len(code) != expected_length or not code.isdigit():
        return False

    return _is_prefecture(code[:2]) and int(code[2:]) != 0


def classify_insurance_number(value: Optional[str]) -> Optional[str]:
    """
    Identify the insurer scheme from length and law-code prefix.

    - 6 digits, prefecture prefix: national health insurance
    - 8 digits, law code 39 + prefecture: late-stage elderly
    - 8 digits, law code 31-34: mutual aid association
    - 8 digits, employee law code (01, 06, ...): employee health insurance
    - 10 digits: long-term care insured number

    Returns:
        'national_health', 'late_elderly', 'mutual_aid', 'employee',
        'long_term_care' or None if invalid
    """
    number = strip_separators(value)
    if not number.isdigit():
        return None

    if len(number) == 6:
        return "national_health" if _is_prefecture(number[:2]) else None

    if len(number) == 8:
        law_code = number[:2]
        if law_code == LATE_ELDERLY_LAW_CODE:
            return "late_elderly" if _is_prefecture(number[2:4]) else None
        if law_code in MUTUAL_AID_LAW_CODES:
            return "mutual_aid"
        if law_code in EMPLOYEE_LAW_CODES:
            return "employee"
        return None

    if len(number) == 10:
        return "long_term_care" if int(number) != 0 else None

    return None


def validate_insurance_number(value: Optional[str]) -> bool:
    return classify_insurance_number(value) is not None


# ============================================================================
# CONTACT DETAILS
# ============================================================================

def validate_postal_code(value: Optional[str]) -> bool:
    """Seven digits, leading digit non-zero ('〒100-0001' is accepted)."""
    code = strip_separators(value)
    return len(code) == 7 and code.isdigit() and code[0] != "0"


def classify_phone_number(value: Optional[str]) -> Optional[str]:
    """
    Identify a domestic phone number type.

    Returns:
        'mobile', 'toll_free', 'ip', 'landline' or None if invalid
    """
    if not value:
        return None

    number = format_phone_number(value)
    if not number.isdigit() or not number.startswith("0") or len(number) not in (10, 11):
        return None

    if len(number) == 11:
        # 0800 shares its first three digits with 080 mobiles
        if number.startswith("0800"):
            return "toll_free"
        if number.startswith(MOBILE_PREFIXES):
            return "mobile"
        if number.startswith("050"):
            return "ip"
        return None

    if number.startswith("0120"):
        return "toll_free"
    if number[1] != "0":
        return "landline"
    return None


def validate_phone_number(value: Optional[str]) -> bool:
    return classify_phone_number(value) is not None


# ============================================================================
# CLINICAL CODES
# ============================================================================

def validate_hot_code(value: Optional[str]) -> bool:
    """HOT9 standard medication code: 9 digits."""
    return bool(_HOT_CODE.match(strip_separators(value)))


def validate_yj_code(value: Optional[str]) -> bool:
    """YJ (price-listing) medication code: 12 characters, dosage-form letter at position 8."""
    return bool(_YJ_CODE.match(strip_separators(value).upper()))


def validate_jlac10_code(value: Optional[str]) -> bool:
    """JLAC10 laboratory code: 17 alphanumeric characters."""
    return bool(_JLAC10_CODE.match(strip_separators(value).upper()))


def validate_icd10_code(value: Optional[str]) -> bool:
    """ICD-10 (and ICD-10-CM-JP) code such as 'K35' or 'K35.80'."""
    if not value:
        return False
    code = re.sub(r"\s", "", normalize_width(value)).upper()
    return bool(_ICD10_CODE.match(code))


CODE_FORMAT_VALIDATORS = {
    "hot": validate_hot_code,
    "yj": validate_yj_code,
    "jlac10": validate_jlac10_code,
    "icd10": validate_icd10_code,
}


# ============================================================================
# REFERENCES
# ============================================================================

def is_same_document_reference(value: Optional[str]) -> bool:
    """urn:uuid or relative Type/id reference."""
    if not value:
        return False
    return bool(_URN_UUID_REFERENCE.match(value) or _RELATIVE_REFERENCE.match(value))


def is_external_reference(value: Optional[str]) -> bool:
    """Absolute http(s) URL or urn:oid reference."""
    if not value:
        return False
    return bool(_ABSOLUTE_REFERENCE.match(value))


def validate_reference(value: Optional[str]) -> bool:
    return is_same_document_reference(value) or is_external_reference(value)
