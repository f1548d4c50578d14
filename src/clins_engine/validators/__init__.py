# ============================================================================
# src/clins_engine/validators/__init__.py
# ============================================================================
"""
Validators Package

Provides validation for document input records:
- Format predicates for Japanese identifiers and clinical codes
- Business-rule validation (errors block, warnings advise)
- Plausibility checks for vital signs
"""

from .format_validators import (
    classify_insurance_number,
    classify_medical_license,
    classify_phone_number,
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
from .plausibility import PlausibilityChecker
from .rule_validator import BusinessRuleValidator, validate_record

__all__ = [
    # Format predicates
    'classify_insurance_number',
    'classify_medical_license',
    'classify_phone_number',
    'validate_facility_code',
    'validate_hot_code',
    'validate_icd10_code',
    'validate_insurance_number',
    'validate_jlac10_code',
    'validate_medical_license',
    'validate_phone_number',
    'validate_postal_code',
    'validate_prefecture_code',
    'validate_reference',
    'validate_yj_code',

    # Business rules
    'BusinessRuleValidator',
    'validate_record',

    # Plausibility
    'PlausibilityChecker',
]
