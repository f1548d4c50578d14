# ============================================================================
# src/clins_engine/validators/domain_checks.py
# ============================================================================
"""
Cross-cutting domain checks shared by every document rule set.

Each helper appends to a ValidationResult and returns nothing:
- categorical enum membership (errors)
- coding-system allow-list membership (warnings)
- structured code formats (warnings)
- narrative length caps, tighter for Japanese text (warnings)
- participant correlation ids (errors)
"""

from typing import Iterable, Optional

from ..constants.code_systems import STRUCTURED_CODE_SYSTEMS
from ..constants.field_limits import NARRATIVE_LIMITS
from ..constants.value_sets import CHECKUP_KIND_KEYWORDS
from ..models.inputs import CodedConcept
from ..models.validation import ValidationResult
from ..utils.text import contains_japanese
from .format_validators import CODE_FORMAT_VALIDATORS


def normalize_choice(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def check_enum(
    result: ValidationResult,
    label: str,
    value: Optional[str],
    allowed: Iterable[str]
) -> None:
    """Error when a present value is outside the allow-list (case-insensitive)."""
    if value is None:
        return
    allowed = tuple(allowed)
    if normalize_choice(value) not in allowed:
        result.add_error(f"{label} '{value}' must be one of: {', '.join(allowed)}")


def check_concept_present(
    result: ValidationResult,
    label: str,
    concept: Optional[CodedConcept]
) -> bool:
    """Error when a concept has neither a coding nor text."""
    if concept is None or concept.is_empty:
        result.add_error(f"{label} requires a code or text")
        return False
    return True


def check_coding_systems(
    result: ValidationResult,
    label: str,
    concept: Optional[CodedConcept],
    allowed_systems: Iterable[str],
    role: str
) -> None:
    """Warn unless at least one coding belongs to an allow-listed system."""
    if concept is None or concept.is_empty:
        return

    if not concept.coding:
        result.add_warning(f"{label} is free text only; a coded {role} is recommended")
        return

    allowed_systems = frozenset(allowed_systems)
    if not any(system in allowed_systems for system in concept.systems):
        result.add_warning(
            f"{label} is not coded in a recommended {role} code system "
            f"(found: {', '.join(concept.systems)})"
        )


def check_code_formats(
    result: ValidationResult,
    label: str,
    concept: Optional[CodedConcept]
) -> None:
    """Warn when a code under a structured system does not fit its pattern."""
    if concept is None:
        return
    for coding in concept.coding:
        family = STRUCTURED_CODE_SYSTEMS.get(coding.system)
        if family and not CODE_FORMAT_VALIDATORS[family](coding.code):
            result.add_warning(f"{label}: '{coding.code}' is not a valid {family.upper()} code")


def check_length(
    result: ValidationResult,
    label: str,
    limit_key: str,
    text: Optional[str]
) -> None:
    """Warn when text exceeds its cap; Japanese text has the tighter cap."""
    if not text:
        return
    default_limit, japanese_limit = NARRATIVE_LIMITS[limit_key]
    limit = japanese_limit if contains_japanese(text) else default_limit
    if len(text) > limit:
        result.add_warning(f"{label} exceeds {limit} characters ({len(text)})")


def check_participant_id(
    result: ValidationResult,
    label: str,
    participant_id: Optional[str],
    known_ids: Iterable[str]
) -> None:
    """Error when a correlation id names no participant of the record."""
    if participant_id and participant_id not in set(known_ids):
        result.add_error(f"{label} '{participant_id}' does not match any participant in the document")


def classify_checkup(concept: Optional[CodedConcept]) -> Optional[str]:
    """'occupational', 'annual', 'executive' or None from the checkup type."""
    if concept is None or concept.is_empty:
        return None
    text = concept.searchable_text()
    for kind, keywords in CHECKUP_KIND_KEYWORDS.items():
        if any(keyword.lower() in text for keyword in keywords):
            return kind
    return None
