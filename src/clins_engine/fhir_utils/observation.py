# ============================================================================
# src/clins_engine/fhir_utils/observation.py
# ============================================================================
"""
FHIR Observation resource builder for vital signs, lab results, exam and
imaging findings, and the overall checkup assessment.
"""

from datetime import date
from typing import List, Optional

from fhir.resources.R4B.codeableconcept import CodeableConcept
from fhir.resources.R4B.observation import Observation, ObservationReferenceRange
from fhir.resources.R4B.quantity import Quantity
from fhir.resources.R4B.reference import Reference

from ..constants import code_systems as cs
from ..constants.profiles import LAB_OBSERVATION_PROFILE
from ..constants.value_sets import INTERPRETATION_FLAGS
from ..models.inputs import CodedConcept, ObservationInput
from .primitives import (
    create_annotations,
    create_codeable_concept,
    create_coded,
    create_meta,
    create_quantity,
    new_resource_id,
    to_fhir_date,
)

_CATEGORY_DISPLAYS = {
    "vital-signs": "Vital Signs",
    "laboratory": "Laboratory",
    "exam": "Exam",
    "imaging": "Imaging",
}


def create_observation(
    observation: ObservationInput,
    subject: Reference,
    encounter: Optional[Reference] = None,
    performer: Optional[Reference] = None,
    default_date: Optional[date] = None
) -> Observation:
    """
    Create FHIR Observation from an observation sub-record.

    Args:
        observation: Observation input
        subject: Patient reference
        encounter: Optional Encounter reference
        performer: Optional performer reference, already resolved
        default_date: Effective date used when the input has none

    Returns:
        FHIR Observation resource
    """
    category = observation.category.strip().lower()
    unit = observation.value_quantity.unit if observation.value_quantity else None
    profile = LAB_OBSERVATION_PROFILE if category == "laboratory" else None
    value_quantity = (
        create_quantity(observation.value_quantity.value, unit)
        if observation.value_quantity else None
    )
    value_code = create_codeable_concept(observation.value_code)
    has_value = any(v is not None for v in (value_quantity, observation.value_string, value_code))

    return Observation(
        id=new_resource_id(),
        meta=create_meta("Observation", profile),
        status=observation.status.strip().lower(),
        category=[create_coded(cs.OBSERVATION_CATEGORY, category, _CATEGORY_DISPLAYS.get(category))],
        code=create_codeable_concept(observation.code),
        subject=subject,
        encounter=encounter,
        effectiveDateTime=to_fhir_date(observation.effective_date or default_date),
        performer=[performer] if performer is not None else None,
        valueQuantity=value_quantity,
        valueString=observation.value_string,
        valueCodeableConcept=value_code,
        # value[x] or dataAbsentReason is required
        dataAbsentReason=(
            None if has_value
            else create_coded(cs.DATA_ABSENT_REASON, "unknown", "Unknown")
        ),
        interpretation=build_interpretation(observation.interpretation),
        referenceRange=build_reference_range(
            observation.reference_low,
            observation.reference_high,
            unit
        ),
        note=create_annotations(observation.notes)
    )


def create_assessment_observation(
    assessment: CodedConcept,
    checkup_type: Optional[CodedConcept],
    subject: Reference,
    effective_date: date,
    encounter: Optional[Reference] = None,
    performer: Optional[Reference] = None
) -> Observation:
    """
    Overall checkup judgement: the code is the checkup type, the value the
    assessment concept.
    """
    code = create_codeable_concept(checkup_type) or CodeableConcept(text="健康診断総合判定")

    return Observation(
        id=new_resource_id(),
        meta=create_meta("Observation"),
        status="final",
        category=[create_coded(cs.OBSERVATION_CATEGORY, "exam", _CATEGORY_DISPLAYS["exam"])],
        code=code,
        subject=subject,
        encounter=encounter,
        effectiveDateTime=to_fhir_date(effective_date),
        performer=[performer] if performer is not None else None,
        valueCodeableConcept=create_codeable_concept(assessment)
    )


def build_reference_range(
    min_value: Optional[float],
    max_value: Optional[float],
    unit: Optional[str]
) -> Optional[List[ObservationReferenceRange]]:
    """
    Build FHIR reference range for a result.

    Args:
        min_value: Lower bound of normal range
        max_value: Upper bound of normal range
        unit: Unit of measurement

    Returns:
        List with single ObservationReferenceRange or None
    """
    if min_value is None and max_value is None:
        return None

    bounds = [f"{min_value}" if min_value is not None else "", f"{max_value}" if max_value is not None else ""]
    text = "-".join(bounds)
    if unit:
        text = f"{text} {unit}"

    return [
        ObservationReferenceRange(
            low=_bound(min_value, unit),
            high=_bound(max_value, unit),
            text=text
        )
    ]


def _bound(value: Optional[float], unit: Optional[str]) -> Optional[Quantity]:
    return create_quantity(value, unit) if value is not None else None


def build_interpretation(abnormal_flag: Optional[str]) -> Optional[List[CodeableConcept]]:
    """
    Build FHIR interpretation from a result flag.

    Args:
        abnormal_flag: H/L/N/A/HH/LL flag or its spelled-out form

    Returns:
        List with CodeableConcept or None; unrecognized flags are kept as
        text only
    """
    if not abnormal_flag:
        return None

    interp_code = map_abnormal_flag(abnormal_flag)
    if interp_code is None:
        return [CodeableConcept(text=abnormal_flag)]

    return [
        create_coded(cs.OBSERVATION_INTERPRETATION, interp_code, text=abnormal_flag)
    ]


def map_abnormal_flag(flag: str) -> Optional[str]:
    """
    Map a result flag to a v3 ObservationInterpretation code.

    Returns:
        FHIR standard code, or None when the flag is not recognized
    """
    return INTERPRETATION_FLAGS.get(flag.strip().upper())
