# ============================================================================
# src/clins_engine/fhir_utils/condition.py
# ============================================================================
"""
FHIR Condition resource builder for diagnoses and problem-list items.
"""

from typing import Optional

from fhir.resources.R4B.condition import Condition
from fhir.resources.R4B.reference import Reference

from ..constants import code_systems as cs
from ..models.inputs import CodedConcept, ConditionInput
from .primitives import (
    create_annotations,
    create_codeable_concept,
    create_coded,
    create_meta,
    new_resource_id,
    to_fhir_date,
)

PROBLEM_LIST_ITEM = "problem-list-item"
ENCOUNTER_DIAGNOSIS = "encounter-diagnosis"

_CATEGORY_DISPLAYS = {
    PROBLEM_LIST_ITEM: "Problem List Item",
    ENCOUNTER_DIAGNOSIS: "Encounter Diagnosis",
}


def create_condition(
    condition: ConditionInput,
    subject: Reference,
    encounter: Optional[Reference] = None,
    recorder: Optional[Reference] = None,
    category: str = PROBLEM_LIST_ITEM
) -> Condition:
    """
    Create FHIR Condition from a condition sub-record.

    Args:
        condition: Condition input
        subject: Patient reference
        encounter: Optional Encounter reference
        recorder: Optional recorder reference, already resolved
        category: 'problem-list-item' or 'encounter-diagnosis'

    Returns:
        FHIR Condition resource
    """
    clinical_status = condition.clinical_status.strip().lower()
    verification_status = condition.verification_status.strip().lower()

    return Condition(
        id=new_resource_id(),
        meta=create_meta("Condition"),
        clinicalStatus=create_coded(cs.CONDITION_CLINICAL, clinical_status),
        verificationStatus=create_coded(cs.CONDITION_VERIFICATION, verification_status),
        category=[create_coded(cs.CONDITION_CATEGORY, category, _CATEGORY_DISPLAYS[category])],
        severity=create_codeable_concept(condition.severity),
        code=create_codeable_concept(condition.code),
        subject=subject,
        encounter=encounter,
        onsetDateTime=to_fhir_date(condition.onset_date),
        abatementDateTime=to_fhir_date(condition.abatement_date),
        recorder=recorder,
        note=create_annotations(condition.notes)
    )


def create_diagnosis(
    concept: CodedConcept,
    subject: Reference,
    encounter: Optional[Reference] = None,
    recorder: Optional[Reference] = None
) -> Condition:
    """Confirmed, active encounter diagnosis from a bare concept."""
    return create_condition(
        ConditionInput(code=concept),
        subject,
        encounter=encounter,
        recorder=recorder,
        category=ENCOUNTER_DIAGNOSIS
    )
