# ============================================================================
# src/clins_engine/fhir_utils/allergy_intolerance.py
# ============================================================================
"""
FHIR AllergyIntolerance resource builder.
"""

from typing import Optional
import logging

from fhir.resources.R4B.allergyintolerance import AllergyIntolerance, AllergyIntoleranceReaction
from fhir.resources.R4B.reference import Reference

from ..constants import code_systems as cs
from ..models.inputs import AllergyInput
from .primitives import (
    create_annotations,
    create_codeable_concept,
    create_coded,
    create_meta,
    new_resource_id,
    to_fhir_date,
)

logger = logging.getLogger(__name__)


def _lower(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if value else None


def create_allergy_intolerance(
    allergy: AllergyInput,
    patient: Reference,
    encounter: Optional[Reference] = None,
    recorder: Optional[Reference] = None
) -> AllergyIntolerance:
    """
    Create FHIR AllergyIntolerance from an allergy sub-record.

    A reaction is only emitted when the manifestation is known; a
    severity without a manifestation is dropped.
    """
    reaction = None
    if allergy.reaction is not None and not allergy.reaction.is_empty:
        reaction = [AllergyIntoleranceReaction(
            manifestation=[create_codeable_concept(allergy.reaction)],
            severity=_lower(allergy.reaction_severity)
        )]
    elif allergy.reaction_severity:
        logger.debug(
            f"Dropping reaction severity '{allergy.reaction_severity}' for "
            f"'{allergy.substance.label}': no manifestation given"
        )

    category = _lower(allergy.category)

    return AllergyIntolerance(
        id=new_resource_id(),
        meta=create_meta("AllergyIntolerance"),
        clinicalStatus=create_coded(cs.ALLERGY_CLINICAL, allergy.clinical_status.strip().lower()),
        verificationStatus=create_coded(cs.ALLERGY_VERIFICATION, allergy.verification_status.strip().lower()),
        type=_lower(allergy.type),
        category=[category] if category else None,
        criticality=_lower(allergy.criticality),
        code=create_codeable_concept(allergy.substance),
        patient=patient,
        encounter=encounter,
        onsetDateTime=to_fhir_date(allergy.onset_date),
        recorder=recorder,
        reaction=reaction,
        note=create_annotations(allergy.notes)
    )
