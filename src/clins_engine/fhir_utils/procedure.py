# ============================================================================
# src/clins_engine/fhir_utils/procedure.py
# ============================================================================
"""
FHIR Procedure resource builder for procedures performed during a stay.
"""

from typing import Optional

from fhir.resources.R4B.procedure import Procedure, ProcedurePerformer
from fhir.resources.R4B.reference import Reference

from ..models.inputs import ProcedureInput
from .primitives import (
    create_annotations,
    create_codeable_concept,
    create_meta,
    new_resource_id,
    to_fhir_date,
)


def create_procedure(
    procedure: ProcedureInput,
    subject: Reference,
    encounter: Optional[Reference] = None,
    performer: Optional[Reference] = None
) -> Procedure:
    return Procedure(
        id=new_resource_id(),
        meta=create_meta("Procedure"),
        status=procedure.status.strip().lower(),
        code=create_codeable_concept(procedure.code),
        subject=subject,
        encounter=encounter,
        performedDateTime=to_fhir_date(procedure.performed_date),
        performer=[ProcedurePerformer(actor=performer)] if performer is not None else None,
        note=create_annotations(procedure.notes)
    )
