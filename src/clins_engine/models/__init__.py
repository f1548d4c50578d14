# ============================================================================
# src/clins_engine/models/__init__.py
# ============================================================================
"""
Input records, validation results and the resource graph.
"""

from .inputs import (
    Coding,
    CodedConcept,
    QuantityInput,
    PatientInput,
    PractitionerInput,
    OrganizationInput,
    ConditionInput,
    ObservationInput,
    MedicationInput,
    AllergyInput,
    ProcedureInput,
)
from .documents import (
    ReferralRecord,
    DischargeSummaryRecord,
    CheckupRecord,
    DocumentRecord,
    RECORD_TYPES,
    parse_document_record,
)
from .validation import ValidationResult
from .graph import GraphNode, ResourceGraph, ResourceKind, RESOURCE_CLASSES
