# ============================================================================
# src/clins_engine/models/documents.py
# ============================================================================
"""
Document Input Records

One record type per document kind, discriminated by `document_type`.
Records are constructed once from transport data and never mutated.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import Field, ValidationError, field_validator

from ..constants.document_types import DocumentType
from ..utils.exceptions import InputShapeError
from .inputs import (
    AllergyInput,
    CodedConcept,
    ConditionInput,
    InputModel,
    JapaneseDate,
    MedicationInput,
    ObservationInput,
    OrganizationInput,
    PatientInput,
    PractitionerInput,
    ProcedureInput,
)


class DocumentRecordBase(InputModel):
    id: str = ""
    version: str = "1.0"
    status: str = ""
    created_at: datetime
    last_modified_at: Optional[datetime] = None

    patient: Optional[PatientInput] = None
    author: Optional[PractitionerInput] = None
    organization: Optional[OrganizationInput] = None

    conditions: List[ConditionInput] = Field(default_factory=list)
    observations: List[ObservationInput] = Field(default_factory=list)
    medications: List[MedicationInput] = Field(default_factory=list)
    allergies: List[AllergyInput] = Field(default_factory=list)

    @field_validator("created_at", "last_modified_at")
    @classmethod
    def assume_utc(cls, v):
        # Naive timestamps are taken as UTC so comparisons stay well defined
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def kind(self) -> DocumentType:
        return DocumentType(self.document_type)

    def practitioners(self) -> Iterator[PractitionerInput]:
        """Every practitioner declared by the record, author first."""
        if self.author is not None:
            yield self.author

    def organizations(self) -> Iterator[OrganizationInput]:
        """Every organization declared by the record."""
        if self.organization is not None:
            yield self.organization

    def narratives(self) -> Dict[str, Optional[str]]:
        """Narrative fields by name, for length and script checks."""
        return {}


class ReferralRecord(DocumentRecordBase):
    document_type: Literal["referral"] = "referral"
    referral_reason: str = ""
    urgency: str = "routine"
    referred_to_organization: Optional[OrganizationInput] = None
    referred_to_practitioner: Optional[PractitionerInput] = None
    requested_services: List[CodedConcept] = Field(default_factory=list)
    clinical_notes: Optional[str] = None
    relevant_history: Optional[str] = None

    def practitioners(self):
        yield from super().practitioners()
        if self.referred_to_practitioner is not None:
            yield self.referred_to_practitioner

    def organizations(self):
        yield from super().organizations()
        if self.referred_to_organization is not None:
            yield self.referred_to_organization

    def narratives(self):
        return {
            "referral_reason": self.referral_reason,
            "clinical_notes": self.clinical_notes,
            "relevant_history": self.relevant_history,
        }


class DischargeSummaryRecord(DocumentRecordBase):
    document_type: Literal["discharge-summary"] = "discharge-summary"
    admission_date: JapaneseDate
    discharge_date: JapaneseDate
    admission_reason: str = ""
    principal_diagnosis: Optional[CodedConcept] = None
    secondary_diagnoses: List[CodedConcept] = Field(default_factory=list)
    procedures: List[ProcedureInput] = Field(default_factory=list)
    hospital_course: Optional[str] = None
    discharge_condition: Optional[str] = None
    discharge_instructions: Optional[str] = None
    follow_up_instructions: Optional[str] = None
    discharge_destination: Optional[CodedConcept] = None
    attending_physician: Optional[PractitionerInput] = None

    @property
    def length_of_stay(self) -> int:
        return (self.discharge_date - self.admission_date).days

    def practitioners(self):
        yield from super().practitioners()
        if self.attending_physician is not None:
            yield self.attending_physician

    def narratives(self):
        return {
            "admission_reason": self.admission_reason,
            "hospital_course": self.hospital_course,
            "discharge_instructions": self.discharge_instructions,
            "follow_up_instructions": self.follow_up_instructions,
        }


class CheckupRecord(DocumentRecordBase):
    document_type: Literal["checkup"] = "checkup"
    checkup_date: JapaneseDate
    checkup_type: Optional[CodedConcept] = None
    checkup_purpose: Optional[str] = None
    examining_physician: Optional[PractitionerInput] = None
    overall_assessment: Optional[CodedConcept] = None
    recommendations: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[JapaneseDate] = None
    certification_status: Optional[str] = None
    restrictions: List[str] = Field(default_factory=list)
    risk_factors: List[CodedConcept] = Field(default_factory=list)

    def practitioners(self):
        yield from super().practitioners()
        if self.examining_physician is not None:
            yield self.examining_physician

    def narratives(self):
        return {
            "checkup_purpose": self.checkup_purpose,
            "recommendations": self.recommendations,
        }


RECORD_TYPES = {
    DocumentType.REFERRAL: ReferralRecord,
    DocumentType.DISCHARGE_SUMMARY: DischargeSummaryRecord,
    DocumentType.CHECKUP: CheckupRecord,
}

DocumentRecord = Union[ReferralRecord, DischargeSummaryRecord, CheckupRecord]


def _describe_errors(error: ValidationError) -> List[str]:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<record>"
        details.append(f"{location}: {item['msg']}")
    return details


def parse_document_record(
    payload: Mapping[str, Any],
    document_type: Optional[Union[str, DocumentType]] = None
) -> DocumentRecord:
    """
    Decode a transport mapping into a typed document record.

    Args:
        payload: Decoded JSON object
        document_type: Optional kind; required when the payload has no
            `documentType` key, and must agree with it otherwise

    Returns:
        ReferralRecord, DischargeSummaryRecord or CheckupRecord

    Raises:
        InputShapeError: for unknown kinds, unknown fields or wrong types
    """
    if not isinstance(payload, Mapping):
        raise InputShapeError(f"Document payload must be an object, got {type(payload).__name__}")

    data = dict(payload)
    camel = data.pop("documentType", None)
    snake = data.pop("document_type", None)
    declared = camel or snake
    requested = document_type.value if isinstance(document_type, DocumentType) else document_type

    if declared and requested and declared != requested:
        raise InputShapeError(
            f"Payload declares document type '{declared}' but '{requested}' was requested"
        )

    kind_value = requested or declared
    if not kind_value:
        raise InputShapeError("Document type is missing")

    try:
        kind = DocumentType(kind_value)
    except ValueError:
        raise InputShapeError(f"Unsupported document type: '{kind_value}'")

    try:
        return RECORD_TYPES[kind].model_validate(data)
    except ValidationError as e:
        details = _describe_errors(e)
        raise InputShapeError(
            f"Invalid {kind.value} record: {len(details)} problem(s)",
            details=details
        ) from e


def record_participant_ids(record) -> Tuple[set, set]:
    """Ids of the practitioners and organizations declared in a record."""
    practitioner_ids = {p.id for p in record.practitioners() if p.id}
    organization_ids = {o.id for o in record.organizations() if o.id}
    return practitioner_ids, organization_ids
