# ============================================================================
# src/clins_engine/models/inputs.py
# ============================================================================
"""
Input Records - Participants and Clinical Sub-records

Typed, immutable input shapes decoded from transport JSON. Unknown fields
are rejected at the boundary. Keys may be given in snake_case or camelCase.

Fields whose emptiness is a business rule (ids, status, codes) default to
empty so the rule engine can report every problem at once instead of the
boundary failing on the first.
"""

from datetime import date, datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..utils.japanese_calendar import parse_japanese_date


def _coerce_date(value: Any) -> Any:
    # Accepts era notation as well as ISO and YYYY/MM/DD strings
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return parse_japanese_date(value)
    return value


JapaneseDate = Annotated[date, BeforeValidator(_coerce_date)]


class InputModel(BaseModel):
    """Base for every input shape."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ============================================================================
# CODED VALUES
# ============================================================================

class Coding(InputModel):
    """A code from a coding system; code and system are always set together."""
    system: str = Field(min_length=1)
    code: str = Field(min_length=1)
    display: Optional[str] = None


class CodedConcept(InputModel):
    """
    A clinical idea as one or more codings plus optional free text.

    The single-coding shorthand {"system", "code", "display"} is accepted
    and folded into the coding list.
    """
    coding: List[Coding] = Field(default_factory=list)
    text: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"text": data}
        if isinstance(data, dict) and ("code" in data or "system" in data):
            data = dict(data)
            single = {key: data.pop(key) for key in ("system", "code", "display") if key in data}
            data["coding"] = [single, *data.get("coding", [])]
        return data

    @property
    def is_empty(self) -> bool:
        return not self.coding and not self.text

    @property
    def systems(self) -> List[str]:
        return [c.system for c in self.coding if c.system]

    @property
    def label(self) -> str:
        """Best human-readable name: text, then first display, then first code."""
        if self.text:
            return self.text
        for c in self.coding:
            if c.display:
                return c.display
        return self.coding[0].code if self.coding else ""

    def searchable_text(self) -> str:
        parts = [self.text or ""]
        for c in self.coding:
            parts.extend([c.code, c.display or ""])
        return " ".join(parts).lower()


class QuantityInput(InputModel):
    value: float
    unit: Optional[str] = None


# ============================================================================
# PARTICIPANTS
# ============================================================================

class PatientInput(InputModel):
    id: str = ""
    family_name: Optional[str] = None
    given_name: Optional[str] = None
    family_name_kana: Optional[str] = None
    given_name_kana: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[JapaneseDate] = None
    postal_code: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    insurance_number: Optional[str] = None

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.family_name, self.given_name) if p)


class PractitionerInput(InputModel):
    id: str = ""
    name: Optional[str] = None
    name_kana: Optional[str] = None
    license_number: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None


class OrganizationInput(InputModel):
    """Organization; the id is its medical institution (facility) code."""
    id: str = ""
    name: Optional[str] = None
    postal_code: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


# ============================================================================
# CLINICAL SUB-RECORDS
# ============================================================================

class ConditionInput(InputModel):
    code: CodedConcept = Field(default_factory=CodedConcept)
    clinical_status: str = "active"
    verification_status: str = "confirmed"
    severity: Optional[CodedConcept] = None
    onset_date: Optional[JapaneseDate] = None
    abatement_date: Optional[JapaneseDate] = None
    recorder_id: Optional[str] = None
    notes: Optional[str] = None


class ObservationInput(InputModel):
    code: CodedConcept = Field(default_factory=CodedConcept)
    category: str = "laboratory"
    status: str = "final"
    value_quantity: Optional[QuantityInput] = None
    value_string: Optional[str] = None
    value_code: Optional[CodedConcept] = None
    reference_low: Optional[float] = None
    reference_high: Optional[float] = None
    interpretation: Optional[str] = None
    effective_date: Optional[datetime] = None
    performer_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def has_value(self) -> bool:
        return any(v is not None for v in (self.value_quantity, self.value_string, self.value_code))


class MedicationInput(InputModel):
    medication: CodedConcept = Field(default_factory=CodedConcept)
    status: str = "active"
    intent: str = "order"
    dosage_text: Optional[str] = None
    dose_value: Optional[float] = None
    dose_unit: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    duration_days: Optional[int] = Field(default=None, ge=1)
    quantity: Optional[float] = None
    refills: Optional[int] = Field(default=None, ge=0)
    authored_on: Optional[JapaneseDate] = None
    requester_id: Optional[str] = None
    notes: Optional[str] = None


class AllergyInput(InputModel):
    substance: CodedConcept = Field(default_factory=CodedConcept)
    clinical_status: str = "active"
    verification_status: str = "confirmed"
    type: Optional[str] = None
    category: Optional[str] = None
    criticality: Optional[str] = None
    reaction: Optional[CodedConcept] = None
    reaction_severity: Optional[str] = None
    onset_date: Optional[JapaneseDate] = None
    recorder_id: Optional[str] = None
    notes: Optional[str] = None


class ProcedureInput(InputModel):
    code: CodedConcept = Field(default_factory=CodedConcept)
    status: str = "completed"
    performed_date: Optional[JapaneseDate] = None
    performer_id: Optional[str] = None
    notes: Optional[str] = None
