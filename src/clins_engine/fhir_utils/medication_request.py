# ============================================================================
# src/clins_engine/fhir_utils/medication_request.py
# ============================================================================
"""
FHIR MedicationRequest resource builder for prescriptions.

R4B carries the drug as medicationCodeableConcept; the YJ/HOT codings
come straight from the input and a free-text drug name stays text-only.
"""

from typing import Optional

from fhir.resources.R4B.codeableconcept import CodeableConcept
from fhir.resources.R4B.dosage import Dosage, DosageDoseAndRate
from fhir.resources.R4B.duration import Duration
from fhir.resources.R4B.medicationrequest import MedicationRequest, MedicationRequestDispenseRequest
from fhir.resources.R4B.quantity import Quantity
from fhir.resources.R4B.reference import Reference
from fhir.resources.R4B.timing import Timing

from ..constants import code_systems as cs
from ..models.inputs import MedicationInput
from .primitives import (
    create_annotations,
    create_codeable_concept,
    create_coded,
    create_meta,
    create_quantity,
    create_text_concept,
    new_resource_id,
    to_fhir_date,
)


def create_medication_request(
    medication: MedicationInput,
    subject: Reference,
    encounter: Optional[Reference] = None,
    requester: Optional[Reference] = None
) -> MedicationRequest:
    """
    Create FHIR MedicationRequest from a medication sub-record.

    Args:
        medication: Medication input
        subject: Patient reference
        encounter: Optional Encounter reference
        requester: Optional prescriber reference, already resolved

    Returns:
        FHIR MedicationRequest resource
    """
    dosage = build_dosage(medication)

    return MedicationRequest(
        id=new_resource_id(),
        meta=create_meta("MedicationRequest"),
        status=medication.status.strip().lower(),
        intent=medication.intent.strip().lower(),
        medicationCodeableConcept=create_codeable_concept(medication.medication),
        subject=subject,
        encounter=encounter,
        authoredOn=to_fhir_date(medication.authored_on),
        requester=requester,
        dosageInstruction=[dosage] if dosage is not None else None,
        dispenseRequest=build_dispense_request(
            medication.quantity,
            medication.refills,
            medication.duration_days
        ),
        note=create_annotations(medication.notes)
    )


def build_dosage(medication: MedicationInput) -> Optional[Dosage]:
    """
    Build the dosage instruction: text, dose, timing and route.

    Returns:
        Dosage, or None when the input carries no dosage detail
    """
    has_detail = any(
        value is not None
        for value in (medication.dosage_text, medication.dose_value, medication.frequency, medication.route)
    )
    if not has_detail:
        return None

    dose_and_rate = None
    if medication.dose_value is not None:
        dose_and_rate = [DosageDoseAndRate(
            doseQuantity=create_quantity(medication.dose_value, medication.dose_unit)
        )]

    timing = None
    if medication.frequency:
        timing = Timing(code=create_text_concept(medication.frequency))

    return Dosage(
        text=medication.dosage_text,
        timing=timing,
        route=build_route(medication.route),
        doseAndRate=dose_and_rate
    )


def build_route(route: Optional[str]) -> Optional[CodeableConcept]:
    """Route as given; codes like 'PO' gain the JAMI route coding."""
    if not route:
        return None
    code = route.strip()
    if code.isascii():
        return create_coded(cs.ROUTE_OF_ADMINISTRATION, code.upper(), text=route)
    return create_text_concept(route)


def build_dispense_request(
    quantity: Optional[float] = None,
    refills: Optional[int] = None,
    duration_days: Optional[int] = None
) -> Optional[MedicationRequestDispenseRequest]:
    """
    Build dispense request with quantity, refills and supply duration.

    Args:
        quantity: Quantity to dispense
        refills: Number of refills
        duration_days: Days of supply

    Returns:
        MedicationRequestDispenseRequest or None when nothing is given
    """
    if quantity is None and refills is None and duration_days is None:
        return None

    return MedicationRequestDispenseRequest(
        quantity=Quantity(value=quantity) if quantity is not None else None,
        numberOfRepeatsAllowed=refills,
        expectedSupplyDuration=(
            Duration(value=duration_days, unit="日", system=cs.UCUM, code="d")
            if duration_days is not None else None
        )
    )
