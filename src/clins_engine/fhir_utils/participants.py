# ============================================================================
# src/clins_engine/fhir_utils/participants.py
# ============================================================================
"""
FHIR Patient, Practitioner, Organization and Encounter builders.

Japanese names are emitted twice: the kanji form tagged with the IDE
representation and the kana reading tagged SYL. Postal codes and phone
numbers are normalized to their domestic display forms.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fhir.resources.R4B.address import Address
from fhir.resources.R4B.coding import Coding
from fhir.resources.R4B.contactpoint import ContactPoint
from fhir.resources.R4B.encounter import Encounter, EncounterHospitalization, EncounterParticipant
from fhir.resources.R4B.extension import Extension
from fhir.resources.R4B.humanname import HumanName
from fhir.resources.R4B.codeableconcept import CodeableConcept
from fhir.resources.R4B.organization import Organization
from fhir.resources.R4B.patient import Patient
from fhir.resources.R4B.period import Period
from fhir.resources.R4B.practitioner import Practitioner
from fhir.resources.R4B.reference import Reference

from ..constants import code_systems as cs
from ..constants.value_sets import GENDERS
from ..models.inputs import OrganizationInput, PatientInput, PractitionerInput
from ..utils.text import format_phone_number, format_postal_code
from .primitives import create_identifier, create_meta, new_resource_id, to_fhir_date

ENCOUNTER_CLASSES = {
    "IMP": "inpatient encounter",
    "AMB": "ambulatory",
}


def _representation(code: str) -> List[Extension]:
    return [Extension(url=cs.ISO21090_EN_REPRESENTATION, valueCode=code)]


def build_human_name(
    family: Optional[str],
    given: Optional[str],
    representation: str
) -> Optional[HumanName]:
    """
    HumanName in Japanese order (family first).

    Args:
        family: Family name
        given: Given name
        representation: 'IDE' for kanji, 'SYL' for kana
    """
    if not family and not given:
        return None
    return HumanName(
        extension=_representation(representation),
        use="official",
        text=" ".join(p for p in (family, given) if p),
        family=family,
        given=[given] if given else None
    )


def split_name(name: Optional[str]):
    """'山田 太郎' -> ('山田', '太郎'); a name without a space is all family."""
    if not name:
        return None, None
    parts = name.split()
    return parts[0], " ".join(parts[1:]) or None


def build_address(address: Optional[str], postal_code: Optional[str]) -> Optional[List[Address]]:
    if not address and not postal_code:
        return None
    return [Address(
        text=address,
        postalCode=format_postal_code(postal_code) if postal_code else None,
        country="JP"
    )]


def build_telecom(phone: Optional[str]) -> Optional[List[ContactPoint]]:
    if not phone:
        return None
    return [ContactPoint(system="phone", value=format_phone_number(phone), use="work")]


def create_patient(patient: PatientInput) -> Patient:
    """
    Create FHIR Patient from the input patient.

    The input id becomes the patient-number identifier; the resource id is
    freshly generated.
    """
    identifiers = [create_identifier(cs.PATIENT_NUMBER, patient.id)]
    if patient.insurance_number:
        identifiers.append(create_identifier(cs.INSURANCE_CARD_NUMBER, patient.insurance_number))

    names = [
        name for name in (
            build_human_name(patient.family_name, patient.given_name, "IDE"),
            build_human_name(patient.family_name_kana, patient.given_name_kana, "SYL"),
        )
        if name is not None
    ]

    patient_data: Dict[str, Any] = {
        "id": new_resource_id(),
        "meta": create_meta("Patient"),
        "identifier": identifiers,
        "name": names or None,
        "telecom": build_telecom(patient.phone),
        "address": build_address(patient.address, patient.postal_code),
        "birthDate": to_fhir_date(patient.birth_date),
    }

    gender = (patient.gender or "").strip().lower()
    if gender in GENDERS:
        patient_data["gender"] = gender

    return Patient(**patient_data)


def create_practitioner(practitioner: PractitionerInput) -> Practitioner:
    """Create FHIR Practitioner; the license number becomes an identifier."""
    family, given = split_name(practitioner.name)
    family_kana, given_kana = split_name(practitioner.name_kana)

    names = [
        name for name in (
            build_human_name(family, given, "IDE"),
            build_human_name(family_kana, given_kana, "SYL"),
        )
        if name is not None
    ]

    identifiers = []
    if practitioner.license_number:
        identifiers.append(create_identifier(cs.MEDICAL_LICENSE_NUMBER, practitioner.license_number))

    return Practitioner(
        id=new_resource_id(),
        meta=create_meta("Practitioner"),
        identifier=identifiers or None,
        name=names or None,
        telecom=build_telecom(practitioner.phone)
    )


def practitioner_display(practitioner: PractitionerInput) -> Optional[str]:
    if practitioner.name and practitioner.department:
        return f"{practitioner.name} ({practitioner.department})"
    return practitioner.name or practitioner.id or None


def create_organization(organization: OrganizationInput) -> Organization:
    """Create FHIR Organization identified by its medical institution code."""
    return Organization(
        id=new_resource_id(),
        meta=create_meta("Organization"),
        identifier=[create_identifier(cs.FACILITY_NUMBER, organization.id)] if organization.id else None,
        name=organization.name,
        telecom=build_telecom(organization.phone),
        address=build_address(organization.address, organization.postal_code)
    )


def create_encounter(
    class_code: str,
    subject: Reference,
    start: date,
    end: Optional[date] = None,
    service_provider: Optional[Reference] = None,
    participants: Optional[List[Reference]] = None,
    discharge_disposition: Optional[CodeableConcept] = None
) -> Encounter:
    """
    Create a finished FHIR Encounter.

    Args:
        class_code: v3 ActCode class ('IMP' inpatient, 'AMB' ambulatory)
        subject: Patient reference
        start: First day of the encounter
        end: Last day of the encounter
        service_provider: Organization reference
        participants: Practitioner references
        discharge_disposition: Where the patient went after discharge

    Returns:
        FHIR Encounter resource
    """
    encounter_data: Dict[str, Any] = {
        "id": new_resource_id(),
        "meta": create_meta("Encounter"),
        "status": "finished",
        "class": Coding(
            system=cs.ACT_CODE,
            code=class_code,
            display=ENCOUNTER_CLASSES.get(class_code)
        ),
        "subject": subject,
        "period": Period(start=to_fhir_date(start), end=to_fhir_date(end or start)),
    }

    if service_provider is not None:
        encounter_data["serviceProvider"] = service_provider
    if participants:
        encounter_data["participant"] = [
            EncounterParticipant(individual=reference) for reference in participants
        ]
    if discharge_disposition is not None:
        encounter_data["hospitalization"] = EncounterHospitalization(
            dischargeDisposition=discharge_disposition
        )

    return Encounter(**encounter_data)
