# ============================================================================
# src/clins_engine/constants/profiles.py
# ============================================================================
"""
JP-CLINS Profile URLs
- Bundle and Composition profiles per document kind
- Resource profiles for every resource the builder emits
"""

from .document_types import DocumentType

IG_VERSION = "1.11.0"

BASE_PROFILE_URL = "http://jpfhir.jp/fhir/clins/StructureDefinition/"

BUNDLE_PROFILES = {
    DocumentType.REFERRAL: BASE_PROFILE_URL + "JP_Bundle_eReferral",
    DocumentType.DISCHARGE_SUMMARY: BASE_PROFILE_URL + "JP_Bundle_eDischargeSummary",
    DocumentType.CHECKUP: BASE_PROFILE_URL + "JP_Bundle_eCheckup",
}

COMPOSITION_PROFILES = {
    DocumentType.REFERRAL: BASE_PROFILE_URL + "JP_Composition_eReferral",
    DocumentType.DISCHARGE_SUMMARY: BASE_PROFILE_URL + "JP_Composition_eDischargeSummary",
    DocumentType.CHECKUP: BASE_PROFILE_URL + "JP_Composition_eCheckup",
}

# Every document profile the compliance validator accepts, including
# kinds this engine does not produce itself
RECOGNIZED_DOCUMENT_PROFILES = frozenset({
    *BUNDLE_PROFILES.values(),
    BASE_PROFILE_URL + "JP_Bundle_ePrescription",
    BASE_PROFILE_URL + "JP_Bundle_eInstructionSummary",
})

RESOURCE_PROFILES = {
    "Patient": BASE_PROFILE_URL + "JP_Patient_CLINS",
    "Practitioner": BASE_PROFILE_URL + "JP_Practitioner_CLINS",
    "Organization": BASE_PROFILE_URL + "JP_Organization_CLINS",
    "Encounter": BASE_PROFILE_URL + "JP_Encounter_CLINS",
    "Condition": BASE_PROFILE_URL + "JP_Condition_CLINS",
    "Procedure": BASE_PROFILE_URL + "JP_Procedure_CLINS",
    "MedicationRequest": BASE_PROFILE_URL + "JP_MedicationRequest_CLINS",
    "Observation": BASE_PROFILE_URL + "JP_Observation_CLINS",
    "AllergyIntolerance": BASE_PROFILE_URL + "JP_AllergyIntolerance_eCS",
    "ServiceRequest": BASE_PROFILE_URL + "JP_ServiceRequest_CLINS",
}

# Lab observations use the eCS lab result profile
LAB_OBSERVATION_PROFILE = BASE_PROFILE_URL + "JP_Observation-LabResult-eCS"
