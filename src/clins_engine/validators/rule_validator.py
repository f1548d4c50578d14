# ============================================================================
# src/clins_engine/validators/rule_validator.py
# ============================================================================
"""
Business Rule Validator

Validates a document input record before any resource is built:
1. Universal checks shared by every document (ids, status, timestamps)
2. Document-specific required fields (referral, discharge summary, checkup)
3. Participant identifiers (license, facility code, postal code, phone, insurance)
4. Clinical sub-records (codes, enumerations, correlation ids)
5. Narrative length and script checks

Structural and mandatory-field violations are errors; coding preferences
and best-practice checks are warnings. Findings are aggregated, never
raised.
"""

from datetime import datetime
from typing import Callable, Dict, Optional
import logging

from ..config import validation_settings
from ..constants import code_systems as cs
from ..constants import value_sets as vs
from ..constants.document_types import DocumentType
from ..models.documents import (
    CheckupRecord,
    DischargeSummaryRecord,
    ReferralRecord,
    record_participant_ids,
)
from ..models.validation import ValidationResult
from ..utils.clock import japan_today, utc_now
from ..utils.text import contains_japanese, is_kana
from . import format_validators as fv
from .domain_checks import (
    check_code_formats,
    check_coding_systems,
    check_concept_present,
    check_enum,
    check_length,
    check_participant_id,
    classify_checkup,
    normalize_choice,
)
from .plausibility import PlausibilityChecker


logger = logging.getLogger(__name__)


class BusinessRuleValidator:
    """
    Rule-based validation for document input records.

    One routine per document kind, run after the universal checks. The
    routines are plain methods selected from a table, not overrides.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        settings=None
    ):
        """
        Args:
            clock: Returns the current aware datetime; defaults to UTC now
            settings: ValidationSettings override
        """
        self.clock = clock or utc_now
        self.settings = settings or validation_settings
        self.plausibility_checker = PlausibilityChecker()
        self._document_checks: Dict[DocumentType, Callable] = {
            DocumentType.REFERRAL: self._check_referral,
            DocumentType.DISCHARGE_SUMMARY: self._check_discharge_summary,
            DocumentType.CHECKUP: self._check_checkup,
        }

    def validate(self, record) -> ValidationResult:
        """
        Validate a document record.

        Args:
            record: ReferralRecord, DischargeSummaryRecord or CheckupRecord

        Returns:
            ValidationResult with all errors and warnings
        """
        result = ValidationResult()
        now = self.clock()

        self._check_universal(record, now, result)
        self._document_checks[record.kind](record, now, result)
        self._check_participants(record, now, result)
        self._check_sub_records(record, result)
        self._check_narratives(record, result)

        logger.info(
            f"Business rules for {record.kind.value} '{record.id}': "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        for error in result.errors:
            logger.warning(f"  - {error}")

        return result

    # ========================================================================
    # UNIVERSAL CHECKS
    # ========================================================================

    def _check_universal(self, record, now: datetime, result: ValidationResult) -> None:
        if not record.id:
            result.add_error("Document id is required")

        if not record.status:
            result.add_error("Document status is required")
        else:
            check_enum(result, "Document status", record.status, vs.DOCUMENT_STATUSES)

        if record.patient is None or not record.patient.id:
            result.add_error("Patient reference is required (patient.id)")
        if record.author is None or not record.author.id:
            result.add_error("Author reference is required (author.id)")
        if record.organization is None or not record.organization.id:
            result.add_error("Organization reference is required (organization.id)")

        if record.created_at > now:
            result.add_error(f"Created timestamp {record.created_at.isoformat()} is in the future")

        if record.last_modified_at is not None:
            if record.last_modified_at > now:
                result.add_error(
                    f"Last-modified timestamp {record.last_modified_at.isoformat()} is in the future"
                )
            if record.last_modified_at < record.created_at:
                result.add_error(
                    f"Last-modified timestamp {record.last_modified_at.isoformat()} is before "
                    f"created timestamp {record.created_at.isoformat()}"
                )

    # ========================================================================
    # DOCUMENT-SPECIFIC CHECKS
    # ========================================================================

    def _check_referral(self, record: ReferralRecord, now: datetime, result: ValidationResult) -> None:
        if not record.referral_reason:
            result.add_error("Referral reason is required")
        elif len(record.referral_reason) < self.settings.MIN_REFERRAL_REASON_LENGTH:
            result.add_warning(
                f"Referral reason is shorter than {self.settings.MIN_REFERRAL_REASON_LENGTH} characters"
            )

        if not record.requested_services:
            result.add_error("At least one requested service is required")
        for i, service in enumerate(record.requested_services):
            label = f"requested_services[{i}]"
            if check_concept_present(result, label, service):
                check_coding_systems(result, label, service, cs.SERVICE_SYSTEMS, "service")
                check_code_formats(result, label, service)

        check_enum(result, "Urgency", record.urgency, vs.URGENCY_LEVELS)
        if normalize_choice(record.urgency) == "stat" and not record.clinical_notes:
            result.add_warning("STAT referrals should include detailed clinical notes")

        receiving = record.referred_to_organization
        if receiving is None:
            result.add_warning("Receiving organization is not specified")
        elif record.organization is not None and receiving.id and receiving.id == record.organization.id:
            result.add_warning("Referring and receiving organization are the same")

    def _check_discharge_summary(
        self,
        record: DischargeSummaryRecord,
        now: datetime,
        result: ValidationResult
    ) -> None:
        if not record.admission_reason:
            result.add_error("Admission reason is required")

        if record.admission_date >= record.discharge_date:
            result.add_error(
                f"Admission date {record.admission_date.isoformat()} must be before "
                f"discharge date {record.discharge_date.isoformat()}"
            )
        elif record.length_of_stay > self.settings.MAX_LENGTH_OF_STAY_DAYS:
            result.add_warning(
                f"Length of stay of {record.length_of_stay} days exceeds "
                f"{self.settings.MAX_LENGTH_OF_STAY_DAYS} days"
            )

        if record.discharge_date > japan_today(now):
            result.add_error(f"Discharge date {record.discharge_date.isoformat()} is in the future")

        if check_concept_present(result, "Principal diagnosis", record.principal_diagnosis):
            self._check_diagnosis("Principal diagnosis", record.principal_diagnosis, result)
        for i, diagnosis in enumerate(record.secondary_diagnoses):
            label = f"secondary_diagnoses[{i}]"
            if check_concept_present(result, label, diagnosis):
                self._check_diagnosis(label, diagnosis, result)

        if record.discharge_condition is None:
            result.add_warning("Discharge condition is not specified")
        else:
            check_enum(result, "Discharge condition", record.discharge_condition, vs.DISCHARGE_CONDITIONS)

        if record.attending_physician is None:
            result.add_warning("Attending physician is not specified")

        practitioner_ids, organization_ids = record_participant_ids(record)
        for i, procedure in enumerate(record.procedures):
            label = f"procedures[{i}]"
            if check_concept_present(result, label, procedure.code):
                check_coding_systems(result, label, procedure.code, cs.SERVICE_SYSTEMS, "procedure")
            check_enum(result, f"{label} status", procedure.status, vs.PROCEDURE_STATUSES)
            check_participant_id(
                result, f"{label} performer", procedure.performer_id,
                practitioner_ids | organization_ids
            )
            check_length(result, f"{label} notes", "notes", procedure.notes)
            performed = procedure.performed_date
            if performed and not (record.admission_date <= performed <= record.discharge_date):
                result.add_warning(f"{label} was performed outside the admission period")

    def _check_checkup(self, record: CheckupRecord, now: datetime, result: ValidationResult) -> None:
        if record.checkup_date > japan_today(now):
            result.add_error(f"Checkup date {record.checkup_date.isoformat()} is in the future")

        check_concept_present(result, "Checkup type", record.checkup_type)

        if check_concept_present(result, "Overall assessment", record.overall_assessment):
            check_coding_systems(
                result, "Overall assessment", record.overall_assessment,
                cs.ASSESSMENT_SYSTEMS, "assessment"
            )

        if record.follow_up_required and record.follow_up_date is None:
            result.add_error("Follow-up date is required when follow-up is required")
        if record.follow_up_date is not None and record.follow_up_date <= record.checkup_date:
            result.add_error(
                f"Follow-up date {record.follow_up_date.isoformat()} must be after "
                f"checkup date {record.checkup_date.isoformat()}"
            )

        check_enum(result, "Certification status", record.certification_status, vs.CERTIFICATION_STATUSES)

        for i, risk in enumerate(record.risk_factors):
            label = f"risk_factors[{i}]"
            if check_concept_present(result, label, risk):
                self._check_diagnosis(label, risk, result)

        categories = {normalize_choice(o.category) for o in record.observations}
        checkup_kind = classify_checkup(record.checkup_type)

        if checkup_kind == "occupational":
            if not record.certification_status:
                result.add_error("Occupational checkups require a certification status")
            if "exam" not in categories:
                result.add_warning("Occupational checkups should include physical examination findings")
        elif checkup_kind == "annual":
            if "vital-signs" not in categories:
                result.add_warning("Annual checkups should include vital signs")
            if "laboratory" not in categories:
                result.add_warning("Annual checkups should include laboratory results")
        elif checkup_kind == "executive":
            if "imaging" not in categories:
                result.add_warning("Comprehensive (ningen dock) checkups should include imaging results")

    def _check_diagnosis(self, label: str, concept, result: ValidationResult) -> None:
        check_coding_systems(result, label, concept, cs.DIAGNOSIS_SYSTEMS, "diagnosis")
        check_code_formats(result, label, concept)
        check_length(result, f"{label} text", "diagnosis_text", concept.text)

    # ========================================================================
    # PARTICIPANTS
    # ========================================================================

    def _check_participants(self, record, now: datetime, result: ValidationResult) -> None:
        patient = record.patient
        if patient is not None:
            if patient.birth_date and patient.birth_date > japan_today(now):
                result.add_error(f"Patient birth date {patient.birth_date.isoformat()} is in the future")
            check_enum(result, "Patient gender", patient.gender, vs.GENDERS)

            if not (patient.family_name or patient.given_name):
                result.add_warning("Patient name is not specified")
            if not (patient.family_name_kana or patient.given_name_kana):
                result.add_warning("Patient kana name is recommended")
            for kana in (patient.family_name_kana, patient.given_name_kana):
                if kana and not is_kana(kana):
                    result.add_warning(f"Patient kana name '{kana}' contains non-kana characters")

            self._check_contact("Patient", patient.postal_code, patient.phone, result)
            if patient.insurance_number and not fv.validate_insurance_number(patient.insurance_number):
                result.add_warning(f"Patient insurance number '{patient.insurance_number}' has an invalid format")

        seen = {}
        for practitioner in record.practitioners():
            label = f"Practitioner '{practitioner.id}'"
            if not practitioner.id:
                result.add_warning("A practitioner without an id cannot be referenced")
            elif practitioner.id in seen and seen[practitioner.id] != practitioner:
                result.add_error(f"{label} is declared more than once with different details")
            seen[practitioner.id] = practitioner

            if not practitioner.license_number:
                result.add_warning(f"{label} has no medical license number")
            elif not fv.validate_medical_license(practitioner.license_number):
                result.add_warning(f"{label} license number '{practitioner.license_number}' has an invalid format")
            if practitioner.phone and not fv.validate_phone_number(practitioner.phone):
                result.add_warning(f"{label} phone number '{practitioner.phone}' has an invalid format")

        seen = {}
        for organization in record.organizations():
            label = f"Organization '{organization.id}'"
            if not organization.id:
                result.add_warning("An organization without a facility code cannot be referenced")
                continue
            if organization.id in seen and seen[organization.id] != organization:
                result.add_error(f"{label} is declared more than once with different details")
            seen[organization.id] = organization

            if not fv.validate_facility_code(organization.id, self.settings.FACILITY_CODE_LENGTH):
                result.add_warning(f"{label} is not a valid medical institution code")
            if not organization.name:
                result.add_warning(f"{label} has no name")
            self._check_contact(label, organization.postal_code, organization.phone, result)

    def _check_contact(self, label: str, postal_code, phone, result: ValidationResult) -> None:
        if postal_code and not fv.validate_postal_code(postal_code):
            result.add_warning(f"{label} postal code '{postal_code}' has an invalid format")
        if phone and not fv.validate_phone_number(phone):
            result.add_warning(f"{label} phone number '{phone}' has an invalid format")

    # ========================================================================
    # CLINICAL SUB-RECORDS
    # ========================================================================

    def _check_sub_records(self, record, result: ValidationResult) -> None:
        practitioner_ids, organization_ids = record_participant_ids(record)

        for i, condition in enumerate(record.conditions):
            label = f"conditions[{i}]"
            if check_concept_present(result, label, condition.code):
                self._check_diagnosis(label, condition.code, result)
            check_enum(result, f"{label} clinical status", condition.clinical_status, vs.CONDITION_CLINICAL_STATUSES)
            check_enum(
                result, f"{label} verification status",
                condition.verification_status, vs.CONDITION_VERIFICATION_STATUSES
            )
            if condition.onset_date and condition.abatement_date and condition.abatement_date < condition.onset_date:
                result.add_error(f"{label} abatement date is before its onset date")
            check_participant_id(result, f"{label} recorder", condition.recorder_id, practitioner_ids)
            check_length(result, f"{label} notes", "notes", condition.notes)

        for i, observation in enumerate(record.observations):
            self._check_observation(f"observations[{i}]", observation, practitioner_ids | organization_ids, result)

        for i, medication in enumerate(record.medications):
            self._check_medication(f"medications[{i}]", medication, practitioner_ids, result)

        for i, allergy in enumerate(record.allergies):
            label = f"allergies[{i}]"
            check_concept_present(result, label, allergy.substance)
            check_length(result, f"{label} substance", "substance_name", allergy.substance.label)
            check_enum(result, f"{label} clinical status", allergy.clinical_status, vs.ALLERGY_CLINICAL_STATUSES)
            check_enum(
                result, f"{label} verification status",
                allergy.verification_status, vs.ALLERGY_VERIFICATION_STATUSES
            )
            check_enum(result, f"{label} type", allergy.type, vs.ALLERGY_TYPES)
            check_enum(result, f"{label} category", allergy.category, vs.ALLERGY_CATEGORIES)
            check_enum(result, f"{label} criticality", allergy.criticality, vs.ALLERGY_CRITICALITIES)
            check_enum(result, f"{label} reaction severity", allergy.reaction_severity, vs.REACTION_SEVERITIES)
            check_participant_id(result, f"{label} recorder", allergy.recorder_id, practitioner_ids)
            check_length(result, f"{label} notes", "notes", allergy.notes)

    def _check_observation(self, label: str, observation, performer_ids, result: ValidationResult) -> None:
        if check_concept_present(result, label, observation.code):
            if normalize_choice(observation.category) == "laboratory":
                check_coding_systems(result, label, observation.code, cs.LABORATORY_SYSTEMS, "laboratory")
            check_code_formats(result, label, observation.code)

        check_enum(result, f"{label} status", observation.status, vs.OBSERVATION_STATUSES)
        check_enum(result, f"{label} category", observation.category, vs.OBSERVATION_CATEGORIES)
        check_participant_id(result, f"{label} performer", observation.performer_id, performer_ids)
        check_length(result, f"{label} notes", "notes", observation.notes)

        if not observation.has_value:
            result.add_warning(f"{label} has no value")

        quantity = observation.value_quantity
        if quantity is not None:
            if not quantity.unit:
                result.add_warning(f"{label} quantity {quantity.value} has no unit")
            if normalize_choice(observation.category) == "vital-signs":
                for coding in observation.code.coding:
                    if coding.system == cs.LOINC:
                        plausible, reason = self.plausibility_checker.check(
                            coding.code, quantity.value, quantity.unit
                        )
                        if not plausible:
                            result.add_warning(f"{label}: {reason}")

        if observation.interpretation and observation.interpretation.strip().upper() not in vs.INTERPRETATION_FLAGS:
            result.add_warning(f"{label} interpretation '{observation.interpretation}' is not recognized")

        low, high = observation.reference_low, observation.reference_high
        if low is not None and high is not None and low > high:
            result.add_warning(f"{label} reference range low {low} is above high {high}")

    def _check_medication(self, label: str, medication, requester_ids, result: ValidationResult) -> None:
        concept = medication.medication
        if check_concept_present(result, label, concept):
            check_coding_systems(result, label, concept, cs.MEDICATION_SYSTEMS, "medication")
            check_code_formats(result, label, concept)
            check_length(result, f"{label} name", "medication_name", concept.label)

            searchable = concept.searchable_text()
            if any(substance.lower() in searchable for substance in vs.CONTROLLED_SUBSTANCES):
                result.add_warning(
                    f"{label} '{concept.label}' is a controlled substance; confirm prescribing requirements"
                )

        check_enum(result, f"{label} status", medication.status, vs.MEDICATION_STATUSES)
        check_enum(result, f"{label} intent", medication.intent, vs.MEDICATION_INTENTS)
        check_participant_id(result, f"{label} requester", medication.requester_id, requester_ids)
        check_length(result, f"{label} notes", "notes", medication.notes)

        if not medication.dosage_text and medication.dose_value is None:
            result.add_warning(f"{label} has no dosage instructions")
        if medication.dose_value is not None and not medication.dose_unit:
            result.add_warning(f"{label} dose {medication.dose_value} has no unit")

        frequency = medication.frequency
        if frequency and not any(p.lower() in frequency.lower() for p in vs.DOSING_FREQUENCY_PATTERNS):
            result.add_warning(f"{label} dosing frequency '{frequency}' is not a recognized pattern")
        if medication.route and normalize_choice(medication.route) not in vs.ROUTE_CODES:
            result.add_warning(f"{label} route '{medication.route}' is not a recognized route")

    # ========================================================================
    # NARRATIVES
    # ========================================================================

    def _check_narratives(self, record, result: ValidationResult) -> None:
        narratives = {name: text for name, text in record.narratives().items() if text}

        for name, text in narratives.items():
            check_length(result, name.replace("_", " ").capitalize(), name, text)

        if (
            self.settings.REQUIRE_JAPANESE_NARRATIVE
            and narratives
            and not any(contains_japanese(text) for text in narratives.values())
        ):
            result.add_warning("No narrative field contains Japanese text")


def validate_record(record, clock: Optional[Callable[[], datetime]] = None) -> ValidationResult:
    """
    Convenience function to validate a document record.

    Args:
        record: Document input record
        clock: Optional clock override

    Returns:
        ValidationResult
    """
    return BusinessRuleValidator(clock=clock).validate(record)
