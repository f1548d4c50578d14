# ============================================================================
# src/clins_engine/fhir_utils/builder.py
# ============================================================================
"""
Resource Graph Builder

Converts a validated document record into the FHIR R4B resources of one
document.

Supports:
- Referrals -> Patient, Practitioners, Organizations, ServiceRequests
- Discharge summaries -> inpatient Encounter, diagnoses, Procedures
- Checkups -> ambulatory Encounter, findings, overall assessment

Key features:
- Every resource id is generated once, when the resource is built
- One Patient reference, built once, is shared by every clinical resource
- Correlation ids (recorder, performer, requester) resolve through a
  participant registry; an unknown id aborts the build
- Absent optional input is omitted, never replaced by placeholder codes
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

from fhir.resources.R4B.reference import Reference

from ..constants.document_types import DocumentType
from ..constants.sections import OBSERVATION_CATEGORY_TOPICS, ClinicalTopic
from ..models.documents import CheckupRecord, DischargeSummaryRecord, ReferralRecord
from ..models.graph import GraphNode, ResourceGraph, ResourceKind
from ..models.inputs import ConditionInput, OrganizationInput, PractitionerInput
from ..utils.exceptions import ReferenceResolutionError
from .allergy_intolerance import create_allergy_intolerance
from .condition import create_condition, create_diagnosis
from .medication_request import create_medication_request
from .observation import create_assessment_observation, create_observation
from .participants import (
    create_encounter,
    create_organization,
    create_patient,
    create_practitioner,
    practitioner_display,
)
from .primitives import create_codeable_concept, create_reference
from .procedure import create_procedure
from .service_request import create_service_request

logger = logging.getLogger(__name__)


@dataclass
class _BuildState:
    """Per-call state; a builder instance holds none of its own."""
    graph: ResourceGraph = field(default_factory=ResourceGraph)
    participants: Dict[str, GraphNode] = field(default_factory=dict)
    subject: Optional[Reference] = None
    encounter: Optional[Reference] = None

    def reference(self, role: str) -> Optional[Reference]:
        node = self.graph.role(role)
        return create_reference(node) if node is not None else None


class ResourceGraphBuilder:
    """
    Builds the resource graph of one document.

    The builder assumes business rules have passed; it still refuses to
    synthesize a missing patient, author or organization, or to guess a
    participant for an unknown correlation id.
    """

    def __init__(self):
        self._clinical_builders = {
            DocumentType.REFERRAL: self._build_referral,
            DocumentType.DISCHARGE_SUMMARY: self._build_discharge_summary,
            DocumentType.CHECKUP: self._build_checkup,
        }

    def build(self, record) -> ResourceGraph:
        """
        Build every resource for a document record.

        Args:
            record: Validated document record

        Returns:
            ResourceGraph with participant roles filled in

        Raises:
            ReferenceResolutionError: patient, author or organization id is
                missing, or a correlation id names no participant
        """
        state = _BuildState()

        self._add_participants(record, state)
        self._clinical_builders[record.kind](record, state)
        self._add_shared_sub_records(record, state)

        logger.info(
            f"Built {len(state.graph)} resources for {record.kind.value} '{record.id}'"
        )
        return state.graph

    # ========================================================================
    # PARTICIPANTS
    # ========================================================================

    def _add_participants(self, record, state: _BuildState) -> None:
        patient = record.patient
        if patient is None or not patient.id:
            raise ReferenceResolutionError("Cannot build document: patient id is missing")
        if record.author is None or not record.author.id:
            raise ReferenceResolutionError("Cannot build document: author id is missing")
        if record.organization is None or not record.organization.id:
            raise ReferenceResolutionError("Cannot build document: organization id is missing")

        patient_node = state.graph.add(
            GraphNode(
                ResourceKind.PATIENT,
                create_patient(patient),
                display=patient.display_name or patient.id
            ),
            role="patient"
        )
        state.subject = create_reference(patient_node)

        self._add_practitioner(record.author, state, role="author")
        self._add_organization(record.organization, state, role="custodian")

    def _add_practitioner(
        self,
        practitioner: Optional[PractitionerInput],
        state: _BuildState,
        role: str
    ) -> Optional[GraphNode]:
        if practitioner is None:
            return None

        existing = state.participants.get(practitioner.id) if practitioner.id else None
        if existing is not None:
            state.graph.roles.setdefault(role, existing)
            return existing

        node = state.graph.add(
            GraphNode(
                ResourceKind.PRACTITIONER,
                create_practitioner(practitioner),
                display=practitioner_display(practitioner)
            ),
            role=role
        )
        if practitioner.id:
            state.participants[practitioner.id] = node
        return node

    def _add_organization(
        self,
        organization: Optional[OrganizationInput],
        state: _BuildState,
        role: str
    ) -> Optional[GraphNode]:
        if organization is None:
            return None

        existing = state.participants.get(organization.id) if organization.id else None
        if existing is not None:
            state.graph.roles.setdefault(role, existing)
            return existing

        node = state.graph.add(
            GraphNode(
                ResourceKind.ORGANIZATION,
                create_organization(organization),
                display=organization.name or organization.id or None
            ),
            role=role
        )
        if organization.id:
            state.participants[organization.id] = node
        return node

    def _resolve(self, participant_id: Optional[str], state: _BuildState, label: str) -> Optional[Reference]:
        """Reference to a declared participant, or None when no id is given."""
        if not participant_id:
            return None
        node = state.participants.get(participant_id)
        if node is None:
            raise ReferenceResolutionError(
                f"{label} '{participant_id}' does not match any participant in the document",
                reference_id=participant_id
            )
        return create_reference(node)

    def _add_clinical(self, state: _BuildState, kind: ResourceKind, resource, topic: ClinicalTopic, display) -> GraphNode:
        return state.graph.add(GraphNode(kind, resource, topic=topic, display=display or None))

    # ========================================================================
    # DOCUMENT-SPECIFIC RESOURCES
    # ========================================================================

    def _build_referral(self, record: ReferralRecord, state: _BuildState) -> None:
        receiving_org = self._add_organization(
            record.referred_to_organization, state, role="receiving-organization"
        )
        receiving_practitioner = self._add_practitioner(
            record.referred_to_practitioner, state, role="receiving-practitioner"
        )
        performers = [
            create_reference(node)
            for node in (receiving_org, receiving_practitioner)
            if node is not None
        ]

        for service in record.requested_services:
            resource = create_service_request(
                service,
                state.subject,
                priority=record.urgency,
                authored_on=record.created_at,
                reason=record.referral_reason,
                requester=state.reference("author"),
                performers=performers
            )
            self._add_clinical(state, ResourceKind.SERVICE_REQUEST, resource, ClinicalTopic.SERVICE_REQUEST, service.label)

        self._add_conditions(record, state, ClinicalTopic.PROBLEM)

    def _build_discharge_summary(self, record: DischargeSummaryRecord, state: _BuildState) -> None:
        attending = self._add_practitioner(record.attending_physician, state, role="attending")
        participants = [create_reference(attending)] if attending is not None else None

        encounter_node = state.graph.add(
            GraphNode(
                ResourceKind.ENCOUNTER,
                create_encounter(
                    "IMP",
                    state.subject,
                    start=record.admission_date,
                    end=record.discharge_date,
                    service_provider=state.reference("custodian"),
                    participants=participants,
                    discharge_disposition=create_codeable_concept(record.discharge_destination)
                ),
                display=f"入院 {record.admission_date.isoformat()} - {record.discharge_date.isoformat()}"
            ),
            role="encounter"
        )
        state.encounter = create_reference(encounter_node)
        recorder = state.reference("attending") or state.reference("author")

        diagnoses = [record.principal_diagnosis, *record.secondary_diagnoses]
        for diagnosis in diagnoses:
            if diagnosis is None or diagnosis.is_empty:
                continue
            resource = create_diagnosis(diagnosis, state.subject, encounter=state.encounter, recorder=recorder)
            self._add_clinical(state, ResourceKind.CONDITION, resource, ClinicalTopic.DIAGNOSIS, diagnosis.label)

        for procedure in record.procedures:
            performer = self._resolve(procedure.performer_id, state, "Procedure performer")
            resource = create_procedure(procedure, state.subject, encounter=state.encounter, performer=performer)
            self._add_clinical(state, ResourceKind.PROCEDURE, resource, ClinicalTopic.PROCEDURE, procedure.code.label)

        self._add_conditions(record, state, ClinicalTopic.PROBLEM)

    def _build_checkup(self, record: CheckupRecord, state: _BuildState) -> None:
        examiner = self._add_practitioner(record.examining_physician, state, role="examiner")
        participants = [create_reference(examiner)] if examiner is not None else None

        encounter_node = state.graph.add(
            GraphNode(
                ResourceKind.ENCOUNTER,
                create_encounter(
                    "AMB",
                    state.subject,
                    start=record.checkup_date,
                    service_provider=state.reference("custodian"),
                    participants=participants
                ),
                display=f"健診 {record.checkup_date.isoformat()}"
            ),
            role="encounter"
        )
        state.encounter = create_reference(encounter_node)
        recorder = state.reference("examiner") or state.reference("author")

        for risk in record.risk_factors:
            if risk.is_empty:
                continue
            resource = create_condition(
                ConditionInput(code=risk), state.subject, encounter=state.encounter, recorder=recorder
            )
            self._add_clinical(state, ResourceKind.CONDITION, resource, ClinicalTopic.PROBLEM, risk.label)

        if record.overall_assessment is not None and not record.overall_assessment.is_empty:
            resource = create_assessment_observation(
                record.overall_assessment,
                record.checkup_type,
                state.subject,
                record.checkup_date,
                encounter=state.encounter,
                performer=recorder
            )
            self._add_clinical(
                state, ResourceKind.OBSERVATION, resource, ClinicalTopic.ASSESSMENT,
                record.overall_assessment.label
            )

        self._add_conditions(record, state, ClinicalTopic.PROBLEM)

    # ========================================================================
    # SUB-RECORDS SHARED BY EVERY DOCUMENT
    # ========================================================================

    def _add_conditions(self, record, state: _BuildState, topic: ClinicalTopic) -> None:
        for condition in record.conditions:
            recorder = self._resolve(condition.recorder_id, state, "Condition recorder")
            resource = create_condition(condition, state.subject, encounter=state.encounter, recorder=recorder)
            self._add_clinical(state, ResourceKind.CONDITION, resource, topic, condition.code.label)

    def _add_shared_sub_records(self, record, state: _BuildState) -> None:
        default_date = getattr(record, "checkup_date", None)

        for observation in record.observations:
            performer = self._resolve(observation.performer_id, state, "Observation performer")
            topic = OBSERVATION_CATEGORY_TOPICS[observation.category.strip().lower()]
            resource = create_observation(
                observation,
                state.subject,
                encounter=state.encounter,
                performer=performer,
                default_date=default_date
            )
            self._add_clinical(state, ResourceKind.OBSERVATION, resource, topic, observation.code.label)

        for medication in record.medications:
            requester = self._resolve(medication.requester_id, state, "Medication requester")
            resource = create_medication_request(
                medication, state.subject, encounter=state.encounter, requester=requester
            )
            self._add_clinical(
                state, ResourceKind.MEDICATION_REQUEST, resource, ClinicalTopic.MEDICATION,
                medication.medication.label
            )

        for allergy in record.allergies:
            recorder = self._resolve(allergy.recorder_id, state, "Allergy recorder")
            resource = create_allergy_intolerance(
                allergy, state.subject, encounter=state.encounter, recorder=recorder
            )
            self._add_clinical(
                state, ResourceKind.ALLERGY_INTOLERANCE, resource, ClinicalTopic.ALLERGY,
                allergy.substance.label
            )


def build_resource_graph(record) -> ResourceGraph:
    """Convenience function to build the resource graph of a record."""
    return ResourceGraphBuilder().build(record)
