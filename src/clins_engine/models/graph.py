# ============================================================================
# src/clins_engine/models/graph.py
# ============================================================================
"""
Resource Graph

The builder's output: every resource of one document, in construction
order, each tagged with its kind and (for clinical resources) the topic
that decides which Composition section lists it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from fhir.resources.R4B.allergyintolerance import AllergyIntolerance
from fhir.resources.R4B.condition import Condition
from fhir.resources.R4B.encounter import Encounter
from fhir.resources.R4B.medicationrequest import MedicationRequest
from fhir.resources.R4B.observation import Observation
from fhir.resources.R4B.organization import Organization
from fhir.resources.R4B.patient import Patient
from fhir.resources.R4B.practitioner import Practitioner
from fhir.resources.R4B.procedure import Procedure
from fhir.resources.R4B.servicerequest import ServiceRequest

from ..constants.sections import ClinicalTopic


class ResourceKind(str, Enum):
    """Closed set of resource kinds a document graph may contain."""
    PATIENT = "Patient"
    PRACTITIONER = "Practitioner"
    ORGANIZATION = "Organization"
    ENCOUNTER = "Encounter"
    CONDITION = "Condition"
    OBSERVATION = "Observation"
    MEDICATION_REQUEST = "MedicationRequest"
    ALLERGY_INTOLERANCE = "AllergyIntolerance"
    PROCEDURE = "Procedure"
    SERVICE_REQUEST = "ServiceRequest"


RESOURCE_CLASSES = {
    ResourceKind.PATIENT: Patient,
    ResourceKind.PRACTITIONER: Practitioner,
    ResourceKind.ORGANIZATION: Organization,
    ResourceKind.ENCOUNTER: Encounter,
    ResourceKind.CONDITION: Condition,
    ResourceKind.OBSERVATION: Observation,
    ResourceKind.MEDICATION_REQUEST: MedicationRequest,
    ResourceKind.ALLERGY_INTOLERANCE: AllergyIntolerance,
    ResourceKind.PROCEDURE: Procedure,
    ResourceKind.SERVICE_REQUEST: ServiceRequest,
}

# Participants and encounters are reached through Composition/resource
# references rather than section entries
PARTICIPANT_KINDS = frozenset({
    ResourceKind.PATIENT,
    ResourceKind.PRACTITIONER,
    ResourceKind.ORGANIZATION,
    ResourceKind.ENCOUNTER,
})


@dataclass(frozen=True)
class GraphNode:
    kind: ResourceKind
    resource: object
    topic: Optional[ClinicalTopic] = None
    display: Optional[str] = None

    def __post_init__(self):
        expected = RESOURCE_CLASSES[self.kind]
        if not isinstance(self.resource, expected):
            raise TypeError(
                f"{self.kind.value} node holds a {type(self.resource).__name__}"
            )
        if self.kind in PARTICIPANT_KINDS and self.topic is not None:
            raise ValueError(f"{self.kind.value} nodes carry no clinical topic")
        if self.kind not in PARTICIPANT_KINDS and self.topic is None:
            raise ValueError(f"{self.kind.value} nodes need a clinical topic")

    @property
    def id(self) -> str:
        return self.resource.id

    @property
    def full_url(self) -> str:
        return f"urn:uuid:{self.resource.id}"


@dataclass
class ResourceGraph:
    """
    All resources built for one document.

    Participant nodes are addressable by role so the assembler can wire
    Composition subject, author, custodian and encounter.
    """
    nodes: List[GraphNode] = field(default_factory=list)
    roles: Dict[str, GraphNode] = field(default_factory=dict)

    def add(self, node: GraphNode, role: Optional[str] = None) -> GraphNode:
        if any(existing.id == node.id for existing in self.nodes):
            raise ValueError(f"Resource id {node.id} already present in graph")
        self.nodes.append(node)
        if role:
            self.roles[role] = node
        return node

    def role(self, name: str) -> Optional[GraphNode]:
        return self.roles.get(name)

    def of_kind(self, kind: ResourceKind) -> List[GraphNode]:
        return [n for n in self.nodes if n.kind == kind]

    def clinical_nodes(self) -> Iterator[GraphNode]:
        return (n for n in self.nodes if n.kind not in PARTICIPANT_KINDS)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)
