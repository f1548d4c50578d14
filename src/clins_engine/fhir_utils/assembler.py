# ============================================================================
# src/clins_engine/fhir_utils/assembler.py
# ============================================================================
"""
Document Assembler

Wraps a resource graph into a FHIR document Bundle:
1. Composition (always entry 0) with the section plan of the document kind
2. One entry per graph resource, fullUrl derived from the resource id
3. Bundle metadata: profile, identifier, timestamp

A section is included only when it lists entries or carries narrative.
Every section entry must point at a fullUrl added in the same pass.
"""

from datetime import datetime
from typing import List, Optional
import logging

from fhir.resources.R4B.bundle import Bundle, BundleEntry
from fhir.resources.R4B.composition import Composition, CompositionSection
from fhir.resources.R4B.extension import Extension

from ..config import fhir_settings
from ..constants import code_systems as cs
from ..constants.document_types import DOC_TYPE_CODE_SYSTEM, DOCUMENT_TITLES, DOCUMENT_TYPE_CODES
from ..constants.profiles import BUNDLE_PROFILES, COMPOSITION_PROFILES
from ..constants.sections import SECTION_PLANS, SectionDefinition
from ..constants.value_sets import COMPOSITION_STATUS_MAP
from ..models.graph import ResourceGraph
from ..utils.clock import fhir_instant, utc_now
from ..utils.exceptions import DocumentAssemblyError
from .primitives import (
    create_coded,
    create_identifier,
    create_list_narrative,
    create_meta,
    create_narrative,
    create_reference,
    full_url,
    new_resource_id,
)

logger = logging.getLogger(__name__)

VERSION_NUMBER_EXTENSION = (
    "http://hl7.org/fhir/StructureDefinition/composition-clinicaldocument-versionNumber"
)
SECTION_CODE_SYSTEM = cs.LOINC


class DocumentAssembler:
    """
    Assembles a Composition and Bundle from a resource graph.

    Usage:
        bundle = DocumentAssembler().assemble(record, graph)
    """

    def __init__(self, include_narrative: Optional[bool] = None):
        """
        Args:
            include_narrative: Generate list narrative for sections that
                only hold entries; defaults to FHIR_INCLUDE_NARRATIVE
        """
        if include_narrative is None:
            include_narrative = fhir_settings.FHIR_INCLUDE_NARRATIVE
        self.include_narrative = include_narrative

    def assemble(self, record, graph: ResourceGraph, now: Optional[datetime] = None) -> Bundle:
        """
        Assemble the document Bundle.

        Args:
            record: Document record the graph was built from
            graph: Resources built for the record
            now: Bundle timestamp; defaults to the current time

        Returns:
            FHIR document Bundle, Composition first

        Raises:
            DocumentAssemblyError: a resource has no section, a participant
                role is missing, or a section entry points outside the bundle
        """
        kind = record.kind
        sections = self._build_sections(record, graph)
        composition = self._build_composition(record, graph, sections)

        entries = [BundleEntry(fullUrl=full_url(composition.id), resource=composition)]
        entries.extend(
            BundleEntry(fullUrl=node.full_url, resource=node.resource) for node in graph
        )
        self._check_integrity(entries, sections)

        bundle = Bundle(
            id=new_resource_id(),
            meta=create_meta("Bundle", BUNDLE_PROFILES[kind]),
            identifier=create_identifier(cs.DOCUMENT_ID, record.id),
            type="document",
            timestamp=fhir_instant(now or utc_now()),
            entry=entries
        )

        logger.info(
            f"Assembled {kind.value} bundle {bundle.id}: {len(entries)} entries, "
            f"{len(sections)} sections"
        )
        return bundle

    # ========================================================================
    # COMPOSITION
    # ========================================================================

    def _build_composition(self, record, graph: ResourceGraph, sections: List[CompositionSection]) -> Composition:
        kind = record.kind

        patient = graph.role("patient")
        author = graph.role("author")
        custodian = graph.role("custodian")
        for role, node in (("patient", patient), ("author", author), ("custodian", custodian)):
            if node is None:
                raise DocumentAssemblyError(f"Resource graph has no {role}")

        type_code = DOCUMENT_TYPE_CODES[kind]
        encounter = graph.role("encounter")

        return Composition(
            id=new_resource_id(),
            meta=create_meta("Composition", COMPOSITION_PROFILES[kind]),
            extension=[Extension(url=VERSION_NUMBER_EXTENSION, valueString=record.version)],
            identifier=create_identifier(cs.DOCUMENT_ID, record.id),
            status=COMPOSITION_STATUS_MAP.get(record.status.strip().lower(), "final"),
            type=create_coded(DOC_TYPE_CODE_SYSTEM, type_code["code"], type_code["display"]),
            subject=create_reference(patient),
            encounter=create_reference(encounter) if encounter is not None else None,
            date=fhir_instant(record.last_modified_at or record.created_at),
            author=[create_reference(author), create_reference(custodian)],
            title=DOCUMENT_TITLES[kind],
            custodian=create_reference(custodian),
            section=sections or None
        )

    def _build_sections(self, record, graph: ResourceGraph) -> List[CompositionSection]:
        placed = set()
        narratives = record.narratives()
        sections = []

        for definition in SECTION_PLANS[record.kind]:
            nodes = [
                node for node in graph.clinical_nodes()
                if node.topic in definition.topics and node.id not in placed
            ]
            placed.update(node.id for node in nodes)

            section = self._build_section(definition, nodes, narratives)
            if section is not None:
                sections.append(section)

        orphans = [node for node in graph.clinical_nodes() if node.id not in placed]
        if orphans:
            kinds = ", ".join(f"{node.kind.value} ({node.topic.value})" for node in orphans)
            raise DocumentAssemblyError(
                f"No {record.kind.value} section lists these resources: {kinds}"
            )

        return sections

    def _build_section(self, definition: SectionDefinition, nodes, narratives) -> Optional[CompositionSection]:
        text = narratives.get(definition.narrative_field) if definition.narrative_field else None
        if not nodes and not text:
            return None

        if text:
            narrative = create_narrative(text)
        elif self.include_narrative:
            narrative = create_list_narrative(node.display for node in nodes)
        else:
            narrative = None

        return CompositionSection(
            title=definition.title,
            code=create_coded(SECTION_CODE_SYSTEM, definition.code, definition.display),
            text=narrative,
            entry=[create_reference(node) for node in nodes] or None
        )

    def _check_integrity(self, entries: List[BundleEntry], sections: List[CompositionSection]) -> None:
        full_urls = {entry.fullUrl for entry in entries}
        if len(full_urls) != len(entries):
            raise DocumentAssemblyError("Bundle entries have duplicate fullUrls")

        for section in sections:
            for reference in section.entry or []:
                if reference.reference not in full_urls:
                    raise DocumentAssemblyError(
                        f"Section '{section.title}' points at {reference.reference}, "
                        f"which is not in the bundle"
                    )


def assemble_document(record, graph: ResourceGraph, now: Optional[datetime] = None) -> Bundle:
    """Convenience function to assemble a document bundle."""
    return DocumentAssembler().assemble(record, graph, now)
