# ============================================================================
# FILE: tests/unit/test_assembler.py
# ============================================================================
"""
Unit tests for document assembly (Composition + Bundle).
"""

from datetime import datetime, timezone

import pytest

from clins_engine.constants import BUNDLE_PROFILES, COMPOSITION_PROFILES, SECTION_PLANS, ClinicalTopic, DocumentType
from clins_engine.constants import code_systems as cs
from clins_engine.fhir_utils import DocumentAssembler, ResourceGraphBuilder
from clins_engine.fhir_utils.observation import create_assessment_observation
from clins_engine.models import CodedConcept, GraphNode, ResourceKind, parse_document_record
from clins_engine.utils.exceptions import DocumentAssemblyError


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _assemble(payload, include_narrative=True):
    record = parse_document_record(payload)
    graph = ResourceGraphBuilder().build(record)
    bundle = DocumentAssembler(include_narrative=include_narrative).assemble(record, graph, now=NOW)
    return record, graph, bundle


def _section_codes(composition):
    return [section.code.coding[0].code for section in composition.section]


def test_bundle_envelope(referral_payload):
    """Test the Bundle type, profile, identifier and entry count"""
    record, graph, bundle = _assemble(referral_payload)

    assert bundle.type == "document"
    assert bundle.id
    assert bundle.timestamp is not None
    assert bundle.meta.profile == [BUNDLE_PROFILES[DocumentType.REFERRAL]]
    assert bundle.identifier.system == cs.DOCUMENT_ID
    assert bundle.identifier.value == "REF-2024-0001"
    assert len(bundle.entry) == len(graph) + 1


def test_composition_is_first_and_only(discharge_payload):
    """Test that the Composition is entry 0 and appears once"""
    _, _, bundle = _assemble(discharge_payload)
    kinds = [entry.resource.__class__.__name__ for entry in bundle.entry]

    assert kinds[0] == "Composition"
    assert kinds.count("Composition") == 1


def test_composition_header(discharge_payload):
    """Test Composition status, type, subject, author and custodian"""
    _, graph, bundle = _assemble(discharge_payload)
    composition = bundle.entry[0].resource

    assert composition.meta.profile == [COMPOSITION_PROFILES[DocumentType.DISCHARGE_SUMMARY]]
    assert composition.status == "final"
    assert composition.type.coding[0].code == "18842-5"
    assert composition.subject.reference == graph.role("patient").full_url
    assert composition.encounter.reference == graph.role("encounter").full_url
    assert [a.reference for a in composition.author] == [
        graph.role("author").full_url,
        graph.role("custodian").full_url,
    ]
    assert composition.custodian.reference == graph.role("custodian").full_url
    assert composition.extension[0].valueString == "1.0"


def test_draft_status_maps_to_preliminary(referral_payload):
    """Test the document status to Composition status mapping"""
    referral_payload["status"] = "draft"
    _, _, bundle = _assemble(referral_payload)

    assert bundle.entry[0].resource.status == "preliminary"


def test_referral_sections(referral_payload):
    """Test that only populated referral sections are emitted, in plan order"""
    _, _, bundle = _assemble(referral_payload)

    assert _section_codes(bundle.entry[0].resource) == ["42349-1", "10164-2", "62387-6"]


def test_discharge_sections(discharge_payload):
    """Test the discharge summary section order"""
    _, _, bundle = _assemble(discharge_payload)

    assert _section_codes(bundle.entry[0].resource) == [
        "46241-6",
        "8648-8",
        "11535-2",
        "47519-4",
        "48765-2",
        "8716-3",
        "10183-2",
        "8653-8",
        "18776-5",
    ]


def test_section_entries_resolve(checkup_payload):
    """Test that every section entry points at a bundle entry"""
    _, graph, bundle = _assemble(checkup_payload)
    full_urls = {entry.fullUrl for entry in bundle.entry}
    listed = [
        reference.reference
        for section in bundle.entry[0].resource.section
        for reference in section.entry or []
    ]

    assert listed
    assert set(listed) <= full_urls
    assert len(listed) == len(set(listed))
    assert len(listed) == len(list(graph.clinical_nodes()))


def test_narrative_sections(referral_payload):
    """Test that narrative fields render as escaped section text"""
    referral_payload["clinicalNotes"] = "腹痛 & 嘔気"
    _, _, bundle = _assemble(referral_payload)
    section = bundle.entry[0].resource.section[1]

    assert "腹痛 &amp; 嘔気" in section.text.div
    assert section.entry is None


def test_generated_list_narrative(referral_payload):
    """Test list narrative for entry-only sections and its opt-out"""
    _, _, bundle = _assemble(referral_payload)
    assert "<li>AST</li>" in bundle.entry[0].resource.section[2].text.div

    _, _, bundle = _assemble(referral_payload, include_narrative=False)
    assert bundle.entry[0].resource.section[2].text is None


def test_orphan_resource_rejected(referral_payload):
    """Test that a resource no section lists aborts assembly"""
    record = parse_document_record(referral_payload)
    graph = ResourceGraphBuilder().build(record)
    subject = graph.of_kind(ResourceKind.SERVICE_REQUEST)[0].resource.subject
    assessment = create_assessment_observation(CodedConcept(text="異常なし"), None, subject, record.created_at.date())
    graph.add(GraphNode(ResourceKind.OBSERVATION, assessment, topic=ClinicalTopic.ASSESSMENT))

    with pytest.raises(DocumentAssemblyError):
        DocumentAssembler().assemble(record, graph, now=NOW)


def test_every_topic_has_a_section():
    """Test that each document kind places every topic it can produce"""
    produced = {
        DocumentType.REFERRAL: {
            ClinicalTopic.SERVICE_REQUEST, ClinicalTopic.PROBLEM, ClinicalTopic.MEDICATION,
            ClinicalTopic.ALLERGY, ClinicalTopic.VITAL_SIGN, ClinicalTopic.LAB_RESULT,
            ClinicalTopic.EXAM_FINDING, ClinicalTopic.IMAGING_RESULT,
        },
        DocumentType.DISCHARGE_SUMMARY: {
            ClinicalTopic.DIAGNOSIS, ClinicalTopic.PROCEDURE, ClinicalTopic.PROBLEM,
            ClinicalTopic.MEDICATION, ClinicalTopic.ALLERGY, ClinicalTopic.VITAL_SIGN,
            ClinicalTopic.LAB_RESULT, ClinicalTopic.EXAM_FINDING, ClinicalTopic.IMAGING_RESULT,
        },
        DocumentType.CHECKUP: {
            ClinicalTopic.ASSESSMENT, ClinicalTopic.PROBLEM, ClinicalTopic.MEDICATION,
            ClinicalTopic.ALLERGY, ClinicalTopic.VITAL_SIGN, ClinicalTopic.LAB_RESULT,
            ClinicalTopic.EXAM_FINDING, ClinicalTopic.IMAGING_RESULT,
        },
    }
    for kind, topics in produced.items():
        planned = set().union(*(section.topics for section in SECTION_PLANS[kind]))
        assert topics <= planned, kind
