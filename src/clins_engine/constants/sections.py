# ============================================================================
# src/clins_engine/constants/sections.py
# ============================================================================
"""
Composition Section Plans
- Clinical topics a built resource can belong to
- Ordered, LOINC-coded section definitions per document kind

A section collects the resources whose topic it lists and, optionally,
renders one narrative field of the input record as its text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from .document_types import DocumentType


class ClinicalTopic(str, Enum):
    """Clinical meaning of a resource, used to route it into a section."""
    PROBLEM = "problem"
    DIAGNOSIS = "diagnosis"
    MEDICATION = "medication"
    ALLERGY = "allergy"
    VITAL_SIGN = "vital-sign"
    LAB_RESULT = "lab-result"
    EXAM_FINDING = "exam-finding"
    IMAGING_RESULT = "imaging-result"
    ASSESSMENT = "assessment"
    PROCEDURE = "procedure"
    SERVICE_REQUEST = "service-request"


# Observation.category code -> topic
OBSERVATION_CATEGORY_TOPICS = {
    "vital-signs": ClinicalTopic.VITAL_SIGN,
    "laboratory": ClinicalTopic.LAB_RESULT,
    "exam": ClinicalTopic.EXAM_FINDING,
    "imaging": ClinicalTopic.IMAGING_RESULT,
}


@dataclass(frozen=True)
class SectionDefinition:
    key: str
    code: str
    display: str
    title: str
    topics: FrozenSet[ClinicalTopic] = frozenset()
    narrative_field: Optional[str] = None


def _section(key, code, display, title, topics=(), narrative_field=None):
    return SectionDefinition(
        key=key,
        code=code,
        display=display,
        title=title,
        topics=frozenset(topics),
        narrative_field=narrative_field,
    )


_MEDICATIONS = _section(
    "current-medications", "10160-0", "History of Medication use Narrative",
    "服薬情報 (Current medications)", [ClinicalTopic.MEDICATION],
)
_ALLERGIES = _section(
    "allergies", "48765-2", "Allergies and adverse reactions Document",
    "アレルギー・不耐性反応 (Allergies)", [ClinicalTopic.ALLERGY],
)
_PROBLEMS = _section(
    "problem-list", "11450-4", "Problem list - Reported",
    "問題リスト (Problem list)", [ClinicalTopic.PROBLEM, ClinicalTopic.DIAGNOSIS],
)
_VITAL_SIGNS = _section(
    "vital-signs", "8716-3", "Vital signs",
    "バイタルサイン (Vital signs)", [ClinicalTopic.VITAL_SIGN],
)


SECTION_PLANS = {
    DocumentType.REFERRAL: (
        _section(
            "referral-reason", "42349-1", "Reason for referral (narrative)",
            "紹介理由 (Referral reason)", narrative_field="referral_reason",
        ),
        _section(
            "present-illness", "10164-2", "History of Present illness Narrative",
            "現病歴 (Clinical notes)", narrative_field="clinical_notes",
        ),
        _section(
            "relevant-history", "11348-0", "History of Past illness Narrative",
            "既往歴 (Relevant history)", narrative_field="relevant_history",
        ),
        _MEDICATIONS,
        _ALLERGIES,
        _PROBLEMS,
        _VITAL_SIGNS,
        _section(
            "lab-results", "30954-2", "Relevant diagnostic tests/laboratory data Narrative",
            "検査結果 (Lab results)",
            [ClinicalTopic.LAB_RESULT, ClinicalTopic.EXAM_FINDING, ClinicalTopic.IMAGING_RESULT],
        ),
        _section(
            "requested-services", "62387-6", "Interventions Provided",
            "依頼内容 (Requested services)", [ClinicalTopic.SERVICE_REQUEST],
        ),
    ),
    DocumentType.DISCHARGE_SUMMARY: (
        _section(
            "admission-reason", "46241-6", "Hospital admission diagnosis Narrative",
            "入院理由 (Admission reason)", narrative_field="admission_reason",
        ),
        _section(
            "hospital-course", "8648-8", "Hospital course Narrative",
            "入院中経過 (Hospital course)", narrative_field="hospital_course",
        ),
        _section(
            "discharge-diagnosis", "11535-2", "Hospital discharge Dx Narrative",
            "退院時診断 (Discharge diagnosis)",
            [ClinicalTopic.DIAGNOSIS, ClinicalTopic.PROBLEM],
        ),
        _section(
            "procedures", "47519-4", "History of Procedures Document",
            "入院中処置 (Procedures)", [ClinicalTopic.PROCEDURE],
        ),
        _ALLERGIES,
        _VITAL_SIGNS,
        _section(
            "lab-results", "30954-2", "Relevant diagnostic tests/laboratory data Narrative",
            "検査結果 (Lab results)",
            [ClinicalTopic.LAB_RESULT, ClinicalTopic.EXAM_FINDING, ClinicalTopic.IMAGING_RESULT],
        ),
        _section(
            "discharge-medications", "10183-2", "Hospital discharge medications Narrative",
            "退院時処方 (Discharge medications)", [ClinicalTopic.MEDICATION],
        ),
        _section(
            "discharge-instructions", "8653-8", "Hospital Discharge instructions",
            "退院時指導 (Discharge instructions)", narrative_field="discharge_instructions",
        ),
        _section(
            "follow-up", "18776-5", "Plan of care note",
            "退院後方針 (Follow-up)", narrative_field="follow_up_instructions",
        ),
    ),
    DocumentType.CHECKUP: (
        _VITAL_SIGNS,
        _section(
            "physical-exam", "29545-1", "Physical findings Narrative",
            "身体所見 (Physical exam)", [ClinicalTopic.EXAM_FINDING],
        ),
        _section(
            "lab-results", "30954-2", "Relevant diagnostic tests/laboratory data Narrative",
            "検査結果 (Lab results)", [ClinicalTopic.LAB_RESULT],
        ),
        _section(
            "imaging", "18748-4", "Diagnostic imaging study",
            "画像検査 (Imaging)", [ClinicalTopic.IMAGING_RESULT],
        ),
        _PROBLEMS,
        _MEDICATIONS,
        _ALLERGIES,
        _section(
            "assessment", "51847-2", "Evaluation + Plan note",
            "総合判定 (Assessment)", [ClinicalTopic.ASSESSMENT],
        ),
        _section(
            "recommendations", "18776-5", "Plan of care note",
            "指導事項 (Recommendations)", narrative_field="recommendations",
        ),
    ),
}
