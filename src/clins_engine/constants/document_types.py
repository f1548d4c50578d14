# ============================================================================
# src/clins_engine/constants/document_types.py
# ============================================================================
"""
Document Types
- Supported JP-CLINS document kinds
- Composition type codes and document titles per kind
"""

from enum import Enum


class DocumentType(str, Enum):
    """
    Document kinds accepted by the transformer.
    Each kind has its own business rules and section plan.
    """
    REFERRAL = "referral"
    DISCHARGE_SUMMARY = "discharge-summary"
    CHECKUP = "checkup"


DOC_TYPE_CODE_SYSTEM = "http://jpfhir.jp/fhir/Common/CodeSystem/doc-typecodes"

# Composition.type coding per document kind
DOCUMENT_TYPE_CODES = {
    DocumentType.REFERRAL: {
        "code": "57133-1",
        "display": "診療情報提供書",
    },
    DocumentType.DISCHARGE_SUMMARY: {
        "code": "18842-5",
        "display": "退院時サマリー",
    },
    DocumentType.CHECKUP: {
        "code": "53576-5",
        "display": "健康診断結果報告書",
    },
}

DOCUMENT_TITLES = {
    DocumentType.REFERRAL: "診療情報提供書 (eReferral)",
    DocumentType.DISCHARGE_SUMMARY: "退院時サマリー (eDischargeSummary)",
    DocumentType.CHECKUP: "健康診断結果報告書 (eCheckup)",
}
