# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.

Payload fixtures are transport-shaped (camelCase keys, as received over
HTTP) and pass every business rule against the fixed clock.
"""

from datetime import datetime, timezone

import pytest

from clins_engine.constants import code_systems as cs
from clins_engine.core import DocumentTransformer


FIXED_NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2024-06-01T00:00:00Z"""
    return lambda: FIXED_NOW


@pytest.fixture
def transformer(fixed_clock):
    """Transformer using the fixed clock, non-strict"""
    return DocumentTransformer(clock=fixed_clock, strict=False)


@pytest.fixture
def patient_payload():
    """Patient with kanji and kana names and an era birth date"""
    return {
        "id": "P001",
        "familyName": "山田",
        "givenName": "太郎",
        "familyNameKana": "ヤマダ",
        "givenNameKana": "タロウ",
        "gender": "male",
        "birthDate": "昭和55年4月1日",
        "postalCode": "1000001",
        "address": "東京都千代田区千代田1-1",
        "phone": "03-1234-5678",
        "insuranceNumber": "06123456",
    }


@pytest.fixture
def author_payload():
    """Referring physician"""
    return {
        "id": "DR001",
        "name": "佐藤 花子",
        "nameKana": "サトウ ハナコ",
        "licenseNumber": "123456",
        "department": "内科",
    }


@pytest.fixture
def organization_payload():
    """Authoring hospital; the id is its medical institution code"""
    return {
        "id": "1311234567",
        "name": "東京中央病院",
        "postalCode": "100-0005",
        "phone": "03-3333-4444",
    }


@pytest.fixture
def referral_payload(patient_payload, author_payload, organization_payload):
    """Valid referral with one JLAC10-coded requested service"""
    return {
        "documentType": "referral",
        "id": "REF-2024-0001",
        "status": "final",
        "createdAt": "2024-05-20T09:30:00+09:00",
        "patient": patient_payload,
        "author": author_payload,
        "organization": organization_payload,
        "referredToOrganization": {
            "id": "1319876543",
            "name": "城南大学病院",
        },
        "referralReason": "abdominal pain work-up",
        "urgency": "routine",
        "requestedServices": [
            {"system": cs.JLAC10, "code": "3B035000002327201", "display": "AST"},
        ],
        "clinicalNotes": "2週間前から心窩部痛が持続しています。",
    }


@pytest.fixture
def discharge_payload(patient_payload, author_payload, organization_payload):
    """Valid discharge summary with a procedure, medication, vital sign and allergy"""
    return {
        "documentType": "discharge-summary",
        "id": "DS-2024-0042",
        "status": "final",
        "createdAt": "2024-03-15T10:00:00+09:00",
        "patient": patient_payload,
        "author": author_payload,
        "organization": organization_payload,
        "admissionDate": "2024-03-01",
        "dischargeDate": "2024-03-10",
        "admissionReason": "急性虫垂炎のため緊急入院",
        "principalDiagnosis": {"system": cs.ICD10, "code": "K35.8", "display": "急性虫垂炎"},
        "procedures": [
            {
                "code": {"system": cs.JAPAN_PROCEDURE, "code": "K718-21", "display": "腹腔鏡下虫垂切除術"},
                "performedDate": "2024-03-02",
                "performerId": "DR001",
            },
        ],
        "hospitalCourse": "第2病日に腹腔鏡下虫垂切除術を施行。術後経過良好。",
        "dischargeCondition": "improved",
        "dischargeInstructions": "1週間は激しい運動を控えてください。",
        "followUpInstructions": "退院1週間後に外来受診。",
        "attendingPhysician": {
            "id": "DR002",
            "name": "田中 一郎",
            "licenseNumber": "234567",
            "department": "外科",
        },
        "medications": [
            {
                "medication": {"system": cs.YJ_CODE, "code": "1149019F1560", "display": "ロキソプロフェンナトリウム錠60mg"},
                "dosageText": "1回1錠 1日3回 毎食後",
                "doseValue": 1,
                "doseUnit": "錠",
                "frequency": "1日3回 毎食後",
                "route": "PO",
                "durationDays": 5,
                "requesterId": "DR002",
            },
        ],
        "observations": [
            {
                "code": {"system": cs.LOINC, "code": "8310-5", "display": "Body temperature"},
                "category": "vital-signs",
                "valueQuantity": {"value": 36.8, "unit": "Cel"},
                "effectiveDate": "2024-03-10T09:00:00+09:00",
            },
        ],
        "allergies": [
            {
                "substance": {"text": "ペニシリン"},
                "category": "medication",
                "criticality": "high",
                "reaction": "発疹",
                "reactionSeverity": "moderate",
            },
        ],
    }


@pytest.fixture
def checkup_payload(patient_payload, author_payload, organization_payload):
    """Valid annual checkup examined by the author"""
    return {
        "documentType": "checkup",
        "id": "HC-2024-0100",
        "status": "final",
        "createdAt": "2024-05-10T15:00:00+09:00",
        "patient": patient_payload,
        "author": author_payload,
        "organization": organization_payload,
        "checkupDate": "令和6年5月10日",
        "checkupType": {"text": "定期健康診断 (annual)"},
        "checkupPurpose": "労働安全衛生法に基づく年次定期健康診断",
        "examiningPhysician": dict(author_payload),
        "overallAssessment": {"system": cs.HEALTH_ASSESSMENT_JP, "code": "A", "display": "異常なし"},
        "observations": [
            {
                "code": {"system": cs.LOINC, "code": "8480-6", "display": "Systolic blood pressure"},
                "category": "vital-signs",
                "valueQuantity": {"value": 128, "unit": "mm[Hg]"},
            },
            {
                "code": {"system": cs.JLAC10, "code": "3D046000001906202", "display": "HbA1c"},
                "category": "laboratory",
                "valueQuantity": {"value": 5.6, "unit": "%"},
                "referenceLow": 4.6,
                "referenceHigh": 6.2,
                "interpretation": "N",
            },
            {
                "code": {"text": "胸部聴診"},
                "category": "exam",
                "valueString": "異常なし",
            },
        ],
        "recommendations": "適度な運動を継続してください。",
    }
