# ============================================================================
# src/clins_engine/constants/code_systems.py
# ============================================================================
"""
Code Systems and Naming Systems
- Terminology URIs used in JP-CLINS documents
- Allow-listed coding systems per clinical role
- Identifier naming systems for patients, practitioners, facilities
"""

# International terminologies
LOINC = "http://loinc.org"
SNOMED = "http://snomed.info/sct"
ICD10 = "http://hl7.org/fhir/sid/icd-10"
UCUM = "http://unitsofmeasure.org"

# Japanese terminologies
ICD10_JP = "http://jpfhir.jp/fhir/core/CodeSystem/icd-10"
ICD10_CM_JP = "http://jpfhir.jp/fhir/core/CodeSystem/icd-10-cm-jp"
MEDIS_DISEASE = "http://medis.or.jp/CodeSystem/master-disease-keyNumber"
JAPAN_PROCEDURE = "http://jpfhir.jp/fhir/core/CodeSystem/japan-procedure"
YJ_CODE = "urn:oid:1.2.392.100495.20.2.74"
HOT_CODE = "urn:oid:1.2.392.100495.20.2.73"
YAKUZAI_CODE = "http://jpfhir.jp/fhir/core/CodeSystem/yakuzai-code"
HOT_CODE_URI = "http://jpfhir.jp/fhir/core/CodeSystem/hot-code"
JLAC10 = "urn:oid:1.2.392.200119.4.504"
JLAC10_URI = "http://jpfhir.jp/fhir/core/CodeSystem/JLAC10"
MEDIS_DC = "http://medis.or.jp/CodeSystem/MEDIS-DC"
HEALTH_ASSESSMENT_JP = "http://jpfhir.jp/fhir/core/CodeSystem/health-assessment-jp"
DISCHARGE_DISPOSITION_JP = "http://jpfhir.jp/fhir/core/CodeSystem/JP_DischargeDisposition"

# HL7 terminology
OBSERVATION_CATEGORY = "http://terminology.hl7.org/CodeSystem/observation-category"
OBSERVATION_INTERPRETATION = "http://terminology.hl7.org/CodeSystem/v3-ObservationInterpretation"
CONDITION_CLINICAL = "http://terminology.hl7.org/CodeSystem/condition-clinical"
CONDITION_VERIFICATION = "http://terminology.hl7.org/CodeSystem/condition-ver-status"
CONDITION_CATEGORY = "http://terminology.hl7.org/CodeSystem/condition-category"
ALLERGY_CLINICAL = "http://terminology.hl7.org/CodeSystem/allergyintolerance-clinical"
ALLERGY_VERIFICATION = "http://terminology.hl7.org/CodeSystem/allergyintolerance-verification"
ACT_CODE = "http://terminology.hl7.org/CodeSystem/v3-ActCode"
DATA_ABSENT_REASON = "http://terminology.hl7.org/CodeSystem/data-absent-reason"
ROUTE_OF_ADMINISTRATION = "http://jpfhir.jp/fhir/core/CodeSystem/JP_MedicationRouteHL7V2toJAMI"
ISO21090_EN_REPRESENTATION = "http://hl7.org/fhir/StructureDefinition/iso21090-EN-representation"

# Identifier naming systems
PATIENT_NUMBER = "http://jpfhir.jp/fhir/core/NamingSystem/patient-number"
INSURANCE_CARD_NUMBER = "http://jpfhir.jp/fhir/core/NamingSystem/insurance-card"
MEDICAL_LICENSE_NUMBER = "http://jpfhir.jp/fhir/core/NamingSystem/medical-license"
FACILITY_NUMBER = "http://jpfhir.jp/fhir/core/NamingSystem/facility-number"
DOCUMENT_ID = "http://jpfhir.jp/fhir/core/NamingSystem/document-id"

# Allow-listed coding systems per clinical role
DIAGNOSIS_SYSTEMS = frozenset({ICD10_CM_JP, ICD10_JP, ICD10, MEDIS_DISEASE, SNOMED})
MEDICATION_SYSTEMS = frozenset({YJ_CODE, HOT_CODE, YAKUZAI_CODE, HOT_CODE_URI})
LABORATORY_SYSTEMS = frozenset({JLAC10, JLAC10_URI, LOINC})
SERVICE_SYSTEMS = frozenset({JAPAN_PROCEDURE, JLAC10, JLAC10_URI, MEDIS_DC, LOINC, SNOMED})
ASSESSMENT_SYSTEMS = frozenset({HEALTH_ASSESSMENT_JP, LOINC, SNOMED})

# Systems whose codes follow a fixed structure, keyed to the
# format validator that checks them
STRUCTURED_CODE_SYSTEMS = {
    HOT_CODE: "hot",
    HOT_CODE_URI: "hot",
    YJ_CODE: "yj",
    YAKUZAI_CODE: "yj",
    JLAC10: "jlac10",
    JLAC10_URI: "jlac10",
    ICD10_CM_JP: "icd10",
    ICD10_JP: "icd10",
    ICD10: "icd10",
}
