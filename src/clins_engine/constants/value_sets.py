# ============================================================================
# src/clins_engine/constants/value_sets.py
# ============================================================================
"""
Categorical Value Sets
- Document-level enumerations (status, urgency, discharge condition, certification)
- FHIR value sets for sub-record status/category fields
- Medication practice tables (dosing frequency, routes, controlled substances)

All membership checks are case-insensitive; values are stored lower-case.
"""

DOCUMENT_STATUSES = ("draft", "final", "amended", "cancelled", "replaced")

# Document status -> Composition.status
COMPOSITION_STATUS_MAP = {
    "draft": "preliminary",
    "final": "final",
    "amended": "amended",
    "cancelled": "entered-in-error",
    "replaced": "entered-in-error",
}

URGENCY_LEVELS = ("routine", "urgent", "asap", "stat")

DISCHARGE_CONDITIONS = ("improved", "stable", "worsened", "deceased", "transferred")

CERTIFICATION_STATUSES = ("fit for work", "restricted", "unfit", "requires evaluation")

GENDERS = ("male", "female", "other", "unknown")

CONDITION_CLINICAL_STATUSES = (
    "active", "recurrence", "relapse", "inactive", "remission", "resolved",
)
CONDITION_VERIFICATION_STATUSES = (
    "unconfirmed", "provisional", "differential", "confirmed", "refuted", "entered-in-error",
)

OBSERVATION_STATUSES = (
    "registered", "preliminary", "final", "amended", "corrected", "cancelled", "entered-in-error",
)
OBSERVATION_CATEGORIES = ("vital-signs", "laboratory", "exam", "imaging")

INTERPRETATION_FLAGS = {
    "H": "H",
    "HIGH": "H",
    "L": "L",
    "LOW": "L",
    "N": "N",
    "NORMAL": "N",
    "A": "A",
    "ABNORMAL": "A",
    "HH": "HH",
    "CRITICAL HIGH": "HH",
    "LL": "LL",
    "CRITICAL LOW": "LL",
}

MEDICATION_STATUSES = (
    "active", "on-hold", "cancelled", "completed", "entered-in-error", "stopped", "draft",
)
MEDICATION_INTENTS = ("proposal", "plan", "order", "original-order", "instance-order")

ALLERGY_CLINICAL_STATUSES = ("active", "inactive", "resolved")
ALLERGY_VERIFICATION_STATUSES = ("unconfirmed", "confirmed", "refuted", "entered-in-error")
ALLERGY_TYPES = ("allergy", "intolerance")
ALLERGY_CATEGORIES = ("food", "medication", "environment", "biologic")
ALLERGY_CRITICALITIES = ("low", "high", "unable-to-assess")
REACTION_SEVERITIES = ("mild", "moderate", "severe")

PROCEDURE_STATUSES = (
    "preparation", "in-progress", "not-done", "on-hold", "stopped", "completed",
    "entered-in-error", "unknown",
)

# Common Japanese and English dosing patterns; a frequency is recognized
# when it contains any of these
DOSING_FREQUENCY_PATTERNS = (
    "朝", "昼", "夕", "寝前", "朝食後", "昼食後", "夕食後", "食前", "食後", "食間",
    "1日1回", "1日2回", "1日3回", "1日4回", "毎朝", "毎夕", "隔日", "頓服",
    "once daily", "twice daily", "three times daily", "four times daily",
    "every morning", "every evening", "every other day", "as needed",
)

ROUTE_CODES = (
    "po", "sl", "iv", "im", "sc", "top", "inh", "pr", "pv", "oph", "oti",
    "経口", "舌下", "静脈内", "筋肉内", "皮下", "外用", "吸入", "直腸", "膣", "点眼", "点耳",
)

CONTROLLED_SUBSTANCES = (
    "morphine", "モルヒネ", "fentanyl", "フェンタニル", "oxycodone", "オキシコドン",
    "methylphenidate", "メチルフェニデート", "tramadol", "トラマドール",
    "codeine", "コデイン", "diazepam", "ジアゼパム", "alprazolam", "アルプラゾラム",
)

# Keywords that classify a checkup type concept
CHECKUP_KIND_KEYWORDS = {
    "occupational": ("occupational", "職業", "雇入"),
    "annual": ("annual", "定期"),
    "executive": ("executive", "人間ドック"),
}
