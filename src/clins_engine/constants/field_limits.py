# ============================================================================
# src/clins_engine/constants/field_limits.py
# ============================================================================
"""
Narrative Length Limits
- Maximum characters per narrative field
- A tighter cap applies when the text contains Japanese script
"""

# field -> (default limit, limit when Japanese script is present)
NARRATIVE_LIMITS = {
    "referral_reason": (1000, 500),
    "clinical_notes": (5000, 2500),
    "relevant_history": (5000, 2500),
    "admission_reason": (1000, 500),
    "hospital_course": (5000, 2500),
    "discharge_instructions": (3000, 1500),
    "follow_up_instructions": (2000, 1000),
    "checkup_purpose": (500, 250),
    "recommendations": (3000, 1500),
    "diagnosis_text": (300, 200),
    "medication_name": (300, 100),
    "substance_name": (200, 100),
    "notes": (1000, 500),
}
