# ============================================================================
# src/clins_engine/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .document_types import DocumentType, DOCUMENT_TYPE_CODES, DOCUMENT_TITLES
from .profiles import (
    IG_VERSION,
    BUNDLE_PROFILES,
    COMPOSITION_PROFILES,
    RECOGNIZED_DOCUMENT_PROFILES,
    RESOURCE_PROFILES,
)
from .sections import ClinicalTopic, SectionDefinition, SECTION_PLANS
from .field_limits import NARRATIVE_LIMITS
from .vital_signs import VITAL_SIGN_RANGES
