# ============================================================================
# src/clins_engine/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .fhir_config import FHIRSettings, fhir_settings
from .validation_config import ValidationSettings, validation_settings
from .logging_config import LoggingSettings, logging_settings
