# ============================================================================
# src/clins_engine/__init__.py
# ============================================================================
"""
JP-CLINS document engine.

Converts referral, discharge summary and health checkup records into
JP-CLINS compliant FHIR R4B document bundles.
"""

__version__ = "0.1.0"
