# ============================================================================
# src/clins_engine/config/fhir_config.py
# ============================================================================
"""
FHIR Output Settings
- FHIR and JP-CLINS implementation guide versions
- Serialization options
- Compliance strictness
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from ..constants.profiles import IG_VERSION


class FHIRSettings(BaseSettings):
    FHIR_VERSION: str = Field(
        default="R4B",
        description="FHIR release of the emitted documents"
    )
    CLINS_IG_VERSION: str = Field(
        default=IG_VERSION,
        description="JP-CLINS implementation guide version"
    )
    FHIR_PRETTY_JSON: bool = Field(
        default=False,
        description="Indent serialized bundles"
    )
    FHIR_STRICT_COMPLIANCE: bool = Field(
        default=False,
        description="Treat bundle compliance warnings as errors"
    )
    FHIR_INCLUDE_NARRATIVE: bool = Field(
        default=True,
        description="Generate narrative text for sections that only hold entries"
    )


fhir_settings = FHIRSettings()
