# ============================================================================
# src/clins_engine/config/validation_config.py
# ============================================================================
"""
Business Rule Settings
- Facility code length
- Referral and stay-length thresholds
- Japanese narrative expectation
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class ValidationSettings(BaseSettings):
    FACILITY_CODE_LENGTH: int = Field(
        default=10,
        ge=3, le=16,
        description="Digits in a medical institution code: 2 prefecture digits plus the institution number"
    )
    MIN_REFERRAL_REASON_LENGTH: int = Field(
        default=10,
        ge=0,
        description="Referral reasons shorter than this produce a warning"
    )
    MAX_LENGTH_OF_STAY_DAYS: int = Field(
        default=365,
        ge=1,
        description="Stays longer than this produce a warning"
    )
    REQUIRE_JAPANESE_NARRATIVE: bool = Field(
        default=True,
        description="Warn when no narrative field contains Japanese script"
    )


validation_settings = ValidationSettings()
