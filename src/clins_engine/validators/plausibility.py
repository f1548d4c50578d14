# ============================================================================
# src/clins_engine/validators/plausibility.py
# ============================================================================
"""
Vital Sign Plausibility Checks

Flags vital signs outside the ranges expected for the Japanese adult
population, and vital signs recorded in an unexpected unit.

Example:
- Systolic BP 250 mm[Hg] -> flagged
- Body temperature 36.5 Cel -> passes
"""

from typing import Optional, Tuple
import logging

from ..constants.vital_signs import VITAL_SIGN_RANGES


logger = logging.getLogger(__name__)


class PlausibilityChecker:
    """
    Check vital sign values against plausible ranges keyed by LOINC code.

    Unknown codes are assumed plausible.
    """

    def __init__(self):
        self.ranges = VITAL_SIGN_RANGES

    def check(
        self,
        loinc_code: str,
        value: float,
        unit: Optional[str]
    ) -> Tuple[bool, Optional[str]]:
        """
        Check if a vital sign value is plausible.

        Args:
            loinc_code: LOINC code of the vital sign (e.g. "8480-6")
            value: Numeric value
            unit: Unit of measurement

        Returns:
            (is_plausible, reason_if_not)
        """
        limits = self.ranges.get(loinc_code)
        if limits is None:
            return True, None

        if unit not in limits["units"]:
            reason = f"{limits['name']}: unexpected unit '{unit}', expected {' or '.join(limits['units'])}"
            logger.debug(reason)
            return False, reason

        if value < limits["low"] or value > limits["high"]:
            reason = (
                f"{limits['name']} {value} {unit} outside plausible range "
                f"{limits['low']}-{limits['high']}"
            )
            logger.debug(reason)
            return False, reason

        return True, None
