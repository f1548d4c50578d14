# ============================================================================
# src/clins_engine/constants/vital_signs.py
# ============================================================================
"""
Vital Sign Plausibility Ranges
- Keyed by LOINC code
- Accepted units per vital sign
"""

VITAL_SIGN_RANGES = {
    "8480-6": {"name": "収縮期血圧", "units": ("mm[Hg]", "mmHg"), "low": 90, "high": 180},
    "8462-4": {"name": "拡張期血圧", "units": ("mm[Hg]", "mmHg"), "low": 60, "high": 110},
    "8867-4": {"name": "心拍数", "units": ("/min", "bpm"), "low": 50, "high": 120},
    "8310-5": {"name": "体温", "units": ("Cel", "C", "℃"), "low": 35.0, "high": 42.0},
    "8302-2": {"name": "身長", "units": ("cm",), "low": 100, "high": 250},
    "29463-7": {"name": "体重", "units": ("kg",), "low": 20, "high": 200},
    "39156-5": {"name": "BMI", "units": ("kg/m2",), "low": 15, "high": 40},
}
