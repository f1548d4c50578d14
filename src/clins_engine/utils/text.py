# ============================================================================
# src/clins_engine/utils/text.py
# ============================================================================
"""
Japanese text helpers shared by validators and builders.
"""

import re
import unicodedata
from typing import Optional

# Hiragana, katakana and CJK unified ideographs
_JAPANESE_SCRIPT = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")
_KANA_ONLY = re.compile(r"^[\u3040-\u309F\u30A0-\u30FF\s\u3000]+$")
_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def contains_japanese(text: Optional[str]) -> bool:
    """True when the text contains hiragana, katakana or kanji."""
    if not text:
        return False
    return _JAPANESE_SCRIPT.search(text) is not None


def is_kana(text: Optional[str]) -> bool:
    """True when the text is made only of kana and spaces."""
    if not text:
        return False
    return _KANA_ONLY.match(text) is not None


def normalize_width(text: str) -> str:
    """
    Fold full-width digits, letters and punctuation to their ASCII forms.

    NFKC also expands era ligatures such as '㍻' into '平成'.
    """
    return unicodedata.normalize("NFKC", text)


def strip_separators(value: Optional[str]) -> str:
    """Remove everything but ASCII letters and digits after width folding."""
    if not value:
        return ""
    return _NON_ALNUM.sub("", normalize_width(value))


def format_postal_code(value: str) -> str:
    """Render a 7-digit postal code as '123-4567'."""
    digits = strip_separators(value)
    if len(digits) != 7:
        return value
    return f"{digits[:3]}-{digits[3:]}"


def format_phone_number(value: str) -> str:
    """Render a phone number in domestic form, replacing a +81 prefix with 0."""
    text = normalize_width(value).strip()
    digits = strip_separators(text)
    if digits.startswith("81"):
        digits = "0" + digits[2:]
    return digits
