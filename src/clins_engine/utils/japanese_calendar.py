# ============================================================================
# src/clins_engine/utils/japanese_calendar.py
# ============================================================================
"""
Japanese Era Calendar Conversion

Converts between era-based dates (和暦, e.g. 令和3年4月1日) and Gregorian
dates, in both directions.

Accepted era spellings: full kanji (令和), single kanji (令), romaji
(Reiwa), single letter (R), the era ligature symbols (㋿, ㍻, ...) and the
numeric era digit used in 7-digit receipt-style codes (5 = Reiwa).

Accepted input forms:
    令和3年4月1日    令和元年5月1日    令和3年4月    ㍻31年4月30日
    R3.4.1    R03/04/01    H31-4-30    Reiwa 3/4/1    R030401
    5030401 (era digit + YYMMDD)
    2021/04/01    2021-04-01    2021年4月1日    20210401

Two-component forms (year + month) default the day to the 1st. Invalid
calendar dates are rejected, never clamped.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple, Union

from .exceptions import EraConversionError
from .text import normalize_width


@dataclass(frozen=True)
class Era:
    name: str
    romaji: str
    letter: str
    digit: str
    start: date
    symbol: str

    @property
    def abbreviation(self) -> str:
        return self.name[0]

    @property
    def spellings(self) -> Tuple[str, ...]:
        return (self.name, self.abbreviation, self.romaji.lower(), self.letter.lower(), self.symbol)


# Ordered oldest to newest; each era ends the day before the next starts
ERAS = (
    Era("明治", "Meiji", "M", "1", date(1868, 10, 23), "㍾"),
    Era("大正", "Taisho", "T", "2", date(1912, 7, 30), "㍽"),
    Era("昭和", "Showa", "S", "3", date(1926, 12, 25), "㍼"),
    Era("平成", "Heisei", "H", "4", date(1989, 1, 8), "㍻"),
    Era("令和", "Reiwa", "R", "5", date(2019, 5, 1), "㋿"),
)

_ERA_LOOKUP: Dict[str, Era] = {
    spelling: era for era in ERAS for spelling in era.spellings
}
_ERA_LOOKUP.update({"taishou": ERAS[1], "shouwa": ERAS[2]})
_ERA_BY_DIGIT = {era.digit: era for era in ERAS}

FIRST_YEAR_TOKEN = "元"

_ERA_DATE = re.compile(
    r"^(?P<era>[^\d\s]+?)\s*(?P<year>元|\d{1,2})\s*(?:年|[./\-])\s*(?P<month>\d{1,2})\s*"
    r"(?:月\s*(?:(?P<day>\d{1,2})\s*日?)?|[./\-]\s*(?P<day_sep>\d{1,2})\s*日?)?$"
)
_ERA_COMPACT = re.compile(r"^(?P<era>[^\d\s]+?)\s*(?P<year>\d{2})(?P<month>\d{2})(?P<day>\d{2})$")
_ERA_DIGIT_CODE = re.compile(r"^(?P<era>[1-5])(?P<year>\d{2})(?P<month>\d{2})(?P<day>\d{2})$")
_GREGORIAN = re.compile(
    r"^(?P<year>\d{4})\s*(?:年|[./\-])\s*(?P<month>\d{1,2})\s*"
    r"(?:月\s*(?:(?P<day>\d{1,2})\s*日?)?|[./\-]\s*(?P<day_sep>\d{1,2})\s*日?)?$"
)
_GREGORIAN_COMPACT = re.compile(r"^(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})$")
_ISO_DATETIME = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")


@dataclass(frozen=True)
class EraDate:
    """A date expressed as (era, year within era, month, day)."""
    era: Era
    year: int
    month: int
    day: int

    @property
    def year_label(self) -> str:
        return FIRST_YEAR_TOKEN if self.year == 1 else str(self.year)

    def to_gregorian(self) -> date:
        return era_to_gregorian(self.era, self.year, self.month, self.day)

    def format(self, style: str = "kanji") -> str:
        """
        Render the date.

        Args:
            style: 'kanji' (令和元年5月1日), 'letter' (R1.5.1) or 'romaji' (Reiwa 1/5/1)
        """
        if style == "kanji":
            return f"{self.era.name}{self.year_label}年{self.month}月{self.day}日"
        if style == "letter":
            return f"{self.era.letter}{self.year}.{self.month}.{self.day}"
        if style == "romaji":
            return f"{self.era.romaji} {self.year}/{self.month}/{self.day}"
        raise ValueError(f"Unknown era date style: {style}")

    def __str__(self) -> str:
        return self.format()


def find_era(token: Union[str, Era]) -> Era:
    """
    Resolve an era from any accepted spelling.

    Raises:
        EraConversionError: if the token names no known era
    """
    if isinstance(token, Era):
        return token

    key = normalize_width(token or "").strip()
    era = _ERA_LOOKUP.get(key) or _ERA_LOOKUP.get(key.lower())
    if era is None:
        raise EraConversionError(f"Unknown era: '{token}'", value=token)
    return era


def _next_era(era: Era) -> Optional[Era]:
    index = ERAS.index(era)
    return ERAS[index + 1] if index + 1 < len(ERAS) else None


def era_to_gregorian(
    era: Union[str, Era],
    year: Union[int, str],
    month: int,
    day: int = 1
) -> date:
    """
    Convert an era date to a Gregorian date.

    Args:
        era: Era object or any accepted spelling
        year: Year within the era; 1 or '元' is the first year
        year: Year within the era; 1, '元' or '元年' is the first year
        day: Day of month, defaults to the 1st

    Returns:
        Gregorian date

    Raises:
        EraConversionError: for invalid calendar dates or dates outside the era
    """
    era = find_era(era)

    if isinstance(year, str):
        year = normalize_width(year).strip().removesuffix("年")
        if year == FIRST_YEAR_TOKEN:
            year = 1
    try:
        year = int(year)
    except (TypeError, ValueError):
        raise EraConversionError(f"Invalid era year: '{year}'", value=str(year))
    if year < 1:
        raise EraConversionError(f"Era year must be 1 or later, got {year}")

    try:
        result = date(era.start.year + year - 1, int(month), int(day))
    except ValueError as e:
        raise EraConversionError(
            f"Invalid date {era.name}{year}年{month}月{day}日: {e}"
        ) from e

    if result < era.start:
        raise EraConversionError(
            f"{result.isoformat()} is before the start of {era.romaji} ({era.start.isoformat()})"
        )

    following = _next_era(era)
    if following is not None and result >= following.start:
        raise EraConversionError(
            f"{era.name}{year}年{month}月{day}日 falls after {era.romaji} ended; "
            f"{following.romaji} began on {following.start.isoformat()}"
        )

    return result


def gregorian_to_era(value: date) -> EraDate:
    """
    Convert a Gregorian date to an era date.

    Raises:
        EraConversionError: if the date is earlier than the first supported era
    """
    for era in reversed(ERAS):
        if era.start <= value:
            return EraDate(
                era=era,
                year=value.year - era.start.year + 1,
                month=value.month,
                day=value.day
            )

    raise EraConversionError(
        f"{value.isoformat()} is earlier than the first supported era ({ERAS[0].romaji})"
    )


def parse_era_date(text: str) -> EraDate:
    """
    Parse era notation into an EraDate.

    The result is validated against the era's bounds.
    """
    normalized = normalize_width(text or "").strip()

    match = _ERA_DIGIT_CODE.match(normalized)
    if match:
        era = _ERA_BY_DIGIT[match.group("era")]
    else:
        match = _ERA_DATE.match(normalized) or _ERA_COMPACT.match(normalized)
        if not match:
            raise EraConversionError(f"Unrecognized era date: '{text}'", value=text)
        era = find_era(match.group("era"))

    groups = match.groupdict()
    year = 1 if groups["year"] == FIRST_YEAR_TOKEN else int(groups["year"])
    month = int(groups["month"])
    day = int(groups.get("day") or groups.get("day_sep") or 1)

    # Raises on out-of-range dates
    era_to_gregorian(era, year, month, day)
    return EraDate(era=era, year=year, month=month, day=day)


def parse_japanese_date(text: str) -> date:
    """
    Parse any supported date notation into a Gregorian date.

    Gregorian 'YYYY/MM/DD' style forms are tried first, then era forms.

    Raises:
        EraConversionError: if the text is not a valid date in any form
    """
    normalized = normalize_width(text or "").strip()
    if not normalized:
        raise EraConversionError("Empty date", value=text)

    iso = _ISO_DATETIME.match(normalized)
    if iso:
        normalized = iso.group(1)

    gregorian = _GREGORIAN.match(normalized) or _GREGORIAN_COMPACT.match(normalized)
    if gregorian:
        groups = gregorian.groupdict()
        day = groups.get("day") or groups.get("day_sep") or 1
        try:
            return date(int(groups["year"]), int(groups["month"]), int(day))
        except ValueError as e:
            raise EraConversionError(f"Invalid date '{text}': {e}", value=text) from e

    return parse_era_date(normalized).to_gregorian()


def format_japanese_date(value: date, style: str = "kanji") -> str:
    """Render a Gregorian date in era notation."""
    return gregorian_to_era(value).format(style)
