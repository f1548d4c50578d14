# ============================================================================
# FILE: tests/unit/test_japanese_calendar.py
# ============================================================================
"""
Unit tests for Japanese era calendar conversion.
"""

from datetime import date

import pytest

from clins_engine.utils.exceptions import EraConversionError
from clins_engine.utils.japanese_calendar import (
    ERAS,
    era_to_gregorian,
    find_era,
    format_japanese_date,
    gregorian_to_era,
    parse_era_date,
    parse_japanese_date,
)


# ============================================================================
# ERA -> GREGORIAN
# ============================================================================

def test_reiwa_to_gregorian():
    """Test 令和3年4月1日 -> 2021-04-01"""
    assert era_to_gregorian("令和", 3, 4, 1) == date(2021, 4, 1)
    assert era_to_gregorian("R", 3, 4, 1) == date(2021, 4, 1)
    assert era_to_gregorian("reiwa", 3, 4) == date(2021, 4, 1)


def test_first_year_token():
    """Test that 元 is accepted as the first year of an era"""
    assert era_to_gregorian("令和", "元", 5, 1) == date(2019, 5, 1)
    assert era_to_gregorian("平成", "元", 1, 8) == date(1989, 1, 8)


def test_date_after_era_end_rejected():
    """Test that 平成31年5月1日 does not exist"""
    with pytest.raises(EraConversionError):
        era_to_gregorian("平成", 31, 5, 1)


def test_date_before_era_start_rejected():
    """Test that 令和元年4月30日 does not exist"""
    with pytest.raises(EraConversionError):
        era_to_gregorian("令和", 1, 4, 30)


def test_invalid_calendar_date_rejected():
    """Test that invalid dates are rejected, not clamped"""
    with pytest.raises(EraConversionError):
        era_to_gregorian("令和", 3, 2, 30)
    with pytest.raises(EraConversionError):
        era_to_gregorian("令和", 3, 13, 1)
    with pytest.raises(EraConversionError):
        era_to_gregorian("令和", 0, 4, 1)


def test_unknown_era_rejected():
    """Test that an unknown era name raises"""
    with pytest.raises(EraConversionError):
        find_era("X")
    with pytest.raises(ValueError):
        era_to_gregorian("康応", 1, 1, 1)


# ============================================================================
# GREGORIAN -> ERA
# ============================================================================

def test_heisei_last_day():
    """Test 2019-04-30 -> 平成31年4月30日"""
    era_date = gregorian_to_era(date(2019, 4, 30))
    assert era_date.era.name == "平成"
    assert era_date.year == 31
    assert era_date.format() == "平成31年4月30日"


def test_reiwa_first_day():
    """Test 2019-05-01 -> 令和元年5月1日"""
    era_date = gregorian_to_era(date(2019, 5, 1))
    assert era_date.era.romaji == "Reiwa"
    assert era_date.year == 1
    assert era_date.format() == "令和元年5月1日"
    assert era_date.format("letter") == "R1.5.1"
    assert era_date.format("romaji") == "Reiwa 1/5/1"


def test_era_boundaries():
    """Test the last and first day of every era transition"""
    for previous, current in zip(ERAS, ERAS[1:]):
        first_day = current.start
        last_day = date.fromordinal(first_day.toordinal() - 1)
        assert gregorian_to_era(first_day).era == current
        assert gregorian_to_era(first_day).year == 1
        assert gregorian_to_era(last_day).era == previous


def test_showa_64():
    """Test the short final year of Showa"""
    assert era_to_gregorian("昭和", 64, 1, 7) == date(1989, 1, 7)
    with pytest.raises(EraConversionError):
        era_to_gregorian("昭和", 64, 1, 8)


def test_before_meiji_rejected():
    """Test that dates before Meiji cannot be expressed"""
    assert gregorian_to_era(date(1868, 10, 23)).era.name == "明治"
    with pytest.raises(EraConversionError):
        gregorian_to_era(date(1868, 10, 22))


def test_round_trip_through_notation():
    """Test that formatted era dates parse back to the same Gregorian date"""
    samples = [
        date(1900, 2, 28),
        date(1926, 12, 25),
        date(1989, 1, 7),
        date(2019, 4, 30),
        date(2019, 5, 1),
        date(2024, 2, 29),
    ]
    for value in samples:
        for style in ("kanji", "letter", "romaji"):
            text = format_japanese_date(value, style)
            assert parse_era_date(text).to_gregorian() == value, text


# ============================================================================
# PARSING
# ============================================================================

def test_parse_era_notations():
    """Test the accepted era date notations"""
    expected = date(2021, 4, 1)
    for text in (
        "令和3年4月1日",
        "令3年4月1日",
        "R3.4.1",
        "R03/04/01",
        "r3-4-1",
        "Reiwa 3/4/1",
        "R030401",
        "5030401",
        "令和３年４月１日",
    ):
        assert parse_japanese_date(text) == expected, text


def test_parse_era_symbol():
    """Test the era ligature symbols"""
    assert parse_japanese_date("㍻31年4月30日") == date(2019, 4, 30)


def test_parse_month_precision():
    """Test that year-month forms default to the first of the month"""
    assert parse_japanese_date("令和3年4月") == date(2021, 4, 1)


def test_parse_gregorian_notations():
    """Test the accepted Gregorian notations"""
    expected = date(2021, 4, 1)
    for text in ("2021-04-01", "2021/04/01", "2021/4/1", "2021年4月1日", "20210401", "2021-04-01T10:00:00+09:00"):
        assert parse_japanese_date(text) == expected, text


def test_parse_invalid_dates():
    """Test that malformed and impossible dates raise"""
    for text in ("", "令和3年2月30日", "2021-02-30", "X3.4.1", "昨日"):
        with pytest.raises(EraConversionError):
            parse_japanese_date(text)


def test_era_lookup_spellings():
    """Test the accepted era spellings"""
    assert find_era("昭和").romaji == "Showa"
    assert find_era("S").name == "昭和"
    assert find_era("showa").name == "昭和"
    assert find_era("Shouwa").name == "昭和"
    assert find_era("大").romaji == "Taisho"


def test_era_round_trip_from_era_side():
    """Test that era dates survive conversion to Gregorian and back"""
    samples = [
        ("令和", "元", 5, 1),
        ("平成", 1, 1, 8),
        ("平成", 31, 4, 30),
        ("昭和", 64, 1, 7),
        ("大正", 15, 12, 24),
        ("明治", 45, 7, 29),
        ("令和", 6, 2, 29),
    ]
    for era, year, month, day in samples:
        era_date = gregorian_to_era(era_to_gregorian(era, year, month, day))

        assert era_date.era.name == era
        assert era_date.year == (1 if year == "元" else year)
        assert (era_date.month, era_date.day) == (month, day)


def test_era_year_spellings():
    """Test year tokens with a trailing 年 and full-width digits"""
    assert era_to_gregorian("令和", "元年", 5, 1) == date(2019, 5, 1)
    assert era_to_gregorian("令和", "３年", 4, 1) == date(2021, 4, 1)
    assert era_to_gregorian("平成", "31", 4, 30) == date(2019, 4, 30)


def test_invalid_era_year_rejected():
    """Test that a non-numeric year is an era conversion error"""
    for year in ("abc", "", "年"):
        with pytest.raises(EraConversionError):
            era_to_gregorian("令和", year, 4, 1)
