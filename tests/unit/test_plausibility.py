# ============================================================================
# FILE: tests/unit/test_plausibility.py
# ============================================================================
"""
Unit tests for vital sign plausibility checker
"""

from clins_engine.validators import PlausibilityChecker


def test_plausibility_checker_init():
    """Test plausibility checker initialization"""
    checker = PlausibilityChecker()
    assert checker.ranges is not None
    assert "8480-6" in checker.ranges


def test_check_valid_systolic():
    """Test valid systolic blood pressure"""
    checker = PlausibilityChecker()
    is_plausible, reason = checker.check("8480-6", 128, "mm[Hg]")

    assert is_plausible is True
    assert reason is None


def test_check_implausible_high_systolic():
    """Test implausibly high systolic blood pressure"""
    checker = PlausibilityChecker()
    is_plausible, reason = checker.check("8480-6", 250, "mm[Hg]")

    assert is_plausible is False
    assert "outside plausible range" in reason


def test_check_implausible_low_temperature():
    """Test implausibly low body temperature"""
    checker = PlausibilityChecker()
    is_plausible, reason = checker.check("8310-5", 30.0, "Cel")

    assert is_plausible is False
    assert "体温" in reason


def test_range_bounds_inclusive():
    """Test that the range limits themselves are plausible"""
    checker = PlausibilityChecker()

    assert checker.check("8867-4", 50, "/min")[0] is True
    assert checker.check("8867-4", 120, "/min")[0] is True


def test_check_unknown_code():
    """Test that codes without a range are assumed plausible"""
    checker = PlausibilityChecker()
    is_plausible, reason = checker.check("2345-7", 999, "mg/dL")

    assert is_plausible is True
    assert reason is None


def test_check_wrong_unit():
    """Test vital sign with unexpected unit"""
    checker = PlausibilityChecker()
    is_plausible, reason = checker.check("8310-5", 98.6, "[degF]")

    assert is_plausible is False
    assert "unexpected unit" in reason


def test_alternate_unit_spelling():
    """Test that accepted unit spellings are interchangeable"""
    checker = PlausibilityChecker()

    assert checker.check("8480-6", 120, "mmHg")[0] is True
    assert checker.check("8310-5", 36.5, "℃")[0] is True
