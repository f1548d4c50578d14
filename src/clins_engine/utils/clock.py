# ============================================================================
# src/clins_engine/utils/clock.py
# ============================================================================
"""
Clock helpers. Japan has no daylight saving, so JST is a fixed offset.
"""

from datetime import date, datetime, timedelta, timezone

JST = timezone(timedelta(hours=9), "JST")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def japan_today(now: datetime) -> date:
    """Calendar date in Japan at the given instant."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(JST).date()


def fhir_instant(value: datetime) -> str:
    """ISO 8601 instant with seconds precision and an explicit offset."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=0).isoformat()
