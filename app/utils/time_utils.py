# app/utils/time_utils.py
"""
Wall-clock helpers.

Appointments are stored as a local date + time in the business timezone;
reminder rows are stored in UTC. These helpers convert between the two.
"""
from datetime import date, datetime, time, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from app.config.settings import get_settings


@lru_cache()
def business_timezone() -> ZoneInfo:
    return ZoneInfo(get_settings().DEFAULT_TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today() -> date:
    return datetime.now(business_timezone()).date()


def local_to_utc(day: date, at: time) -> datetime:
    """Interpret (day, at) in the business timezone and return an aware UTC datetime"""
    local = datetime.combine(day, at.replace(tzinfo=None), tzinfo=business_timezone())
    return local.astimezone(timezone.utc)
