# utils/datetime_utils.py

from datetime import date, datetime
from typing import Union

import pytz

DEFAULT_TZ = "UTC"


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(pytz.timezone(tz_name))


def today_local(tz_name: str = DEFAULT_TZ) -> date:
    return now_local(tz_name).date()


def parse_iso_date(value: Union[str, date]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def export_timestamp(dt: datetime) -> str:
    """DDMMYYHHMM, used in export file names"""
    return dt.strftime("%d%m%y%H%M")


def is_valid_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set
