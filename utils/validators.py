# utils/validators.py

import math
import re
from datetime import date

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date(date_str) -> bool:
    if not isinstance(date_str, str) or not _ISO_DATE_RE.match(date_str):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True


def is_valid_value(value) -> bool:
    """Finite, non-negative number; bools and ints beyond float range are rejected"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and value >= 0
    except OverflowError:
        return False
