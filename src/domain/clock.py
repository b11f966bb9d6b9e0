"""
Helpers for HH:MM wall-clock strings.
"""
import re

from domain.errors import ValidationError

_CLOCK_RE = re.compile(r'^([01]?\d|2[0-3]):([0-5]\d)$')


def validate_clock(value):
    if not isinstance(value, str) or not _CLOCK_RE.match(value.strip()):
        raise ValidationError(f"Invalid time (expected HH:MM): {value!r}")
    return value.strip()


def clock_to_minutes(value):
    hours, minutes = validate_clock(value).split(':')
    return int(hours) * 60 + int(minutes)
