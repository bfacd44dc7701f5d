# ABOUTME: Normalizes free-text 12-hour clock strings into 24-hour HH:MM:SS.
# ABOUTME: Never raises; malformed input maps to midnight so sorting and export keep working.

import re

import structlog

log = structlog.get_logger()

MIDNIGHT = "00:00:00"

_LEADING_TIME = re.compile(r"^\s*(\d{1,2})(?::(\d{1,2}))?")


def to_24_hour(time_str: str | None) -> str:
    """Convert a loosely formatted 12-hour time to "HH:MM:SS".

    "7:00 PM" -> "19:00:00", "12:00 PM" -> "12:00:00", "12:30 am" -> "00:30:00".
    An hour of 0 is accepted with a marker, so "0:30 AM" -> "00:30:00".
    A string without an AM/PM marker is read as a 24-hour clock. Anything that
    cannot be parsed yields "00:00:00".
    """
    if not time_str:
        return MIDNIGHT

    clean = time_str.strip().upper()
    is_pm = "PM" in clean
    is_am = "AM" in clean and not is_pm

    match = _LEADING_TIME.match(clean)
    if not match:
        log.debug("time_parse_failed", value=time_str[:40])
        return MIDNIGHT

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)

    if (is_pm or is_am) and hour > 12:
        log.debug("time_parse_failed", value=time_str[:40])
        return MIDNIGHT

    if is_pm and hour != 12:
        hour += 12
    elif is_am and hour == 12:
        hour = 0

    if hour > 23 or minute > 59:
        log.debug("time_parse_failed", value=time_str[:40])
        return MIDNIGHT

    return f"{hour:02d}:{minute:02d}:00"
