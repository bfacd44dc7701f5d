# ABOUTME: iCalendar (RFC 5545) export of a single bulletin event.
# ABOUTME: Builds a VCALENDAR/VEVENT byte stream and a safe download filename.

import re
from datetime import UTC, datetime

from sermon_scribe.events.timeparse import to_24_hour
from sermon_scribe.models import EventRecord

PRODID = "-//Sermon Scribe//Church Events//EN"


def escape_text(value: str) -> str:
    """Escape a TEXT property value per RFC 5545 section 3.3.11."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str, limit: int = 75) -> str:
    """Fold a content line to at most `limit` octets per physical line."""
    encoded = line.encode("utf-8")
    if len(encoded) <= limit:
        return line

    pieces = []
    current = b""
    for char in line:
        char_bytes = char.encode("utf-8")
        # continuation lines start with a space, which counts toward the limit
        room = limit if not pieces else limit - 1
        if len(current) + len(char_bytes) > room:
            pieces.append(current.decode("utf-8"))
            current = b""
        current += char_bytes
    pieces.append(current.decode("utf-8"))
    return "\r\n ".join(pieces)


def format_dtstart(event: EventRecord) -> str:
    """Floating local start time, e.g. 20241005T190000."""
    start_date = event.date.strip().replace("-", "")
    start_time = to_24_hour(event.time).replace(":", "")[:6]
    return f"{start_date}T{start_time}"


def build_ics(event: EventRecord, url: str, now: datetime | None = None) -> bytes:
    """Render one event as an iCalendar file.

    Args:
        event: Event to export.
        url: Back-reference to the app, written as the URL property.
        now: Timestamp for DTSTAMP. Defaults to the current UTC time.

    Returns:
        UTF-8 encoded calendar with CRLF line endings.
    """
    now = now or datetime.now(UTC)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "BEGIN:VEVENT",
        f"UID:{event.id}@sermon-scribe",
        f"DTSTAMP:{now.strftime('%Y%m%dT%H%M%SZ')}",
        f"URL:{url}",
        f"DTSTART:{format_dtstart(event)}",
        f"SUMMARY:{escape_text(event.title)}",
        f"DESCRIPTION:{escape_text(event.description)}",
        f"LOCATION:{escape_text(event.location)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return ("\r\n".join(fold_line(line) for line in lines) + "\r\n").encode("utf-8")


def ics_filename(event: EventRecord) -> str:
    return re.sub(r"[^a-z0-9]", "_", event.title, flags=re.IGNORECASE) + ".ics"
