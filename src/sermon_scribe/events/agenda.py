# ABOUTME: Chronological ordering and upcoming-window filtering of bulletin events.
# ABOUTME: Combines the ISO event date with the normalized 24-hour time.

from datetime import date, datetime, time, timedelta

from sermon_scribe.events.timeparse import to_24_hour
from sermon_scribe.models import Bulletin, EventRecord


def parse_event_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def event_start(event: EventRecord) -> datetime | None:
    """Start of an event, or None when its date is unusable."""
    event_date = parse_event_date(event.date)
    if event_date is None:
        return None
    return datetime.combine(event_date, time.fromisoformat(to_24_hour(event.time)))


def sort_events(events: list[EventRecord]) -> list[EventRecord]:
    """Order events by start; events with an unusable date go last, in input order."""
    return sorted(events, key=lambda e: (event_start(e) is None, event_start(e) or datetime.min))


def upcoming_events(bulletins: list[Bulletin], today: date | None = None) -> list[EventRecord]:
    """All events across bulletins from yesterday onward, soonest first."""
    today = today or date.today()
    cutoff = today - timedelta(days=1)

    events = [event for bulletin in bulletins for event in bulletin.events]
    upcoming = [
        event
        for event in events
        if (event_date := parse_event_date(event.date)) is not None and event_date >= cutoff
    ]
    return sort_events(upcoming)
