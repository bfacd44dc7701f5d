# ABOUTME: Church event utilities: time normalization, ordering, and calendar export.
# ABOUTME: Shared by bulletin deduplication, the events listing, and .ics downloads.

from sermon_scribe.events.agenda import sort_events, upcoming_events
from sermon_scribe.events.calendar import build_ics, ics_filename
from sermon_scribe.events.timeparse import to_24_hour

__all__ = ["build_ics", "ics_filename", "sort_events", "to_24_hour", "upcoming_events"]
