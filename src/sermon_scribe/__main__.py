# ABOUTME: CLI entry point for Sermon Scribe.
# ABOUTME: Provides subcommands: study, bulletin, events, export-event, find-church.

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import structlog

from sermon_scribe.config import get_settings
from sermon_scribe.errors import GenerationUnavailableError, ProcessingFailure
from sermon_scribe.models import Bulletin, GenerationInput, MediaAttachment, StudyPlan
from sermon_scribe.pipeline.state import STATE_MESSAGES, ProcessingState
from sermon_scribe.session import UserSession


def configure_logging() -> None:
    """Configure structlog for console or JSON output."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )


class ConsoleObserver:
    """Prints processing progress to the terminal."""

    def __init__(self) -> None:
        self.log = structlog.get_logger()

    def on_progress(self, state: ProcessingState, percent: int) -> None:
        if STATE_MESSAGES[state]:
            print(f"[{percent:3d}%] {STATE_MESSAGES[state]}")

    def on_success(self, result: StudyPlan | Bulletin) -> None:
        self.log.info("processing_succeeded", record_id=result.id)

    def on_failure(self, failure: ProcessingFailure) -> None:
        print(f"\n{failure.message}\n  {failure.detail}")
        if failure.retryable:
            print("  You can run the same command again.")
        print()


def load_attachment(path: Path, default_mime: str) -> MediaAttachment:
    """Read a capture from disk, guessing its MIME type from the file name."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return MediaAttachment(
        data=path.read_bytes(),
        mime_type=mime_type or default_mime,
        filename=path.name,
    )


async def _with_storage(coro) -> int:
    """Await a command, opening and closing the database when it is the backend."""
    if get_settings().storage_backend != "database":
        return await coro

    from sermon_scribe.db.session import close_db, init_db

    await init_db()
    try:
        return await coro
    finally:
        await close_db()


def _session(args: argparse.Namespace) -> UserSession:
    return UserSession.from_settings(get_settings(), user_id=args.user)


def _build_processor(args: argparse.Namespace):
    from sermon_scribe.pipeline.processor import SermonProcessor
    from sermon_scribe.services.storage import create_record_store

    return SermonProcessor(
        session=_session(args),
        store=create_record_store(),
        observer=ConsoleObserver(),
    )


def print_study(plan: StudyPlan) -> None:
    print(f"\n=== {plan.sermon_title} ===")
    if plan.preacher:
        print(f"Speaker: {plan.preacher}")
    print(f"Study id: {plan.id}\n")
    for day in plan.days:
        print(f"Day {day.day}: {day.topic} ({day.scripture_reference})")
        if day.supporting_scriptures:
            print(f"  See also: {', '.join(day.supporting_scriptures)}")
    print()


def print_bulletin(bulletin: Bulletin) -> None:
    print(f"\n=== {bulletin.title} ===")
    if bulletin.raw_summary:
        print(bulletin.raw_summary)
    print(f"\nNew events: {len(bulletin.events)}")
    for event in bulletin.events:
        print(f"  - {event.date} {event.time}  {event.title}  [{event.id}]")
    print()


async def _run_study(args: argparse.Namespace) -> int:
    generation_input = GenerationInput(
        audio=load_attachment(args.audio, "audio/mp3") if args.audio else None,
        images=[load_attachment(p, "image/jpeg") for p in args.image or []],
        text=args.text.read_text(encoding="utf-8") if args.text else None,
    )
    processor = _build_processor(args)
    outcome = await processor.create_study(generation_input)
    if not outcome.ok:
        return 1
    print_study(outcome.result)
    return 0


def cmd_study(args: argparse.Namespace) -> int:
    """Generate a study plan from sermon audio, note photos, and/or a transcript."""
    log = structlog.get_logger()
    log.info("cmd_study_start")
    return asyncio.run(_with_storage(_run_study(args)))


async def _run_bulletin(args: argparse.Namespace) -> int:
    images = [load_attachment(p, "image/jpeg") for p in args.images]
    processor = _build_processor(args)
    outcome = await processor.scan_bulletin(images)
    if not outcome.ok:
        return 1
    print_bulletin(outcome.result)
    return 0


def cmd_bulletin(args: argparse.Namespace) -> int:
    """Scan bulletin photos and store newly found events."""
    log = structlog.get_logger()
    log.info("cmd_bulletin_start", images=len(args.images))
    return asyncio.run(_with_storage(_run_bulletin(args)))


async def _run_events(args: argparse.Namespace) -> int:
    from sermon_scribe.events.agenda import upcoming_events
    from sermon_scribe.events.timeparse import to_24_hour
    from sermon_scribe.services.storage import create_record_store

    store = create_record_store()
    bulletins = await store.list_bulletins(_session(args).user_id)
    events = upcoming_events(bulletins)

    print("\n=== Upcoming Events ===\n")
    if not events:
        print("No upcoming events. Scan your church bulletin to add some.\n")
        return 0
    for event in events:
        print(f"{event.date} {to_24_hour(event.time)[:5]}  {event.title}")
        if event.location:
            print(f"    @ {event.location}")
        print(f"    id: {event.id}")
    print()
    return 0


def cmd_events(args: argparse.Namespace) -> int:
    """List upcoming events from every stored bulletin."""
    return asyncio.run(_with_storage(_run_events(args)))


async def _run_export_event(args: argparse.Namespace) -> int:
    from sermon_scribe.events.calendar import build_ics, ics_filename
    from sermon_scribe.services.storage import create_record_store

    log = structlog.get_logger()
    store = create_record_store()
    event = await store.get_event(_session(args).user_id, args.event_id)
    if event is None:
        log.error("event_not_found", event_id=args.event_id)
        return 1

    output = args.output or Path(ics_filename(event))
    output.write_bytes(build_ics(event, url=get_settings().app_base_url))
    log.info("event_exported", event_id=event.id, path=str(output))
    print(f"Saved {output}")
    return 0


def cmd_export_event(args: argparse.Namespace) -> int:
    """Write a single event as an .ics calendar file."""
    return asyncio.run(_with_storage(_run_export_event(args)))


async def _run_find_church(args: argparse.Namespace) -> int:
    from sermon_scribe.pipeline.locations import ChurchLocator

    matches = await ChurchLocator().search(args.query)
    if not matches:
        print("No matching churches found.")
        return 0
    for match in matches:
        print(f"{match.name}  ({match.lat:.5f}, {match.lng:.5f})")
        if match.address:
            print(f"    {match.address}")
        if match.serviceTimes:
            print(f"    Services: {', '.join(match.serviceTimes)}")
    return 0


def cmd_find_church(args: argparse.Namespace) -> int:
    """Look up a church and its Sunday service times."""
    log = structlog.get_logger()
    try:
        return asyncio.run(_run_find_church(args))
    except GenerationUnavailableError:
        log.error("gemini_not_configured", hint="Set GEMINI_API_KEY")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="sermon_scribe",
        description="Sermon Scribe - turn sermons and bulletins into study plans and events",
    )
    parser.add_argument(
        "--user",
        type=str,
        help="User id that owns generated records. Defaults to DEFAULT_USER_ID.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # study command
    study_parser = subparsers.add_parser(
        "study",
        help="Create a study plan from audio, note photos, and/or a transcript",
    )
    study_parser.add_argument("--text", type=Path, help="Transcript text file")
    study_parser.add_argument("--audio", type=Path, help="Sermon audio file")
    study_parser.add_argument(
        "--image",
        type=Path,
        action="append",
        help="Photo of sermon notes (repeatable)",
    )

    # bulletin command
    bulletin_parser = subparsers.add_parser(
        "bulletin",
        help="Scan bulletin photos for events",
    )
    bulletin_parser.add_argument("images", type=Path, nargs="+", help="Bulletin page photos")

    # events command
    subparsers.add_parser(
        "events",
        help="List upcoming events",
    )

    # export-event command
    export_parser = subparsers.add_parser(
        "export-event",
        help="Export one event as an .ics file",
    )
    export_parser.add_argument("event_id", type=str, help="Event id (see 'events')")
    export_parser.add_argument("--output", type=Path, help="Destination .ics path")

    # find-church command
    find_parser = subparsers.add_parser(
        "find-church",
        help="Search for a church by name or place",
    )
    find_parser.add_argument("query", type=str, help="Church name and/or town")

    return parser


def main() -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args()

    commands = {
        "study": cmd_study,
        "bulletin": cmd_bulletin,
        "events": cmd_events,
        "export-event": cmd_export_event,
        "find-church": cmd_find_church,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
