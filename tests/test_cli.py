# ABOUTME: Tests for CLI argument parsing and command dispatch.
# ABOUTME: Validates argparse configuration, subcommand routing, and local-store commands.

import argparse
import asyncio
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sermon_scribe.__main__ import (
    ConsoleObserver,
    cmd_events,
    cmd_export_event,
    cmd_find_church,
    cmd_study,
    create_parser,
    main,
)
from sermon_scribe.config import Settings
from sermon_scribe.errors import GenerationUnavailableError, ProcessingFailure
from sermon_scribe.models import Bulletin, DayEntry, EventRecord, StudyPlan
from sermon_scribe.pipeline.processor import ProcessingOutcome
from sermon_scribe.services.storage import LocalRecordStore


@pytest.fixture
def cli_settings(tmp_path: Path) -> Settings:
    """Create settings for CLI testing."""
    return Settings(
        gemini_model="gemini-test",
        data_dir=tmp_path / "data",
        default_user_id="cli-user",
        app_base_url="https://scribe.example",
    )


@pytest.fixture
def patched_settings(cli_settings: Settings):
    with (
        patch("sermon_scribe.__main__.get_settings", return_value=cli_settings),
        patch("sermon_scribe.services.storage.get_settings", return_value=cli_settings),
    ):
        yield cli_settings


def _seed_event(settings: Settings, event: EventRecord) -> None:
    bulletin = Bulletin(
        id="b1",
        user_id="cli-user",
        date_scanned=datetime(2024, 10, 1, tzinfo=UTC),
        title="Announcements",
        events=[event],
    )
    asyncio.run(LocalRecordStore(settings).save_bulletin(bulletin))


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_creation(self) -> None:
        """Parser is created successfully."""
        assert isinstance(create_parser(), argparse.ArgumentParser)

    def test_study_command(self) -> None:
        args = create_parser().parse_args(
            ["study", "--text", "sermon.txt", "--image", "a.jpg", "--image", "b.jpg"]
        )
        assert args.command == "study"
        assert args.text == Path("sermon.txt")
        assert args.audio is None
        assert args.image == [Path("a.jpg"), Path("b.jpg")]

    def test_bulletin_requires_images(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["bulletin"])

    def test_bulletin_command(self) -> None:
        args = create_parser().parse_args(["bulletin", "p1.jpg", "p2.jpg"])
        assert args.images == [Path("p1.jpg"), Path("p2.jpg")]

    def test_global_user(self) -> None:
        args = create_parser().parse_args(["--user", "alice", "events"])
        assert args.user == "alice"
        assert args.command == "events"

    def test_export_event_command(self) -> None:
        args = create_parser().parse_args(["export-event", "abc", "--output", "x.ics"])
        assert args.event_id == "abc"
        assert args.output == Path("x.ics")

    def test_find_church_command(self) -> None:
        args = create_parser().parse_args(["find-church", "Grace Chapel Springfield"])
        assert args.query == "Grace Chapel Springfield"

    def test_no_command(self) -> None:
        args = create_parser().parse_args([])
        assert args.command is None


class TestCmdEvents:
    """Tests for the events listing."""

    def test_empty(self, patched_settings: Settings, capsys: pytest.CaptureFixture) -> None:
        assert cmd_events(argparse.Namespace(user=None)) == 0
        assert "No upcoming events" in capsys.readouterr().out

    def test_lists_future_events(self, patched_settings: Settings, capsys: pytest.CaptureFixture) -> None:
        _seed_event(
            patched_settings,
            EventRecord(id="e1", title="Fall Picnic", date="2099-10-05", time="7:00 PM", location="Lawn"),
        )

        assert cmd_events(argparse.Namespace(user=None)) == 0

        out = capsys.readouterr().out
        assert "2099-10-05 19:00  Fall Picnic" in out
        assert "@ Lawn" in out
        assert "id: e1" in out


class TestCmdExportEvent:
    """Tests for .ics export."""

    def test_writes_ics(self, patched_settings: Settings, tmp_path: Path) -> None:
        _seed_event(patched_settings, EventRecord(id="e1", title="Fall Picnic", date="2099-10-05", time="7:00 PM"))
        output = tmp_path / "picnic.ics"

        result = cmd_export_event(argparse.Namespace(user=None, event_id="e1", output=output))

        assert result == 0
        text = output.read_text(encoding="utf-8")
        assert "DTSTART:20991005T190000" in text
        assert "URL:https://scribe.example" in text

    def test_unknown_event(self, patched_settings: Settings, tmp_path: Path) -> None:
        args = argparse.Namespace(user=None, event_id="missing", output=tmp_path / "x.ics")

        assert cmd_export_event(args) == 1
        assert not (tmp_path / "x.ics").exists()


class TestCmdStudy:
    """Tests for the study command."""

    @patch("sermon_scribe.pipeline.processor.SermonProcessor")
    def test_reads_transcript_and_prints_plan(
        self,
        mock_processor_cls: MagicMock,
        patched_settings: Settings,
        tmp_path: Path,
        capsys: pytest.CaptureFixture,
    ) -> None:
        transcript = tmp_path / "sermon.txt"
        transcript.write_text("Grace upon grace.", encoding="utf-8")
        plan = StudyPlan(
            id="plan-1",
            user_id="cli-user",
            sermon_title="Grace Upon Grace",
            date_recorded=datetime(2024, 10, 6, tzinfo=UTC),
            days=[
                DayEntry(
                    day=1,
                    topic="Received",
                    scripture_reference="John 1:16",
                    supporting_scriptures=["Romans 5:2"],
                    devotional_content="Body",
                    reflection_question="Q?",
                    prayer_focus="Pray.",
                )
            ],
        )
        mock_processor_cls.return_value.create_study = AsyncMock(
            return_value=ProcessingOutcome(result=plan)
        )

        args = argparse.Namespace(user=None, text=transcript, audio=None, image=None)
        assert cmd_study(args) == 0

        generation_input = mock_processor_cls.return_value.create_study.call_args.args[0]
        assert generation_input.text == "Grace upon grace."
        assert mock_processor_cls.call_args.kwargs["session"].user_id == "cli-user"
        out = capsys.readouterr().out
        assert "Grace Upon Grace" in out
        assert "Day 1: Received (John 1:16)" in out

    @patch("sermon_scribe.pipeline.processor.SermonProcessor")
    def test_failure_returns_1(self, mock_processor_cls: MagicMock, patched_settings: Settings) -> None:
        mock_processor_cls.return_value.create_study = AsyncMock(
            return_value=ProcessingOutcome(error=RuntimeError("boom"))
        )

        args = argparse.Namespace(user=None, text=None, audio=None, image=None)
        assert cmd_study(args) == 1


class TestConsoleObserver:
    """Tests for failure output."""

    def test_retry_hint_for_retryable_failure(self, capsys: pytest.CaptureFixture) -> None:
        ConsoleObserver().on_failure(ProcessingFailure(message="Processing Timeout", detail="Took too long."))
        assert "run the same command again" in capsys.readouterr().out

    def test_no_retry_hint_when_not_retryable(self, capsys: pytest.CaptureFixture) -> None:
        ConsoleObserver().on_failure(
            ProcessingFailure(message="Service Unavailable", detail="Set GEMINI_API_KEY.", retryable=False)
        )
        out = capsys.readouterr().out

        assert "Service Unavailable" in out
        assert "again" not in out


class TestCmdFindChurch:
    """Tests for church search."""

    @patch("sermon_scribe.pipeline.locations.ChurchLocator")
    def test_missing_key_returns_1(self, mock_locator_cls: MagicMock) -> None:
        mock_locator_cls.return_value.search = AsyncMock(side_effect=GenerationUnavailableError("no key"))

        assert cmd_find_church(argparse.Namespace(query="Grace")) == 1


class TestMain:
    """Tests for main() dispatch."""

    @patch("sermon_scribe.__main__.cmd_events")
    @patch("sermon_scribe.__main__.configure_logging")
    def test_dispatches_command(self, _mock_logging: MagicMock, mock_events: MagicMock) -> None:
        mock_events.return_value = 0

        with patch("sys.argv", ["sermon_scribe", "events"]):
            assert main() == 0

        mock_events.assert_called_once()

    @patch("sermon_scribe.__main__.configure_logging")
    def test_no_command_prints_help(self, _mock_logging: MagicMock) -> None:
        with patch("sys.argv", ["sermon_scribe"]):
            assert main() == 1
