# ABOUTME: Processing state machine driving normalization, generation, validation, and saving.
# ABOUTME: Enforces a watchdog timeout, one job per session, and displayable failures.

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from sermon_scribe.ai.service import AIService
from sermon_scribe.ai.validation import ResponseValidator
from sermon_scribe.config import Settings, get_settings
from sermon_scribe.errors import (
    EmptyInputError,
    ProcessingBusyError,
    ProcessingFailure,
    ProcessingTimeoutError,
    ScribeError,
    to_failure,
)
from sermon_scribe.media.normalizer import MediaNormalizer
from sermon_scribe.models import Bulletin, GenerationInput, MediaAttachment, StudyPlan
from sermon_scribe.pipeline.assembler import RequestAssembler
from sermon_scribe.pipeline.records import RecordAssembler
from sermon_scribe.pipeline.state import (
    STATE_PROGRESS,
    JobKind,
    NullObserver,
    ProcessingObserver,
    ProcessingState,
)
from sermon_scribe.services.storage import RecordStore
from sermon_scribe.session import UserSession

log = structlog.get_logger()


@dataclass
class ProcessingOutcome:
    """What a caller gets back from one processing request."""

    result: StudyPlan | Bulletin | None = None
    failure: ProcessingFailure | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.result is not None


@dataclass
class _Run:
    epoch: int
    kind: JobKind
    committed: bool = False


def study_job_kind(generation_input: GenerationInput) -> JobKind:
    if generation_input.audio is not None:
        return JobKind.AUDIO_STUDY
    if generation_input.images:
        return JobKind.IMAGE_STUDY
    return JobKind.TEXT_STUDY


class SermonProcessor:
    """Runs study and bulletin jobs for one user session.

    States move IDLE -> [OPTIMIZING] -> ANALYZING|RESEARCHING -> FINALIZING -> IDLE.
    Any failure is reported as FAILED and the machine settles back in IDLE.

    A watchdog is armed when a job starts. If it fires first, the caller gets a
    ProcessingTimeoutError and the job keeps running detached; a run whose epoch
    is no longer current never saves and never reports progress.
    """

    def __init__(
        self,
        session: UserSession,
        store: RecordStore,
        ai_service: AIService | None = None,
        settings: Settings | None = None,
        observer: ProcessingObserver | None = None,
        normalizer: MediaNormalizer | None = None,
        validator: ResponseValidator | None = None,
        records: RecordAssembler | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session
        self.store = store
        self.ai_service = ai_service or AIService(self.settings)
        self.observer = observer or NullObserver()
        self.normalizer = normalizer or MediaNormalizer(self.settings)
        self.validator = validator or ResponseValidator()
        self.records = records or RecordAssembler()

        self.state = ProcessingState.IDLE
        self.is_processing = False
        self.last_failure: ProcessingFailure | None = None
        self._epoch = 0
        self._detached: set[asyncio.Task] = set()

    # --- Public entry points ---

    async def create_study(self, generation_input: GenerationInput) -> ProcessingOutcome:
        """Generate and save a study plan from audio, images, and/or text."""
        kind = study_job_kind(generation_input)
        return await self._run(kind, lambda run: self._study_job(run, generation_input))

    async def scan_bulletin(self, images: list[MediaAttachment]) -> ProcessingOutcome:
        """Extract, deduplicate, and save events from bulletin photos."""
        return await self._run(JobKind.BULLETIN, lambda run: self._bulletin_job(run, images))

    async def drain(self) -> None:
        """Wait for detached jobs left behind by timeouts."""
        if self._detached:
            await asyncio.gather(*self._detached, return_exceptions=True)

    # --- State handling ---

    def _is_current(self, run: _Run) -> bool:
        return run.epoch == self._epoch

    def _set_state(self, state: ProcessingState) -> None:
        self.state = state
        self.observer.on_progress(state, STATE_PROGRESS[state])

    def _transition(self, run: _Run, state: ProcessingState) -> None:
        if not self._is_current(run):
            return
        log.debug("processing_state_changed", state=state.value, kind=run.kind.value)
        self._set_state(state)

    def _commit(self, run: _Run) -> bool:
        """Claim the right to save. False once the run has been detached."""
        if not self._is_current(run):
            log.warning("late_result_discarded", kind=run.kind.value, epoch=run.epoch)
            return False
        run.committed = True
        return True

    def _finish(self) -> None:
        self.is_processing = False
        self._set_state(ProcessingState.IDLE)

    def _fail(self, kind: JobKind, error: BaseException) -> ProcessingOutcome:
        failure = to_failure(error, kind.failure_headline)
        if isinstance(error, ScribeError):
            log.warning(
                "processing_failed",
                kind=kind.value,
                error_type=type(error).__name__,
                error=str(error),
            )
        else:
            log.error(
                "processing_failed_unexpectedly",
                kind=kind.value,
                error_type=type(error).__name__,
                error=str(error)[:300],
            )

        self.last_failure = failure
        self._set_state(ProcessingState.FAILED)
        self.observer.on_failure(failure)
        self._finish()
        return ProcessingOutcome(failure=failure, error=error)

    def _detach(self, task: asyncio.Task, run: _Run) -> None:
        """Let a timed-out job finish in the background, ignored."""
        self._epoch += 1
        self._detached.add(task)

        def _on_done(done: asyncio.Task) -> None:
            self._detached.discard(done)
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                log.info(
                    "detached_job_failed",
                    kind=run.kind.value,
                    error_type=type(error).__name__,
                )
            else:
                log.info("detached_job_finished", kind=run.kind.value, saved=run.committed)

        task.add_done_callback(_on_done)

    async def _run(
        self,
        kind: JobKind,
        job: Callable[[_Run], Awaitable[StudyPlan | Bulletin | None]],
    ) -> ProcessingOutcome:
        if self.is_processing:
            error = ProcessingBusyError("A request is already in progress for this session")
            log.warning("processing_rejected_busy", kind=kind.value)
            failure = to_failure(error, kind.failure_headline)
            self.observer.on_failure(failure)
            return ProcessingOutcome(failure=failure, error=error)

        self.is_processing = True
        self.last_failure = None
        self._epoch += 1
        run = _Run(epoch=self._epoch, kind=kind)
        timeout = self.settings.processing_timeout_seconds
        log.info("processing_started", kind=kind.value, user_id=self.session.user_id, timeout=timeout)

        task = asyncio.create_task(job(run))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
            if not done and run.committed:
                # Generation already returned; only the save is left
                done, _ = await asyncio.wait({task})
        except asyncio.CancelledError:
            self._detach(task, run)
            self.is_processing = False
            self.state = ProcessingState.IDLE
            raise

        if not done:
            self._detach(task, run)
            return self._fail(
                kind, ProcessingTimeoutError(f"No result after {timeout:g} seconds")
            )

        try:
            result = task.result()
        except (Exception, asyncio.CancelledError) as e:
            # A job cancelled from outside still ends the run
            return self._fail(kind, e)

        log.info("processing_complete", kind=kind.value, record_id=result.id)
        self._finish()
        self.observer.on_success(result)
        return ProcessingOutcome(result=result)

    # --- Jobs ---

    async def _study_job(self, run: _Run, generation_input: GenerationInput) -> StudyPlan | None:
        if generation_input.is_empty:
            raise EmptyInputError("No audio, images, or text supplied")

        settings = self.session.settings
        images = generation_input.images
        if images:
            self._transition(run, ProcessingState.OPTIMIZING)
            images = await self.normalizer.optimize_images(images)

        audio = generation_input.audio
        request = RequestAssembler(settings).assemble_study(
            audio=self.normalizer.encode_audio(audio) if audio else None,
            images=self.normalizer.encode_images(images),
            text=generation_input.text,
        )

        self._transition(run, run.kind.generation_state)
        raw = await self.ai_service.generate_study_plan(request.contents)
        content = self.validator.validate_study_plan(raw, settings)

        if not self._commit(run):
            return None

        self._transition(run, ProcessingState.FINALIZING)
        plan = self.records.build_study_plan(
            content,
            self.session.user_id,
            audio_duration=audio.duration_seconds if audio else None,
        )
        await self.store.save_study(plan)
        return plan

    async def _bulletin_job(self, run: _Run, images: list[MediaAttachment]) -> Bulletin | None:
        if not images:
            raise EmptyInputError("No bulletin images supplied")

        self._transition(run, ProcessingState.OPTIMIZING)
        optimized = await self.normalizer.optimize_images(images)
        request = RequestAssembler(self.session.settings).assemble_bulletin(
            self.normalizer.encode_images(optimized)
        )

        self._transition(run, run.kind.generation_state)
        raw = await self.ai_service.extract_bulletin(request.contents)
        content = self.validator.validate_bulletin(raw)

        if not self._commit(run):
            return None

        self._transition(run, ProcessingState.FINALIZING)
        prior_events = await self.store.list_prior_events(self.session.user_id)
        bulletin = self.records.build_bulletin(content, self.session.user_id, prior_events)
        await self.store.save_bulletin(bulletin)
        return bulletin
