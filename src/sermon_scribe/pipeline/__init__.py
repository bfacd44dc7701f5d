# ABOUTME: Ingestion pipeline: request assembly, processing state machine, record assembly.
# ABOUTME: SermonProcessor is the entry point for study and bulletin jobs.

from sermon_scribe.pipeline.assembler import AssembledRequest, RequestAssembler
from sermon_scribe.pipeline.locations import ChurchLocator
from sermon_scribe.pipeline.processor import ProcessingOutcome, SermonProcessor
from sermon_scribe.pipeline.records import RecordAssembler, dedup_key
from sermon_scribe.pipeline.state import JobKind, ProcessingObserver, ProcessingState

__all__ = [
    "AssembledRequest",
    "ChurchLocator",
    "JobKind",
    "ProcessingObserver",
    "ProcessingOutcome",
    "ProcessingState",
    "RecordAssembler",
    "RequestAssembler",
    "SermonProcessor",
    "dedup_key",
]
