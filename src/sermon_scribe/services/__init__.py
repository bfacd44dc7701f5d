# ABOUTME: Service layer for persistence of generated records.
# ABOUTME: Exports the RecordStore contract and the backend factory.

from sermon_scribe.services.storage import LocalRecordStore, RecordStore, create_record_store

__all__ = ["LocalRecordStore", "RecordStore", "create_record_store"]
