"""Store failures surfaced to callers. Nothing in the store retries."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every failure raised by a record store."""


class RecordNotFound(StoreError):
    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record {record_id!r} in {collection}")


class WriteFailure(StoreError):
    """The medium rejected a write or delete. The previous file content is intact."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write {path}: {reason}")


class MalformedRecord(StoreError):
    """A stored file exists but does not parse as a valid record."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed record at {path}: {reason}")


class ReadFailure(StoreError):
    """A record file exists but could not be opened or read."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")
