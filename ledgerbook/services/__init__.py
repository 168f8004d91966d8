"""Services package."""

from ledgerbook.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryRecordSource,
    NotFoundError,
    RecordRejectedError,
    RecordSourceInterface,
    SourceUnavailableError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryRecordSource",
    "NotFoundError",
    "RecordRejectedError",
    "RecordSourceInterface",
    "SourceUnavailableError",
    "StorageError",
]
