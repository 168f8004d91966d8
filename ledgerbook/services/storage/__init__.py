"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the record
source and the audit log. Currently implements an in-memory backend, but
designed to be swappable.
"""

from ledgerbook.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    RecordRejectedError,
    RecordSourceInterface,
    SourceUnavailableError,
    StorageError,
)
from ledgerbook.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordSource,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordSourceInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "RecordRejectedError",
    "SourceUnavailableError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordSource",
]
