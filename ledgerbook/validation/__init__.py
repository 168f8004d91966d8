"""Record intake validation package."""

from ledgerbook.validation.validator import RecordValidator

__all__ = ["RecordValidator"]
