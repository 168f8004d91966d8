"""
Ledger engine package.

Pure functions over a snapshot of records: no I/O, no caching, no shared
state between calls.
"""

from ledgerbook.engine.builder import (
    LedgerAccountBuilder,
    apply_sign,
    build_ledgers,
)
from ledgerbook.engine.classifier import (
    FEES_KEY,
    UNCATEGORIZED_EXPENSE_KEY,
    UNCATEGORIZED_INCOME_KEY,
    UNCLASSIFIED_CASH_KEY,
    AccountClassifier,
    cash_ledger_key,
    category_ledger_key,
    record_is_balanced,
)
from ledgerbook.engine.export import (
    LEDGER_HEADERS,
    REPLAY_HEADERS,
    format_amount,
    ledger_rows,
    replay_rows,
)
from ledgerbook.engine.ordering import (
    SequencedRecord,
    assign_sequence,
    chronological,
)
from ledgerbook.engine.replay import (
    combined_delta,
    reconcile,
    replay_account_balances,
    replay_global_balance,
)
from ledgerbook.engine.summary import summarize_period

__all__ = [
    # Classifier
    "AccountClassifier",
    "FEES_KEY",
    "UNCATEGORIZED_EXPENSE_KEY",
    "UNCATEGORIZED_INCOME_KEY",
    "UNCLASSIFIED_CASH_KEY",
    "cash_ledger_key",
    "category_ledger_key",
    "record_is_balanced",
    # Ordering
    "SequencedRecord",
    "assign_sequence",
    "chronological",
    # Builder
    "LedgerAccountBuilder",
    "apply_sign",
    "build_ledgers",
    # Replay
    "combined_delta",
    "reconcile",
    "replay_account_balances",
    "replay_global_balance",
    # Reports
    "LEDGER_HEADERS",
    "REPLAY_HEADERS",
    "format_amount",
    "ledger_rows",
    "replay_rows",
    "summarize_period",
]
