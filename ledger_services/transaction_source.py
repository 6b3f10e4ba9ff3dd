"""
ledger_services.transaction_source -- Transaction fetch collaborator.

Responsibility:
    Defines the protocol the report service uses to obtain an account's
    transactions, and an in-memory implementation for tests, fixtures and
    callers that already hold the records.

Contract:
    ``fetch_transactions`` returns the account's transactions sorted
    descending by timestamp (most recent first). The engines rely on this
    order and never re-sort.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from ledger_kernel.domain.dtos import Transaction


class TransactionSource(Protocol):
    """Pluggable interface for fetching an account's transactions."""

    def fetch_transactions(self, account_id: Any) -> Sequence[Transaction]:
        """Return the account's transactions, most recent first."""
        ...


class InMemoryTransactionSource:
    """Holds transactions per account and serves them newest first."""

    def __init__(self, transactions: Mapping[Any, Iterable[Transaction]] | None = None):
        self._transactions: dict[Any, list[Transaction]] = {}
        for account_id, txs in (transactions or {}).items():
            self.add(account_id, *txs)

    def add(self, account_id: Any, *transactions: Transaction) -> None:
        self._transactions.setdefault(account_id, []).extend(transactions)

    def fetch_transactions(self, account_id: Any) -> tuple[Transaction, ...]:
        # Stable sort: same-timestamp transactions keep insertion order
        return tuple(
            sorted(
                self._transactions.get(account_id, ()),
                key=lambda tx: tx.timestamp,
                reverse=True,
            )
        )
