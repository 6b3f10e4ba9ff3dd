"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that flow through the ledger
    pipeline: Transaction (input), AnnotatedTransaction and CurrencyGroup
    (aggregator output), LedgerRow and CurrencyLedger (reconstructor output).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All DTOs are frozen; nothing is mutated after construction.
    - Monetary fields on derived DTOs are Decimal (never float).

Data flow:
    Transaction -> AnnotatedTransaction -> CurrencyGroup -> LedgerRow
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

UNKNOWN_CURRENCY = "Unknown Currency"
UNKNOWN_PARTY_NAME = "Unknown User"
MISSING_DESCRIPTION = "N/A"


class TransactionStatus(str, Enum):
    """Known transaction status descriptions. The set is open-ended."""

    COMPLETED = "Completed"
    AUTHORIZE = "Authorize"
    PENDING = "Pending"
    DECLINED = "Declined"
    EXPIRED = "Expired"


class TransferType(str, Enum):
    """Transaction types whose description is rewritten to name the counterparty."""

    SEND_MONEY = "Send Money"
    SEND_CRYPTO = "Send Crypto"


# Statuses whose amount never reaches the current balance
BALANCE_EXCLUDED_STATUSES: frozenset[str] = frozenset({
    TransactionStatus.PENDING.value,
    TransactionStatus.DECLINED.value,
    TransactionStatus.EXPIRED.value,
})

# Statuses that produce a visible ledger row
DISPLAYED_STATUSES: frozenset[str] = frozenset({
    TransactionStatus.COMPLETED.value,
    TransactionStatus.AUTHORIZE.value,
})

TRANSFER_TYPE_DESCRIPTIONS: frozenset[str] = frozenset(t.value for t in TransferType)


@dataclass(frozen=True)
class Transaction:
    """
    A single account transaction as supplied by the transaction source.

    ``amount`` is kept as supplied; it is parsed (and rejected if malformed)
    by the aggregator so the failure can be labelled with the currency.
    A missing or zero ``type_factor`` counts as +1.
    """

    timestamp: datetime
    amount: Decimal | str | int | float
    currency_code: str | None = None
    type_factor: int | None = 1
    type_description: str | None = None
    status_description: str = TransactionStatus.COMPLETED.value
    related_profile_id: Any = None
    transaction_id: Any = None

    @property
    def factor(self) -> int:
        return self.type_factor or 1

    @property
    def status(self) -> str:
        status = self.status_description
        return status.value if isinstance(status, TransactionStatus) else status


@dataclass(frozen=True)
class AnnotatedTransaction:
    """A transaction with its parsed amount and resolved display description."""

    transaction: Transaction
    amount: Decimal
    description: str
    related_party_name: str | None = None

    @property
    def timestamp(self) -> datetime:
        return self.transaction.timestamp

    @property
    def factor(self) -> int:
        return self.transaction.factor

    @property
    def status(self) -> str:
        return self.transaction.status

    @property
    def transaction_id(self) -> Any:
        return self.transaction.transaction_id

    @property
    def signed_amount(self) -> Decimal:
        """Net effect of this transaction on the balance, unrounded."""
        return self.factor * self.amount


@dataclass(frozen=True)
class CurrencyGroup:
    """All transactions of one currency in aggregator traversal order."""

    currency: str
    transactions: tuple[AnnotatedTransaction, ...] = ()
    current_balance: Decimal = Decimal("0")

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class LedgerRow:
    """
    One displayed ledger line.

    ``balance_before_transaction`` is the balance as it stood immediately
    before this transaction was applied, already rounded to the currency's
    rule. Exactly one of ``debit``/``credit`` is set.
    """

    date: date
    time: time
    description: str
    status: str
    balance_before_transaction: Decimal
    debit: Decimal | None = None
    credit: Decimal | None = None
    currency: str = ""
    transaction_id: Any = None

    @classmethod
    def split_timestamp(cls, timestamp: datetime) -> tuple[date, time]:
        """Split a timestamp into UTC date and time (naive values kept as-is)."""
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(UTC)
        return timestamp.date(), timestamp.time()

    def to_display(self) -> dict[str, str]:
        """Row values as strings, ready for a tabular renderer."""
        return {
            "date": self.date.isoformat(),
            "time": self.time.isoformat(timespec="milliseconds"),
            "description": self.description,
            "debit": "" if self.debit is None else f"{self.debit:f}",
            "credit": "" if self.credit is None else f"{self.credit:f}",
            "status": self.status,
            "balance": f"{self.balance_before_transaction:f}",
        }


@dataclass(frozen=True)
class CurrencyLedger:
    """Reconstructed ledger for one currency."""

    currency: str
    current_balance: Decimal
    rows: tuple[LedgerRow, ...] = field(default_factory=tuple)
    opening_balance: Decimal = Decimal("0")

    def __len__(self) -> int:
        return len(self.rows)
