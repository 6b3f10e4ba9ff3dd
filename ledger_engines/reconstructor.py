"""
ledger_engines.reconstructor -- Backward reconstruction of pre-transaction balances.

Responsibility:
    Given one currency's transactions (most recent first) and that
    currency's current balance, produce one display row per displayed
    transaction stating the balance immediately before it was applied.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes CurrencyGroup output of ledger_engines.aggregator.

Invariants enforced:
    - Single strictly-ordered fold with one accumulator, seeded with the
      current balance. No historical snapshot is read or stored.
    - Only Completed/Authorize rows are emitted and only they are undone.
    - Balances within 1e-6 of zero are displayed as zero; the accumulator
      itself is never snapped.
    - Output order equals input order.

Failure modes:
    None inherent. Empty input yields no rows; a missing current balance
    is treated as zero.

Usage:
    from ledger_engines.reconstructor import BalanceHistoryReconstructor

    ledger = BalanceHistoryReconstructor().reconstruct(
        currency="Cash",
        transactions=group.transactions,
        current_balance=group.current_balance,
    )
    for row in ledger.rows:
        print(row.date, row.description, row.balance_before_transaction)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal, localcontext

from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.dtos import (
    DISPLAYED_STATUSES,
    AnnotatedTransaction,
    CurrencyGroup,
    CurrencyLedger,
    LedgerRow,
)
from ledger_kernel.domain.rounding import (
    DEFAULT_ROUNDING_POLICY,
    EXACT_CONTEXT,
    RoundingPolicy,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.reconstructor")

ZERO_SNAP_THRESHOLD = Decimal("0.000001")


class BalanceHistoryReconstructor:
    """
    Walks a currency's transactions newest to oldest, undoing each one.

    Contract:
        Stateless between calls; each call owns its accumulator, so
        different currencies may be reconstructed concurrently.
    """

    def __init__(
        self,
        policy: RoundingPolicy = DEFAULT_ROUNDING_POLICY,
        *,
        displayed_statuses: Iterable[str] = DISPLAYED_STATUSES,
        zero_snap_threshold: Decimal = ZERO_SNAP_THRESHOLD,
    ):
        self._policy = policy
        self._displayed_statuses = frozenset(displayed_statuses)
        self._zero_snap_threshold = Decimal(zero_snap_threshold)

    def is_displayed(self, status: str) -> bool:
        """True when a transaction with this status produces a ledger row."""
        return status in self._displayed_statuses

    @traced_engine(
        "balance_history_reconstructor",
        "1.0",
        fingerprint_fields=("currency", "current_balance"),
    )
    def reconstruct(
        self,
        currency: str,
        transactions: Sequence[AnnotatedTransaction],
        current_balance: Decimal | None,
    ) -> CurrencyLedger:
        """
        Reconstruct the balance before each displayed transaction.

        Args:
            currency: Currency label; selects the rounding rule.
            transactions: The currency's transactions, most recent first.
            current_balance: Balance after the most recent transaction.

        Returns:
            CurrencyLedger whose rows are in input order and whose
            opening_balance is the accumulator left after the oldest row.
        """
        rule = self._policy.rule_for(currency)
        balance = Decimal("0") if current_balance is None else Decimal(current_balance)
        running = balance
        rows: list[LedgerRow] = []

        with localcontext(EXACT_CONTEXT):
            for tx in transactions:
                if not self.is_displayed(tx.status):
                    continue

                if abs(running) < self._zero_snap_threshold:
                    displayed = rule.quantize(Decimal("0"))
                else:
                    displayed = rule.quantize(running)

                tx_date, tx_time = LedgerRow.split_timestamp(tx.timestamp)
                rows.append(
                    LedgerRow(
                        date=tx_date,
                        time=tx_time,
                        description=tx.description,
                        status=tx.status,
                        balance_before_transaction=displayed,
                        debit=tx.amount if tx.factor < 0 else None,
                        credit=tx.amount if tx.factor > 0 else None,
                        currency=currency,
                        transaction_id=tx.transaction_id,
                    )
                )
                running -= tx.signed_amount

        logger.debug(
            "balance_history_reconstructed",
            extra={"ledger_currency": currency, "row_count": len(rows)},
        )
        return CurrencyLedger(
            currency=currency,
            current_balance=balance,
            rows=tuple(rows),
            opening_balance=running,
        )

    def reconstruct_group(self, group: CurrencyGroup) -> CurrencyLedger:
        """Reconstruct a CurrencyGroup produced by the aggregator."""
        return self.reconstruct(
            currency=group.currency,
            transactions=group.transactions,
            current_balance=group.current_balance,
        )


def reconstruct(
    currency: str,
    transactions: Sequence[AnnotatedTransaction],
    current_balance: Decimal | None,
    policy: RoundingPolicy = DEFAULT_ROUNDING_POLICY,
) -> tuple[LedgerRow, ...]:
    """Functional form: returns the rows only."""
    ledger = BalanceHistoryReconstructor(policy).reconstruct(
        currency=currency,
        transactions=transactions,
        current_balance=current_balance,
    )
    return ledger.rows
