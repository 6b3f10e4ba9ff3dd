"""
ledger_services.ledger_report_service -- Per-account ledger report orchestration.

Responsibility:
    Fetch an account's transactions, aggregate them into per-currency
    groups and balances, and reconstruct each currency's pre-transaction
    balance history. The result is a renderer-neutral LedgerReport.

Architecture position:
    Services -- orchestration over engines + kernel.
    Composes LedgerAggregator and BalanceHistoryReconstructor, configured
    from ``ledger_config`` via the bridges.

Invariants enforced:
    - One aggregation per request; one reconstruction per currency.
    - Related-party lookups are cached per request (one lookup per
      distinct profile id).
    - Currencies are independent: with ``max_workers > 1`` they are
      reconstructed on a thread pool, each with its own accumulator.
    - Workers see the request's LogContext (account_id) through a copied
      contextvars context.

Failure modes:
    - InvalidAmountError propagates from aggregation.
    - Transaction source errors propagate unchanged.

Usage:
    source = InMemoryTransactionSource({"acct-1": transactions})
    service = LedgerReportService(source, MappingPartyResolver(names))
    report = service.build_report("acct-1")
    report.balance_summary()  # [("Cash", "12.00"), ("Procurrency", "0.0000000000"), ...]
"""

from __future__ import annotations

import contextvars
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ledger_config import LedgerConfig, get_active_config
from ledger_config.bridges import (
    build_aggregator,
    build_reconstructor,
    build_rounding_policy,
)
from ledger_engines.aggregator import AggregationResult
from ledger_kernel.domain.dtos import CurrencyGroup, CurrencyLedger, LedgerRow
from ledger_kernel.domain.parties import CachingPartyResolver, PartyName
from ledger_kernel.domain.rounding import DEFAULT_ROUNDING_POLICY, RoundingPolicy
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_services.transaction_source import TransactionSource

logger = get_logger("services.ledger_report")


@dataclass(frozen=True)
class TransactionCheck:
    """Answer to "does this account have any transactions at all"."""

    has_transactions: bool
    transaction_count: int


@dataclass(frozen=True)
class LedgerReport:
    """
    Balances and reconstructed ledgers for one account.

    ``ledgers`` preserves the aggregator's first-seen currency order.
    """

    account_id: Any
    ledgers: Mapping[str, CurrencyLedger]
    known_currencies: tuple[str, ...] = ()
    policy: RoundingPolicy = DEFAULT_ROUNDING_POLICY

    @property
    def balances(self) -> dict[str, Decimal]:
        return {c: ledger.current_balance for c, ledger in self.ledgers.items()}

    @property
    def rows(self) -> dict[str, tuple[LedgerRow, ...]]:
        return {c: ledger.rows for c, ledger in self.ledgers.items()}

    @property
    def transaction_count(self) -> int:
        """Total displayed rows across all currencies."""
        return sum(len(ledger.rows) for ledger in self.ledgers.values())

    @property
    def has_transactions(self) -> bool:
        return self.transaction_count > 0

    def balance_of(self, currency: str) -> Decimal:
        ledger = self.ledgers.get(currency)
        return ledger.current_balance if ledger is not None else Decimal("0")

    def balance_summary(self) -> list[tuple[str, str]]:
        """
        Formatted balance per currency for display.

        Known currencies come first in configured order, defaulting to zero
        when unseen; any other currency the account used follows.
        """
        currencies = list(self.known_currencies)
        currencies += [c for c in self.ledgers if c not in self.known_currencies]
        return [(c, self.policy.format(self.balance_of(c), c)) for c in currencies]

    def display_rows(self, currency: str) -> list[dict[str, str]]:
        ledger = self.ledgers.get(currency)
        return [row.to_display() for row in ledger.rows] if ledger else []


class LedgerReportService:
    """
    Builds LedgerReports from a transaction source and a name resolver.

    Contract:
        Holds no per-request state; each call creates its own resolver
        cache and engine outputs, so one instance may serve concurrent
        requests.
    """

    def __init__(
        self,
        source: TransactionSource,
        resolver: Callable[[Any], PartyName | None],
        config: LedgerConfig | None = None,
        max_workers: int = 1,
    ):
        self.source = source
        self.resolver = resolver
        self.config = config if config is not None else get_active_config()
        self.max_workers = max(1, max_workers)
        self.policy = build_rounding_policy(self.config)
        self.aggregator = build_aggregator(self.config)
        self.reconstructor = build_reconstructor(self.config)

    def build_report(self, account_id: Any) -> LedgerReport:
        """Aggregate and reconstruct every currency ledger of an account."""
        with LogContext.bind(account_id=str(account_id)):
            transactions = self.source.fetch_transactions(account_id)
            resolver = CachingPartyResolver(self.resolver)

            aggregation = self.aggregator.aggregate(
                transactions=transactions,
                resolve_related_name=resolver,
            )
            ledgers = self._reconstruct_all(aggregation)

            report = LedgerReport(
                account_id=account_id,
                ledgers=ledgers,
                known_currencies=self.config.known_currencies,
                policy=self.policy,
            )
            logger.info(
                "ledger_report_built",
                extra={
                    "currency_count": len(ledgers),
                    "row_count": report.transaction_count,
                    "party_lookups": resolver.lookups,
                },
            )
            return report

    def check_transactions(self, account_id: Any) -> TransactionCheck:
        report = self.build_report(account_id)
        return TransactionCheck(
            has_transactions=report.has_transactions,
            transaction_count=report.transaction_count,
        )

    def _reconstruct_all(self, aggregation: AggregationResult) -> dict[str, CurrencyLedger]:
        groups = list(aggregation.groups.values())
        if self.max_workers == 1 or len(groups) < 2:
            return {g.currency: self._reconstruct(g) for g in groups}

        # Each worker runs in its own copy of the request's log context;
        # results are collected in group order, not completion order
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(contextvars.copy_context().run, self._reconstruct, g)
                for g in groups
            ]
            ledgers = [f.result() for f in futures]
        return {ledger.currency: ledger for ledger in ledgers}

    def _reconstruct(self, group: CurrencyGroup) -> CurrencyLedger:
        with LogContext.bind(currency=group.currency):
            return self.reconstructor.reconstruct_group(group)
