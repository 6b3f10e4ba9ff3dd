"""
ledger_engines.aggregator -- Per-currency grouping and settled balance calculation.

Responsibility:
    Partition an account's transactions by currency label, compute each
    currency's current balance from settled transactions only, and attach a
    display description to every transaction (naming the counterparty for
    peer-to-peer transfers).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The only outward call is the injected related-party resolver.
    Consumed by the reconstructor (via the report service).

Invariants enforced:
    - Every transaction lands in exactly one currency group.
    - Round-then-sum: each settled transaction's signed amount is rounded
      under the currency's rule before it is added to the balance.
    - Traversal order is preserved; the aggregator never re-sorts.

Failure modes:
    - InvalidAmountError when a transaction amount is not a finite,
      non-negative decimal. Aborts the call.
    - Missing currency label: bucketed under "Unknown Currency" (logged).
    - Resolver miss or failure: placeholder name (logged). Never aborts.

Usage:
    from ledger_engines.aggregator import LedgerAggregator

    result = LedgerAggregator().aggregate(
        transactions=transactions,
        resolve_related_name=resolver,
    )
    result.balances["Cash"]       # Decimal("12.00")
    result.groups["Cash"].transactions
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from ledger_engines.tracer import traced_engine
from ledger_kernel.domain.dtos import (
    BALANCE_EXCLUDED_STATUSES,
    MISSING_DESCRIPTION,
    TRANSFER_TYPE_DESCRIPTIONS,
    UNKNOWN_CURRENCY,
    UNKNOWN_PARTY_NAME,
    AnnotatedTransaction,
    CurrencyGroup,
    Transaction,
)
from ledger_kernel.domain.parties import PartyName
from ledger_kernel.domain.rounding import (
    DEFAULT_ROUNDING_POLICY,
    EXACT_CONTEXT,
    RoundingPolicy,
)
from ledger_kernel.exceptions import (
    InvalidAmountError,
    UnknownCurrencyError,
    UnresolvedRelatedPartyError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.aggregator")

NameResolver = Callable[[Any], "PartyName | str | None"]


@dataclass(frozen=True)
class AggregationResult:
    """Currency groups in first-seen order, each carrying its balance."""

    groups: Mapping[str, CurrencyGroup] = field(default_factory=dict)

    @property
    def balances(self) -> dict[str, Decimal]:
        return {currency: group.current_balance for currency, group in self.groups.items()}

    @property
    def transaction_count(self) -> int:
        return sum(len(group) for group in self.groups.values())


class LedgerAggregator:
    """
    Pure aggregator over one account's transactions.

    Contract:
        No I/O apart from the injected resolver, fully deterministic for a
        deterministic resolver. Status sets and labels are constructor
        parameters so configuration can override them.
    """

    def __init__(
        self,
        policy: RoundingPolicy = DEFAULT_ROUNDING_POLICY,
        *,
        excluded_statuses: Iterable[str] = BALANCE_EXCLUDED_STATUSES,
        transfer_types: Iterable[str] = TRANSFER_TYPE_DESCRIPTIONS,
        unknown_currency: str = UNKNOWN_CURRENCY,
        unknown_party_name: str = UNKNOWN_PARTY_NAME,
        missing_description: str = MISSING_DESCRIPTION,
    ):
        self._policy = policy
        self._excluded_statuses = frozenset(excluded_statuses)
        self._transfer_types = frozenset(transfer_types)
        self._unknown_currency = unknown_currency
        self._unknown_party_name = unknown_party_name
        self._missing_description = missing_description

    @property
    def policy(self) -> RoundingPolicy:
        return self._policy

    def is_settled(self, status: str) -> bool:
        """True when a transaction with this status counts toward the balance."""
        return status not in self._excluded_statuses

    @traced_engine("ledger_aggregator", "1.0", fingerprint_fields=("transactions",))
    def aggregate(
        self,
        transactions: Sequence[Transaction],
        resolve_related_name: NameResolver,
    ) -> AggregationResult:
        """
        Group transactions by currency and compute settled balances.

        Args:
            transactions: Transactions sorted descending by timestamp.
            resolve_related_name: profile id -> PartyName (or None).

        Returns:
            AggregationResult with one CurrencyGroup per currency label.

        Raises:
            InvalidAmountError: If any amount is malformed.
        """
        balances: dict[str, Decimal] = {}
        members: dict[str, list[AnnotatedTransaction]] = {}

        for tx in transactions:
            currency = self._currency_of(tx)
            if currency not in members:
                members[currency] = []
                balances[currency] = Decimal("0")

            amount = self._parse_amount(tx, currency)
            if self.is_settled(tx.status):
                with localcontext(EXACT_CONTEXT):
                    signed = self._policy.round(tx.factor * amount, currency)
                    balances[currency] += signed

            related_name = self._resolve_related_name(tx, resolve_related_name)
            members[currency].append(
                AnnotatedTransaction(
                    transaction=tx,
                    amount=amount,
                    description=self._describe(tx, related_name),
                    related_party_name=related_name,
                )
            )

        groups = {
            currency: CurrencyGroup(
                currency=currency,
                transactions=tuple(annotated),
                current_balance=balances[currency],
            )
            for currency, annotated in members.items()
        }

        result = AggregationResult(groups=groups)
        logger.info(
            "ledger_aggregated",
            extra={
                "transaction_count": result.transaction_count,
                "currency_count": len(groups),
            },
        )
        return result

    # -- internals --------------------------------------------------------

    def _currency_of(self, tx: Transaction) -> str:
        code = tx.currency_code
        if code and code.strip():
            return code
        err = UnknownCurrencyError(tx.transaction_id, self._unknown_currency)
        logger.warning(
            "currency_missing",
            extra={
                "error_code": err.code,
                "tx_id": tx.transaction_id,
                "bucket": self._unknown_currency,
            },
        )
        return self._unknown_currency

    def _parse_amount(self, tx: Transaction, currency: str) -> Decimal:
        raw = tx.amount
        if isinstance(raw, bool):
            raise InvalidAmountError(tx.transaction_id, currency, raw)
        try:
            amount = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
        except (InvalidOperation, ValueError, TypeError) as e:
            raise InvalidAmountError(tx.transaction_id, currency, raw) from e

        if not amount.is_finite():
            raise InvalidAmountError(tx.transaction_id, currency, raw, "not a finite number")
        if amount < 0:
            raise InvalidAmountError(
                tx.transaction_id, currency, raw, "amount must be a non-negative magnitude"
            )
        return amount

    def _resolve_related_name(
        self,
        tx: Transaction,
        resolve_related_name: NameResolver,
    ) -> str | None:
        profile_id = tx.related_profile_id
        if profile_id is None or profile_id == "":
            return None

        try:
            name = resolve_related_name(profile_id)
        except UnresolvedRelatedPartyError as e:
            logger.warning(
                "related_party_unresolved",
                extra={"error_code": e.code, "profile_id": str(profile_id), "reason": e.reason},
            )
            return self._unknown_party_name
        except Exception:
            # Lookup failures never block balance computation
            logger.warning(
                "related_party_lookup_failed",
                extra={
                    "error_code": UnresolvedRelatedPartyError.code,
                    "profile_id": str(profile_id),
                },
                exc_info=True,
            )
            return self._unknown_party_name

        display = name if isinstance(name, str) else (name.display_name if name else "")
        if not display:
            logger.warning(
                "related_party_unresolved",
                extra={
                    "error_code": UnresolvedRelatedPartyError.code,
                    "profile_id": str(profile_id),
                    "reason": "not found",
                },
            )
            return self._unknown_party_name
        return display

    def _describe(self, tx: Transaction, related_name: str | None) -> str:
        if tx.type_description in self._transfer_types and related_name is not None:
            return f"to {related_name}" if tx.factor < 0 else f"from {related_name}"
        return tx.type_description or self._missing_description


def aggregate(
    transactions: Sequence[Transaction],
    resolve_related_name: NameResolver,
    policy: RoundingPolicy = DEFAULT_ROUNDING_POLICY,
) -> tuple[dict[str, CurrencyGroup], dict[str, Decimal]]:
    """Functional form: returns ``(groups, balances)`` keyed by currency."""
    result = LedgerAggregator(policy).aggregate(
        transactions=transactions,
        resolve_related_name=resolve_related_name,
    )
    return dict(result.groups), result.balances
