"""
Pytest fixtures for the ledger test suite.

Provides:
- A transaction factory with deterministic timestamps
- Stub related-party resolvers
- Logging reset between tests
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest

from ledger_kernel.domain.dtos import Transaction, TransactionStatus
from ledger_kernel.domain.parties import MappingPartyResolver, PartyName
from ledger_kernel.logging_config import reset_logging

BASE_TIME = datetime(2024, 3, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def make_tx() -> Callable[..., Transaction]:
    """
    Build a Transaction. ``minutes_ago`` places it before BASE_TIME so
    callers can list fixtures newest first.
    """
    counter = {"n": 0}

    def _make(
        amount: Any = "10.00",
        currency: str | None = "Cash",
        factor: int | None = 1,
        status: str = TransactionStatus.COMPLETED.value,
        type_description: str | None = "Deposit",
        related_profile_id: Any = None,
        minutes_ago: int | None = None,
        transaction_id: Any = None,
    ) -> Transaction:
        counter["n"] += 1
        offset = counter["n"] if minutes_ago is None else minutes_ago
        if isinstance(amount, float):
            amount = Decimal(str(amount))
        return Transaction(
            timestamp=BASE_TIME - timedelta(minutes=offset),
            amount=amount,
            currency_code=currency,
            type_factor=factor,
            type_description=type_description,
            status_description=status,
            related_profile_id=related_profile_id,
            transaction_id=transaction_id if transaction_id is not None else f"tx-{counter['n']}",
        )

    return _make


@pytest.fixture
def party_names() -> dict[int, PartyName]:
    return {
        101: PartyName("Alice", "Smith"),
        102: PartyName("Bob", "Jones"),
    }


@pytest.fixture
def resolver(party_names) -> MappingPartyResolver:
    return MappingPartyResolver(party_names)


@pytest.fixture
def no_parties() -> Callable[[Any], None]:
    """Resolver that knows nobody."""
    return lambda profile_id: None
