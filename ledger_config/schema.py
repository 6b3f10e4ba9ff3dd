"""
LedgerConfig schema.

Defines the human-authored, reviewable configuration for ledger
reconstruction. YAML documents are parsed into these types by the loader
and translated into engine inputs by the bridges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoundingRuleDef:
    """Decimal places and ``decimal`` rounding mode name for one currency."""

    decimal_places: int
    rounding: str = ROUND_HALF_UP


@dataclass(frozen=True)
class CurrencyRoundingDef:
    """Binds a currency label to its rounding rule."""

    currency: str
    rule: RoundingRuleDef


# ---------------------------------------------------------------------------
# Top-level configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    """
    Complete ledger configuration.

    ``known_currencies`` lists the currencies a balance summary always
    shows, in display order, even when the account never used them.
    """

    config_id: str
    version: int
    default_rounding: RoundingRuleDef
    currency_rounding: tuple[CurrencyRoundingDef, ...] = ()
    balance_excluded_statuses: tuple[str, ...] = ()
    displayed_statuses: tuple[str, ...] = ()
    transfer_type_descriptions: tuple[str, ...] = ()
    known_currencies: tuple[str, ...] = ()
    unknown_currency_label: str = "Unknown Currency"
    unknown_party_name: str = "Unknown User"
    missing_description: str = "N/A"
    zero_snap_threshold: Decimal = field(default_factory=lambda: Decimal("0.000001"))
