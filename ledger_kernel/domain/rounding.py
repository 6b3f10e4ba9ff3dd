"""
Rounding -- Currency-label rounding rules and the policy lookup.

Responsibility:
    Maps a currency label (e.g. "Cash", "Bitcoin") to the number of decimal
    places and the rounding mode used for balance accumulation and display.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - "Cash" rounds to 2 places, half-to-even (banker's rounding).
    - Every other label rounds to 10 places, half-away-from-zero.
    - Rules are looked up, never decided by inline conditionals.

Failure modes:
    - InvalidRoundingRuleError on negative places or an unknown mode name.

Precision:
    Quantizing and balance arithmetic run under EXACT_CONTEXT, so large
    amounts are never silently truncated to the default 28 significant
    digits and never fail a quantize for lack of precision.
"""

from __future__ import annotations

import decimal
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from types import MappingProxyType

from ledger_kernel.exceptions import InvalidRoundingRuleError

CASH_CURRENCY = "Cash"

SUPPORTED_ROUNDING_MODES: frozenset[str] = frozenset({
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_DOWN,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
    decimal.ROUND_05UP,
})

# add, subtract, multiply and quantize are exact under this context
EXACT_CONTEXT = decimal.Context(
    prec=decimal.MAX_PREC,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
)


@dataclass(frozen=True)
class RoundingRule:
    """Decimal places plus a ``decimal`` rounding mode."""

    decimal_places: int
    rounding: str = ROUND_HALF_UP

    def __post_init__(self) -> None:
        if not isinstance(self.decimal_places, int) or isinstance(self.decimal_places, bool):
            raise InvalidRoundingRuleError(
                self.decimal_places, self.rounding, "decimal places must be an integer"
            )
        if self.decimal_places < 0:
            raise InvalidRoundingRuleError(
                self.decimal_places, self.rounding, "decimal places must be >= 0"
            )
        if self.rounding not in SUPPORTED_ROUNDING_MODES:
            raise InvalidRoundingRuleError(
                self.decimal_places, self.rounding, "unsupported rounding mode"
            )

    @property
    def quantum(self) -> Decimal:
        """Exponent used with Decimal.quantize() for this precision."""
        return Decimal(1).scaleb(-self.decimal_places)

    def quantize(self, value: Decimal) -> Decimal:
        """Round ``value`` to this rule's places using this rule's mode."""
        return Decimal(value).quantize(
            self.quantum, rounding=self.rounding, context=EXACT_CONTEXT
        )

    def format(self, value: Decimal) -> str:
        """Fixed-point string with exactly ``decimal_places`` digits."""
        return f"{self.quantize(value):f}"


CASH_RULE = RoundingRule(decimal_places=2, rounding=ROUND_HALF_EVEN)
DEFAULT_RULE = RoundingRule(decimal_places=10, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class RoundingPolicy:
    """
    Closed mapping of currency label -> RoundingRule.

    Contract:
        Labels are matched exactly (case-sensitive). Labels without an
        explicit rule use ``default_rule``.
    """

    rules: Mapping[str, RoundingRule] = field(default_factory=dict)
    default_rule: RoundingRule = DEFAULT_RULE

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))

    def rule_for(self, currency: str) -> RoundingRule:
        """Get the rounding rule for a currency label."""
        return self.rules.get(currency, self.default_rule)

    def round(self, value: Decimal, currency: str) -> Decimal:
        """Round ``value`` under the rule for ``currency``."""
        return self.rule_for(currency).quantize(value)

    def format(self, value: Decimal, currency: str) -> str:
        """Format ``value`` to the decimal places of ``currency``."""
        return self.rule_for(currency).format(value)


DEFAULT_ROUNDING_POLICY = RoundingPolicy(rules={CASH_CURRENCY: CASH_RULE})
