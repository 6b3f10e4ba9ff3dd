"""
Bridges from LedgerConfig to engine inputs.

The engines never import ``ledger_config``; these helpers translate a parsed
configuration into the kernel rounding policy and configured engines.
"""

from __future__ import annotations

from ledger_config.schema import LedgerConfig, RoundingRuleDef
from ledger_engines.aggregator import LedgerAggregator
from ledger_engines.reconstructor import BalanceHistoryReconstructor
from ledger_kernel.domain.rounding import RoundingPolicy, RoundingRule


def _rule(definition: RoundingRuleDef) -> RoundingRule:
    return RoundingRule(
        decimal_places=definition.decimal_places,
        rounding=definition.rounding,
    )


def build_rounding_policy(config: LedgerConfig) -> RoundingPolicy:
    return RoundingPolicy(
        rules={b.currency: _rule(b.rule) for b in config.currency_rounding},
        default_rule=_rule(config.default_rounding),
    )


def build_aggregator(config: LedgerConfig) -> LedgerAggregator:
    return LedgerAggregator(
        build_rounding_policy(config),
        excluded_statuses=config.balance_excluded_statuses,
        transfer_types=config.transfer_type_descriptions,
        unknown_currency=config.unknown_currency_label,
        unknown_party_name=config.unknown_party_name,
        missing_description=config.missing_description,
    )


def build_reconstructor(config: LedgerConfig) -> BalanceHistoryReconstructor:
    return BalanceHistoryReconstructor(
        build_rounding_policy(config),
        displayed_statuses=config.displayed_statuses,
        zero_snap_threshold=config.zero_snap_threshold,
    )
