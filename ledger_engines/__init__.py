"""
Module: ledger_engines
Responsibility:
    Package entrypoint that re-exports the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel. MUST NOT import ledger_services.

Invariants enforced:
    - Purity: engines never read the clock; timestamps come from inputs.
    - Decimal-only arithmetic for every balance.
    - Determinism: identical inputs produce identical outputs.

Usage:
    from ledger_engines import LedgerAggregator, BalanceHistoryReconstructor
"""

from ledger_engines.aggregator import AggregationResult, LedgerAggregator, aggregate
from ledger_engines.reconstructor import (
    ZERO_SNAP_THRESHOLD,
    BalanceHistoryReconstructor,
    reconstruct,
)
from ledger_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "ZERO_SNAP_THRESHOLD",
    "AggregationResult",
    "BalanceHistoryReconstructor",
    "LedgerAggregator",
    "aggregate",
    "compute_input_fingerprint",
    "reconstruct",
    "traced_engine",
]
