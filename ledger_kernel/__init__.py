"""
Ledger Kernel

Pure domain core for per-currency transaction ledgers:
- Settled balance aggregation with currency-specific rounding
- Backward reconstruction of pre-transaction balances
- Typed exceptions and structured logging
"""

__version__ = "0.1.0"
