"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the way to obtain configuration at runtime through
    ``get_active_config()``. Without an explicit path the packaged default
    set (``sets/default.yaml``) is used.

Architecture position:
    Configuration -- sits above ``ledger_kernel`` / ``ledger_engines`` and
    below ``ledger_services``. The kernel and engines never import from
    this package; ``bridges`` translates a config into engine inputs.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``InvalidLedgerConfigError`` -- schema or structural validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LEDGER_CONFIG_TRACE`` log entry containing the config_id, version and
    checksum.
"""

from __future__ import annotations

from pathlib import Path

from ledger_config.loader import compute_checksum, load_ledger_config
from ledger_config.schema import CurrencyRoundingDef, LedgerConfig, RoundingRuleDef
from ledger_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | None = None) -> LedgerConfig:
    """Load the ledger configuration from ``path`` or the packaged default."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = load_ledger_config(config_path)

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": compute_checksum(config),
            "config_path": str(config_path),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CurrencyRoundingDef",
    "LedgerConfig",
    "RoundingRuleDef",
    "get_active_config",
]
