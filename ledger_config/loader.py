"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a ledger configuration YAML document and parses it into the frozen
dataclasses of ``ledger_config.schema``. Runtime callers go through
``ledger_config.get_active_config()``.

Invariants enforced
-------------------
* Every structural problem raises ``InvalidLedgerConfigError`` naming the
  offending field path; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or ill-typed keys  -> ``InvalidLedgerConfigError``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import CurrencyRoundingDef, LedgerConfig, RoundingRuleDef
from ledger_kernel.domain.rounding import SUPPORTED_ROUNDING_MODES
from ledger_kernel.exceptions import InvalidLedgerConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidLedgerConfigError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidLedgerConfigError("<root>", "document must be a mapping")
    return data


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise InvalidLedgerConfigError(f"{path}{key}", "required field is missing")
    return data[key]


def _string_list(value: Any, path: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidLedgerConfigError(path, "must be a list of strings")
    return tuple(value)


def parse_rounding_rule(data: Any, path: str) -> RoundingRuleDef:
    """Parse a ``RoundingRuleDef`` from ``{decimal_places, rounding}``."""
    if not isinstance(data, dict):
        raise InvalidLedgerConfigError(path, "rounding rule must be a mapping")
    places = _require(data, "decimal_places", f"{path}.")
    if not isinstance(places, int) or isinstance(places, bool) or places < 0:
        raise InvalidLedgerConfigError(
            f"{path}.decimal_places", "must be a non-negative integer"
        )
    rounding = data.get("rounding", "ROUND_HALF_UP")
    if rounding not in SUPPORTED_ROUNDING_MODES:
        raise InvalidLedgerConfigError(
            f"{path}.rounding", f"unsupported rounding mode {rounding!r}"
        )
    return RoundingRuleDef(decimal_places=places, rounding=rounding)


def parse_currency_rounding(data: Any) -> tuple[CurrencyRoundingDef, ...]:
    """Parse the ``rounding.currencies`` mapping, preserving document order."""
    if data is None:
        return ()
    if not isinstance(data, dict):
        raise InvalidLedgerConfigError("rounding.currencies", "must be a mapping")
    return tuple(
        CurrencyRoundingDef(
            currency=str(currency),
            rule=parse_rounding_rule(rule, f"rounding.currencies.{currency}"),
        )
        for currency, rule in data.items()
    )


def parse_threshold(value: Any) -> Decimal:
    """Parse the zero-snap threshold; floats go through ``str`` first."""
    try:
        threshold = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidLedgerConfigError("zero_snap_threshold", "must be a decimal") from e
    if not threshold.is_finite() or threshold < 0:
        raise InvalidLedgerConfigError(
            "zero_snap_threshold", "must be a finite non-negative decimal"
        )
    return threshold


def parse_ledger_config(data: dict[str, Any]) -> LedgerConfig:
    """
    Parse a ``LedgerConfig`` from a dict.

    Required: ``config_id``, ``version``, ``rounding.default``,
    ``statuses.balance_excluded``, ``statuses.displayed``.
    """
    rounding = _require(data, "rounding", "")
    if not isinstance(rounding, dict):
        raise InvalidLedgerConfigError("rounding", "must be a mapping")
    statuses = _require(data, "statuses", "")
    if not isinstance(statuses, dict):
        raise InvalidLedgerConfigError("statuses", "must be a mapping")
    labels = data.get("labels") or {}
    if not isinstance(labels, dict):
        raise InvalidLedgerConfigError("labels", "must be a mapping")

    version = _require(data, "version", "")
    if not isinstance(version, int) or isinstance(version, bool):
        raise InvalidLedgerConfigError("version", "must be an integer")

    return LedgerConfig(
        config_id=str(_require(data, "config_id", "")),
        version=version,
        default_rounding=parse_rounding_rule(
            _require(rounding, "default", "rounding."), "rounding.default"
        ),
        currency_rounding=parse_currency_rounding(rounding.get("currencies")),
        balance_excluded_statuses=_string_list(
            _require(statuses, "balance_excluded", "statuses."),
            "statuses.balance_excluded",
        ),
        displayed_statuses=_string_list(
            _require(statuses, "displayed", "statuses."), "statuses.displayed"
        ),
        transfer_type_descriptions=_string_list(
            data.get("transfer_types", []), "transfer_types"
        ),
        known_currencies=_string_list(data.get("known_currencies", []), "known_currencies"),
        unknown_currency_label=str(labels.get("unknown_currency", "Unknown Currency")),
        unknown_party_name=str(labels.get("unknown_party", "Unknown User")),
        missing_description=str(labels.get("missing_description", "N/A")),
        zero_snap_threshold=parse_threshold(data.get("zero_snap_threshold", "0.000001")),
    )


def load_ledger_config(path: Path) -> LedgerConfig:
    """Load and parse a ledger configuration YAML file."""
    return parse_ledger_config(load_yaml_file(path))


def compute_checksum(config: LedgerConfig) -> str:
    """Deterministic SHA-256 of the parsed configuration."""
    canonical = json.dumps(dataclasses.asdict(config), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
