"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LedgerKernelError:

    LedgerKernelError (base)
    |
    +-- AmountError
    |   +-- InvalidAmountError
    |
    +-- PartyError
    |   +-- UnresolvedRelatedPartyError
    |
    +-- CurrencyError
    |   +-- UnknownCurrencyError
    |
    +-- RoundingError
    |   +-- InvalidRoundingRuleError
    |
    +-- ConfigError
        +-- InvalidLedgerConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|--------------------------------------------
Amount     | INVALID_AMOUNT            | Amount is non-numeric, NaN, infinite or < 0
-----------|---------------------------|--------------------------------------------
Party      | UNRESOLVED_RELATED_PARTY  | Related profile lookup missed or failed
-----------|---------------------------|--------------------------------------------
Currency   | UNKNOWN_CURRENCY          | Transaction carries no currency label
-----------|---------------------------|--------------------------------------------
Rounding   | INVALID_ROUNDING_RULE     | Negative places or unsupported mode
-----------|---------------------------|--------------------------------------------
Config     | INVALID_LEDGER_CONFIG     | Ledger configuration document is malformed

===============================================================================
HANDLING PATTERNS
===============================================================================

1. FATAL vs NON-FATAL:

    InvalidAmountError propagates out of aggregation: the balance of the
    affected currency cannot be trusted.

    UnresolvedRelatedPartyError and UnknownCurrencyError are never raised
    out of the engines. The aggregator substitutes a placeholder name or the
    "Unknown Currency" bucket and logs the code instead:

        except UnresolvedRelatedPartyError as e:
            logger.warning("related_party_unresolved",
                           extra={"error_code": e.code, "profile_id": e.profile_id})

2. USE STRUCTURED DATA (not message parsing):

    except InvalidAmountError as e:
        return {
            "error": e.code,
            "transaction_id": e.transaction_id,
            "currency": e.currency,
            "raw_amount": e.raw_amount,
        }
"""

from typing import Any


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Amount-related exceptions


class AmountError(LedgerKernelError):
    """Base exception for amount-related errors."""

    code: str = "AMOUNT_ERROR"


class InvalidAmountError(AmountError):
    """Transaction amount is not a usable non-negative decimal magnitude."""

    code: str = "INVALID_AMOUNT"

    def __init__(
        self,
        transaction_id: Any,
        currency: str,
        raw_amount: Any,
        reason: str = "not a decimal number",
    ):
        self.transaction_id = transaction_id
        self.currency = currency
        self.raw_amount = raw_amount
        self.reason = reason
        super().__init__(
            f"Invalid amount {raw_amount!r} for transaction {transaction_id} "
            f"in {currency}: {reason}"
        )


# Related-party exceptions


class PartyError(LedgerKernelError):
    """Base exception for related-party errors."""

    code: str = "PARTY_ERROR"


class UnresolvedRelatedPartyError(PartyError):
    """
    Related profile could not be resolved to a name.

    Non-fatal: the aggregator substitutes a placeholder name.
    """

    code: str = "UNRESOLVED_RELATED_PARTY"

    def __init__(self, profile_id: Any, reason: str = "not found"):
        self.profile_id = profile_id
        self.reason = reason
        super().__init__(f"Related profile {profile_id} unresolved: {reason}")


# Currency exceptions


class CurrencyError(LedgerKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class UnknownCurrencyError(CurrencyError):
    """
    Transaction carries no currency label.

    Non-fatal: the transaction is bucketed under the unknown-currency label.
    """

    code: str = "UNKNOWN_CURRENCY"

    def __init__(self, transaction_id: Any, bucket: str):
        self.transaction_id = transaction_id
        self.bucket = bucket
        super().__init__(
            f"Transaction {transaction_id} has no currency, bucketed as {bucket!r}"
        )


# Rounding exceptions


class RoundingError(LedgerKernelError):
    """Base exception for rounding-related errors."""

    code: str = "ROUNDING_ERROR"


class InvalidRoundingRuleError(RoundingError):
    """Rounding rule has negative places or an unsupported rounding mode."""

    code: str = "INVALID_ROUNDING_RULE"

    def __init__(self, decimal_places: Any, rounding: Any, reason: str):
        self.decimal_places = decimal_places
        self.rounding = rounding
        self.reason = reason
        super().__init__(
            f"Invalid rounding rule (places={decimal_places!r}, "
            f"rounding={rounding!r}): {reason}"
        )


# Configuration exceptions


class ConfigError(LedgerKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidLedgerConfigError(ConfigError):
    """Ledger configuration document is malformed."""

    code: str = "INVALID_LEDGER_CONFIG"

    def __init__(self, field_path: str, reason: str):
        self.field_path = field_path
        self.reason = reason
        super().__init__(f"Invalid ledger config at '{field_path}': {reason}")
