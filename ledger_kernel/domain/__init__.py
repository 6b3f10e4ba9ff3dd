"""Pure domain layer: DTOs, rounding policy and related-party resolution."""

from ledger_kernel.domain.dtos import (
    BALANCE_EXCLUDED_STATUSES,
    DISPLAYED_STATUSES,
    MISSING_DESCRIPTION,
    TRANSFER_TYPE_DESCRIPTIONS,
    UNKNOWN_CURRENCY,
    UNKNOWN_PARTY_NAME,
    AnnotatedTransaction,
    CurrencyGroup,
    CurrencyLedger,
    LedgerRow,
    Transaction,
    TransactionStatus,
    TransferType,
)
from ledger_kernel.domain.parties import (
    CachingPartyResolver,
    MappingPartyResolver,
    PartyName,
    RelatedPartyResolver,
)
from ledger_kernel.domain.rounding import (
    CASH_CURRENCY,
    CASH_RULE,
    DEFAULT_ROUNDING_POLICY,
    DEFAULT_RULE,
    RoundingPolicy,
    RoundingRule,
)

__all__ = [
    "BALANCE_EXCLUDED_STATUSES",
    "CASH_CURRENCY",
    "CASH_RULE",
    "DEFAULT_ROUNDING_POLICY",
    "DEFAULT_RULE",
    "DISPLAYED_STATUSES",
    "MISSING_DESCRIPTION",
    "TRANSFER_TYPE_DESCRIPTIONS",
    "UNKNOWN_CURRENCY",
    "UNKNOWN_PARTY_NAME",
    "AnnotatedTransaction",
    "CachingPartyResolver",
    "CurrencyGroup",
    "CurrencyLedger",
    "LedgerRow",
    "MappingPartyResolver",
    "PartyName",
    "RelatedPartyResolver",
    "RoundingPolicy",
    "RoundingRule",
    "Transaction",
    "TransactionStatus",
    "TransferType",
]
