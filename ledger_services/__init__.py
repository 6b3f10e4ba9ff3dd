"""
ledger_services -- Package init and public API.

Responsibility:
    Orchestration services that compose the pure engines (ledger_engines/)
    with the injected collaborators: the transaction source and the
    related-party resolver.

Architecture position:
    Services -- orchestration over engines + kernel.

        ledger_services/ -> ledger_engines/   (allowed)
        ledger_services/ -> ledger_kernel/    (allowed)
        ledger_engines/  -> ledger_services/  (FORBIDDEN)
        ledger_kernel/   -> ledger_services/  (FORBIDDEN)
"""

from ledger_services.ledger_report_service import (
    LedgerReport,
    LedgerReportService,
    TransactionCheck,
)
from ledger_services.transaction_source import (
    InMemoryTransactionSource,
    TransactionSource,
)

__all__ = [
    "InMemoryTransactionSource",
    "LedgerReport",
    "LedgerReportService",
    "TransactionCheck",
    "TransactionSource",
]
