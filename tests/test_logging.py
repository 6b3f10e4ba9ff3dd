"""
Tests for the JSON log records the ledger emits.

Covers:
- LEDGER_ENGINE_TRACE records from both engines
- Degradation warnings (unknown currency, unresolved related party)
- account_id / currency context bound while a report is built,
  including records emitted from reconstruction worker threads
- Exception code and attribute extraction
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from ledger_engines.aggregator import LedgerAggregator
from ledger_engines.reconstructor import BalanceHistoryReconstructor
from ledger_kernel.exceptions import InvalidAmountError
from ledger_kernel.logging_config import LogContext, configure_logging, get_logger
from ledger_services import InMemoryTransactionSource, LedgerReportService


@pytest.fixture
def log_stream() -> StringIO:
    stream = StringIO()
    configure_logging(level=logging.DEBUG, handler=logging.StreamHandler(stream))
    return stream


def _records(stream: StringIO, message: str | None = None) -> list[dict]:
    records = [json.loads(line) for line in stream.getvalue().splitlines() if line]
    if message is None:
        return records
    return [r for r in records if r["message"] == message]


class TestEngineTraceRecords:
    def test_aggregator_trace(self, log_stream, make_tx, no_parties):
        LedgerAggregator().aggregate(
            transactions=[make_tx(), make_tx(currency="Bitcoin")],
            resolve_related_name=no_parties,
        )

        (trace,) = _records(log_stream, "LEDGER_ENGINE_TRACE")
        assert trace["logger"] == "ledger_kernel.engines.tracer"
        assert trace["engine_name"] == "ledger_aggregator"
        assert trace["engine_version"] == "1.0"
        assert trace["function"] == "LedgerAggregator.aggregate"
        assert len(trace["input_fingerprint"]) == 16

        (summary,) = _records(log_stream, "ledger_aggregated")
        assert summary["transaction_count"] == 2
        assert summary["currency_count"] == 2

    def test_reconstructor_trace_fingerprint_stable(self, log_stream):
        reconstructor = BalanceHistoryReconstructor()
        for _ in range(2):
            reconstructor.reconstruct(
                currency="Cash", transactions=(), current_balance=Decimal("12.00")
            )
        reconstructor.reconstruct(
            currency="Cash", transactions=(), current_balance=Decimal("12.01")
        )

        traces = _records(log_stream, "LEDGER_ENGINE_TRACE")
        assert [t["engine_name"] for t in traces] == ["balance_history_reconstructor"] * 3
        first, second, third = (t["input_fingerprint"] for t in traces)
        assert first == second
        assert first != third


class TestDegradationWarnings:
    def test_missing_currency(self, log_stream, make_tx, no_parties):
        LedgerAggregator().aggregate(
            transactions=[make_tx(currency=None, transaction_id="tx-nocur")],
            resolve_related_name=no_parties,
        )

        (warning,) = _records(log_stream, "currency_missing")
        assert warning["level"] == "WARNING"
        assert warning["error_code"] == "UNKNOWN_CURRENCY"
        assert warning["tx_id"] == "tx-nocur"
        assert warning["bucket"] == "Unknown Currency"

    def test_resolver_miss(self, log_stream, make_tx, resolver):
        LedgerAggregator().aggregate(
            transactions=[make_tx(type_description="Send Money", related_profile_id=999)],
            resolve_related_name=resolver,
        )

        (warning,) = _records(log_stream, "related_party_unresolved")
        assert warning["error_code"] == "UNRESOLVED_RELATED_PARTY"
        assert warning["profile_id"] == "999"
        assert warning["reason"] == "not found"

    def test_resolver_failure_carries_traceback(self, log_stream, make_tx):
        def broken(profile_id):
            raise ConnectionError("profile store unavailable")

        LedgerAggregator().aggregate(
            transactions=[make_tx(type_description="Send Money", related_profile_id=101)],
            resolve_related_name=broken,
        )

        (warning,) = _records(log_stream, "related_party_lookup_failed")
        assert warning["error_code"] == "UNRESOLVED_RELATED_PARTY"
        assert warning["exc_type"] == "ConnectionError"
        assert warning["exc_message"] == "profile store unavailable"
        assert "exc_code" not in warning
        assert "Traceback" in warning["traceback"]


class TestRequestContext:
    """build_report binds account_id; each reconstruction binds currency."""

    def _service(self, make_tx, resolver, **kwargs) -> LedgerReportService:
        source = InMemoryTransactionSource(
            {
                7: [
                    make_tx("5.00"),
                    make_tx("1", currency="Bitcoin"),
                    make_tx("2", currency="Stellar"),
                ]
            }
        )
        return LedgerReportService(source, resolver, **kwargs)

    def test_records_carry_account_and_currency(self, log_stream, make_tx, resolver):
        self._service(make_tx, resolver).build_report(7)

        (built,) = _records(log_stream, "ledger_report_built")
        assert built["account_id"] == "7"
        assert "currency" not in built

        reconstructed = _records(log_stream, "balance_history_reconstructed")
        assert len(reconstructed) == 3
        for record in reconstructed:
            assert record["account_id"] == "7"
            assert record["currency"] == record["ledger_currency"]

    def test_worker_threads_keep_account_id(self, log_stream, make_tx, resolver):
        self._service(make_tx, resolver, max_workers=4).build_report(7)

        reconstructed = _records(log_stream, "balance_history_reconstructed")
        assert {r["ledger_currency"] for r in reconstructed} == {"Cash", "Bitcoin", "Stellar"}
        for record in reconstructed:
            assert record["account_id"] == "7"
            assert record["currency"] == record["ledger_currency"]

        engine_traces = [
            r
            for r in _records(log_stream, "LEDGER_ENGINE_TRACE")
            if r["engine_name"] == "balance_history_reconstructor"
        ]
        assert len(engine_traces) == 3
        assert all(r["account_id"] == "7" for r in engine_traces)

    def test_context_released_after_report(self, make_tx, resolver):
        self._service(make_tx, resolver, max_workers=2).build_report(7)
        assert LogContext.current() == {}

    def test_nested_bind_restores_outer_value(self):
        with LogContext.bind(account_id=1, currency="Cash"):
            with LogContext.bind(currency="Bitcoin"):
                assert LogContext.current() == {"account_id": "1", "currency": "Bitcoin"}
            assert LogContext.current() == {"account_id": "1", "currency": "Cash"}
        assert LogContext.current() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="unknown log context fields"):
            with LogContext.bind(user="alice"):
                pass


class TestExceptionFields:
    def test_invalid_amount_attributes(self, log_stream, make_tx, no_parties):
        logger = get_logger("services.test")
        try:
            LedgerAggregator().aggregate(
                transactions=[make_tx("abc", currency="Litecoin", transaction_id="tx-bad")],
                resolve_related_name=no_parties,
            )
        except InvalidAmountError:
            logger.error("report_failed", exc_info=True)

        (record,) = _records(log_stream, "report_failed")
        assert record["logger"] == "ledger_kernel.services.test"
        assert record["exc_code"] == "INVALID_AMOUNT"
        assert record["exc_transaction_id"] == "tx-bad"
        assert record["exc_currency"] == "Litecoin"
        assert record["exc_raw_amount"] == "abc"
        assert record["exc_reason"] == "not a decimal number"

    def test_decimal_extras_in_plain_notation(self, log_stream):
        get_logger("test").info("balance", extra={"balance": Decimal("1E-7")})
        (record,) = _records(log_stream, "balance")
        assert record["balance"] == "0.0000001"


class TestConfigureLogging:
    def test_first_handler_wins(self, log_stream):
        second = logging.StreamHandler(StringIO())
        installed = configure_logging(handler=second)

        assert installed is not second
        assert len(logging.getLogger("ledger_kernel").handlers) == 1

    def test_default_level_drops_debug(self):
        stream = StringIO()
        configure_logging(handler=logging.StreamHandler(stream))
        get_logger("test").debug("hidden")
        get_logger("test").info("shown")
        assert [r["message"] for r in _records(stream)] == ["shown"]
