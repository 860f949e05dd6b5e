"""
Secure Logging Tests.
"""

import json
import logging

from poloniex_futures.logging_utils import (
    AdapterLogger,
    OrderLogEntry,
    mask_headers,
    mask_params,
    mask_url,
    mask_value,
)


class TestMasking:
    """Tests for credential masking."""

    def test_mask_value(self):
        assert mask_value("abcdefgh") == "abcd...***"
        assert mask_value("abc") == "***"
        assert mask_value("") == "***"

    def test_mask_headers(self):
        headers = {
            "PF-API-KEY": "5c2db93503aa674c74a31734",
            "PF-API-SIGN": "Zy9ns7Y4Nl0cLDnO8MOC1UZgqr8rLw5TxVY5n1e8ZfQ=",
            "PF-API-PASSPHRASE": "my-passphrase",
            "PF-API-TIMESTAMP": "1700000000000",
            "Content-Type": "application/json",
        }

        masked = mask_headers(headers)

        assert masked["PF-API-KEY"] == "5c2d...***"
        assert masked["PF-API-SIGN"] == "Zy9n...***"
        assert masked["PF-API-PASSPHRASE"] == "my-p...***"
        assert masked["PF-API-TIMESTAMP"] == "1700000000000"
        assert masked["Content-Type"] == "application/json"

    def test_mask_params(self):
        params = {
            "symbol": "BTCUSDTPERP",
            "passphrase": "secret-pass",
            "nested": {"apiKey": "abcdefgh"},
            "note": "sig=Zy9ns7Y4Nl0cLDnO8MOC1UZgqr8rLw5TxVY5n1e8ZfQ=",
        }

        masked = mask_params(params)

        assert masked["symbol"] == "BTCUSDTPERP"
        assert masked["passphrase"] == "secr...***"
        assert masked["nested"]["apiKey"] == "abcd...***"
        assert masked["note"] == "sig=***SIGN***"

    def test_mask_url(self):
        url = "https://futures-api.poloniex.com/api/v1/x?symbol=A&passphrase=p1&sign=abc"

        masked = mask_url(url)

        assert "p1" not in masked
        assert "abc" not in masked
        assert "symbol=A" in masked


class TestAdapterLogger:
    """Tests for structured log entries."""

    def test_request_ids_increment(self):
        logger = AdapterLogger("poloniexfutures")

        first = logger.log_request("timestamp", "GET", "https://x/api/v1/timestamp")
        second = logger.log_request("timestamp", "GET", "https://x/api/v1/timestamp")

        assert first == "poloniexfutures-1"
        assert second == "poloniexfutures-2"

    def test_request_entry_hashes_body(self, caplog):
        logger = AdapterLogger("poloniexfutures", "test.request")

        with caplog.at_level(logging.DEBUG, logger="test.request"):
            logger.log_request(
                "orders",
                "POST",
                "https://x/api/v1/orders",
                headers={"PF-API-KEY": "5c2db93503aa674c74a31734"},
                body='{"symbol":"BTCUSDTPERP"}',
                weight=1.5,
            )

        message = caplog.records[0].getMessage()
        entry = json.loads(message[len("REQUEST: "):])
        assert entry["weight"] == 1.5
        assert len(entry["body_hash"]) == 16
        assert "BTCUSDTPERP" not in message
        assert "5c2db93503aa674c74a31734" not in message

    def test_failed_response_is_warning(self, caplog):
        logger = AdapterLogger("poloniexfutures", "test.response")

        with caplog.at_level(logging.DEBUG, logger="test.response"):
            logger.log_response("orders", "poloniexfutures-1", 429, 12.3456, False, "POLONIEXFUTURES_429", "slow")

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.getMessage().startswith("RESPONSE_ERROR: ")

    def test_order_entry(self, caplog):
        logger = AdapterLogger("poloniexfutures", "test.order")

        with caplog.at_level(logging.INFO, logger="test.order"):
            logger.log_order("create", client_order_id="c1", exchange_order_id="e1", symbol="BTC/USDT:USDT")

        assert caplog.records[0].getMessage().startswith("ORDER: ")

    def test_order_entry_drops_unset_fields(self):
        entry = OrderLogEntry(timestamp="t", exchange_id="poloniexfutures", operation="cancel")

        assert entry.to_dict() == {"timestamp": "t", "exchange_id": "poloniexfutures", "operation": "cancel"}

    def test_info_is_prefixed_with_exchange(self, caplog):
        logger = AdapterLogger("poloniexfutures", "test.info")

        with caplog.at_level(logging.INFO, logger="test.info"):
            logger.info("Loaded 2 markets")

        assert caplog.records[0].getMessage() == "[poloniexfutures] Loaded 2 markets"
        assert not hasattr(logger, "warning")
