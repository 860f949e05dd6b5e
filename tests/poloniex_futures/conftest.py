"""
Shared fixtures for Poloniex Futures adapter tests.
"""

import pytest

from poloniex_futures import AdapterConfig, MarketRegistry, PoloniexFuturesAdapter
from poloniex_futures.parsers import parse_market

from payloads import INVERSE_CONTRACT, LINEAR_CONTRACT, NOW_MS


@pytest.fixture
def linear_market():
    return parse_market(dict(LINEAR_CONTRACT))


@pytest.fixture
def inverse_market():
    return parse_market(dict(INVERSE_CONTRACT))


@pytest.fixture
def registry(linear_market, inverse_market):
    return MarketRegistry([linear_market, inverse_market])


@pytest.fixture
def config():
    return AdapterConfig(api_key="key", api_secret="secret", passphrase="pass")


@pytest.fixture
def adapter(config):
    """Adapter with a fixed clock; no session is ever opened."""
    return PoloniexFuturesAdapter(config, clock=lambda: NOW_MS)
