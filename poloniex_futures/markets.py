"""
Poloniex Futures - Market Registry.

============================================================
PURPOSE
============================================================
Read-mostly lookup of loaded markets by unified symbol and
by exchange id, plus currency code canonicalization.

Markets are loaded once per adapter and replaced only on an
explicit reload.

============================================================
"""

from typing import Dict, Iterable, List, Optional

from .errors import BadSymbol
from .types import Market


# Exchange currency id -> unified code
COMMON_CURRENCIES: Dict[str, str] = {
    "XBT": "BTC",
    "BCHSV": "BSV",
}

_REVERSE_CURRENCIES: Dict[str, str] = {code: cid for cid, code in COMMON_CURRENCIES.items()}


def safe_currency_code(currency_id: Optional[str]) -> Optional[str]:
    """
    Unified currency code for an exchange currency id.

    Example: "XBT" -> "BTC", "usdt" -> "USDT"
    """
    if currency_id is None:
        return None
    upper = currency_id.upper()
    return COMMON_CURRENCIES.get(upper, upper)


def currency_id(code: Optional[str]) -> Optional[str]:
    """Exchange currency id for a unified code ("BTC" -> "XBT")."""
    if code is None:
        return None
    upper = code.upper()
    return _REVERSE_CURRENCIES.get(upper, upper)


class MarketRegistry:
    """
    Markets indexed by symbol and by id.
    """

    def __init__(self, markets: Optional[Iterable[Market]] = None):
        self._by_symbol: Dict[str, Market] = {}
        self._by_id: Dict[str, Market] = {}
        if markets is not None:
            self.load(markets)

    def load(self, markets: Iterable[Market]) -> None:
        """Replace registered markets."""
        by_symbol: Dict[str, Market] = {}
        by_id: Dict[str, Market] = {}
        for market in markets:
            by_symbol[market.symbol] = market
            by_id[market.id] = market
        self._by_symbol = by_symbol
        self._by_id = by_id

    @property
    def loaded(self) -> bool:
        return bool(self._by_symbol)

    @property
    def symbols(self) -> List[str]:
        return sorted(self._by_symbol)

    @property
    def markets(self) -> Dict[str, Market]:
        return dict(self._by_symbol)

    def __len__(self) -> int:
        return len(self._by_symbol)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._by_symbol or symbol in self._by_id

    def market(self, symbol: str) -> Market:
        """
        Get market by unified symbol or exchange id.

        Raises:
            BadSymbol: If the market is not registered
        """
        market = self._by_symbol.get(symbol) or self._by_id.get(symbol)
        if market is None:
            raise BadSymbol(f"poloniexfutures does not have market symbol {symbol}")
        return market

    def market_id(self, symbol: str) -> str:
        return self.market(symbol).id

    def safe_market(self, market_id: Optional[str], market: Optional[Market] = None) -> Market:
        """
        Resolve the market of a raw record.

        Returns the registered market for market_id, else the
        given market, else a skeletal market whose symbol is the
        raw id.
        """
        if market_id is not None and market_id in self._by_id:
            return self._by_id[market_id]
        if market is not None:
            return market
        return Market(id=market_id, symbol=market_id)

    def safe_symbol(self, market_id: Optional[str], market: Optional[Market] = None) -> Optional[str]:
        return self.safe_market(market_id, market).symbol
