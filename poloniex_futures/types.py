"""
Poloniex Futures - Types.

============================================================
PURPOSE
============================================================
Canonical, exchange-agnostic shapes returned by the adapter.

CRITICAL PRINCIPLE:
    "Monetary fields are Decimal, never float."

Every entity keeps the untouched server payload in `info`.
Entities are built fresh per response and never mutated
across calls.

============================================================
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


# ============================================================
# MARKET
# ============================================================

@dataclass
class MinMax:
    """Lower/upper bound pair."""

    min: Optional[Decimal] = None
    max: Optional[Decimal] = None


@dataclass
class MarketPrecision:
    """Tick and lot sizes."""

    amount: Optional[Decimal] = None
    """Lot size (minimum order-size increment)."""

    price: Optional[Decimal] = None
    """Tick size (minimum price increment)."""


@dataclass
class MarketLimits:
    """Trading limits."""

    leverage: MinMax = field(default_factory=MinMax)
    amount: MinMax = field(default_factory=MinMax)
    price: MinMax = field(default_factory=MinMax)
    cost: MinMax = field(default_factory=MinMax)


@dataclass
class Market:
    """
    Perpetual contract market.

    `symbol` is the unified BASE/QUOTE:SETTLE identifier and
    `active` is a pure function of the exchange status.
    """

    id: Optional[str] = None
    """Exchange market id (e.g., BTCUSDTPERP)."""

    symbol: Optional[str] = None
    """Unified symbol (e.g., BTC/USDT:USDT)."""

    base: Optional[str] = None
    quote: Optional[str] = None
    settle: Optional[str] = None
    base_id: Optional[str] = None
    quote_id: Optional[str] = None
    settle_id: Optional[str] = None

    type: str = "swap"
    spot: bool = False
    margin: bool = False
    swap: bool = True
    future: bool = False
    option: bool = False
    contract: bool = True

    active: Optional[bool] = None
    """True when exchange status is Open."""

    linear: Optional[bool] = None
    inverse: Optional[bool] = None

    taker: Optional[Decimal] = None
    maker: Optional[Decimal] = None

    contract_size: Optional[Decimal] = None
    """Absolute value of the exchange multiplier."""

    expiry: Optional[int] = None
    expiry_datetime: Optional[str] = None
    strike: Optional[Decimal] = None
    option_type: Optional[str] = None

    precision: MarketPrecision = field(default_factory=MarketPrecision)
    limits: MarketLimits = field(default_factory=MarketLimits)

    info: Dict[str, Any] = field(default_factory=dict)


# ============================================================
# MARKET DATA
# ============================================================

@dataclass
class Ticker:
    """Best bid/ask and last trade snapshot."""

    symbol: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None

    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    bid: Optional[Decimal] = None
    bid_volume: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    ask_volume: Optional[Decimal] = None
    vwap: Optional[Decimal] = None
    open: Optional[Decimal] = None
    close: Optional[Decimal] = None
    last: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    change: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    average: Optional[Decimal] = None
    base_volume: Optional[Decimal] = None
    quote_volume: Optional[Decimal] = None

    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrderBook:
    """
    Order book snapshot.

    bids are sorted descending, asks ascending; each entry is
    [price, size].
    """

    symbol: Optional[str] = None
    bids: List[List[Decimal]] = field(default_factory=list)
    asks: List[List[Decimal]] = field(default_factory=list)
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    nonce: Optional[int] = None

    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Candle:
    """OHLCV candle."""

    timestamp: Optional[int] = None
    open: Optional[Decimal] = None
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    close: Optional[Decimal] = None
    volume: Optional[Decimal] = None

    def to_list(self) -> List[Any]:
        """[timestamp, open, high, low, close, volume]."""
        return [self.timestamp, self.open, self.high, self.low, self.close, self.volume]


# ============================================================
# TRADES AND ORDERS
# ============================================================

@dataclass
class Fee:
    """Fee paid on a trade or order."""

    cost: Optional[Decimal] = None
    currency: Optional[str] = None
    rate: Optional[Decimal] = None


@dataclass
class Trade:
    """Public or private trade."""

    id: Optional[str] = None
    order: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    symbol: Optional[str] = None
    type: Optional[str] = None
    taker_or_maker: Optional[str] = None
    side: Optional[str] = None
    price: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    fee: Optional[Fee] = None

    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Order:
    """
    Order snapshot.

    Status is read verbatim from each fetch:
    canceled if cancelExist, else open if isActive, else closed.
    """

    id: Optional[str] = None
    client_order_id: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    last_trade_timestamp: Optional[int] = None
    symbol: Optional[str] = None
    type: Optional[str] = None
    time_in_force: Optional[str] = None
    post_only: Optional[bool] = None
    side: Optional[str] = None
    price: Optional[Decimal] = None
    stop_price: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    average: Optional[Decimal] = None
    filled: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    status: Optional[str] = None
    fee: Optional[Fee] = None
    trades: Optional[List[Trade]] = None

    info: Any = None


# ============================================================
# ACCOUNT
# ============================================================

@dataclass
class Position:
    """Open contract position."""

    id: Optional[str] = None
    symbol: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None

    side: Optional[str] = None
    """long, short, or None for a flat position."""

    contracts: Optional[Decimal] = None
    contract_size: Optional[Decimal] = None
    notional: Optional[Decimal] = None
    leverage: Optional[Decimal] = None
    entry_price: Optional[Decimal] = None
    mark_price: Optional[Decimal] = None
    liquidation_price: Optional[Decimal] = None

    initial_margin: Optional[Decimal] = None
    initial_margin_percentage: Optional[Decimal] = None
    maintenance_margin: Optional[Decimal] = None
    maintenance_margin_percentage: Optional[Decimal] = None
    margin_ratio: Optional[Decimal] = None
    collateral: Optional[Decimal] = None
    margin_mode: Optional[str] = None

    unrealized_pnl: Optional[Decimal] = None
    percentage: Optional[Decimal] = None

    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BalanceEntry:
    """Balance of one currency."""

    free: Optional[Decimal] = None
    used: Optional[Decimal] = None
    total: Optional[Decimal] = None


@dataclass
class Balances:
    """Account balances keyed by unified currency code."""

    currencies: Dict[str, BalanceEntry] = field(default_factory=dict)
    timestamp: Optional[int] = None
    datetime: Optional[str] = None

    info: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, code: str) -> BalanceEntry:
        return self.currencies[code]

    def __contains__(self, code: str) -> bool:
        return code in self.currencies

    def get(self, code: str) -> Optional[BalanceEntry]:
        return self.currencies.get(code)


@dataclass
class FundingPayment:
    """Funding fee paid or received."""

    id: Optional[str] = None
    symbol: Optional[str] = None
    code: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    amount: Optional[Decimal] = None
    funding_rate: Optional[Decimal] = None
    mark_price: Optional[Decimal] = None
    position_qty: Optional[Decimal] = None
    position_cost: Optional[Decimal] = None

    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FundingRate:
    """
    Funding rate snapshot.

    The venue reports the predicted rate and the previous
    settled rate only.
    """

    symbol: Optional[str] = None
    mark_price: Optional[Decimal] = None
    index_price: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    estimated_settle_price: Optional[Decimal] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    funding_rate: Optional[Decimal] = None
    funding_timestamp: Optional[int] = None
    funding_datetime: Optional[str] = None
    next_funding_rate: Optional[Decimal] = None
    next_funding_timestamp: Optional[int] = None
    next_funding_datetime: Optional[str] = None
    previous_funding_rate: Optional[Decimal] = None
    previous_funding_timestamp: Optional[int] = None
    previous_funding_datetime: Optional[str] = None

    info: Dict[str, Any] = field(default_factory=dict)


# ============================================================
# TRANSPORT
# ============================================================

@dataclass
class SignedRequest:
    """Outgoing request descriptor produced by the signer."""

    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
