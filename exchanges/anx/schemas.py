"""
Dataclasses describing orders, market data, fees and account state for ANX.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Literal, Optional

OrderType = Literal["LIMIT", "MARKET"]


class OrderStatus(str, Enum):
    """
    Server-side order lifecycle.

    SUBMITTED moves to ACTIVE or REJECTED. ACTIVE moves to PARTIALLY_FILLED,
    CANCELLED or REPLACED; a partial fill returns to ACTIVE or ends FILLED.
    The adapter never tracks these transitions itself; each query returns the
    exchange's current snapshot.
    """

    SUBMITTED = "SUBMITTED"
    ACTIVE = "ACTIVE"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"
    REPLACED = "REPLACED"
    REJECTED = "REJECTED"
    UNKNOWN = "UNKNOWN"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    @property
    def is_open(self) -> bool:
        return self in (OrderStatus.ACTIVE, OrderStatus.PARTIALLY_FILLED)


_TERMINAL_STATUSES = frozenset({OrderStatus.FILLED, OrderStatus.CANCELLED, OrderStatus.REJECTED})


class FeeKind(str, Enum):
    TRADE = "trade"
    CRYPTO_WITHDRAWAL = "crypto_withdrawal"
    FIAT_WITHDRAWAL = "fiat_withdrawal"
    OFFLINE_TRADE = "offline_trade"


@dataclass(frozen=True, slots=True)
class ReplaceSpec:
    """Cancel-and-replace instructions; the exchange enforces ``only_if_active``."""

    existing_id: str
    only_if_active: bool = True


@dataclass(slots=True)
class Order:
    """
    Outbound order.

    Buying spends settlement currency to receive ``traded_amount`` of the
    traded currency; selling names the ``settlement_amount`` to receive.
    """

    order_type: OrderType
    is_buy: bool
    traded_currency: str
    settlement_currency: str
    traded_amount: Optional[float] = None
    settlement_amount: Optional[float] = None
    limit_price: Optional[float] = None
    replace: Optional[ReplaceSpec] = None


@dataclass(frozen=True, slots=True)
class OrderRecord:
    """Immutable snapshot of an order as last reported by the exchange."""

    order_id: str
    status: OrderStatus
    order_type: str
    is_buy: bool
    traded_currency: str
    traded_amount: float
    traded_outstanding: float
    settlement_currency: str
    settlement_amount: float
    settlement_outstanding: float
    executed_average_rate: float
    limit_price: float
    timestamp: Optional[datetime]
    replaced_order_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Ticker:
    pair: str
    bid: float
    ask: float
    last: float
    high: float
    low: float
    volume: float
    average: float = 0.0
    vwap: float = 0.0
    updated_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class OrderBookLevel:
    price: float
    amount: float


@dataclass(frozen=True, slots=True)
class OrderBook:
    """Depth snapshot; asks ascend by price, bids descend."""

    pair: str
    asks: List[OrderBookLevel] = field(default_factory=list)
    bids: List[OrderBookLevel] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def best_bid(self) -> Optional[float]:
        return self.bids[0].price if self.bids else None

    def best_ask(self) -> Optional[float]:
        return self.asks[0].price if self.asks else None


@dataclass(frozen=True, slots=True)
class FeeRequest:
    kind: FeeKind
    amount: float = 0.0
    price: float = 0.0
    is_maker: bool = False
    currency: str = ""


@dataclass(frozen=True, slots=True)
class WalletBalance:
    available: float
    total: float


@dataclass(frozen=True, slots=True)
class AccountInfo:
    rights: FrozenSet[str]
    wallets: Dict[str, WalletBalance]
    trade_fee: Optional[float] = None


@dataclass(frozen=True, slots=True)
class DepositAddress:
    address: str
    sub_account: Optional[str] = None


@dataclass(frozen=True, slots=True)
class WithdrawRequest:
    currency: str
    amount: float
    address: str
    otp: Optional[str] = None
