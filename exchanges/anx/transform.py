"""
Helper functions for transforming ANX API payloads to and from domain models.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from exchanges.anx.errors import EncodingError, ValidationError
from exchanges.anx.schemas import (
    AccountInfo,
    DepositAddress,
    Order,
    OrderBook,
    OrderBookLevel,
    OrderRecord,
    OrderStatus,
    Ticker,
    WalletBalance,
)
from exchanges.anx.wire import (
    AccountPayload,
    CancellationEntry,
    OrderBody,
    OrderPayload,
    parse_wire_number,
)

SUPPORTED_ORDER_TYPES = frozenset({"LIMIT", "MARKET"})
CANCEL_ACCEPTED_CODES = frozenset({"", "CANCEL_REQUEST_SUBMITTED"})
MISSING_CANCEL_ACK = "NO_CANCELLATION_RESPONSE"

_STATUS_ALIASES: Dict[str, OrderStatus] = {
    "SUBMITTED": OrderStatus.SUBMITTED,
    "PENDING": OrderStatus.SUBMITTED,
    "ACTIVE": OrderStatus.ACTIVE,
    "PARTIAL_FILL": OrderStatus.PARTIALLY_FILLED,
    "PARTIALLY_FILLED": OrderStatus.PARTIALLY_FILLED,
    "FULL_FILL": OrderStatus.FILLED,
    "FILLED": OrderStatus.FILLED,
    "CANCELLED": OrderStatus.CANCELLED,
    "CANCELED": OrderStatus.CANCELLED,
    "REPLACED": OrderStatus.REPLACED,
    "REJECTED": OrderStatus.REJECTED,
}


# ----------------------------------------------------------------------
# Outbound
# ----------------------------------------------------------------------
def build_order_body(order: Order) -> OrderBody:
    """
    Validate ``order`` and convert it to the ``order/new`` wire body.

    Raises:
        ValidationError: when the order cannot be submitted as given.
    """
    violations: List[str] = []
    order_type = (order.order_type or "").upper()

    if order_type not in SUPPORTED_ORDER_TYPES:
        violations.append(f"Unsupported order type '{order.order_type}'.")
    if not order.traded_currency:
        violations.append("traded_currency is required.")
    if not order.settlement_currency:
        violations.append("settlement_currency is required.")

    if order.is_buy:
        if order.traded_amount is None:
            violations.append("Buy orders require traded_amount.")
        elif not is_positive_amount(order.traded_amount):
            violations.append("traded_amount must be a finite number greater than zero.")
    else:
        if order.settlement_amount is None:
            violations.append("Sell orders require settlement_amount.")
        elif not is_positive_amount(order.settlement_amount):
            violations.append("settlement_amount must be a finite number greater than zero.")

    if order.limit_price is None:
        if order_type == "LIMIT":
            violations.append("Limit orders require limit_price.")
    elif not is_positive_amount(order.limit_price):
        violations.append("limit_price must be a finite number greater than zero.")

    if order.replace is not None and not order.replace.existing_id:
        violations.append("Replacement requires the existing order id.")

    if violations:
        raise ValidationError(violations)

    body = OrderBody(
        order_type=order_type,
        buy_traded_currency=order.is_buy,
        traded_currency=order.traded_currency.upper(),
        settlement_currency=order.settlement_currency.upper(),
    )
    if order.is_buy:
        body.traded_currency_amount = format_amount(order.traded_amount)
    else:
        body.settlement_currency_amount = format_amount(order.settlement_amount)
    if order.limit_price is not None:
        body.limit_price_in_settlement_currency = format_amount(order.limit_price)
    if order.replace is not None:
        body.replace_existing_order_uuid = order.replace.existing_id
        body.replace_only_if_active = order.replace.only_if_active
    return body


def is_positive_amount(value: float) -> bool:
    return math.isfinite(value) and value > 0


def format_amount(value: float) -> str:
    """Render a number in plain decimal notation as the exchange expects."""
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError([f"Cannot send non-finite amount {value!r}."])
    return format(Decimal(repr(number)), "f")


# ----------------------------------------------------------------------
# Inbound
# ----------------------------------------------------------------------
def parse_order_record(raw: Any) -> OrderRecord:
    if not isinstance(raw, dict):
        raise EncodingError("Order payload is missing or malformed")
    try:
        payload = OrderPayload.model_validate(raw)
    except PydanticValidationError as exc:
        raise EncodingError(f"Malformed order payload: {exc}", payload=raw) from exc
    return OrderRecord(
        order_id=payload.order_id,
        status=parse_order_status(payload.order_status),
        order_type=payload.order_type,
        is_buy=payload.buy_traded_currency,
        traded_currency=payload.traded_currency,
        traded_amount=payload.traded_currency_amount,
        traded_outstanding=payload.traded_currency_outstanding,
        settlement_currency=payload.settlement_currency,
        settlement_amount=payload.settlement_currency_amount,
        settlement_outstanding=payload.settlement_currency_outstanding,
        executed_average_rate=payload.executed_average_rate,
        limit_price=payload.limit_price_in_settlement_currency,
        timestamp=_from_millis(payload.timestamp),
        replaced_order_id=payload.replace_existing_order_id or None,
    )


def parse_order_records(raw_orders: Any) -> List[OrderRecord]:
    if raw_orders is None:
        return []
    if not isinstance(raw_orders, list):
        raise EncodingError("Order list payload is malformed")
    return [parse_order_record(item) for item in raw_orders]


def parse_order_status(value: str) -> OrderStatus:
    return _STATUS_ALIASES.get((value or "").strip().upper(), OrderStatus.UNKNOWN)


def collect_cancellation_failures(
    requested_ids: Sequence[str],
    raw_entries: Any,
) -> Dict[str, str]:
    """
    Return error text keyed by order id for every cancellation that did not
    go through. Ids the exchange never acknowledged are reported as failed.
    """
    failures: Dict[str, str] = {}
    acknowledged: set[str] = set()
    for item in raw_entries or []:
        try:
            entry = CancellationEntry.model_validate(item)
        except PydanticValidationError as exc:
            raise EncodingError(f"Malformed cancellation entry: {exc}", payload={"entry": item}) from exc
        acknowledged.add(entry.uuid)
        code = (entry.error_code or "").strip()
        if code not in CANCEL_ACCEPTED_CODES:
            failures[entry.uuid] = code
    for order_id in requested_ids:
        if order_id not in acknowledged:
            failures[order_id] = MISSING_CANCEL_ACK
    return failures


def parse_ticker(pair: str, data: Dict[str, Any]) -> Ticker:
    """
    Map a ``money/ticker`` payload. ``buy`` is the best bid on ANX and ``sell``
    the best ask.
    """
    return Ticker(
        pair=pair,
        bid=_component_value(data.get("buy")),
        ask=_component_value(data.get("sell")),
        last=_component_value(data.get("last")),
        high=_component_value(data.get("high")),
        low=_component_value(data.get("low")),
        volume=_component_value(data.get("vol")),
        average=_component_value(data.get("avg")),
        vwap=_component_value(data.get("vwap")),
        updated_at=_from_micros(data.get("dataUpdateTime")),
    )


def parse_order_book(pair: str, data: Dict[str, Any]) -> OrderBook:
    asks = sorted(_levels(data.get("asks")), key=lambda level: level.price)
    bids = sorted(_levels(data.get("bids")), key=lambda level: level.price, reverse=True)
    return OrderBook(pair=pair, asks=asks, bids=bids, updated_at=_from_micros(data.get("dataUpdateTime")))


def parse_account_info(body: Dict[str, Any]) -> AccountInfo:
    data = body.get("data")
    try:
        payload = AccountPayload.model_validate(data if data is not None else {})
    except PydanticValidationError as exc:
        raise EncodingError(f"Malformed account payload: {exc}", payload=body) from exc
    wallets: Dict[str, WalletBalance] = {}
    for currency, wallet in (payload.wallets or {}).items():
        wallets[currency] = WalletBalance(
            available=_component_value(wallet.available_balance),
            total=_component_value(wallet.balance),
        )
    return AccountInfo(
        rights=frozenset(payload.rights or []),
        wallets=wallets,
        trade_fee=payload.trade_fee,
    )


def parse_deposit_address(body: Dict[str, Any]) -> DepositAddress:
    address = body.get("address")
    if not address:
        raise EncodingError("Deposit address missing from response", payload=body)
    return DepositAddress(address=str(address), sub_account=body.get("subAccount") or None)


def parse_currency_pairs(body: Dict[str, Any]) -> List[str]:
    static = body.get("currencyStatic") or {}
    if not isinstance(static, dict):
        raise EncodingError("currencyStatic payload is malformed", payload=body)
    raw_pairs = static.get("currencyPairs") or {}
    if not isinstance(raw_pairs, dict):
        raise EncodingError("currencyPairs payload is malformed", payload=body)
    pairs: Iterable[str] = raw_pairs.keys()
    return sorted(pairs)


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------
def _levels(raw_levels: Any) -> List[OrderBookLevel]:
    levels: List[OrderBookLevel] = []
    for item in raw_levels or []:
        if not isinstance(item, dict):
            raise EncodingError("Order book level is malformed", payload={"level": item})
        levels.append(OrderBookLevel(price=_number(item.get("price")), amount=_number(item.get("amount"))))
    return levels


def _component_value(component: Any) -> float:
    if isinstance(component, dict):
        return _number(component.get("value"))
    return _number(component)


def _number(value: Any) -> float:
    try:
        return parse_wire_number(value)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Expected a numeric field, got {value!r}") from exc


def _from_millis(value: Optional[int]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromtimestamp(value / 1_000, tz=timezone.utc)


def _from_micros(value: Any) -> Optional[datetime]:
    try:
        micros = int(value)
    except (TypeError, ValueError):
        return None
    if micros <= 0:
        return None
    return datetime.fromtimestamp(micros / 1_000_000, tz=timezone.utc)
