import math

import pytest

from exchanges.anx import transform
from exchanges.anx.errors import EncodingError, ValidationError
from exchanges.anx.schemas import Order, OrderStatus, ReplaceSpec


@pytest.mark.parametrize(
    "value, expected",
    [
        ("ACTIVE", OrderStatus.ACTIVE),
        ("partial_fill", OrderStatus.PARTIALLY_FILLED),
        ("FULL_FILL", OrderStatus.FILLED),
        ("CANCELLED", OrderStatus.CANCELLED),
        ("REJECTED", OrderStatus.REJECTED),
        ("", OrderStatus.UNKNOWN),
        ("SOMETHING_NEW", OrderStatus.UNKNOWN),
    ],
)
def test_parse_order_status(value, expected):
    assert transform.parse_order_status(value) is expected


def test_terminal_statuses():
    assert {status for status in OrderStatus if status.is_terminal} == {
        OrderStatus.FILLED,
        OrderStatus.CANCELLED,
        OrderStatus.REJECTED,
    }


def test_sell_without_settlement_amount_lists_violation():
    order = Order(
        order_type="LIMIT",
        is_buy=False,
        traded_currency="BTC",
        settlement_currency="USD",
        traded_amount=1.0,
        limit_price=100.0,
    )
    with pytest.raises(ValidationError) as excinfo:
        transform.build_order_body(order)
    assert excinfo.value.violations == ["Sell orders require settlement_amount."]


def test_all_violations_are_reported_together():
    order = Order(order_type="STOP", is_buy=True, traded_currency="", settlement_currency="")
    with pytest.raises(ValidationError) as excinfo:
        transform.build_order_body(order)
    assert len(excinfo.value.violations) == 4


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"order_type": "MARKET", "traded_amount": math.nan}, "traded_amount"),
        ({"order_type": "LIMIT", "traded_amount": math.inf, "limit_price": 100.0}, "traded_amount"),
        ({"order_type": "LIMIT", "traded_amount": 1.0, "limit_price": math.inf}, "limit_price"),
        ({"order_type": "MARKET", "traded_amount": 1.0, "limit_price": math.nan}, "limit_price"),
        ({"is_buy": False, "order_type": "MARKET", "settlement_amount": -math.inf}, "settlement_amount"),
    ],
)
def test_non_finite_numbers_are_rejected(overrides, field):
    values = dict(order_type="LIMIT", is_buy=True, traded_currency="BTC", settlement_currency="USD")
    values.update(overrides)
    with pytest.raises(ValidationError) as excinfo:
        transform.build_order_body(Order(**values))
    assert excinfo.value.violations == [f"{field} must be a finite number greater than zero."]


def test_replacement_needs_existing_id():
    order = Order(
        order_type="MARKET",
        is_buy=True,
        traded_currency="BTC",
        settlement_currency="USD",
        traded_amount=1.0,
        replace=ReplaceSpec(""),
    )
    with pytest.raises(ValidationError):
        transform.build_order_body(order)


def test_format_amount_avoids_scientific_notation():
    assert transform.format_amount(0.00001) == "0.00001"
    assert transform.format_amount(2) == "2.0"


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_format_amount_refuses_non_finite_values(value):
    with pytest.raises(ValidationError):
        transform.format_amount(value)


def test_malformed_order_payload():
    with pytest.raises(EncodingError):
        transform.parse_order_record(None)
    with pytest.raises(EncodingError):
        transform.parse_order_record({"orderId": "x", "tradedCurrencyAmount": "abc"})


def test_malformed_depth_level():
    with pytest.raises(EncodingError):
        transform.parse_order_book("BTCUSD", {"asks": ["oops"]})


def test_deposit_address_required():
    with pytest.raises(EncodingError):
        transform.parse_deposit_address({"resultCode": "OK"})


@pytest.mark.parametrize(
    "data",
    [
        ["x"],
        {"Rights": "withdraw"},
        {"Rights": ["trade"], "Wallets": ["BTC"]},
        {"Wallets": {"BTC": "2.5"}},
        {"Trade_Fee": "abc"},
    ],
)
def test_malformed_account_payload(data):
    with pytest.raises(EncodingError):
        transform.parse_account_info({"resultCode": "OK", "data": data})


def test_account_payload_without_data_is_empty():
    info = transform.parse_account_info({"resultCode": "OK"})
    assert info.rights == frozenset()
    assert info.wallets == {}
    assert info.trade_fee is None


@pytest.mark.parametrize(
    "body",
    [
        {"currencyStatic": ["BTCUSD"]},
        {"currencyStatic": {"currencyPairs": ["BTCUSD"]}},
    ],
)
def test_malformed_currency_static(body):
    with pytest.raises(EncodingError):
        transform.parse_currency_pairs(body)
