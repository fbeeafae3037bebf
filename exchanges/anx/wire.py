"""
Per-endpoint request and response bodies for the ANX v3 API.

Field names follow the exchange's camelCase wire format through pydantic
aliases; Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_params(self) -> dict[str, Any]:
        """Serialize using wire aliases, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


def parse_wire_number(value: Any) -> float:
    """Absent or empty numbers mean "no data" on ANX and are read as zero."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    return float(value)


# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------
class OrderBody(WireModel):
    order_type: str = Field(alias="orderType")
    buy_traded_currency: bool = Field(alias="buyTradedCurrency")
    traded_currency: str = Field(alias="tradedCurrency")
    settlement_currency: str = Field(alias="settlementCurrency")
    traded_currency_amount: Optional[str] = Field(default=None, alias="tradedCurrencyAmount")
    settlement_currency_amount: Optional[str] = Field(default=None, alias="settlementCurrencyAmount")
    limit_price_in_settlement_currency: Optional[str] = Field(
        default=None, alias="limitPriceInSettlementCurrency"
    )
    replace_existing_order_uuid: Optional[str] = Field(default=None, alias="replaceExistingOrderUuid")
    replace_only_if_active: Optional[bool] = Field(default=None, alias="replaceOnlyIfActive")


class NewOrderRequest(WireModel):
    order: OrderBody


class OrderInfoRequest(WireModel):
    order_id: str = Field(alias="orderId")


class OrderListRequest(WireModel):
    active_only: bool = Field(alias="activeOnly")


class CancelOrdersRequest(WireModel):
    order_ids: List[str] = Field(alias="orderIds")


class SendRequest(WireModel):
    ccy: str
    amount: str
    address: str
    otp: Optional[str] = None


class SubAccountRequest(WireModel):
    ccy: str
    custom_ref: str = Field(alias="customRef")


class ReceiveAddressRequest(WireModel):
    ccy: str
    sub_account: Optional[str] = Field(default=None, alias="subAccount")


class ApiKeyRequest(WireModel):
    username: str
    password: str
    device_id: str = Field(alias="deviceId")
    otp: Optional[str] = None


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------
class OrderPayload(WireModel):
    order_id: str = Field(alias="orderId")
    order_status: str = Field(default="", alias="orderStatus")
    order_type: str = Field(default="", alias="orderType")
    buy_traded_currency: bool = Field(default=False, alias="buyTradedCurrency")
    traded_currency: str = Field(default="", alias="tradedCurrency")
    traded_currency_amount: float = Field(default=0.0, alias="tradedCurrencyAmount")
    traded_currency_outstanding: float = Field(default=0.0, alias="tradedCurrencyOutstanding")
    settlement_currency: str = Field(default="", alias="settlementCurrency")
    settlement_currency_amount: float = Field(default=0.0, alias="settlementCurrencyAmount")
    settlement_currency_outstanding: float = Field(default=0.0, alias="settlementCurrencyOutstanding")
    executed_average_rate: float = Field(default=0.0, alias="executedAverageRate")
    limit_price_in_settlement_currency: float = Field(default=0.0, alias="limitPriceInSettlementCurrency")
    replace_existing_order_id: Optional[str] = Field(default=None, alias="replaceExistingOrderId")
    timestamp: Optional[int] = None

    @field_validator(
        "traded_currency_amount",
        "traded_currency_outstanding",
        "settlement_currency_amount",
        "settlement_currency_outstanding",
        "executed_average_rate",
        "limit_price_in_settlement_currency",
        mode="before",
    )
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return parse_wire_number(value)


class CancellationEntry(WireModel):
    uuid: str
    error_code: Optional[str] = Field(default=None, alias="errorCode")


class WalletPayload(WireModel):
    # Balances arrive either as ``{"value": "1.5", ...}`` or as a bare number.
    balance: Any = Field(default=None, alias="Balance")
    available_balance: Any = Field(default=None, alias="Available_Balance")


class AccountPayload(WireModel):
    rights: Optional[List[str]] = Field(default=None, alias="Rights")
    wallets: Optional[Dict[str, WalletPayload]] = Field(default=None, alias="Wallets")
    trade_fee: Optional[float] = Field(default=None, alias="Trade_Fee")

    @field_validator("trade_fee", mode="before")
    @classmethod
    def _fee(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return parse_wire_number(value)
