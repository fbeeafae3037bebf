"""
ANX REST client covering orders, account data, withdrawals and market data.

Authenticated calls are POSTed to ``api/3/<endpoint>`` and signed with the
account's ``Rest-Key``/``Rest-Sign`` pair. Ticker and depth come from the
public v2 endpoints and are served through a per-client cache.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from exchanges.anx import envelope, transform
from exchanges.anx.errors import (
    CredentialsMissingError,
    EncodingError,
    NotFoundError,
    NotYetImplementedError,
    RemoteRejectedError,
    ValidationError,
)
from exchanges.anx.fees import compute_fee
from exchanges.anx.market_data import CacheStore, MarketDataCache
from exchanges.anx.schemas import (
    AccountInfo,
    DepositAddress,
    FeeKind,
    FeeRequest,
    Order,
    OrderBook,
    OrderRecord,
    Ticker,
    WithdrawRequest,
)
from exchanges.anx.settings import AnxSettings
from exchanges.anx.signing import NonceSource, RequestSigner, decode_payload, versioned_path
from exchanges.anx.transport import HttpxTransport, Transport
from exchanges.anx.wire import (
    ApiKeyRequest,
    CancelOrdersRequest,
    NewOrderRequest,
    OrderInfoRequest,
    OrderListRequest,
    ReceiveAddressRequest,
    SendRequest,
    SubAccountRequest,
)
from exchanges.base_client import ExchangeClient, ExchangeCredentials

logger = logging.getLogger(__name__)

ANX_API_KEY = "apiKey"
ANX_DATA_TOKEN = "dataToken"
ANX_ORDER_NEW = "order/new"
ANX_ORDER_CANCEL = "order/cancel"
ANX_ORDER_LIST = "order/list"
ANX_ORDER_INFO = "order/info"
ANX_SEND = "send"
ANX_SUBACCOUNT_NEW = "subaccount/new"
ANX_RECEIVE_ADDRESS = "receive"
ANX_CREATE_ADDRESS = "receive/create"
ANX_ACCOUNT_INFO = "money/info"
ANX_CURRENCY_STATIC = "currencyStatic"
ANX_TICKER = "money/ticker"
ANX_DEPTH = "money/depth/full"

WITHDRAW_RIGHT = "withdraw"


class AnxClient(ExchangeClient):
    """Synchronous ANX client; safe to share between threads."""

    name = "ANX"

    def __init__(
        self,
        settings: AnxSettings | None = None,
        *,
        transport: Transport | None = None,
        cache_store: CacheStore | None = None,
        nonce_source: NonceSource | None = None,
        rate_limiter: Callable[[], None] | None = None,
    ) -> None:
        self._settings = settings or AnxSettings()
        self._transport = transport or HttpxTransport(self._settings.base_url, timeout=self._settings.timeout)
        self._nonces = nonce_source or NonceSource()
        self._rate_limiter = rate_limiter
        self._signer = self._make_signer(self._settings.credentials)
        # Sign and send under one lock so requests reach ANX in nonce order.
        self._auth_lock = threading.Lock()
        self.market_data = MarketDataCache(
            self.name,
            fetch_ticker=self.fetch_ticker,
            fetch_order_book=self.fetch_order_book,
            store=cache_store,
        )

    def __enter__(self) -> "AnxClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---------------------------------------------------------------------
    # ExchangeClient API
    # ---------------------------------------------------------------------
    def authenticate(self, credentials: ExchangeCredentials) -> None:
        self._signer = self._make_signer(credentials)

    @property
    def authenticated(self) -> bool:
        return self._signer.has_credentials

    def close(self) -> None:
        self.market_data.clear()
        self._transport.close()

    # ------------------------------------------------------------------
    # Market data
    # ------------------------------------------------------------------
    def get_ticker(self, pair: str) -> Ticker:
        """Cached ticker; hits the network only on a cache miss."""
        return self.market_data.get_ticker(pair)

    def get_order_book(self, pair: str) -> OrderBook:
        return self.market_data.get_order_book(pair)

    def fetch_ticker(self, pair: str) -> Ticker:
        """Fetch a fresh ticker, bypassing the cache."""
        pair = pair.upper()
        data = envelope.unwrap_legacy(self._get(self._market_path(pair, ANX_TICKER)))
        return transform.parse_ticker(pair, data)

    def fetch_order_book(self, pair: str) -> OrderBook:
        pair = pair.upper()
        data = envelope.unwrap_legacy(self._get(self._market_path(pair, ANX_DEPTH)))
        return transform.parse_order_book(pair, data)

    def fetch_currency_pairs(self) -> List[str]:
        body = envelope.unwrap(self._get(versioned_path(ANX_CURRENCY_STATIC, self._settings.api_version)))
        return transform.parse_currency_pairs(body)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------
    def submit_order(self, order: Order) -> str:
        """
        Submit (or cancel-and-replace) an order and return its id.

        Raises:
            ValidationError: if the order is inconsistent; nothing is sent.
        """
        body = transform.build_order_body(order)
        response = self._post(ANX_ORDER_NEW, NewOrderRequest(order=body).to_params())
        return _required(response, "orderId")

    def cancel_orders(self, order_ids: Iterable[str]) -> Dict[str, str]:
        """
        Cancel several orders in one call.

        Returns error text keyed by order id for every order that was *not*
        cancelled; an empty mapping means every cancellation was accepted.
        """
        ids = list(dict.fromkeys(str(order_id) for order_id in order_ids))
        if not ids:
            return {}
        response = self._post(ANX_ORDER_CANCEL, CancelOrdersRequest(order_ids=ids).to_params())
        return transform.collect_cancellation_failures(ids, response.get("orderIds"))

    def cancel_order(self, order_id: str) -> None:
        failures = self.cancel_orders([order_id])
        if order_id in failures:
            raise RemoteRejectedError(failures[order_id], payload={"orderId": order_id})

    def cancel_all_orders(self) -> Dict[str, str]:
        active = self.list_orders(active_only=True)
        return self.cancel_orders(record.order_id for record in active)

    def list_orders(self, active_only: bool = True) -> List[OrderRecord]:
        response = self._post(ANX_ORDER_LIST, OrderListRequest(active_only=active_only).to_params())
        return transform.parse_order_records(response.get("orders"))

    def get_order_info(self, order_id: str) -> OrderRecord:
        """
        Raises:
            NotFoundError: when ANX does not answer with ``OK`` for the id.
        """
        response = self._post(
            ANX_ORDER_INFO,
            OrderInfoRequest(order_id=order_id).to_params(),
            error_cls=NotFoundError,
        )
        return transform.parse_order_record(response.get("order"))

    def get_trade_history(self, *args: Any, **kwargs: Any) -> List[dict]:
        raise NotYetImplementedError("ANX does not expose trade history")

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------
    def get_account_info(self) -> AccountInfo:
        return transform.parse_account_info(self._post(ANX_ACCOUNT_INFO))

    def has_withdrawal_permission(self) -> bool:
        return WITHDRAW_RIGHT in self.get_account_info().rights

    def check_withdrawal_permission(self) -> bool:
        """Like ``has_withdrawal_permission`` but warns when the right is missing."""
        allowed = self.has_withdrawal_permission()
        if not allowed:
            logger.warning("%s API key lacks the '%s' right; withdrawals will be refused.", self.name, WITHDRAW_RIGHT)
        return allowed

    def get_fee_by_type(self, request: FeeRequest) -> float:
        """Compute a fee, falling back to the offline estimate without credentials."""
        if request.kind is FeeKind.TRADE and not self.authenticated:
            request = FeeRequest(
                kind=FeeKind.OFFLINE_TRADE,
                amount=request.amount,
                price=request.price,
                is_maker=request.is_maker,
                currency=request.currency,
            )
        return compute_fee(request)

    def withdraw_crypto(self, request: WithdrawRequest) -> str:
        """Send crypto to an external address; returns the transaction id."""
        violations: List[str] = []
        if not request.currency:
            violations.append("currency is required.")
        if not request.address:
            violations.append("address is required.")
        if request.amount is None or not transform.is_positive_amount(request.amount):
            violations.append("amount must be a finite number greater than zero.")
        if violations:
            raise ValidationError(violations)
        params = SendRequest(
            ccy=request.currency.upper(),
            amount=transform.format_amount(request.amount),
            address=request.address,
            otp=request.otp or None,
        ).to_params()
        response = self._post(ANX_SEND, params)
        return _required(response, "transactionId")

    def withdraw_fiat(self, *args: Any, **kwargs: Any) -> str:
        raise NotYetImplementedError("ANX fiat withdrawals are not available over the API")

    def get_deposit_address(
        self,
        currency: str,
        sub_account: str | None = None,
        *,
        create: bool = False,
    ) -> DepositAddress:
        params = ReceiveAddressRequest(ccy=currency.upper(), sub_account=sub_account or None).to_params()
        response = self._post(ANX_CREATE_ADDRESS if create else ANX_RECEIVE_ADDRESS, params)
        return transform.parse_deposit_address(response)

    def create_sub_account(self, currency: str, name: str) -> str:
        params = SubAccountRequest(ccy=currency.upper(), custom_ref=name).to_params()
        response = self._post(ANX_SUBACCOUNT_NEW, params)
        return _required(response, "subAccount")

    def get_data_token(self) -> str:
        return _required(self._post(ANX_DATA_TOKEN), "token")

    def request_api_key(
        self,
        username: str,
        password: str,
        device_id: str,
        otp: str | None = None,
    ) -> Tuple[str, str]:
        """Exchange login details for an API key and base64 secret."""
        params = ApiKeyRequest(username=username, password=password, device_id=device_id, otp=otp or None).to_params()
        response = self._post(ANX_API_KEY, params)
        return _required(response, "apiKey"), _required(response, "apiSecret")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _make_signer(self, credentials: ExchangeCredentials | None) -> RequestSigner:
        return RequestSigner(credentials, nonce_source=self._nonces, api_version=self._settings.api_version)

    def _market_path(self, pair: str, endpoint: str) -> str:
        return f"api/{self._settings.market_data_api_version}/{pair.upper()}/{endpoint}"

    def _get(self, path: str) -> dict:
        self._throttle()
        logger.debug("ANX GET %s", path)
        return decode_payload(self._transport.send("GET", path))

    def _post(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        error_cls: type[RemoteRejectedError] = RemoteRejectedError,
    ) -> dict:
        if not self._signer.has_credentials:
            raise CredentialsMissingError(f"{self.name} credentials are required for '{endpoint}'")
        self._throttle()
        with self._auth_lock:
            signed = self._signer.sign(endpoint, params)
            logger.debug("ANX POST %s (%d bytes)", signed.path, len(signed.payload))
            raw = self._transport.send("POST", signed.path, signed.headers, signed.payload)
        return envelope.unwrap(decode_payload(raw), error_cls=error_cls)

    def _throttle(self) -> None:
        if self._rate_limiter is not None:
            self._rate_limiter()


def _required(response: Mapping[str, Any], field: str) -> str:
    """Return a result field ANX must include in an ``OK`` response."""
    value = response.get(field)
    if value is None or value == "":
        raise EncodingError(f"ANX accepted the request but returned no {field}", payload=dict(response))
    return str(value)
