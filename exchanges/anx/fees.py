"""
Fee schedule for ANX trades and withdrawals.

``compute_fee`` is pure and total: it never raises for a known fee kind and
never returns a negative amount.
"""

from __future__ import annotations

from typing import Callable, Dict, Final

from exchanges.anx.schemas import FeeKind, FeeRequest

MAKER_RATE: Final = 0.01
TAKER_RATE: Final = 0.02
OFFLINE_TRADE_RATE: Final = 0.002
HKD_BANK_WITHDRAWAL_BASE: Final = 250.0

# Fixed per-withdrawal fees in units of the withdrawn currency. HKD is the
# per-unit rate applied on top of the flat bank transfer charge.
WITHDRAWAL_FEES: Final[Dict[str, float]] = {
    "BTC": 0.002,
    "LTC": 0.02,
    "DOGE": 2.0,
    "STR": 0.01,
    "XRP": 0.02,
    "ETH": 0.005,
    "BCH": 0.0001,
    "NMC": 0.005,
    "PPC": 0.05,
    "START": 1.0,
    "GNT": 1.0,
    "REP": 0.1,
    "OAX": 1.0,
    "HKD": 0.01,
}

# Only HKD has a published bank withdrawal schedule. Every other fiat currency
# is quoted as 0 until ANX provides figures; callers can detect the gap with
# ``fiat_fee_schedule_defined``.
_FIAT_SCHEDULES: Final = frozenset({"HKD"})


def compute_fee(request: FeeRequest) -> float:
    """Return the fee for ``request``, clamped at zero."""
    assert request.kind in _FORMULAS, f"Unhandled fee kind {request.kind!r}"
    fee = _FORMULAS[request.kind](request)
    return fee if fee > 0 else 0.0


def fiat_fee_schedule_defined(currency: str) -> bool:
    return currency.upper() in _FIAT_SCHEDULES


def _trading_fee(request: FeeRequest) -> float:
    rate = MAKER_RATE if request.is_maker else TAKER_RATE
    return request.amount * request.price * rate


def _crypto_withdrawal_fee(request: FeeRequest) -> float:
    return WITHDRAWAL_FEES.get(request.currency.upper(), 0.0)


def _fiat_withdrawal_fee(request: FeeRequest) -> float:
    currency = request.currency.upper()
    if currency == "HKD":
        return HKD_BANK_WITHDRAWAL_BASE + WITHDRAWAL_FEES[currency] * request.amount
    return 0.0


def _offline_trade_fee(request: FeeRequest) -> float:
    """Worst-case estimate used when the live fee tier cannot be determined."""
    return OFFLINE_TRADE_RATE * request.price * request.amount


_FORMULAS: Final[Dict[FeeKind, Callable[[FeeRequest], float]]] = {
    FeeKind.TRADE: _trading_fee,
    FeeKind.CRYPTO_WITHDRAWAL: _crypto_withdrawal_fee,
    FeeKind.FIAT_WITHDRAWAL: _fiat_withdrawal_fee,
    FeeKind.OFFLINE_TRADE: _offline_trade_fee,
}
