import pytest

from exchanges.anx.fees import WITHDRAWAL_FEES, compute_fee, fiat_fee_schedule_defined
from exchanges.anx.schemas import FeeKind, FeeRequest


@pytest.mark.parametrize(
    "amount, price, is_maker, rate",
    [
        (1.0, 1000.0, True, 0.01),
        (1.0, 1000.0, False, 0.02),
        (0.25, 48000.0, True, 0.01),
        (3.5, 12.0, False, 0.02),
    ],
)
def test_trade_fee_uses_maker_and_taker_tiers(amount, price, is_maker, rate):
    request = FeeRequest(kind=FeeKind.TRADE, amount=amount, price=price, is_maker=is_maker)
    assert compute_fee(request) == pytest.approx(rate * amount * price)


def test_taker_trade_example():
    request = FeeRequest(kind=FeeKind.TRADE, amount=1000, price=1000, is_maker=False)
    assert compute_fee(request) == pytest.approx(20000)


@pytest.mark.parametrize("is_maker", [True, False])
def test_negative_trade_fee_is_clamped(is_maker):
    request = FeeRequest(kind=FeeKind.TRADE, amount=1, price=-1000, is_maker=is_maker)
    assert compute_fee(request) == 0


def test_crypto_withdrawal_uses_fixed_table():
    request = FeeRequest(kind=FeeKind.CRYPTO_WITHDRAWAL, amount=5, currency="BTC")
    assert compute_fee(request) == WITHDRAWAL_FEES["BTC"]


def test_unknown_crypto_currency_has_no_fee():
    request = FeeRequest(kind=FeeKind.CRYPTO_WITHDRAWAL, amount=5, currency="XYZ")
    assert compute_fee(request) == 0


def test_hkd_bank_withdrawal():
    request = FeeRequest(kind=FeeKind.FIAT_WITHDRAWAL, amount=1, currency="HKD")
    assert compute_fee(request) == pytest.approx(250 + WITHDRAWAL_FEES["HKD"] * 1)
    assert fiat_fee_schedule_defined("hkd")


def test_fiat_without_schedule_is_zero_and_flagged():
    request = FeeRequest(kind=FeeKind.FIAT_WITHDRAWAL, amount=1000, currency="USD")
    assert compute_fee(request) == 0
    assert not fiat_fee_schedule_defined("USD")


def test_offline_trade_estimate():
    request = FeeRequest(kind=FeeKind.OFFLINE_TRADE, amount=2, price=500)
    assert compute_fee(request) == pytest.approx(2.0)


@pytest.mark.parametrize("kind", list(FeeKind))
@pytest.mark.parametrize("amount, price", [(-5.0, 10.0), (5.0, -10.0), (-5.0, -10.0), (0.0, 0.0), (-1e9, 1.0)])
def test_fee_is_never_negative(kind, amount, price):
    request = FeeRequest(kind=kind, amount=amount, price=price, currency="HKD")
    assert compute_fee(request) >= 0
