import threading

import pytest

from exchanges.anx.market_data import LockedDictStore, MarketDataCache
from exchanges.anx.schemas import OrderBook, OrderBookLevel, Ticker


def _ticker(pair, last):
    return Ticker(pair=pair, bid=last - 1, ask=last + 1, last=last, high=last, low=last, volume=1.0)


def _make_cache(mocker, store=None):
    prices = iter([100.0, 200.0, 300.0])
    fetch_ticker = mocker.Mock(side_effect=lambda pair: _ticker(pair, next(prices)))
    fetch_book = mocker.Mock(
        side_effect=lambda pair: OrderBook(pair=pair, asks=[OrderBookLevel(101.0, 1.0)], bids=[OrderBookLevel(99.0, 2.0)])
    )
    cache = MarketDataCache("ANX", fetch_ticker=fetch_ticker, fetch_order_book=fetch_book, store=store)
    return cache, fetch_ticker, fetch_book


def test_second_get_is_a_cache_hit(mocker):
    cache, fetch_ticker, _ = _make_cache(mocker)

    first = cache.get_ticker("BTCUSD")
    second = cache.get_ticker("BTCUSD")

    assert fetch_ticker.call_count == 1
    assert first is second


def test_refresh_then_get_fetches_once_and_returns_new_value(mocker):
    cache, fetch_ticker, _ = _make_cache(mocker)
    cache.get_ticker("BTCUSD")
    fetch_ticker.reset_mock()

    refreshed = cache.refresh("BTCUSD")
    current = cache.get_ticker("BTCUSD")

    assert fetch_ticker.call_count == 1
    assert current is refreshed
    assert current.last == 200.0


def test_pairs_are_cached_independently(mocker):
    cache, fetch_ticker, _ = _make_cache(mocker)

    cache.get_ticker("BTCUSD")
    cache.get_ticker("LTCBTC")
    cache.get_ticker("btcusd")

    assert [call.args[0] for call in fetch_ticker.call_args_list] == ["BTCUSD", "LTCBTC"]


def test_order_book_cached_separately_from_ticker(mocker):
    cache, fetch_ticker, fetch_book = _make_cache(mocker)

    cache.get_ticker("BTCUSD")
    book = cache.get_order_book("BTCUSD")
    again = cache.get_order_book("BTCUSD")

    assert fetch_ticker.call_count == 1
    assert fetch_book.call_count == 1
    assert book is again
    assert book.best_ask() == 101.0
    assert book.best_bid() == 99.0


def test_refresh_order_book_overwrites_entry(mocker):
    cache, _, fetch_book = _make_cache(mocker)
    cache.get_order_book("BTCUSD")
    cache.refresh_order_book("BTCUSD")
    cache.get_order_book("BTCUSD")
    assert fetch_book.call_count == 2


def test_injected_store_is_used_and_cleared(mocker):
    store = LockedDictStore()
    cache, _, _ = _make_cache(mocker, store=store)

    cache.get_ticker("BTCUSD")
    cache.get_order_book("BTCUSD")
    assert len(store) == 2

    cache.clear()
    assert len(store) == 0


def test_fetch_errors_leave_cache_empty(mocker):
    fetch_ticker = mocker.Mock(side_effect=[RuntimeError("boom"), _ticker("BTCUSD", 5.0)])
    cache = MarketDataCache("ANX", fetch_ticker=fetch_ticker, fetch_order_book=mocker.Mock())

    with pytest.raises(RuntimeError):
        cache.get_ticker("BTCUSD")

    assert cache.get_ticker("BTCUSD").last == 5.0
    assert fetch_ticker.call_count == 2


def test_concurrent_access_on_distinct_keys(mocker):
    fetch_ticker = mocker.Mock(side_effect=lambda pair: _ticker(pair, 1.0))
    cache = MarketDataCache("ANX", fetch_ticker=fetch_ticker, fetch_order_book=mocker.Mock())
    pairs = [f"PAIR{i}" for i in range(20)]

    def worker(pair):
        for _ in range(50):
            assert cache.get_ticker(pair).pair == pair

    threads = [threading.Thread(target=worker, args=(pair,)) for pair in pairs]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert fetch_ticker.call_count == len(pairs)
