"""
Cache-aside access to ANX tickers and order books.

Entries are keyed by ``(exchange, pair, asset_class)`` and never expire on
their own; ``refresh`` is the only way to replace a cached value. Concurrent
misses on one key may each fetch, and the last write wins.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Dict, Hashable, Optional, Protocol, Tuple

from exchanges.anx.schemas import OrderBook, Ticker

logger = logging.getLogger(__name__)

SPOT = "spot"

CacheKey = Tuple[str, str, str]


class CacheStore(Protocol):
    """Backing store for cached market data; must tolerate concurrent use."""

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value or ``None``."""

    def set(self, key: Hashable, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""

    def clear(self) -> None:
        """Drop every entry."""


class LockedDictStore:
    """Dictionary guarded by a single lock."""

    def __init__(self) -> None:
        self._data: Dict[Hashable, Any] = {}
        self._lock = Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class MarketDataCache:
    """Ticker and order book cache owned by a single exchange client."""

    def __init__(
        self,
        exchange: str,
        *,
        fetch_ticker: Callable[[str], Ticker],
        fetch_order_book: Callable[[str], OrderBook],
        store: Optional[CacheStore] = None,
        asset_class: str = SPOT,
    ) -> None:
        self._exchange = exchange
        self._fetch_ticker = fetch_ticker
        self._fetch_order_book = fetch_order_book
        self._store: CacheStore = store if store is not None else LockedDictStore()
        self._asset_class = asset_class

    def get_ticker(self, pair: str) -> Ticker:
        cached = self._store.get(self._key("ticker", pair))
        if cached is not None:
            return cached
        return self.refresh(pair)

    def get_order_book(self, pair: str) -> OrderBook:
        cached = self._store.get(self._key("orderbook", pair))
        if cached is not None:
            return cached
        return self.refresh_order_book(pair)

    def refresh(self, pair: str) -> Ticker:
        """Fetch the ticker for ``pair`` and overwrite the cached entry."""
        ticker = self._fetch_ticker(pair)
        self._store.set(self._key("ticker", pair), ticker)
        logger.debug("Cached %s ticker for %s (last=%s)", self._exchange, pair, ticker.last)
        return ticker

    def refresh_order_book(self, pair: str) -> OrderBook:
        book = self._fetch_order_book(pair)
        self._store.set(self._key("orderbook", pair), book)
        logger.debug(
            "Cached %s order book for %s (%d asks, %d bids)",
            self._exchange,
            pair,
            len(book.asks),
            len(book.bids),
        )
        return book

    def clear(self) -> None:
        self._store.clear()

    def _key(self, kind: str, pair: str) -> Tuple[str, CacheKey]:
        return kind, (self._exchange, pair.upper(), self._asset_class)
