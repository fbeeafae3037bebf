"""
Abstract client definitions for centralized exchange integrations.

Concrete adapters (e.g. ANX) should subclass `ExchangeClient` and implement
the required methods while leaving throttling and retries to the caller.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Iterable, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ExchangeCredentials:
    """Typed container for exchange authentication data."""

    api_key: str
    api_secret: bytes = field(repr=False)

    @classmethod
    def from_base64_secret(cls, api_key: str, encoded_secret: str) -> "ExchangeCredentials":
        """
        Build credentials from the base64 secret issued by the exchange.

        Raises:
            ValueError: if the secret is not valid base64.
        """
        try:
            secret = base64.b64decode(encoded_secret, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("API secret is not valid base64") from exc
        return cls(api_key=api_key, api_secret=secret)


@runtime_checkable
class ExchangeClient(Protocol):
    """Protocol describing the surface area for exchange integrations."""

    name: str

    def authenticate(self, credentials: ExchangeCredentials) -> None:
        """Load credentials into the client."""

    def get_account_info(self):
        """Return the latest wallet balances and account rights."""

    def submit_order(self, order) -> str:
        """Submit an order to the exchange and return its identifier."""

    def cancel_orders(self, order_ids: Iterable[str]) -> dict[str, str]:
        """Cancel orders in one batch; returns error text keyed by failed id."""

    def close(self) -> None:
        """Release network resources (sessions, caches, etc.)."""
