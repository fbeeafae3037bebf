"""
Error taxonomy for the ANX adapter.

Every public operation either returns a usable result or raises one of the
types below. Nothing here is retried or logged by the adapter itself.
"""

from __future__ import annotations

from typing import Optional, Sequence


class AnxError(RuntimeError):
    """Base class for ANX adapter failures."""

    def __init__(self, message: str, payload: Optional[dict] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class CredentialsMissingError(AnxError):
    """Raised before any network activity when no key/secret is configured."""


class EncodingError(AnxError):
    """Raised when a payload cannot be serialized or a response cannot be decoded."""


class TransportError(AnxError):
    """Network, timeout or HTTP-level failure reported by the transport."""


class RemoteRejectedError(AnxError):
    """Raised when the exchange answers with a non-success result code."""

    def __init__(self, code: str, payload: Optional[dict] = None) -> None:
        super().__init__(f"ANX rejected request: {code or '<empty result code>'}", payload=payload)
        self.code = code


class NotFoundError(RemoteRejectedError):
    """The exchange did not return the requested entity (e.g. an order id)."""


class NotYetImplementedError(AnxError, NotImplementedError):
    """Operation the exchange does not expose; never attempted over the wire."""


class ValidationError(AnxError, ValueError):
    """Raised when a request is malformed before it reaches the exchange."""

    def __init__(self, violations: Sequence[str]) -> None:
        super().__init__("; ".join(violations))
        self.violations = list(violations)
