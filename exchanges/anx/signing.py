"""
Nonce generation and request signing for authenticated ANX endpoints.

Authenticated calls are POSTed to ``api/<version>/<endpoint>`` with a JSON body
that always carries a 13 digit ``nonce``. The ``Rest-Sign`` header is the
base64 encoded HMAC-SHA512 of ``path + "\\x00" + body`` keyed with the decoded
API secret.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from exchanges.anx.errors import CredentialsMissingError, EncodingError
from exchanges.base_client import ExchangeCredentials

NONCE_DIGITS = 13
DEFAULT_API_VERSION = "3"


class NonceSource:
    """Strictly increasing nonces derived from the nanosecond wall clock."""

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> str:
        with self._lock:
            candidate = int(str(self._clock())[:NONCE_DIGITS])
            # The exchange rejects reused nonces, so never hand out the same value twice.
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """Fully prepared authenticated request, consumed once by the transport."""

    path: str
    payload: bytes
    signature: str
    headers: dict[str, str] = field(default_factory=dict)


def encode_payload(payload: Mapping[str, Any]) -> bytes:
    """Serialize a request body deterministically (sorted keys, compact)."""
    try:
        return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Unable to encode request payload: {exc}") from exc


def decode_payload(raw: bytes) -> dict:
    """Decode a response body into a JSON object."""
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError, UnicodeDecodeError) as exc:
        raise EncodingError(f"Unable to decode response body: {exc}") from exc
    if not isinstance(decoded, dict):
        raise EncodingError(f"Expected a JSON object, got {type(decoded).__name__}")
    return decoded


def versioned_path(endpoint: str, version: str = DEFAULT_API_VERSION) -> str:
    return f"api/{version}/{endpoint.lstrip('/')}"


def compute_signature(path: str, payload: bytes, secret: bytes) -> str:
    mac = hmac.new(secret, path.encode("utf-8") + b"\x00" + payload, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode("utf-8")


class RequestSigner:
    """Builds signed requests for one credential set. Performs no I/O."""

    def __init__(
        self,
        credentials: Optional[ExchangeCredentials],
        *,
        nonce_source: Optional[NonceSource] = None,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        self._credentials = credentials
        self._nonces = nonce_source or NonceSource()
        self._api_version = api_version

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None

    def sign(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """Sign ``params`` for ``endpoint`` using a freshly generated nonce."""
        credentials = self._require_credentials()
        return self._build(credentials, endpoint, self._nonces.next(), params)

    def sign_with_nonce(
        self,
        endpoint: str,
        nonce: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        """Sign with an explicit nonce; used for reproducible test vectors."""
        credentials = self._require_credentials()
        return self._build(credentials, endpoint, nonce, params)

    def _require_credentials(self) -> ExchangeCredentials:
        if self._credentials is None:
            raise CredentialsMissingError("ANX API credentials are not configured")
        return self._credentials

    def _build(
        self,
        credentials: ExchangeCredentials,
        endpoint: str,
        nonce: str,
        params: Optional[Mapping[str, Any]],
    ) -> SignedRequest:
        body: dict[str, Any] = {"nonce": nonce}
        if params:
            body.update(params)
        payload = encode_payload(body)
        path = versioned_path(endpoint, self._api_version)
        signature = compute_signature(path, payload, credentials.api_secret)
        headers = {
            "Rest-Key": credentials.api_key,
            "Rest-Sign": signature,
            "Content-Type": "application/json",
        }
        return SignedRequest(path=path, payload=payload, signature=signature, headers=headers)
