"""
Result-code decoding for ANX responses.

Version 3 endpoints wrap every answer in ``{"resultCode": ..., "timestamp": ...}``
and ``"OK"`` is the only success value. The older version 2 market-data
endpoints use ``{"result": "success", "data": ...}`` instead. Both checks live
here so no caller compares result strings itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Type, Union

from exchanges.anx.errors import RemoteRejectedError

SUCCESS_CODE = "OK"
LEGACY_SUCCESS = "success"


@dataclass(frozen=True, slots=True)
class Accepted:
    payload: dict
    timestamp: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Rejected:
    code: str
    payload: dict
    timestamp: Optional[int] = None

    def to_error(self, error_cls: Type[RemoteRejectedError] = RemoteRejectedError) -> RemoteRejectedError:
        return error_cls(self.code, payload=self.payload)


DecodedResponse = Union[Accepted, Rejected]


def decode(body: dict) -> DecodedResponse:
    """Classify a decoded response body by its ``resultCode``."""
    code = body.get("resultCode")
    timestamp = _optional_int(body.get("timestamp"))
    if code == SUCCESS_CODE:
        return Accepted(payload=body, timestamp=timestamp)
    return Rejected(code=_code_text(code), payload=body, timestamp=timestamp)


def unwrap(body: dict, *, error_cls: Type[RemoteRejectedError] = RemoteRejectedError) -> dict:
    """Return ``body`` unchanged when accepted, otherwise raise ``error_cls``."""
    result = decode(body)
    if isinstance(result, Rejected):
        raise result.to_error(error_cls)
    return result.payload


def unwrap_legacy(body: dict) -> dict:
    """Return the ``data`` object of a version 2 response, or raise on failure."""
    result = body.get("result")
    if result != LEGACY_SUCCESS:
        raise RemoteRejectedError(_code_text(result), payload=body)
    data = body.get("data")
    return data if isinstance(data, dict) else {}


def _code_text(code: Any) -> str:
    if code is None:
        return ""
    return code if isinstance(code, str) else str(code)


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
