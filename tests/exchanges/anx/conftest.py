import base64
import json

import pytest

from exchanges.anx.client import AnxClient
from exchanges.anx.settings import AnxSettings
from exchanges.anx.signing import NonceSource
from exchanges.base_client import ExchangeCredentials

SECRET = b"anx-test-secret"


class FakeTransport:
    """Records every request and answers from a queue of JSON bodies."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False

    def queue(self, *bodies):
        self.responses.extend(bodies)

    def send(self, method, path, headers=None, body=None):
        self.calls.append({"method": method, "path": path, "headers": dict(headers or {}), "body": body})
        if not self.responses:
            raise AssertionError(f"Unexpected request {method} {path}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, bytes):
            return response
        return json.dumps(response).encode("utf-8")

    def close(self):
        self.closed = True

    def json_body(self, index=-1):
        return json.loads(self.calls[index]["body"])


@pytest.fixture
def credentials():
    return ExchangeCredentials.from_base64_secret("key-1", base64.b64encode(SECRET).decode())


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def nonce_source():
    ticks = iter(range(1_700_000_000_000_000_000, 1_800_000_000_000_000_000, 1_000_000))
    return NonceSource(clock=lambda: next(ticks))


@pytest.fixture
def client(credentials, transport, nonce_source):
    settings = AnxSettings(credentials=credentials)
    return AnxClient(settings, transport=transport, nonce_source=nonce_source)


@pytest.fixture
def public_client(transport):
    return AnxClient(AnxSettings(), transport=transport)
