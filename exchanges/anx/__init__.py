"""
ANX exchange adapter.

Submodules split signing, result decoding, fees and market-data caching from
the client that composes them.
"""

from .client import AnxClient  # noqa: F401
from .errors import (  # noqa: F401
    AnxError,
    CredentialsMissingError,
    EncodingError,
    NotFoundError,
    NotYetImplementedError,
    RemoteRejectedError,
    TransportError,
    ValidationError,
)
from .settings import AnxSettings  # noqa: F401
