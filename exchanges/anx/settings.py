"""
Runtime settings for the ANX client.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from exchanges.base_client import ExchangeCredentials

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnxSettings:
    """Connection settings plus the (optional) credentials for one account."""

    base_url: str = "https://anxpro.com/"
    api_version: str = "3"
    market_data_api_version: str = "2"
    timeout: float = 10.0
    credentials: ExchangeCredentials | None = None

    @property
    def authenticated(self) -> bool:
        return self.credentials is not None

    @staticmethod
    def from_env(account: str = "default") -> "AnxSettings":
        """
        Resolve settings from environment variables, falling back to the
        project-level ``config`` module.

        An unusable secret disables authenticated support instead of failing,
        so public market data keeps working.
        """
        try:
            import config as config_module  # type: ignore
        except ModuleNotFoundError:
            config_module = None  # type: ignore

        defaults = AnxSettings()
        account_meta: dict = {}
        if config_module is not None:
            defaults.base_url = getattr(config_module, "ANX_API_URL", defaults.base_url)
            defaults.api_version = getattr(config_module, "ANX_API_VERSION", defaults.api_version)
            defaults.market_data_api_version = getattr(
                config_module, "ANX_MARKET_DATA_API_VERSION", defaults.market_data_api_version
            )
            defaults.timeout = float(getattr(config_module, "ANX_TIMEOUT_SECONDS", defaults.timeout))
            account_meta = dict(getattr(config_module, "ANX_ACCOUNTS", {}).get(account, {}))

        api_key = os.getenv("ANX_API_KEY") or account_meta.get("api_key") or ""
        api_secret = os.getenv("ANX_API_SECRET") or account_meta.get("api_secret") or ""

        timeout_env = os.getenv("ANX_TIMEOUT")
        try:
            timeout = float(timeout_env) if timeout_env else defaults.timeout
        except ValueError:
            logger.warning("Ignoring non-numeric ANX_TIMEOUT=%r", timeout_env)
            timeout = defaults.timeout

        return AnxSettings(
            base_url=os.getenv("ANX_API_URL") or defaults.base_url,
            api_version=os.getenv("ANX_API_VERSION") or defaults.api_version,
            market_data_api_version=defaults.market_data_api_version,
            timeout=timeout,
            credentials=_load_credentials(api_key, api_secret),
        )


def _load_credentials(api_key: str, api_secret: str) -> ExchangeCredentials | None:
    if not api_key or not api_secret:
        return None
    try:
        return ExchangeCredentials.from_base64_secret(api_key, api_secret)
    except ValueError:
        logger.warning("ANX unable to decode secret key. Authenticated API support disabled.")
        return None
