"""
Poloniex Futures - Configuration.

============================================================
PURPOSE
============================================================
Adapter configuration and environment loading.

Credentials are read from the environment (optionally from
a .env file) and are never persisted by the adapter.

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .endpoints import DEFAULT_VERSION
from .errors import AuthenticationError


# ============================================================
# CONSTANTS
# ============================================================

POLONIEX_FUTURES_URL = "https://futures-api.poloniex.com"

ENV_PREFIX = "POLONIEX_FUTURES"


# ============================================================
# ADAPTER CONFIGURATION
# ============================================================

@dataclass
class AdapterConfig:
    """
    Configuration for the Poloniex Futures adapter.
    """

    # Credentials (None for public-only use)
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    passphrase: Optional[str] = None

    # Endpoints
    public_url: str = POLONIEX_FUTURES_URL
    private_url: str = POLONIEX_FUTURES_URL
    default_version: str = DEFAULT_VERSION

    # Connection
    timeout_seconds: float = 30.0

    # OHLCV page size when only `since` is given
    ohlcv_limit: int = 200

    # Exchange-specific options
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def urls(self) -> Dict[str, str]:
        """Base URL per access scope."""
        return {"public": self.public_url, "private": self.private_url}

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides: Any) -> "AdapterConfig":
        """
        Create config from environment variables.

        Reads <PREFIX>_API_KEY, <PREFIX>_API_SECRET and
        <PREFIX>_PASSPHRASE after loading a .env file if present.

        Args:
            prefix: Environment variable prefix
            **overrides: Explicit field values

        Returns:
            AdapterConfig
        """
        load_dotenv()

        prefix = prefix.upper()
        values: Dict[str, Any] = {
            "api_key": os.environ.get(f"{prefix}_API_KEY"),
            "api_secret": os.environ.get(f"{prefix}_API_SECRET"),
            "passphrase": os.environ.get(f"{prefix}_PASSPHRASE"),
        }
        values.update(overrides)
        return cls(**values)

    def check_required_credentials(self) -> None:
        """
        Raises:
            AuthenticationError: If API key, secret or passphrase is missing
        """
        required = {
            "apiKey": self.api_key,
            "secret": self.api_secret,
            "password": self.passphrase,
        }
        for name, value in required.items():
            if not value:
                raise AuthenticationError(f"poloniexfutures requires \"{name}\" credential")
