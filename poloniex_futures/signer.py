"""
Poloniex Futures - Endpoint Signer.

============================================================
PURPOSE
============================================================
Builds the outgoing request descriptor (url, method,
headers, body) for every call and authenticates private
endpoints.

============================================================
SIGNATURE
============================================================
    payload   = timestamp_ms + METHOD + endpoint + body
    signature = BASE64(HMAC-SHA256(secret, payload))

`endpoint` is always the v1 path (plus query string for
GET/HEAD), independent of the version used in the visible
URL. `body` is the JSON body, or empty for GET/HEAD.

Headers:
    PF-API-SIGN, PF-API-TIMESTAMP, PF-API-KEY,
    PF-API-PASSPHRASE, Content-Type: application/json

The signer never performs the HTTP call.

============================================================
"""

import base64
import hashlib
import hmac
import json
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from .config import AdapterConfig
from .endpoints import resolve_version
from .fields import extract_params, implode_params, milliseconds, omit, urlencode
from .precise import to_string
from .types import SignedRequest


SIGNING_VERSION = "v1"

QUERY_METHODS = ("GET", "HEAD")


def _json_default(value: Any) -> str:
    if isinstance(value, Decimal):
        return to_string(value)
    return str(value)


def encode_body(params: Dict[str, Any]) -> str:
    """Compact JSON body; Decimals are sent as plain text without exponent."""
    return json.dumps(params, separators=(",", ":"), default=_json_default)


def hmac_sha256_base64(secret: str, payload: str) -> str:
    digest = hmac.new(secret.encode(), payload.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


class EndpointSigner:
    """
    Request builder for Poloniex Futures.

    Example:
        signer = EndpointSigner(config)
        request = signer.sign("orders", "private", "POST", {"symbol": "BTCUSDTPERP"})
    """

    def __init__(
        self,
        config: AdapterConfig,
        clock: Callable[[], int] = milliseconds,
    ):
        """
        Args:
            config: Adapter configuration with URLs and credentials
            clock: Millisecond clock used for the timestamp header
        """
        self._config = config
        self._clock = clock

    def sign(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> SignedRequest:
        """
        Build the request descriptor.

        Args:
            path: Endpoint path template (e.g., "orders/{order-id}")
            api: "public" or "private"
            method: HTTP method
            params: Caller parameters; path placeholders are filled
                from here and `version` overrides the API version

        Returns:
            SignedRequest
        """
        params = dict(params or {})
        method = method.upper()

        version = params.get("version") or resolve_version(
            api, method, path, self._config.default_version,
        )
        imploded = implode_params(path, params)
        query = omit(params, "version", extract_params(path))

        url = f"{self._config.urls[api]}/api/{version}/{imploded}"
        headers: Dict[str, str] = {}
        body = None

        if api == "private":
            self._config.check_required_credentials()

            endpoint = f"/api/{SIGNING_VERSION}/{imploded}"
            if method in QUERY_METHODS:
                if query:
                    encoded = urlencode(query)
                    endpoint += "?" + encoded
                    url += "?" + encoded
            else:
                body = encode_body(query)

            timestamp = str(self._clock())
            payload = timestamp + method + endpoint + (body or "")
            headers = {
                "PF-API-SIGN": hmac_sha256_base64(self._config.api_secret, payload),
                "PF-API-TIMESTAMP": timestamp,
                "PF-API-KEY": self._config.api_key,
                "PF-API-PASSPHRASE": self._config.passphrase,
                "Content-Type": "application/json",
            }
        elif query:
            url += "?" + urlencode(query)

        return SignedRequest(url=url, method=method, headers=headers, body=body)
