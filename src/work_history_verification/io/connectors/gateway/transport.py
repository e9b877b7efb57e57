"""
HTTP transport layer for the verification gateway connector.
Handles session management, headers, timeouts and body decoding.
"""

import json
import logging
from typing import Any, Optional

import requests

from work_history_verification.config.settings import get_settings
from .models import (
    GatewayConfigurationError,
    GatewayResponse,
    GatewayTransportError,
)

logger = logging.getLogger(__name__)


class GatewayTransport:
    """
    Base HTTP transport for the verification gateway proxy.

    Every call is a POST to ``{proxy_url}?endpoint=<name>`` with a JSON body.
    Requests are never retried here: the company session credentials are
    single-use, so replaying a verify call is not safe.
    """

    def __init__(
        self,
        proxy_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize gateway transport with configuration.

        Args:
            proxy_url: Gateway proxy base URL. If None, uses settings default
            timeout: Read timeout in seconds. If None, uses settings default
            connect_timeout: Connect timeout in seconds. If None, uses settings
                default
            session: Pre-built requests session (mainly for tests)
        """
        self.settings = get_settings()

        self.proxy_url = proxy_url or self.settings.gateway_proxy_url
        if not self.proxy_url:
            raise GatewayConfigurationError(
                "Gateway proxy URL required via constructor parameter or "
                "WHV_GATEWAY_PROXY_URL in .env configuration file"
            )

        self.timeout = timeout if timeout is not None else self.settings.gateway_timeout
        self.connect_timeout = (
            connect_timeout
            if connect_timeout is not None
            else self.settings.gateway_connect_timeout
        )

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.settings.gateway_user_agent,
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

        logger.info(
            "Verification gateway transport initialized",
            extra={
                "proxy_url": self.proxy_url,
                "timeout": self.timeout,
                "connect_timeout": self.connect_timeout,
            },
        )

    @staticmethod
    def _decode_body(response: requests.Response) -> Any:
        """
        Decode a proxy response body.

        The upstream service often labels JSON as text/html, so the body is
        read as text and parsed as JSON when possible; otherwise the raw text
        is returned.
        """
        raw_text = response.text or ""
        try:
            return json.loads(raw_text)
        except ValueError:
            return raw_text

    def _post(self, endpoint: str, payload: dict) -> GatewayResponse:
        """
        POST one step of an exchange to the proxy.

        Args:
            endpoint: Proxy endpoint, e.g. ``company-encrypt``
            payload: JSON body

        Returns:
            GatewayResponse for any HTTP status; status handling is left to
            the caller because some steps carry payloads in error responses.

        Raises:
            GatewayTransportError: When no HTTP response was received at all
        """
        logger.debug(
            "Making gateway request",
            extra={"endpoint": endpoint, "proxy_url": self.proxy_url},
        )

        try:
            response = self.session.post(
                self.proxy_url,
                params={"endpoint": endpoint},
                json=payload,
                timeout=(self.connect_timeout, self.timeout),
            )
        except requests.Timeout as e:
            logger.warning(
                "Gateway request timed out",
                extra={"endpoint": endpoint, "error": str(e)},
            )
            raise GatewayTransportError(
                "Network error or request timed out: Unable to reach the "
                f"verification service ({endpoint})."
            ) from e
        except requests.RequestException as e:
            logger.warning(
                "Gateway request failed",
                extra={"endpoint": endpoint, "error": str(e)},
            )
            raise GatewayTransportError(
                f"Request to verification service failed ({endpoint}): {e}"
            ) from e

        body = self._decode_body(response)

        logger.debug(
            "Gateway response received",
            extra={
                "endpoint": endpoint,
                "status_code": response.status_code,
                "json_body": isinstance(body, (dict, list)),
            },
        )

        return GatewayResponse(
            endpoint=endpoint, status_code=response.status_code, body=body
        )
