"""
Verification gateway connector models and exceptions.
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional

GatewayDomain = Literal["company", "employee"]
GatewayStep = Literal["encrypt", "verify", "decrypt"]


class GatewayError(Exception):
    """Base exception for verification gateway errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class GatewayConfigurationError(GatewayError):
    """Raised when the gateway proxy URL is not configured."""

    pass


class GatewayTransportError(GatewayError):
    """Raised on network failures or non-success responses without a payload."""

    pass


class GatewayResponseError(GatewayError):
    """Raised when a successful response does not carry the expected field."""

    pass


@dataclass
class GatewayResponse:
    """
    One HTTP exchange with the gateway proxy.

    Attributes:
        endpoint: Proxy endpoint name, e.g. ``company-verify``.
        status_code: HTTP status returned by the proxy.
        body: Parsed JSON body, or the raw text when the body is not JSON.
        soft_failure: True when the payload was recovered from a non-2xx
            response.
    """

    endpoint: str
    status_code: int
    body: Any
    soft_failure: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
