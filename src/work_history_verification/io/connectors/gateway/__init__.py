"""
Verification gateway connector package.
"""

from .core import VerificationGatewayClient
from .models import (
    GatewayConfigurationError,
    GatewayError,
    GatewayResponse,
    GatewayResponseError,
    GatewayTransportError,
)

__all__ = [
    "VerificationGatewayClient",
    "GatewayError",
    "GatewayConfigurationError",
    "GatewayTransportError",
    "GatewayResponseError",
    "GatewayResponse",
]
