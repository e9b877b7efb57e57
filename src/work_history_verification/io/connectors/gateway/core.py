"""
Verification gateway HTTP client core implementation.
"""

import logging
from typing import Any, Iterable, Optional, Tuple

from .models import (
    GatewayDomain,
    GatewayResponse,
    GatewayResponseError,
    GatewayTransportError,
)
from .transport import GatewayTransport
from .utils import looks_like_encrypted_payload

logger = logging.getLogger(__name__)


def _extract_field(
    body: Any, keys: Iterable[str], *, any_bare_string: bool = False
) -> Optional[str]:
    """
    Return the first non-empty field among ``keys``; bare blobs count too.

    With ``any_bare_string`` every non-empty string body is accepted;
    otherwise a bare string must look like an encrypted payload.
    """
    if isinstance(body, dict):
        for key in keys:
            value = body.get(key)
            if value:
                return value
        return None
    if any_bare_string and isinstance(body, str) and body.strip():
        return body
    if looks_like_encrypted_payload(body):
        return body
    return None


def describe_failure(response: GatewayResponse) -> str:
    """Build a human-readable message for a non-success gateway response."""
    body = response.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
        if isinstance(error, dict):
            message = error.get("message") or error.get("details")
            if message:
                return str(message)
        message = body.get("message")
        if message:
            return str(message)
    elif isinstance(body, str) and body.strip():
        return body.strip()[:100]
    return f"Gateway returned HTTP {response.status_code} for {response.endpoint}"


class VerificationGatewayClient(GatewayTransport):
    """
    Synchronous client for the three-step encrypt/verify/decrypt protocol.

    The same three primitives exist for the ``company`` and the ``employee``
    domain. Each primitive has a ``*_with_response`` variant that also
    returns the GatewayResponse, so callers can audit status codes.
    """

    def encrypt(self, domain: GatewayDomain, payload: dict) -> str:
        """Encrypt a verification request; returns the ``requestData`` blob."""
        return self.encrypt_with_response(domain, payload)[0]

    def encrypt_with_response(
        self, domain: GatewayDomain, payload: dict
    ) -> Tuple[str, GatewayResponse]:
        endpoint = f"{domain}-encrypt"
        response = self._post(endpoint, payload)

        if not response.ok:
            raise GatewayTransportError(
                describe_failure(response),
                status_code=response.status_code,
                body=response.body,
            )

        request_data = _extract_field(
            response.body, ("requestData", "responseData"), any_bare_string=True
        )
        if not request_data:
            logger.error(
                "Gateway encrypt response missing requestData",
                extra={"endpoint": endpoint, "status_code": response.status_code},
            )
            raise GatewayResponseError(
                f"Missing requestData from {domain} encryption.",
                status_code=response.status_code,
                body=response.body,
            )

        return request_data, response

    def verify(self, domain: GatewayDomain, request_data: str) -> str:
        """Submit an encrypted request; returns the ``responseData`` blob."""
        return self.verify_with_response(domain, request_data)[0]

    def verify_with_response(
        self, domain: GatewayDomain, request_data: str
    ) -> Tuple[str, GatewayResponse]:
        """
        Verify step with soft-failure extraction.

        The gateway reports "no match" and similar outcomes through a non-2xx
        HTTP status whose body still carries ``responseData``. That payload is
        returned as a normal result; only responses without a payload raise.
        """
        endpoint = f"{domain}-verify"
        response = self._post(endpoint, {"requestData": request_data})
        response_data = _extract_field(response.body, ("responseData",))

        if response.ok:
            if not response_data:
                raise GatewayResponseError(
                    f"Missing responseData from {domain} verification "
                    "(proxy did not return expected data).",
                    status_code=response.status_code,
                    body=response.body,
                )
            return response_data, response

        if response_data:
            response.soft_failure = True
            logger.info(
                "Gateway verify step returned payload with error status",
                extra={"endpoint": endpoint, "status_code": response.status_code},
            )
            return response_data, response

        message = (
            f"{domain.capitalize()} verification request failed: "
            f"{describe_failure(response)}"
        )
        logger.error(
            "Gateway verify step failed without payload",
            extra={"endpoint": endpoint, "status_code": response.status_code},
        )
        raise GatewayTransportError(
            message, status_code=response.status_code, body=response.body
        )

    def decrypt(self, domain: GatewayDomain, response_data: str) -> dict:
        """Decrypt a verify response; returns the structured result."""
        return self.decrypt_with_response(domain, response_data)[0]

    def decrypt_with_response(
        self, domain: GatewayDomain, response_data: str
    ) -> Tuple[dict, GatewayResponse]:
        endpoint = f"{domain}-decrypt"
        response = self._post(endpoint, {"responseData": response_data})

        if not response.ok:
            raise GatewayTransportError(
                describe_failure(response),
                status_code=response.status_code,
                body=response.body,
            )

        if not isinstance(response.body, dict):
            logger.error(
                "Gateway decrypt response is not a JSON object",
                extra={"endpoint": endpoint, "body_type": type(response.body).__name__},
            )
            raise GatewayResponseError(
                f"Unexpected response structure from {domain} decryption.",
                status_code=response.status_code,
                body=response.body,
            )

        return response.body, response
