"""
Utility functions for the verification gateway connector.
"""

from typing import Any, Dict

from work_history_verification.utils.logging import REDACTED_VALUE, is_sensitive_key

# Bare-string bodies shorter than this are error text, not encrypted payloads
MIN_ENCRYPTED_PAYLOAD_LENGTH = 50


def redact_payload(payload: Any) -> Any:
    """
    Return a copy of a gateway request/response body safe to persist or log.

    Session credentials (secretToken, tsTransactionID, ...) are replaced by a
    marker; nested objects are handled recursively.
    """
    if isinstance(payload, dict):
        redacted: Dict[str, Any] = {}
        for key, value in payload.items():
            if is_sensitive_key(str(key)):
                redacted[key] = REDACTED_VALUE
            else:
                redacted[key] = redact_payload(value)
        return redacted
    if isinstance(payload, list):
        return [redact_payload(item) for item in payload]
    return payload


def looks_like_encrypted_payload(body: Any) -> bool:
    """True for a bare string body that is an encrypted blob rather than HTML."""
    return (
        isinstance(body, str)
        and len(body) > MIN_ENCRYPTED_PAYLOAD_LENGTH
        and "<html" not in body.lower()
    )
