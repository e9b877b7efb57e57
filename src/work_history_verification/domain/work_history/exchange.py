"""
Audited gateway steps shared by the company and employee verifiers.

Each encrypt/verify/decrypt call goes through ``GatewayExchange.call``, which
writes one verification_api_call_logs row per step when auditing is enabled.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from work_history_verification.io.connectors.gateway import (
    GatewayError,
    GatewayResponse,
    VerificationGatewayClient,
)
from work_history_verification.io.connectors.gateway.models import (
    GatewayDomain,
    GatewayStep,
)
from work_history_verification.io.connectors.gateway.utils import redact_payload
from work_history_verification.utils.logging import get_logger

from .exceptions import RecordPersistenceError
from .models import ApiCallLog
from .protocols import RecordStore

logger = get_logger(__name__)

# Body field wrapping the blob sent to each step
_BLOB_FIELDS = {
    "encrypt": "payload",
    "verify": "requestData",
    "decrypt": "responseData",
}


@dataclass(frozen=True)
class CallContext:
    """Identifiers stamped on every audit row of one exchange."""

    trans_id: str
    candidate_id: str
    company_id: Optional[int] = None
    employee_id: Optional[str] = None
    organization_id: Optional[str] = None
    is_retry: bool = False


class GatewayExchange:
    """Runs single gateway steps and records them in the audit log."""

    def __init__(
        self,
        gateway: VerificationGatewayClient,
        store: RecordStore,
        *,
        audit: bool = True,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.audit = audit

    def call(
        self,
        domain: GatewayDomain,
        step: GatewayStep,
        argument: Any,
        context: CallContext,
        *,
        request_payload: Optional[dict] = None,
    ) -> Tuple[Any, GatewayResponse]:
        """
        Run one step and audit it.

        Args:
            domain: ``company`` or ``employee``.
            step: ``encrypt``, ``verify`` or ``decrypt``.
            argument: Plaintext payload for encrypt, blob for verify/decrypt.
            context: Identifiers for the audit row.
            request_payload: Body to record; defaults to ``argument``.

        Raises:
            GatewayError: Propagated unchanged after the failure is audited.
        """
        if request_payload is None:
            if isinstance(argument, dict):
                request_payload = argument
            else:
                request_payload = {_BLOB_FIELDS[step]: argument}

        method = getattr(self.gateway, f"{step}_with_response")
        try:
            value, response = method(domain, argument)
        except GatewayError as e:
            self._record(
                context,
                domain,
                step,
                request_payload,
                status_code=e.status_code,
                body=e.body,
                error_message=e.message,
                success=False,
            )
            raise

        self._record(
            context,
            domain,
            step,
            request_payload,
            status_code=response.status_code,
            body=response.body,
            error_message=None,
            success=not response.soft_failure,
        )
        return value, response

    def _record(
        self,
        context: CallContext,
        domain: GatewayDomain,
        step: GatewayStep,
        request_payload: dict,
        *,
        status_code: Optional[int],
        body: Any,
        error_message: Optional[str],
        success: bool,
    ) -> None:
        if not self.audit:
            return

        response_body = redact_payload(body)
        if response_body is not None and not isinstance(response_body, (dict, list)):
            response_body = {"raw": str(response_body)}

        log = ApiCallLog(
            candidate_id=context.candidate_id,
            organization_id=context.organization_id,
            company_id=context.company_id,
            employee_id=context.employee_id,
            trans_id=context.trans_id,
            api_type=f"{domain}_{step}",
            endpoint_name=f"{domain}-{step}",
            request_payload=redact_payload(request_payload),
            response_status_http=status_code,
            response_body=response_body,
            error_message=error_message,
            success=success,
            is_retry=context.is_retry,
        )
        try:
            self.store.insert_api_call_log(log)
        except RecordPersistenceError as e:
            logger.warning(
                "gateway_exchange.audit_failed",
                endpoint_name=log.endpoint_name,
                trans_id=context.trans_id,
                error=e.message,
            )
