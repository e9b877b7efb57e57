"""
Employee verification with the stale-token refresh loop.

The employee check is scoped to a prior company verification through its
``secretToken``/``tsTransactionID`` pair. When the gateway answers that the
token must be regenerated, the company exchange is re-run once with a fresh
transaction id and the employee exchange is repeated with the new
credentials. The loop is bounded by ``employee_token_refresh_max``.

Unlike company failures, every employee outcome is persisted: successes with
``verified_at`` set, failures with ``verification_error`` set.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from work_history_verification.config.settings import Settings, get_settings
from work_history_verification.io.connectors.gateway import (
    GatewayError,
    VerificationGatewayClient,
)
from work_history_verification.utils.logging import get_logger

from .company_verifier import CompanyVerifier
from .exceptions import (
    InvalidInputError,
    ServiceSoftFailureError,
    TokenExpiredError,
    VerificationError,
)
from .exchange import CallContext, GatewayExchange
from .models import (
    CompanyCredentials,
    CompanyVerificationResult,
    EmployeeVerificationRecord,
    EmployeeVerificationResult,
    utcnow,
)
from .protocols import RecordStore

logger = get_logger(__name__)

EMPLOYEE_DOC_TYPE = "106"
STALE_TOKEN_MESSAGE = "please generate new token"
DEFAULT_FAILURE_MESSAGE = "Employee not found"
FALLBACK_EMPLOYEE_NAME = "Unknown"
MISSING_CREDENTIALS_MESSAGE = (
    "Missing company verification details for employee verification"
)


def new_tx_id() -> str:
    return str(uuid.uuid4())


@dataclass
class EmployeeVerificationRequest:
    """Inputs of one employee verification."""

    tx_id: str
    person_name: str
    verification_year: str
    candidate_id: str
    company_id: int
    credentials: Optional[CompanyCredentials]
    employee_id: Optional[str] = None
    organization_id: Optional[str] = None

    @property
    def start_date(self) -> Optional[str]:
        if not self.verification_year:
            return None
        return f"{self.verification_year}-01-01"


def _message_of(result: Dict[str, Any]) -> Optional[str]:
    msg = result.get("msg")
    if isinstance(msg, dict):
        message = msg.get("message")
        return str(message) if message else None
    if isinstance(msg, str) and msg:
        return msg
    return None


def _check_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """
    Classify a decrypted employee result.

    Returns:
        The ``msg`` object of a complete success.

    Raises:
        TokenExpiredError: The company session credentials are stale.
        ServiceSoftFailureError: Any other shape, including partial successes.
    """
    status = result.get("status")
    message = _message_of(result)

    if status == 0 and message and message.lower() == STALE_TOKEN_MESSAGE:
        raise TokenExpiredError(message)

    msg = result.get("msg")
    if (
        status == 1
        and isinstance(msg, dict)
        and msg.get("employer_name")
        and msg.get("establishment_id")
        and msg.get("status") is True
        and msg.get("status_code") == 200
        and result.get("tsTransId")
    ):
        return msg

    raise ServiceSoftFailureError(message or DEFAULT_FAILURE_MESSAGE)


class EmployeeVerifier:
    """
    Drives the employee encrypt/verify/decrypt exchange.

    Args:
        gateway: Verification gateway client.
        store: Record store for employee outcomes and audit rows.
        company_verifier: Used to regenerate stale company credentials.
        settings: Optional settings; defaults to ``get_settings()``.
        tx_id_factory: Source of fresh transaction ids for the refresh loop.
        clock: Source of ``verified_at`` timestamps.
    """

    def __init__(
        self,
        gateway: VerificationGatewayClient,
        store: RecordStore,
        company_verifier: CompanyVerifier,
        settings: Optional[Settings] = None,
        *,
        tx_id_factory: Callable[[], str] = new_tx_id,
        clock: Callable[[], Any] = utcnow,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.company_verifier = company_verifier
        self.exchange = GatewayExchange(
            gateway, store, audit=self.settings.audit_api_calls
        )
        self.max_token_refreshes = self.settings.employee_token_refresh_max
        self.tx_id_factory = tx_id_factory
        self.clock = clock

    def verify_employee(
        self,
        request: EmployeeVerificationRequest,
        *,
        on_company_refreshed: Optional[
            Callable[[CompanyVerificationResult], None]
        ] = None,
    ) -> EmployeeVerificationResult:
        """
        Verify that ``request.person_name`` worked at the verified company.

        Args:
            request: Person, year, entry identifiers and company credentials.
            on_company_refreshed: Called with the new company result whenever
                stale credentials were regenerated.

        Returns:
            EmployeeVerificationResult for the persisted success record.

        Raises:
            InvalidInputError: Empty person name or incomplete credentials;
                nothing is persisted and no call is made.
            ServiceSoftFailureError: The gateway declared a failure; a failure
                record has been persisted.
            GatewayError: Transport failure; a failure record has been
                persisted and the original exception is re-raised.
        """
        person_name = (request.person_name or "").strip()
        if not person_name:
            raise InvalidInputError("Invalid employee name provided")

        credentials = request.credentials
        if credentials is None or not credentials.is_complete():
            raise InvalidInputError(MISSING_CREDENTIALS_MESSAGE)

        tx_id = request.tx_id
        attempt = 0
        while True:
            try:
                result = self._run_exchange(
                    request, person_name, tx_id, credentials, attempt
                )
            except GatewayError as e:
                self.record_failure(request, e.message, credentials=credentials)
                raise

            try:
                msg = _check_result(result)
            except TokenExpiredError as e:
                if attempt >= self.max_token_refreshes:
                    self.record_failure(
                        request,
                        e.message,
                        credentials=credentials,
                        ts_transaction_id=result.get("tsTransId"),
                    )
                    raise ServiceSoftFailureError(e.message) from e

                attempt += 1
                credentials = self._refresh_credentials(
                    request, credentials, on_company_refreshed
                )
                tx_id = self.tx_id_factory()
                continue
            except ServiceSoftFailureError as e:
                logger.info(
                    "employee_verifier.exchange.soft_failure",
                    candidate_id=request.candidate_id,
                    company_id=request.company_id,
                    attempt=attempt,
                    message=e.message,
                )
                self.record_failure(
                    request,
                    e.message,
                    credentials=credentials,
                    ts_transaction_id=result.get("tsTransId"),
                )
                raise

            record = self.store.insert_employee_record(
                EmployeeVerificationRecord(
                    candidate_id=request.candidate_id,
                    company_id=request.company_id,
                    employee_id=request.employee_id,
                    organization_id=request.organization_id,
                    establishment_id=str(msg["establishment_id"]),
                    employee_name=person_name,
                    start_date=request.start_date,
                    ts_transaction_id=str(result["tsTransId"]),
                    verified_at=self.clock(),
                )
            )
            logger.info(
                "employee_verifier.exchange.completed",
                candidate_id=request.candidate_id,
                company_id=request.company_id,
                attempts=attempt + 1,
            )
            return EmployeeVerificationResult(
                tx_id=tx_id,
                record=record,
                employer_name=str(msg["employer_name"]),
                establishment_id=str(msg["establishment_id"]),
                ts_trans_id=str(result["tsTransId"]),
                credentials=credentials,
                attempts=attempt + 1,
                response=result,
            )

    def record_failure(
        self,
        request: EmployeeVerificationRequest,
        message: str,
        *,
        credentials: Optional[CompanyCredentials] = None,
        ts_transaction_id: Optional[str] = None,
    ) -> EmployeeVerificationRecord:
        """Persist a failed employee attempt with ``message`` as its error."""
        credentials = credentials or request.credentials
        record = EmployeeVerificationRecord(
            candidate_id=request.candidate_id,
            company_id=request.company_id,
            employee_id=request.employee_id,
            organization_id=request.organization_id,
            establishment_id=credentials.establishment_id if credentials else None,
            employee_name=(request.person_name or "").strip()
            or FALLBACK_EMPLOYEE_NAME,
            start_date=request.start_date,
            ts_transaction_id=str(ts_transaction_id) if ts_transaction_id else None,
            verified_at=None,
            verification_error=message or DEFAULT_FAILURE_MESSAGE,
        )
        return self.store.insert_employee_record(record)

    def _run_exchange(
        self,
        request: EmployeeVerificationRequest,
        person_name: str,
        tx_id: str,
        credentials: CompanyCredentials,
        attempt: int,
    ) -> Dict[str, Any]:
        context = CallContext(
            trans_id=tx_id,
            candidate_id=request.candidate_id,
            company_id=request.company_id,
            employee_id=request.employee_id,
            organization_id=request.organization_id,
            is_retry=attempt > 0,
        )
        logger.info(
            "employee_verifier.exchange.started",
            candidate_id=request.candidate_id,
            company_id=request.company_id,
            verification_year=request.verification_year,
            attempt=attempt,
        )

        payload = {
            "transID": tx_id,
            "docType": EMPLOYEE_DOC_TYPE,
            "company_name": credentials.verified_company_name,
            "person_name": person_name,
            "verification_year": request.verification_year,
            "tsTransactionID": credentials.ts_transaction_id,
            "secretToken": credentials.secret_token,
        }
        request_data, _ = self.exchange.call("employee", "encrypt", payload, context)
        response_data, _ = self.exchange.call(
            "employee", "verify", request_data, context
        )
        result, _ = self.exchange.call("employee", "decrypt", response_data, context)
        return result

    def _refresh_credentials(
        self,
        request: EmployeeVerificationRequest,
        stale: CompanyCredentials,
        on_company_refreshed: Optional[Callable[[CompanyVerificationResult], None]],
    ) -> CompanyCredentials:
        """Re-run the company exchange; a failure here fails the employee check."""
        logger.info(
            "employee_verifier.token_refresh.started",
            candidate_id=request.candidate_id,
            company_id=request.company_id,
        )
        try:
            refreshed = self.company_verifier.verify_company(
                self.tx_id_factory(),
                stale.verified_company_name,
                request.candidate_id,
                request.company_id,
                request.employee_id,
                request.organization_id,
                is_retry=True,
            )
        except (GatewayError, VerificationError) as e:
            logger.warning(
                "employee_verifier.token_refresh.failed",
                candidate_id=request.candidate_id,
                company_id=request.company_id,
                error=e.message,
            )
            self.record_failure(request, e.message, credentials=stale)
            raise

        if on_company_refreshed is not None:
            on_company_refreshed(refreshed)
        return refreshed.primary
