"""
Company verification: one three-step gateway exchange per claimed employer.

A successful exchange may resolve the searched name to several legal
entities. Every match is persisted as a CompanyVerificationRecord in one
transaction; the first match in response order is the primary result whose
session credentials scope the following employee check.

Company failures are never written to the record store. Their gateway steps
still appear in the API call audit log.
"""

from typing import Any, Callable, Dict, List, Optional

from work_history_verification.config.settings import Settings, get_settings
from work_history_verification.io.connectors.gateway import VerificationGatewayClient
from work_history_verification.utils.logging import get_logger

from .exceptions import InvalidInputError, NoMatchError, ServiceSoftFailureError
from .exchange import CallContext, GatewayExchange
from .models import (
    CompanyCredentials,
    CompanyVerificationRecord,
    CompanyVerificationResult,
    utcnow,
)
from .normalizer import clean_company_name
from .protocols import RecordStore

logger = get_logger(__name__)

COMPANY_DOC_TYPE = 106


class CompanyVerifier:
    """
    Drives the company encrypt/verify/decrypt exchange and persists matches.

    Example:
        >>> verifier = CompanyVerifier(gateway, store)
        >>> result = verifier.verify_company(
        ...     "tx-1", "Infosys Ltd. (Bangalore)", "cand-1", 42
        ... )
        >>> result.primary.establishment_id
        'EST001'
    """

    def __init__(
        self,
        gateway: VerificationGatewayClient,
        store: RecordStore,
        settings: Optional[Settings] = None,
        *,
        clock: Callable[[], Any] = utcnow,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.exchange = GatewayExchange(
            gateway, store, audit=self.settings.audit_api_calls
        )
        self.clock = clock

    def verify_company(
        self,
        tx_id: str,
        raw_company_name: str,
        candidate_id: str,
        company_id: int,
        employee_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        *,
        is_retry: bool = False,
    ) -> CompanyVerificationResult:
        """
        Verify a claimed employer and persist every legal-entity match.

        Args:
            tx_id: Fresh transaction id for this exchange.
            raw_company_name: Company name as claimed; canonicalized here.
            candidate_id: Candidate whose work history is verified.
            company_id: Claimed employment the records belong to.
            employee_id: User driving the verification.
            organization_id: Tenant of the verification.
            is_retry: True when called to refresh stale employee credentials.

        Returns:
            CompanyVerificationResult with the primary match first.

        Raises:
            InvalidInputError: Name is empty after canonicalization.
            NoMatchError: The gateway matched no legal entity.
            ServiceSoftFailureError: The gateway declared a failure.
            GatewayError: Transport failure in one of the three steps.
            RecordPersistenceError: The records could not be stored.
        """
        company_name = clean_company_name(raw_company_name)
        if not company_name:
            raise InvalidInputError("Company name is required for verification")

        context = CallContext(
            trans_id=tx_id,
            candidate_id=candidate_id,
            company_id=company_id,
            employee_id=employee_id,
            organization_id=organization_id,
            is_retry=is_retry,
        )
        logger.info(
            "company_verifier.exchange.started",
            candidate_id=candidate_id,
            company_id=company_id,
            company_name=company_name,
            is_retry=is_retry,
        )

        payload = {
            "transID": tx_id,
            "docType": COMPANY_DOC_TYPE,
            "companyName": company_name,
        }
        request_data, _ = self.exchange.call("company", "encrypt", payload, context)
        response_data, _ = self.exchange.call(
            "company", "verify", request_data, context
        )
        result, _ = self.exchange.call("company", "decrypt", response_data, context)

        matches = self._parse_matches(result)
        verified_at = self.clock()
        rows = [
            CompanyVerificationRecord(
                candidate_id=candidate_id,
                company_id=company_id,
                employee_id=employee_id,
                organization_id=organization_id,
                establishment_id=match.establishment_id,
                verified_company_name=match.verified_company_name,
                secret_token=match.secret_token,
                ts_transaction_id=match.ts_transaction_id,
                verified_at=verified_at,
            )
            for match in matches
        ]
        records = self.store.insert_company_records(rows)

        logger.info(
            "company_verifier.exchange.completed",
            candidate_id=candidate_id,
            company_id=company_id,
            match_count=len(matches),
            establishment_id=matches[0].establishment_id,
        )
        return CompanyVerificationResult(
            tx_id=tx_id, primary=matches[0], matches=matches, records=records
        )

    @staticmethod
    def _parse_matches(result: Dict[str, Any]) -> List[CompanyCredentials]:
        """Turn a decrypted company result into credentials, in response order."""
        status = result.get("status")
        names = result.get("CompanyName")
        secret_token = result.get("secretToken")
        ts_transaction_id = result.get("tsTransactionID")

        if status == 1 and (not isinstance(names, dict) or not names):
            raise NoMatchError("No company names returned in response")

        if status != 1 or not ts_transaction_id:
            message = result.get("msg") or "Unknown verification error"
            logger.warning(
                "company_verifier.exchange.soft_failure",
                status=status,
                message=str(message),
            )
            raise ServiceSoftFailureError(str(message))

        return [
            CompanyCredentials(
                establishment_id=str(establishment_id),
                verified_company_name=str(name),
                secret_token=secret_token or "",
                ts_transaction_id=str(ts_transaction_id),
            )
            for establishment_id, name in names.items()
        ]
