"""
Caller-facing verification workflow for a candidate's work history.

WorkHistoryVerifier owns the in-memory WorkHistoryEntry read models: it
loads them from the record store, runs the company and employee verifiers
against them, applies the verifier outputs and publishes every state change
to subscribed observers.

Single-entry operations (``verify_company_only``, ``verify_employee_only``,
``verify_entry``) re-raise failures so the caller can show the message;
``verify_all_outstanding`` never raises for a single entry.
"""

import time
from typing import Callable, List, Optional

from work_history_verification.config.settings import Settings, get_settings
from work_history_verification.io.connectors.gateway import GatewayError
from work_history_verification.utils.logging import get_logger

from .company_verifier import CompanyVerifier
from .employee_verifier import (
    EmployeeVerificationRequest,
    EmployeeVerifier,
    new_tx_id,
)
from .events import TransitionPublisher
from .exceptions import InvalidInputError, VerificationError
from .models import (
    BatchSummary,
    CandidateProfile,
    ClaimedEmployment,
    CompanyVerificationResult,
    EmployeeVerificationResult,
    WorkflowState,
    WorkHistoryEntry,
)
from .orchestrator import BatchOrchestrator
from .protocols import RecordStore, StateObserver
from .years import available_verification_years, parse_verification_year

logger = get_logger(__name__)


def _describe(error: Exception) -> str:
    return f"{type(error).__name__}: {error}"


def load_work_history(
    store: RecordStore,
    candidate: CandidateProfile,
    claims: List[ClaimedEmployment],
) -> List[WorkHistoryEntry]:
    """
    Build entries for a candidate's claims with their current records.

    The initial state reflects what is already stored: EmployeeVerified
    or EmployeeFailed when an employee record exists, CompanyVerified when
    only a company record exists, Unverified otherwise.
    """
    entries = []
    for claim in claims:
        company_record = store.query_current_company_record(
            candidate.candidate_id, claim.company_id
        )
        employee_record = store.query_current_employee_record(
            candidate.candidate_id, claim.company_id, None
        )
        entry = WorkHistoryEntry(
            candidate_id=candidate.candidate_id,
            company_id=claim.company_id,
            raw_company_name=claim.company_name,
            designation=claim.designation,
            raw_years_text=claim.years,
            person_name=candidate.person_name,
            company_record=company_record,
            employee_record=employee_record,
            available_verification_years=available_verification_years(claim.years),
        )
        if employee_record is not None and not employee_record.is_success:
            entry.employee_error = employee_record.verification_error
        entry.state = entry.initial_state()
        entries.append(entry)

    logger.info(
        "work_history.loaded",
        candidate_id=candidate.candidate_id,
        entry_count=len(entries),
        outstanding=sum(1 for entry in entries if entry.needs_verification),
    )
    return entries


class WorkHistoryVerifier:
    """
    Verification workflow over WorkHistoryEntry read models.

    Args:
        company_verifier: Company exchange driver.
        employee_verifier: Employee exchange driver.
        store: Record store used to load current records.
        settings: Optional settings; defaults to ``get_settings()``.
        employee_id: User on whose behalf verifications run.
        organization_id: Tenant stamped on every record.
        publisher: Transition publisher; a new one is created when omitted.
        tx_id_factory: Source of transaction ids.
        sleep: Blocking sleep used between batch entries.
    """

    def __init__(
        self,
        company_verifier: CompanyVerifier,
        employee_verifier: EmployeeVerifier,
        store: RecordStore,
        settings: Optional[Settings] = None,
        *,
        employee_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        publisher: Optional[TransitionPublisher] = None,
        tx_id_factory: Callable[[], str] = new_tx_id,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.company_verifier = company_verifier
        self.employee_verifier = employee_verifier
        self.store = store
        self.employee_id = employee_id
        self.organization_id = organization_id
        self.publisher = publisher or TransitionPublisher()
        self.tx_id_factory = tx_id_factory
        self.sleep = sleep or time.sleep

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register a ``(entry_key, new_state, detail)`` callback."""
        return self.publisher.subscribe(observer)

    # ===== Loading =====

    def load_work_history(
        self,
        candidate: CandidateProfile,
        claims: List[ClaimedEmployment],
    ) -> List[WorkHistoryEntry]:
        """Build the read models for a candidate; see ``load_work_history``."""
        return load_work_history(self.store, candidate, claims)

    # ===== Single-entry operations =====

    def verify_company_only(self, entry: WorkHistoryEntry) -> CompanyVerificationResult:
        """
        Run the company exchange for one entry.

        Raises:
            VerificationError, GatewayError: Re-raised after the entry moved
                to CompanyFailed. Unexpected errors also end in CompanyFailed
                before propagating.
        """
        self.publisher.transition(entry, WorkflowState.COMPANY_VERIFYING)
        try:
            result = self.company_verifier.verify_company(
                self.tx_id_factory(),
                entry.raw_company_name,
                entry.candidate_id,
                entry.company_id,
                self.employee_id,
                self.organization_id,
            )
        except (VerificationError, GatewayError) as e:
            self._fail_company(entry, e.message)
            raise
        except Exception as e:
            logger.error(
                "work_history.company_unexpected_error",
                entry_key=str(entry.key),
                error=str(e),
                error_type=type(e).__name__,
            )
            self._fail_company(entry, _describe(e))
            raise

        self._apply_company_result(entry, result)
        return result

    def verify_employee_only(
        self, entry: WorkHistoryEntry
    ) -> EmployeeVerificationResult:
        """
        Run the employee exchange for one entry with its stored credentials.

        The verification year is the entry's selected year, else the start
        year parsed from the claimed tenure.

        Raises:
            UnrecognizedDateFormatError: Tenure text has no parseable year;
                nothing is called or stored.
            VerificationError, GatewayError: Re-raised after the entry moved
                to EmployeeFailed. Unexpected errors also end in
                EmployeeFailed before propagating.
        """
        try:
            verification_year = entry.selected_verification_year or (
                parse_verification_year(entry.raw_years_text)
            )
        except VerificationError as e:
            entry.employee_error = e.message
            self.publisher.transition(entry, WorkflowState.EMPLOYEE_FAILED, e.message)
            raise

        request = EmployeeVerificationRequest(
            tx_id=self.tx_id_factory(),
            person_name=entry.person_name,
            verification_year=str(verification_year),
            candidate_id=entry.candidate_id,
            company_id=entry.company_id,
            credentials=entry.credentials,
            employee_id=self.employee_id,
            organization_id=self.organization_id,
        )

        def _on_company_refreshed(result: CompanyVerificationResult) -> None:
            self._apply_company_result(
                entry, result, detail="Company credentials regenerated"
            )
            self.publisher.transition(entry, WorkflowState.EMPLOYEE_VERIFYING)

        self.publisher.transition(entry, WorkflowState.EMPLOYEE_VERIFYING)
        try:
            result = self.employee_verifier.verify_employee(
                request, on_company_refreshed=_on_company_refreshed
            )
        except InvalidInputError as e:
            try:
                self.employee_verifier.record_failure(request, e.message)
            finally:
                self._fail_employee(entry, e.message)
            raise
        except (VerificationError, GatewayError) as e:
            self._fail_employee(entry, e.message)
            raise
        except Exception as e:
            logger.error(
                "work_history.employee_unexpected_error",
                entry_key=str(entry.key),
                error=str(e),
                error_type=type(e).__name__,
            )
            self._fail_employee(entry, _describe(e))
            raise

        entry.employee_record = result.record
        entry.employee_error = None
        self.publisher.transition(entry, WorkflowState.EMPLOYEE_VERIFIED)
        return result

    def verify_entry(self, entry: WorkHistoryEntry) -> EmployeeVerificationResult:
        """
        Combined verification: company first when needed, then employee.

        A company success is kept when the employee step then fails.
        """
        if not entry.is_company_verified:
            self.verify_company_only(entry)
        return self.verify_employee_only(entry)

    # ===== Batch =====

    def verify_all_outstanding(self, entries: List[WorkHistoryEntry]) -> BatchSummary:
        """Verify every outstanding entry sequentially; never raises per entry."""
        orchestrator = BatchOrchestrator(
            self.verify_entry,
            delay=self.settings.batch_inter_entry_delay,
            sleep=self.sleep,
        )
        return orchestrator.verify_all(entries)

    # ===== Helpers =====

    def _apply_company_result(
        self,
        entry: WorkHistoryEntry,
        result: CompanyVerificationResult,
        detail: Optional[str] = None,
    ) -> None:
        entry.company_record = result.primary_record
        entry.company_error = None
        self.publisher.transition(entry, WorkflowState.COMPANY_VERIFIED, detail)

    def _fail_company(self, entry: WorkHistoryEntry, message: str) -> None:
        entry.company_error = message
        self.publisher.transition(entry, WorkflowState.COMPANY_FAILED, message)

    def _fail_employee(self, entry: WorkHistoryEntry, message: str) -> None:
        entry.employee_error = message
        entry.employee_record = self.store.query_current_employee_record(
            entry.candidate_id, entry.company_id, None
        )
        self.publisher.transition(entry, WorkflowState.EMPLOYEE_FAILED, message)
