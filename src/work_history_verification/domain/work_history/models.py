"""
Pydantic v2 data models for the work history verification domain.

This module defines the data contracts for:
1. Append-only verification records (company and employee) and the API
   call audit trail written through the RecordStore
2. Session credentials produced by a company verification and consumed by
   the employee check
3. The WorkHistoryEntry read model and its in-memory workflow state
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNKNOWN_EMPLOYEE_NAME = "Unknown Employee"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===== Persisted records =====


class CompanyVerificationRecord(BaseModel):
    """
    One legal-entity match of a successful company verification.

    Failures are never stored here. Several rows may exist for one
    (candidate_id, company_id); the current one has the latest verified_at.
    """

    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: Optional[int] = None
    candidate_id: str = Field(..., min_length=1)
    company_id: int
    employee_id: Optional[str] = None
    organization_id: Optional[str] = None
    establishment_id: str = Field(..., min_length=1)
    verified_company_name: str
    secret_token: str
    ts_transaction_id: str
    verified_at: datetime
    created_at: Optional[datetime] = None


class EmployeeVerificationRecord(BaseModel):
    """
    Outcome of one employee verification attempt.

    Exactly one of ``verified_at`` (success) or ``verification_error``
    (failure) is set.
    """

    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: Optional[int] = None
    candidate_id: str = Field(..., min_length=1)
    company_id: int
    employee_id: Optional[str] = None
    organization_id: Optional[str] = None
    establishment_id: Optional[str] = None
    employee_name: str
    start_date: Optional[str] = None
    ts_transaction_id: Optional[str] = None
    verified_at: Optional[datetime] = None
    verification_error: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _success_xor_failure(self) -> "EmployeeVerificationRecord":
        if (self.verified_at is None) == (self.verification_error is None):
            raise ValueError(
                "exactly one of verified_at or verification_error must be set"
            )
        return self

    @property
    def is_success(self) -> bool:
        return self.verified_at is not None


class ApiCallLog(BaseModel):
    """Audit row for one gateway step (encrypt, verify or decrypt)."""

    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: Optional[int] = None
    candidate_id: str
    organization_id: Optional[str] = None
    company_id: Optional[int] = None
    employee_id: Optional[str] = None
    trans_id: str
    api_type: str
    endpoint_name: str
    request_payload: Optional[Dict[str, Any]] = None
    response_status_http: Optional[int] = None
    response_body: Optional[Any] = None
    error_message: Optional[str] = None
    success: bool
    is_retry: bool = False
    created_at: Optional[datetime] = None


# ===== Exchange results =====


class CompanyCredentials(BaseModel):
    """Session credentials scoping an employee check to one company verification."""

    model_config = ConfigDict(frozen=True)

    establishment_id: str
    verified_company_name: str
    secret_token: str
    ts_transaction_id: str

    @classmethod
    def from_record(cls, record: CompanyVerificationRecord) -> "CompanyCredentials":
        return cls(
            establishment_id=record.establishment_id,
            verified_company_name=record.verified_company_name,
            secret_token=record.secret_token,
            ts_transaction_id=record.ts_transaction_id,
        )

    def is_complete(self) -> bool:
        return all(
            (
                self.establishment_id,
                self.verified_company_name,
                self.secret_token,
                self.ts_transaction_id,
            )
        )


class CompanyVerificationResult(BaseModel):
    """
    Successful company verification.

    ``primary`` is the first match in gateway response order; ``matches``
    holds every legal entity returned, ``records`` the persisted rows.
    """

    tx_id: str
    primary: CompanyCredentials
    matches: List[CompanyCredentials]
    records: List[CompanyVerificationRecord]

    @property
    def primary_record(self) -> CompanyVerificationRecord:
        return self.records[0]


class EmployeeVerificationResult(BaseModel):
    """Successful employee verification."""

    tx_id: str
    record: EmployeeVerificationRecord
    employer_name: str
    establishment_id: str
    ts_trans_id: str
    credentials: CompanyCredentials
    attempts: int = Field(..., ge=1)
    response: Dict[str, Any] = Field(default_factory=dict)


# ===== Read model =====


class WorkflowState(str, Enum):
    """Per-entry verification workflow state (in memory only)."""

    UNVERIFIED = "unverified"
    COMPANY_VERIFYING = "company_verifying"
    COMPANY_VERIFIED = "company_verified"
    COMPANY_FAILED = "company_failed"
    EMPLOYEE_VERIFYING = "employee_verifying"
    EMPLOYEE_VERIFIED = "employee_verified"
    EMPLOYEE_FAILED = "employee_failed"


class EntryKey(NamedTuple):
    candidate_id: str
    company_id: int

    def __str__(self) -> str:
        return f"{self.candidate_id}:{self.company_id}"


class CandidateProfile(BaseModel):
    """The person whose work history is being verified."""

    model_config = ConfigDict(str_strip_whitespace=True)

    candidate_id: str = Field(..., min_length=1)
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def person_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.name or UNKNOWN_EMPLOYEE_NAME


class ClaimedEmployment(BaseModel):
    """One line of a candidate's claimed work history."""

    model_config = ConfigDict(str_strip_whitespace=True)

    company_id: int
    company_name: str = "Unknown Company"
    designation: str = "-"
    years: str = "-"


@dataclass
class WorkHistoryEntry:
    """
    Read model combining a claimed employment with its current records.

    Mutated only with verifier outputs; ``state`` is never persisted.
    """

    candidate_id: str
    company_id: int
    raw_company_name: str
    designation: str = "-"
    raw_years_text: str = "-"
    person_name: str = UNKNOWN_EMPLOYEE_NAME
    company_record: Optional[CompanyVerificationRecord] = None
    employee_record: Optional[EmployeeVerificationRecord] = None
    state: WorkflowState = WorkflowState.UNVERIFIED
    company_error: Optional[str] = None
    employee_error: Optional[str] = None
    selected_verification_year: Optional[str] = None
    available_verification_years: List[int] = field(default_factory=list)

    @property
    def key(self) -> EntryKey:
        return EntryKey(self.candidate_id, self.company_id)

    @property
    def is_company_verified(self) -> bool:
        return self.company_record is not None

    @property
    def is_employee_verified(self) -> bool:
        return self.employee_record is not None and self.employee_record.is_success

    @property
    def needs_verification(self) -> bool:
        return not self.is_company_verified or not self.is_employee_verified

    @property
    def credentials(self) -> Optional[CompanyCredentials]:
        if self.company_record is None:
            return None
        return CompanyCredentials.from_record(self.company_record)

    def initial_state(self) -> WorkflowState:
        """State implied by the current records at load time."""
        if self.employee_record is not None:
            if self.employee_record.is_success:
                return WorkflowState.EMPLOYEE_VERIFIED
            return WorkflowState.EMPLOYEE_FAILED
        if self.company_record is not None:
            return WorkflowState.COMPANY_VERIFIED
        return WorkflowState.UNVERIFIED


@dataclass
class BatchSummary:
    """Result of a verify-all run."""

    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    errors: List[str] = field(default_factory=list)
