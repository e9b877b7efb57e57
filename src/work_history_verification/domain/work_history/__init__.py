"""
Work history verification domain.

Drives the company and employee exchanges with the verification gateway,
persists every attempt and exposes per-entry workflow state to observers.
"""

from .company_verifier import CompanyVerifier
from .employee_verifier import EmployeeVerificationRequest, EmployeeVerifier
from .events import StateTransition, TransitionPublisher
from .exceptions import (
    InvalidInputError,
    NoMatchError,
    RecordPersistenceError,
    ServiceSoftFailureError,
    TokenExpiredError,
    UnrecognizedDateFormatError,
    VerificationError,
)
from .models import (
    ApiCallLog,
    BatchSummary,
    CandidateProfile,
    ClaimedEmployment,
    CompanyCredentials,
    CompanyVerificationRecord,
    CompanyVerificationResult,
    EmployeeVerificationRecord,
    EmployeeVerificationResult,
    EntryKey,
    WorkflowState,
    WorkHistoryEntry,
)
from .normalizer import clean_company_name
from .orchestrator import BatchOrchestrator
from .protocols import RecordStore, StateObserver
from .workflow import WorkHistoryVerifier, load_work_history
from .years import available_verification_years, parse_verification_year

__all__ = [
    "ApiCallLog",
    "BatchOrchestrator",
    "BatchSummary",
    "CandidateProfile",
    "ClaimedEmployment",
    "CompanyCredentials",
    "CompanyVerificationRecord",
    "CompanyVerificationResult",
    "CompanyVerifier",
    "EmployeeVerificationRecord",
    "EmployeeVerificationRequest",
    "EmployeeVerificationResult",
    "EmployeeVerifier",
    "EntryKey",
    "InvalidInputError",
    "NoMatchError",
    "RecordPersistenceError",
    "RecordStore",
    "ServiceSoftFailureError",
    "StateObserver",
    "StateTransition",
    "TokenExpiredError",
    "TransitionPublisher",
    "UnrecognizedDateFormatError",
    "VerificationError",
    "WorkHistoryEntry",
    "WorkHistoryVerifier",
    "WorkflowState",
    "available_verification_years",
    "clean_company_name",
    "load_work_history",
    "parse_verification_year",
]
