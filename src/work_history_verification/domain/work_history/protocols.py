"""
Protocols for the collaborators of the verification core.
"""

from typing import List, Optional, Protocol

from .models import (
    ApiCallLog,
    CompanyVerificationRecord,
    EmployeeVerificationRecord,
    EntryKey,
    WorkflowState,
)


class RecordStore(Protocol):
    """Append-only persistence of verification attempts."""

    def insert_company_records(
        self, rows: List[CompanyVerificationRecord]
    ) -> List[CompanyVerificationRecord]:
        """Insert all rows atomically; returns them with ids assigned."""
        ...

    def insert_employee_record(
        self, row: EmployeeVerificationRecord
    ) -> EmployeeVerificationRecord:
        ...

    def query_current_company_record(
        self, candidate_id: str, company_id: int
    ) -> Optional[CompanyVerificationRecord]:
        ...

    def query_current_employee_record(
        self, candidate_id: str, company_id: int, employee_id: Optional[str]
    ) -> Optional[EmployeeVerificationRecord]:
        ...

    def insert_api_call_log(self, log: ApiCallLog) -> None:
        ...


class StateObserver(Protocol):
    """Callback invoked after every workflow state change."""

    def __call__(
        self, entry_key: EntryKey, new_state: WorkflowState, detail: Optional[str]
    ) -> None:
        ...
