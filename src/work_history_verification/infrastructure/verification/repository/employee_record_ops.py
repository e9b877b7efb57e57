"""
verified_employee_records table operations mixin.
"""

from typing import Any, List, Mapping, Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from work_history_verification.domain.work_history.exceptions import (
    RecordPersistenceError,
)
from work_history_verification.domain.work_history.models import (
    EmployeeVerificationRecord,
    utcnow,
)
from work_history_verification.utils.logging import get_logger

from .tables import verified_employee_records

logger = get_logger(__name__)


def _employee_from_row(row: Mapping[str, Any]) -> EmployeeVerificationRecord:
    return EmployeeVerificationRecord(
        id=row["id"],
        candidate_id=row["candidate_id"],
        company_id=row["company_id"],
        employee_id=row["employee_id"],
        organization_id=row["organization_id"],
        establishment_id=row["establishment_id"],
        employee_name=row["employee_name"],
        start_date=row["start_date"],
        ts_transaction_id=row["ts_transaction_id"],
        verified_at=row["verified_at"],
        verification_error=row["verification_error"],
        created_at=row["created_at"],
    )


class EmployeeRecordOpsMixin:
    """Mixin providing verified_employee_records operations."""

    def insert_employee_record(
        self, row: EmployeeVerificationRecord
    ) -> EmployeeVerificationRecord:
        """
        Append one employee verification outcome (success or failure).

        Raises:
            RecordPersistenceError: When the insert fails.
        """
        created_at = row.created_at or utcnow()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    insert(verified_employee_records).values(
                        candidate_id=row.candidate_id,
                        company_id=row.company_id,
                        employee_id=row.employee_id,
                        organization_id=row.organization_id,
                        establishment_id=row.establishment_id,
                        employee_name=row.employee_name,
                        start_date=row.start_date,
                        ts_transaction_id=row.ts_transaction_id,
                        verified_at=row.verified_at,
                        verification_error=row.verification_error,
                        created_at=created_at,
                    )
                )
                new_id = result.inserted_primary_key[0]
        except SQLAlchemyError as e:
            logger.error(
                "record_store.insert_employee_record.failed",
                candidate_id=row.candidate_id,
                company_id=row.company_id,
                error=str(e),
            )
            raise RecordPersistenceError(
                f"Failed to store employee verification: {e}"
            ) from e

        logger.info(
            "record_store.insert_employee_record.completed",
            candidate_id=row.candidate_id,
            company_id=row.company_id,
            success=row.is_success,
        )
        return row.model_copy(update={"id": new_id, "created_at": created_at})

    def query_current_employee_record(
        self,
        candidate_id: str,
        company_id: int,
        employee_id: Optional[str] = None,
    ) -> Optional[EmployeeVerificationRecord]:
        """
        Current employee record for an entry.

        The latest success by verified_at wins; without any success, the
        latest failure by created_at. Remaining ties go to the highest id.
        ``employee_id`` narrows the lookup when given.
        """
        table = verified_employee_records
        stmt = (
            select(table)
            .where(table.c.candidate_id == candidate_id)
            .where(table.c.company_id == company_id)
        )
        if employee_id is not None:
            stmt = stmt.where(table.c.employee_id == employee_id)
        stmt = stmt.order_by(
            table.c.verified_at.is_(None),
            table.c.verified_at.desc(),
            table.c.created_at.desc(),
            table.c.id.desc(),
        ).limit(1)

        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _employee_from_row(row) if row is not None else None

    def list_employee_records(
        self, candidate_id: str, company_id: Optional[int] = None
    ) -> List[EmployeeVerificationRecord]:
        """All employee attempts for a candidate, oldest first."""
        table = verified_employee_records
        stmt = select(table).where(table.c.candidate_id == candidate_id)
        if company_id is not None:
            stmt = stmt.where(table.c.company_id == company_id)
        stmt = stmt.order_by(table.c.created_at, table.c.id)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_employee_from_row(row) for row in rows]
