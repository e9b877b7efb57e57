"""
verified_company_records table operations mixin.
"""

from typing import Any, List, Mapping, Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from work_history_verification.domain.work_history.exceptions import (
    RecordPersistenceError,
)
from work_history_verification.domain.work_history.models import (
    CompanyVerificationRecord,
    utcnow,
)
from work_history_verification.utils.logging import get_logger

from .tables import verified_company_records

logger = get_logger(__name__)


def _company_from_row(row: Mapping[str, Any]) -> CompanyVerificationRecord:
    return CompanyVerificationRecord(
        id=row["id"],
        candidate_id=row["candidate_id"],
        company_id=row["company_id"],
        employee_id=row["employee_id"],
        organization_id=row["organization_id"],
        establishment_id=row["establishment_id"],
        verified_company_name=row["company_name"],
        secret_token=row["secret_token"],
        ts_transaction_id=row["ts_transaction_id"],
        verified_at=row["verified_at"],
        created_at=row["created_at"],
    )


class CompanyRecordOpsMixin:
    """Mixin providing verified_company_records operations."""

    def insert_company_records(
        self, rows: List[CompanyVerificationRecord]
    ) -> List[CompanyVerificationRecord]:
        """
        Insert every match of one company verification in a single transaction.

        Either all rows are written or none are. Input order is preserved, so
        the first returned row is the primary match.

        Raises:
            RecordPersistenceError: When the transaction fails.
        """
        if not rows:
            logger.debug("record_store.insert_company_records.empty_input")
            return []

        created_at = utcnow()
        stored: List[CompanyVerificationRecord] = []
        try:
            with self.engine.begin() as conn:
                for row in rows:
                    record_created_at = row.created_at or created_at
                    result = conn.execute(
                        insert(verified_company_records).values(
                            candidate_id=row.candidate_id,
                            company_id=row.company_id,
                            employee_id=row.employee_id,
                            organization_id=row.organization_id,
                            establishment_id=row.establishment_id,
                            company_name=row.verified_company_name,
                            secret_token=row.secret_token,
                            ts_transaction_id=row.ts_transaction_id,
                            verified_at=row.verified_at,
                            created_at=record_created_at,
                        )
                    )
                    stored.append(
                        row.model_copy(
                            update={
                                "id": result.inserted_primary_key[0],
                                "created_at": record_created_at,
                            }
                        )
                    )
        except SQLAlchemyError as e:
            logger.error(
                "record_store.insert_company_records.failed",
                row_count=len(rows),
                error=str(e),
            )
            raise RecordPersistenceError(
                f"Failed to store company verification: {e}"
            ) from e

        logger.info(
            "record_store.insert_company_records.completed",
            candidate_id=rows[0].candidate_id,
            company_id=rows[0].company_id,
            inserted_count=len(stored),
        )
        return stored

    def query_current_company_record(
        self, candidate_id: str, company_id: int
    ) -> Optional[CompanyVerificationRecord]:
        """
        Latest company record by verified_at.

        Matches of one exchange share verified_at and are inserted in
        response order, so ties go to the lowest id: the primary match.
        """
        table = verified_company_records
        stmt = (
            select(table)
            .where(table.c.candidate_id == candidate_id)
            .where(table.c.company_id == company_id)
            .order_by(table.c.verified_at.desc(), table.c.id.asc())
            .limit(1)
        )
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _company_from_row(row) if row is not None else None

    def list_company_records(
        self, candidate_id: str, company_id: Optional[int] = None
    ) -> List[CompanyVerificationRecord]:
        """All company records for a candidate, oldest first."""
        table = verified_company_records
        stmt = select(table).where(table.c.candidate_id == candidate_id)
        if company_id is not None:
            stmt = stmt.where(table.c.company_id == company_id)
        stmt = stmt.order_by(table.c.verified_at, table.c.id)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_company_from_row(row) for row in rows]
