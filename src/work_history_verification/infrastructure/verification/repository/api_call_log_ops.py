"""
verification_api_call_logs table operations mixin.
"""

from typing import List, Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from work_history_verification.domain.work_history.exceptions import (
    RecordPersistenceError,
)
from work_history_verification.domain.work_history.models import ApiCallLog, utcnow
from work_history_verification.utils.logging import get_logger

from .tables import verification_api_call_logs

logger = get_logger(__name__)


class ApiCallLogOpsMixin:
    """Mixin providing the gateway audit trail operations."""

    def insert_api_call_log(self, log: ApiCallLog) -> None:
        """Append one audit row; payloads are expected to be redacted already."""
        values = log.model_dump(exclude={"id"})
        values["created_at"] = log.created_at or utcnow()
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(verification_api_call_logs).values(**values))
        except SQLAlchemyError as e:
            raise RecordPersistenceError(f"Failed to store API call log: {e}") from e

        logger.debug(
            "record_store.insert_api_call_log.completed",
            trans_id=log.trans_id,
            endpoint_name=log.endpoint_name,
            success=log.success,
        )

    def list_api_call_logs(
        self, candidate_id: str, company_id: Optional[int] = None
    ) -> List[ApiCallLog]:
        table = verification_api_call_logs
        stmt = select(table).where(table.c.candidate_id == candidate_id)
        if company_id is not None:
            stmt = stmt.where(table.c.company_id == company_id)
        stmt = stmt.order_by(table.c.created_at, table.c.id)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [ApiCallLog.model_validate(dict(row)) for row in rows]
