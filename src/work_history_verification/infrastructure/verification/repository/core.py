"""
Core SqlRecordStore class.

Composes the per-table operations from sibling modules using mixins.
"""

from typing import Optional

from sqlalchemy import Engine, create_engine

from work_history_verification.config.settings import Settings, get_settings
from work_history_verification.utils.logging import get_logger

from .api_call_log_ops import ApiCallLogOpsMixin
from .company_record_ops import CompanyRecordOpsMixin
from .employee_record_ops import EmployeeRecordOpsMixin
from .tables import metadata

logger = get_logger(__name__)


class SqlRecordStore(
    CompanyRecordOpsMixin,
    EmployeeRecordOpsMixin,
    ApiCallLogOpsMixin,
):
    """
    Append-only verification record store backed by SQLAlchemy.

    Each write runs in its own transaction (``engine.begin()``), so a
    company verification's rows are committed together or not at all.
    Records are never updated or deleted.

    Composed using mixins:
    - CompanyRecordOpsMixin: verified_company_records
    - EmployeeRecordOpsMixin: verified_employee_records
    - ApiCallLogOpsMixin: verification_api_call_logs

    Example:
        >>> from sqlalchemy import create_engine
        >>> store = SqlRecordStore(create_engine("sqlite://"))
        >>> store.create_schema()
        >>> store.query_current_company_record("cand-1", 42) is None
        True
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SqlRecordStore":
        """Build a store on the configured database URI."""
        settings = settings or get_settings()
        engine = create_engine(
            settings.get_database_connection_string(), pool_pre_ping=True
        )
        return cls(engine)

    def create_schema(self) -> None:
        """Create the verification tables if missing (SQLite and tests)."""
        metadata.create_all(self.engine)
        logger.info("record_store.schema_created", dialect=self.engine.dialect.name)
