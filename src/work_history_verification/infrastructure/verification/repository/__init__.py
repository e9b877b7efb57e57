"""
SQLAlchemy-backed RecordStore.
"""

from .core import SqlRecordStore
from .tables import (
    metadata,
    verification_api_call_logs,
    verified_company_records,
    verified_employee_records,
)

__all__ = [
    "SqlRecordStore",
    "metadata",
    "verification_api_call_logs",
    "verified_company_records",
    "verified_employee_records",
]
