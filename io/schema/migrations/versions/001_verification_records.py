"""Verification record tables.

Creates the append-only record store of the work history verification
workflow:
- verified_company_records: one row per legal-entity match of a successful
  company verification
- verified_employee_records: one row per employee verification attempt,
  success xor failure
- verification_api_call_logs: one audit row per gateway step

Tables are only created when missing, so the migration is safe to re-run
against a database bootstrapped with ``init-db``.

Revision ID: 20261017_000001
Revises: None
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.sql import func

revision = "20261017_000001"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(conn, table_name: str) -> bool:
    """Check if a table exists in the default schema."""
    return sa.inspect(conn).has_table(table_name)


def upgrade() -> None:
    """Create the verification record tables."""
    conn = op.get_bind()

    # === 1. verified_company_records ===
    if not _table_exists(conn, "verified_company_records"):
        op.create_table(
            "verified_company_records",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("candidate_id", sa.String(64), nullable=False),
            sa.Column("company_id", sa.BigInteger(), nullable=False),
            sa.Column("employee_id", sa.String(64), nullable=True),
            sa.Column("organization_id", sa.String(64), nullable=True),
            sa.Column("establishment_id", sa.String(128), nullable=False),
            sa.Column("company_name", sa.Text(), nullable=False),
            sa.Column("secret_token", sa.Text(), nullable=False),
            sa.Column("ts_transaction_id", sa.String(128), nullable=False),
            sa.Column("verified_at", sa.TIMESTAMP(timezone=True), nullable=False),
            sa.Column(
                "created_at",
                sa.TIMESTAMP(timezone=True),
                nullable=False,
                server_default=func.now(),
            ),
        )
        op.create_index(
            "ix_verified_company_records_candidate_company",
            "verified_company_records",
            ["candidate_id", "company_id"],
        )

    # === 2. verified_employee_records ===
    if not _table_exists(conn, "verified_employee_records"):
        op.create_table(
            "verified_employee_records",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("candidate_id", sa.String(64), nullable=False),
            sa.Column("company_id", sa.BigInteger(), nullable=False),
            sa.Column("employee_id", sa.String(64), nullable=True),
            sa.Column("organization_id", sa.String(64), nullable=True),
            sa.Column("establishment_id", sa.String(128), nullable=True),
            sa.Column("employee_name", sa.Text(), nullable=False),
            sa.Column("start_date", sa.String(10), nullable=True),
            sa.Column("ts_transaction_id", sa.String(128), nullable=True),
            sa.Column("verified_at", sa.TIMESTAMP(timezone=True), nullable=True),
            sa.Column("verification_error", sa.Text(), nullable=True),
            sa.Column(
                "created_at",
                sa.TIMESTAMP(timezone=True),
                nullable=False,
                server_default=func.now(),
            ),
            sa.CheckConstraint(
                "(verified_at IS NULL) <> (verification_error IS NULL)",
                name="ck_verified_employee_records_success_xor_failure",
            ),
        )
        op.create_index(
            "ix_verified_employee_records_candidate_company",
            "verified_employee_records",
            ["candidate_id", "company_id"],
        )

    # === 3. verification_api_call_logs ===
    if not _table_exists(conn, "verification_api_call_logs"):
        op.create_table(
            "verification_api_call_logs",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("candidate_id", sa.String(64), nullable=False),
            sa.Column("organization_id", sa.String(64), nullable=True),
            sa.Column("company_id", sa.BigInteger(), nullable=True),
            sa.Column("employee_id", sa.String(64), nullable=True),
            sa.Column("trans_id", sa.String(64), nullable=False),
            sa.Column("api_type", sa.String(32), nullable=False),
            sa.Column("endpoint_name", sa.String(64), nullable=False),
            sa.Column("request_payload", sa.JSON(), nullable=True),
            sa.Column("response_status_http", sa.Integer(), nullable=True),
            sa.Column("response_body", sa.JSON(), nullable=True),
            sa.Column("error_message", sa.Text(), nullable=True),
            sa.Column("success", sa.Boolean(), nullable=False),
            sa.Column(
                "is_retry", sa.Boolean(), nullable=False, server_default=sa.false()
            ),
            sa.Column(
                "created_at",
                sa.TIMESTAMP(timezone=True),
                nullable=False,
                server_default=func.now(),
            ),
        )
        op.create_index(
            "ix_verification_api_call_logs_candidate",
            "verification_api_call_logs",
            ["candidate_id"],
        )


def downgrade() -> None:
    """Drop the verification record tables.

    This is a destructive operation. Data loss will occur.
    """
    conn = op.get_bind()

    for table in [
        "verification_api_call_logs",
        "verified_employee_records",
        "verified_company_records",
    ]:
        if _table_exists(conn, table):
            op.drop_table(table)
