"""
SQLAlchemy table definitions for the verification record store.

The Alembic migration in io/schema/migrations/versions creates the same
tables; ``metadata.create_all`` is used for local SQLite stores and tests.
"""

import sqlalchemy as sa

metadata = sa.MetaData()

verified_company_records = sa.Table(
    "verified_company_records",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("candidate_id", sa.String(64), nullable=False),
    sa.Column("company_id", sa.BigInteger(), nullable=False),
    sa.Column("employee_id", sa.String(64), nullable=True),
    sa.Column("organization_id", sa.String(64), nullable=True),
    sa.Column("establishment_id", sa.String(128), nullable=False),
    sa.Column("company_name", sa.Text(), nullable=False),
    sa.Column("secret_token", sa.Text(), nullable=False),
    sa.Column("ts_transaction_id", sa.String(128), nullable=False),
    sa.Column("verified_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    ),
    sa.Index(
        "ix_verified_company_records_candidate_company",
        "candidate_id",
        "company_id",
    ),
)

verified_employee_records = sa.Table(
    "verified_employee_records",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("candidate_id", sa.String(64), nullable=False),
    sa.Column("company_id", sa.BigInteger(), nullable=False),
    sa.Column("employee_id", sa.String(64), nullable=True),
    sa.Column("organization_id", sa.String(64), nullable=True),
    sa.Column("establishment_id", sa.String(128), nullable=True),
    sa.Column("employee_name", sa.Text(), nullable=False),
    sa.Column("start_date", sa.String(10), nullable=True),
    sa.Column("ts_transaction_id", sa.String(128), nullable=True),
    sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
    sa.Column("verification_error", sa.Text(), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    ),
    sa.CheckConstraint(
        "(verified_at IS NULL) <> (verification_error IS NULL)",
        name="ck_verified_employee_records_success_xor_failure",
    ),
    sa.Index(
        "ix_verified_employee_records_candidate_company",
        "candidate_id",
        "company_id",
    ),
)

verification_api_call_logs = sa.Table(
    "verification_api_call_logs",
    metadata,
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
    sa.Column("is_retry", sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    ),
    sa.Index("ix_verification_api_call_logs_candidate", "candidate_id"),
)
