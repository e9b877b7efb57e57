"""
CLI for work history verification.

Usage:
    # Create the record store tables (SQLite / local development)
    python -m work_history_verification.cli init-db

    # Show current verification state of every claimed employment
    python -m work_history_verification.cli status --claims claims.yml

    # Verify one employer, or one employee with stored company credentials
    python -m work_history_verification.cli verify-company --claims claims.yml --company-id 101
    python -m work_history_verification.cli verify-employee --claims claims.yml --company-id 101

    # Verify every outstanding entry sequentially
    python -m work_history_verification.cli verify-all --claims claims.yml

    # Load configuration from a specific env file
    python -m work_history_verification.cli --env-file .whv_env verify-all --claims claims.yml
"""

import argparse
import sys
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from work_history_verification.cli.claims import ClaimsFile, load_claims_file
from work_history_verification.config.settings import Settings, get_settings
from work_history_verification.domain.work_history import (
    BatchSummary,
    CompanyVerifier,
    EmployeeVerifier,
    EntryKey,
    VerificationError,
    WorkflowState,
    WorkHistoryEntry,
    WorkHistoryVerifier,
    load_work_history,
)
from work_history_verification.infrastructure.verification.repository import (
    SqlRecordStore,
)
from work_history_verification.io.connectors.gateway import (
    GatewayError,
    VerificationGatewayClient,
)
from work_history_verification.utils.logging import get_logger

logger = get_logger(__name__)

_STATE_ICONS = {
    WorkflowState.UNVERIFIED: "⚪",
    WorkflowState.COMPANY_VERIFYING: "🔄",
    WorkflowState.COMPANY_VERIFIED: "🏢",
    WorkflowState.COMPANY_FAILED: "❌",
    WorkflowState.EMPLOYEE_VERIFYING: "🔄",
    WorkflowState.EMPLOYEE_VERIFIED: "✅",
    WorkflowState.EMPLOYEE_FAILED: "❌",
}


def print_entries(entries: List[WorkHistoryEntry]) -> None:
    print("\n" + "=" * 60)
    print("Work History Verification Status")
    print("=" * 60)
    for entry in entries:
        icon = _STATE_ICONS[entry.state]
        print(f"{icon} [{entry.company_id}] {entry.raw_company_name} ({entry.raw_years_text})")
        print(f"    State: {entry.state.value}")
        if entry.company_record is not None:
            print(
                f"    Verified company: {entry.company_record.verified_company_name} "
                f"({entry.company_record.establishment_id})"
            )
        if entry.company_error:
            print(f"    Company error: {entry.company_error}")
        if entry.employee_error:
            print(f"    Employee error: {entry.employee_error}")
    outstanding = sum(1 for entry in entries if entry.needs_verification)
    print("=" * 60)
    print(f"Total: {len(entries)}  Outstanding: {outstanding}")
    print()


def print_transition(
    entry_key: EntryKey, new_state: WorkflowState, detail: Optional[str]
) -> None:
    line = f"  {_STATE_ICONS[new_state]} {entry_key}: {new_state.value}"
    if detail:
        line += f" ({detail})"
    print(line)


def print_batch_summary(summary: BatchSummary) -> None:
    print("\n" + "=" * 60)
    print("Verification Results")
    print("=" * 60)
    print(f"Total Outstanding: {summary.total}")
    print(f"✅ Successful: {summary.success_count}")
    print(f"❌ Failed: {summary.failure_count}")
    print("=" * 60)

    if summary.errors:
        print("\nErrors:")
        for error in summary.errors[:10]:
            print(f"  - {error}")
        if len(summary.errors) > 10:
            print(f"  ... and {len(summary.errors) - 10} more errors")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="work_history_verification.cli",
        description="Work history verification against the verification gateway",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--env-file",
        type=str,
        help="Env file loaded before settings (overrides process variables)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    subparsers.add_parser("init-db", help="Create the verification tables")

    for name, help_text in (
        ("status", "Show verification state of every claimed employment"),
        ("verify-company", "Verify one claimed employer"),
        ("verify-employee", "Verify the candidate at one verified employer"),
        ("verify-all", "Verify every outstanding entry sequentially"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--claims",
            type=str,
            required=True,
            help="YAML file with candidate profile and claimed work history",
        )
        if name in ("verify-company", "verify-employee"):
            sub.add_argument(
                "--company-id",
                type=int,
                required=True,
                help="company_id of the claimed employment to verify",
            )
            sub.add_argument(
                "--year",
                type=str,
                help="Verification year (defaults to the claimed start year)",
            )
        if name == "verify-all":
            sub.add_argument(
                "--delay",
                type=float,
                help="Seconds between entries (overrides settings)",
            )

    return parser


def build_workflow(
    store: SqlRecordStore, claims: ClaimsFile, settings: Settings
) -> WorkHistoryVerifier:
    gateway = VerificationGatewayClient()
    company_verifier = CompanyVerifier(gateway, store, settings)
    employee_verifier = EmployeeVerifier(gateway, store, company_verifier, settings)
    workflow = WorkHistoryVerifier(
        company_verifier,
        employee_verifier,
        store,
        settings,
        employee_id=claims.employee_id,
        organization_id=claims.organization_id,
    )
    workflow.subscribe(print_transition)
    return workflow


def _select_entry(
    entries: List[WorkHistoryEntry], company_id: int
) -> Optional[WorkHistoryEntry]:
    for entry in entries:
        if entry.company_id == company_id:
            return entry
    return None


def _run_command(
    args: argparse.Namespace, store: SqlRecordStore, settings: Settings
) -> int:
    try:
        claims = load_claims_file(args.claims)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        print(f"❌ Failed to load claims file: {e}", file=sys.stderr)
        return 1

    entries = load_work_history(store, claims.candidate, claims.work_history)

    if args.command == "status":
        print_entries(entries)
        return 0

    if args.command == "verify-all" and args.delay is not None:
        settings = settings.model_copy(update={"batch_inter_entry_delay": args.delay})

    try:
        workflow = build_workflow(store, claims, settings)
    except GatewayError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1

    if args.command == "verify-all":
        summary = workflow.verify_all_outstanding(entries)
        print_batch_summary(summary)
        return 0 if summary.failure_count == 0 else 1

    entry = _select_entry(entries, args.company_id)
    if entry is None:
        print(f"❌ Company {args.company_id} is not in the claimed work history")
        return 1
    if args.year:
        entry.selected_verification_year = args.year

    try:
        if args.command == "verify-company":
            result = workflow.verify_company_only(entry)
            print(
                f"\n✅ Company verified: {result.primary.verified_company_name} "
                f"({len(result.matches)} match(es))"
            )
        else:
            result = workflow.verify_employee_only(entry)
            print(f"\n✅ Employee verified at {result.employer_name}")
    except (VerificationError, GatewayError) as e:
        print(f"\n❌ Verification failed: {e.message}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.env_file:
        load_dotenv(dotenv_path=args.env_file, override=True)
        get_settings.cache_clear()

    try:
        settings = get_settings()
    except Exception as e:
        print(f"❌ Failed to load settings: {e}", file=sys.stderr)
        return 1

    try:
        store = SqlRecordStore.from_settings(settings)
    except Exception as e:
        print(f"❌ Failed to create database engine: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "init-db":
            store.create_schema()
            print("✅ Verification tables created")
            return 0
        return _run_command(args, store, settings)
    finally:
        store.engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
