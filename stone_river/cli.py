"""Command-line entry point for the administrative batch jobs.

Each sub-command runs one job, prints a summary, writes a timestamped
JSON log, and exits 0. Setup failures (configuration, connection, input
file) exit 1 before any record is touched.
"""

import argparse
import logging
from datetime import date
from typing import Any

from stone_river.config import PortalConfig
from stone_river.exceptions import PortalError
from stone_river.jobs import (
    DeduplicationJob,
    InceptionDateJob,
    SuffixAssignmentJob,
    SuffixVerificationJob,
    SuspensionJob,
    UploadValidationJob,
    load_upload_file,
)
from stone_river.logging import setup_logging
from stone_river.models.policy import ComplianceModel
from stone_river.sinks import ConsoleSink, JsonFileSink

logger = logging.getLogger(__name__)

COMMANDS = {
    "assign-suffixes": ("Assign suffix codes to all customers", "suffix-assignment"),
    "verify-suffixes": ("Verify suffix compliance (read-only)", "suffix-verification"),
    "suspend": ("Compute and apply suspension status", "suspension"),
    "dedupe": ("Find and resolve duplicate customers by id number", "deduplication"),
    "standardize-dates": ("Standardize inception dates to YYYY-MM-DD", "inception-dates"),
    "validate-upload": ("Check an upload file for duplicate policy-holder ids", "upload-validation"),
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and report without writing to the store",
    )
    common.add_argument(
        "--demo",
        action="store_true",
        help="Run against a generated in-memory portfolio instead of PostgreSQL",
    )
    common.add_argument(
        "--customers",
        type=int,
        default=200,
        help="Number of customers in the demo portfolio (default: 200)",
    )
    common.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for the demo portfolio (default: 42)",
    )
    common.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for JSON audit logs (default: $OUTPUT_DIR or ./logs)",
    )
    common.add_argument(
        "--kafka",
        action="store_true",
        help="Publish per-record audit events to Kafka",
    )
    common.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    common.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also append run logs to this file",
    )

    parser = argparse.ArgumentParser(
        prog="stone-river",
        description="Stone River Portal policy batch jobs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for command, (help_text, _) in COMMANDS.items():
        sub = subparsers.add_parser(command, parents=[common], help=help_text)
        if command == "suspend":
            sub.add_argument(
                "--model",
                type=str,
                choices=[m.value for m in ComplianceModel],
                default=None,
                help="Compliance model (default: $COMPLIANCE_MODEL or arrears)",
            )
            sub.add_argument(
                "--as-of",
                type=date.fromisoformat,
                default=None,
                help="Evaluation date YYYY-MM-DD (default: today)",
            )
        if command == "validate-upload":
            sub.add_argument("file", type=str, help="Upload file (.json or .csv)")
    return parser


def open_store(args: argparse.Namespace, config: PortalConfig) -> Any:
    """Return the store the job runs against."""
    if args.demo:
        from stone_river.scenarios import PortfolioScenario

        scenario = PortfolioScenario(num_customers=args.customers, seed=args.seed)
        store = scenario.generate()
        logger.info("Demo portfolio: %s", scenario.get_summary())
        return store

    from stone_river.store.postgres import PostgresStore

    config.postgres.validate()
    return PostgresStore(config.postgres.connection_string)


def run_command(args: argparse.Namespace, config: PortalConfig, store: Any, audit: Any) -> Any:
    """Run the job selected by ``args.command`` and return its report."""
    options = {"audit": audit, "dry_run": args.dry_run}

    if args.command == "assign-suffixes":
        return SuffixAssignmentJob(store, **options).run()
    if args.command == "verify-suffixes":
        return SuffixVerificationJob(store).run()
    if args.command == "suspend":
        model = ComplianceModel(args.model) if args.model else config.compliance.model
        return SuspensionJob(store, model=model, today=args.as_of, **options).run()
    if args.command == "dedupe":
        return DeduplicationJob(store, **options).run()
    if args.command == "standardize-dates":
        return InceptionDateJob(store, **options).run()
    if args.command == "validate-upload":
        records = load_upload_file(args.file)
        return UploadValidationJob(store).run(records)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = PortalConfig.from_env()
    except PortalError as e:
        setup_logging(args.log_level or "INFO")
        logger.error("Configuration error: %s", e)
        return 1

    setup_logging(args.log_level or config.log_level, config.log_format, args.log_file)
    title, log_name = COMMANDS[args.command]

    audit = None
    store = None
    try:
        store = open_store(args, config)
        if args.kafka:
            from stone_river.sinks.kafka import KafkaSink

            audit = KafkaSink(config.kafka)

        report = run_command(args, config, store, audit)
        ConsoleSink(limit=config.compliance.report_limit).write_report(title, report)
        log_dir = args.log_dir or config.output.log_dir
        JsonFileSink(log_dir, pretty=config.output.pretty_json).write_log(log_name, report)
    except (PortalError, ImportError) as e:
        logger.error("%s aborted: %s", title, e)
        return 1
    finally:
        if audit is not None:
            audit.close()
        if store is not None and hasattr(store, "close"):
            store.close()

    return 0
