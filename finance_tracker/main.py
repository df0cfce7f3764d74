"""
Personal Finance Tracker - Import Pipeline and CLI
Orchestrates parsing, validation and storage of imported transactions, and
exposes the analytics from the command line.
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Optional

from .aggregation import (
    SPLIT_EXAMPLES,
    RolloverManager,
    budget_split,
    budget_state,
    filter_period,
    round_money,
    summarize,
    top_categories,
    transaction_impact,
)
from .config import config
from .extractors.financial_rules import MANUAL_CATEGORIES, format_amount_display
from .extractors.text_extractor import TransactionExtractor
from .goals import average_monthly_savings, project_goal
from .loaders.tabular_loader import (
    MalformedDocumentError,
    UnsupportedFormatError,
    normalize,
)
from .logging_config import get_logger, setup_logging
from .models import TransactionCandidate
from .output.writer import ExportWriter
from .query import SortSpec, ViewFilters, categories_in, view
from .settings import JsonFileSettingsStore
from .storage.client import StorageClient
from .storage.exceptions import StorageError, TransactionNotFoundError
from .validators.financial_validator import TransactionValidator, ValidationError

logger = get_logger(__name__)


@dataclass
class ImportReport:
    """What happened to one import: row accounting plus per-item storage failures."""

    status: str = "success"  # success | unparsable | unsupported_format | malformed | invalid
    message: str = ""
    total_rows: int = 0
    accepted: int = 0
    saved: int = 0
    failures: list[tuple[TransactionCandidate, str]] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return self.total_rows - self.accepted

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def summary_line(self) -> str:
        if not self.ok:
            return self.message
        line = f"Saved {self.saved} of {self.total_rows} rows ({self.skipped} skipped"
        if self.failed:
            line += f", {self.failed} rejected by storage"
        return line + ")"


class TransactionImporter:
    """Main orchestrator for the ingestion pipeline."""

    def __init__(
        self,
        storage,
        validator: Optional[TransactionValidator] = None,
        today: Callable[[], date] = date.today
    ):
        """
        Args:
            storage: Storage client exposing create_many(candidates)
            validator: Candidate validator (non-strict by default)
            today: Clock used for default dates
        """
        self.storage = storage
        self.validator = validator or TransactionValidator(strict_mode=config.STRICT_MODE)
        self.extractor = TransactionExtractor(today=today)
        self.today = today
        self.stats = {
            "imports": 0,
            "rows_seen": 0,
            "rows_saved": 0,
            "rows_skipped": 0,
            "storage_failures": 0,
        }

    def import_text(self, raw_text: str) -> ImportReport:
        """
        Parse one free-text message and store it.

        Returns:
            ImportReport; status "unparsable" when no amount could be read
        """
        result = self.extractor.extract(raw_text)
        if not result.ok:
            return ImportReport(status="unparsable", message=result.reason, total_rows=1)
        return self._store([result.candidate], total_rows=1)

    def import_file(self, file_bytes: bytes, extension: str) -> ImportReport:
        """
        Normalize a CSV/JSON document and store every valid row.

        Returns:
            ImportReport with accepted vs. input row counts
        """
        logger.info(f"Step 1: Normalizing {extension} document ({len(file_bytes)} bytes)")
        try:
            normalized = normalize(file_bytes, extension, today=self.today())
        except UnsupportedFormatError as e:
            logger.error(f"Import rejected: {e}")
            return ImportReport(status="unsupported_format", message=str(e))
        except MalformedDocumentError as e:
            logger.error(f"Import failed: {e}")
            return ImportReport(status="malformed", message=f"Error parsing file. {e}")

        return self._store(normalized.candidates, total_rows=normalized.total_rows)

    def import_path(self, path: Path) -> ImportReport:
        """Read an import file from disk, checking type and size first."""
        error = config.check_import_file(path.name, path.stat().st_size)
        if error:
            status = "unsupported_format" if not config.is_allowed_file_type(path.name) else "malformed"
            logger.error(f"Import of {path} rejected: {error}")
            return ImportReport(status=status, message=error)
        return self.import_file(path.read_bytes(), path.suffix)

    def _store(self, candidates: list[TransactionCandidate], total_rows: int) -> ImportReport:
        logger.info(f"Step 2: Validating {len(candidates)} candidates")
        try:
            valid = self.validator.validate_candidates(candidates)
        except ValidationError as e:
            # Strict mode rejects the whole import before anything is stored
            logger.error(f"Import rejected: {e}")
            return ImportReport(status="invalid", message=f"Invalid transaction {e}", total_rows=total_rows)

        report = ImportReport(total_rows=total_rows, accepted=len(valid))
        if not valid:
            report.message = "No valid transactions found."

        logger.info(f"Step 3: Storing {len(valid)} transactions")
        batch = self.storage.create_many(valid)
        report.saved = batch.succeeded
        report.failures = batch.failures

        self.stats["imports"] += 1
        self.stats["rows_seen"] += report.total_rows
        self.stats["rows_saved"] += report.saved
        self.stats["rows_skipped"] += report.skipped
        self.stats["storage_failures"] += report.failed
        logger.info(report.summary_line())
        return report

    def get_stats(self) -> dict:
        return self.stats.copy()


# ---- Command line ----------------------------------------------------------


def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")


def _date_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="finance-tracker", description=config.APP_NAME)
    parser.add_argument("--api-url", default=config.API_URL, help="Storage service base URL")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse a bank message and store it")
    p.add_argument("text", help="Message text")
    p.add_argument("--dry-run", action="store_true", help="Only show the parsed result")

    p = sub.add_parser("import", help="Import a .csv or .json file")
    p.add_argument("path", type=Path)

    p = sub.add_parser("add", help="Add a transaction by hand")
    p.add_argument("title")
    p.add_argument("amount", type=_decimal_arg)
    p.add_argument("--type", default="expense", choices=["income", "expense"])
    p.add_argument("--category", default=MANUAL_CATEGORIES[0], choices=MANUAL_CATEGORIES)
    p.add_argument("--date", type=_date_arg, default=None, help="YYYY-MM-DD (default: today)")

    p = sub.add_parser("list", help="Search, filter and sort transactions")
    p.add_argument("--search", default="")
    p.add_argument("--type", default="all", choices=["all", "income", "expense"])
    p.add_argument("--category", default="all")
    p.add_argument("--start", default="", help="YYYY-MM-DD")
    p.add_argument("--end", default="", help="YYYY-MM-DD")
    p.add_argument("--sort", default="date", choices=["date", "title", "category", "type", "amount"])
    p.add_argument("--direction", default="desc", choices=["asc", "desc"])
    p.add_argument("--json", action="store_true", help="Print the view as JSON")
    p.add_argument("--categories", action="store_true", help="Only list the categories in use")

    p = sub.add_parser("summary", help="Totals, top categories and budget use")
    p.add_argument("--period", default="this_month", choices=["this_month", "last_month", "all"])
    p.add_argument("--budget", type=_decimal_arg, help="Set the monthly budget limit")

    p = sub.add_parser("rollover", help="Carry last month's savings forward")
    p.add_argument("--accept", action="store_true")
    p.add_argument("--decline", action="store_true")

    p = sub.add_parser("goal", help="Project when a savings target is reached")
    p.add_argument("amount", type=_decimal_arg)

    p = sub.add_parser("export", help="Export transactions")
    p.add_argument("--format", dest="fmt", default="csv", choices=["csv", "json"])
    p.add_argument("--output-dir", type=Path, default=config.OUTPUT_DIR)

    p = sub.add_parser("delete", help="Delete a transaction by id")
    p.add_argument("id")

    p = sub.add_parser("serve", help="Run the storage API")
    p.add_argument("--host", default=config.API_HOST)
    p.add_argument("--port", type=int, default=config.API_PORT)

    return parser


def _print_report(report: ImportReport) -> int:
    if report.ok and report.saved:
        print(f"✅ {report.summary_line()}")
        for candidate, reason in report.failures:
            print(f"   ⚠️  {candidate.title}: {reason}")
        return 0
    print(f"❌ {report.message or report.summary_line()}")
    return 1


def run_command(args, client: StorageClient) -> int:
    """Execute one parsed CLI command. Returns the process exit code."""
    settings_store = JsonFileSettingsStore()

    if args.command == "parse":
        if args.dry_run:
            result = TransactionExtractor().extract(args.text)
            if not result.ok:
                print(f"❌ {result.reason}")
                return 1
            c = result.candidate
            print(f"{c.date}  {c.title}  {c.category}  {format_amount_display(c.amount, c.type)}")
            return 0
        return _print_report(TransactionImporter(client).import_text(args.text))

    if args.command == "import":
        if not args.path.is_file():
            print(f"❌ File not found: {args.path}")
            return 1
        return _print_report(TransactionImporter(client).import_path(args.path))

    if args.command == "delete":
        try:
            client.delete(args.id)
        except TransactionNotFoundError:
            print(f"❌ Transaction {args.id} not found (already deleted?)")
            return 1
        print(f"✅ Deleted {args.id}")
        return 0

    records = client.list()

    if args.command == "add":
        candidate = TransactionCandidate(
            title=args.title.strip(),
            amount=args.amount,
            type=args.type,
            category=args.category,
            date=(args.date or date.today()).isoformat(),
        )
        try:
            TransactionValidator(strict_mode=True).validate_candidate(candidate)
        except ValidationError as e:
            print(f"❌ Invalid transaction {e}")
            return 1
        impact = transaction_impact(summarize(records).balance, candidate.amount, candidate.type)
        print(f"Balance: {round_money(impact.current_balance)} -> {round_money(impact.projected_balance)}")
        if not impact.is_affordable:
            print("⚠️  Insufficient funds for this expense!")
        tx = client.create(candidate)
        print(f"✅ Added {tx.id}: {tx.title} {format_amount_display(tx.amount, tx.type)}")
        return 0

    if args.command == "list":
        if args.categories:
            for category in categories_in(records):
                print(category)
            return 0
        rows = view(
            records,
            search_term=args.search,
            filters=ViewFilters(args.type, args.category, args.start, args.end),
            sort=SortSpec(args.sort, args.direction),
        )
        if args.json:
            print(json.dumps([tx.to_dict() for tx in rows], indent=2, default=str))
            return 0
        for tx in rows:
            print(f"{tx.date_key}  {tx.id}  {tx.title[:30]:<30}  {tx.category:<12}  "
                  f"{format_amount_display(tx.amount, tx.type)}")
        print(f"{len(rows)} of {len(records)} transactions")
        return 0

    if args.command == "summary":
        settings = settings_store.load()
        if args.budget is not None:
            settings = settings.with_budget(args.budget)
            settings_store.save(settings)
        period_records = filter_period(records, args.period)
        period_summary = summarize(period_records)
        totals = period_summary.to_dict()
        print(f"Income:   {totals['total_income']}")
        print(f"Expenses: {totals['total_expenses']}")
        print(f"Balance:  {totals['balance']}")
        for bucket in top_categories(period_records):
            print(f"  {bucket.category:<15} {bucket.to_dict()['amount']}")
        if args.period != "all":
            budget = budget_state(period_records, settings.monthly_budget).to_dict()
            print(f"Budget:   {budget['spent']} / {budget['limit']} ({budget['percentage_used']}% used, {budget['level']})")
            if budget["exceeded"]:
                print("⚠️  Budget Exceeded!")
            else:
                print(f"          {budget['remaining']} remaining")
        split = budget_split(period_summary.total_income)
        if split is not None:
            print("50/30/20 guide:")
            for share, amount in split.to_dict().items():
                print(f"  {share.capitalize():<8} {amount}  ({SPLIT_EXAMPLES[share]})")
        return 0

    if args.command == "rollover":
        manager = RolloverManager(settings_store)
        offer = manager.check(records)
        if offer is None:
            print("No rollover to offer this month.")
            return 0
        if args.accept:
            manager.accept(offer, client)
            print(f"✅ Added {offer.amount} from {offer.month} as income")
        elif args.decline:
            manager.decline()
            print("Rollover declined.")
        else:
            print(f"You saved {offer.amount} in {offer.month}. Run with --accept or --decline.")
        return 0

    if args.command == "goal":
        projection = project_goal(records, args.amount)
        if projection is None:
            print(f"❌ Average monthly savings is {average_monthly_savings(records):.2f}; "
                  "a projection needs positive savings.")
            return 1
        print(f"🎯 {projection.months_needed} months, around {projection.target_month_label} "
              f"(saving {projection.average_monthly_savings:.2f}/month)")
        return 0

    if args.command == "export":
        path = ExportWriter(args.output_dir).write(records, args.fmt)
        print(f"✅ Exported {len(records)} transactions to {path}")
        return 0

    raise ValueError(f"Unknown command {args.command!r}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, log_file="finance_tracker.log")

    if args.command == "serve":
        from .api.main import run

        run(host=args.host, port=args.port)
        return 0

    client = StorageClient(base_url=args.api_url)
    try:
        return run_command(args, client)
    except StorageError as e:
        logger.error(f"Storage error: {e}")
        print(f"\n❌ Storage Error: {e}")
        print("Is the storage service running? Start it with: finance-tracker serve")
        return 1
    except ValueError as e:
        logger.error(f"Input error: {e}")
        print(f"\n❌ Input Error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
