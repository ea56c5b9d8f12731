"""Command-line interface for the finance ledger."""

import argparse
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from finance_ledger import __version__
from finance_ledger.config import Config, ConfigError, load_config
from finance_ledger.models.category import category_key, custom_key_for
from finance_ledger.models.statement import AccountType, Statement
from finance_ledger.models.transaction import Transaction
from finance_ledger.parsers import ParseDiagnostics, ParseError, StatementParser, statement_from_extraction
from finance_ledger.persistence import JsonFilePersistence, StorageError
from finance_ledger.store import FinanceStore
from finance_ledger.utils.decimal_utils import ZERO
from finance_ledger.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

# Commands that change the store and must be saved afterwards
MUTATING_COMMANDS = {
    "add", "remove", "recategorize", "add-category", "remove-category", "import", "clear",
}


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="finance-ledger",
        description="Import bank statements, categorize spending and review the ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s add Chase1234_Activity.csv
  %(prog)s add card.csv --account-type credit
  %(prog)s ledger --category dining --limit 20
  %(prog)s recategorize <transaction-id> transportation --all
  %(prog)s export backup.json
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=None,
        help="Finance data file (overrides settings and FINANCE_LEDGER_DATA)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    add = subparsers.add_parser("add", help="Parse statement files and add them")
    add.add_argument("files", nargs="+", type=Path, help="CSV exports or extraction JSON files")
    add.add_argument(
        "--account-type",
        choices=[t.value for t in AccountType],
        default=None,
        help="Statement layout (default: detect from the CSV header)",
    )
    add.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse files and show results without saving",
    )

    subparsers.add_parser("statements", help="List stored statements")

    remove = subparsers.add_parser("remove", help="Remove a statement and its transactions")
    remove.add_argument("index", type=int, help="Statement number as shown by 'statements'")

    ledger = subparsers.add_parser("ledger", help="Show transactions, newest first")
    ledger.add_argument("--category", default=None, help="Only show this category key")
    ledger.add_argument("--search", default=None, help="Only show descriptions containing TEXT")
    ledger.add_argument("--limit", type=int, default=None, help="Show at most N transactions")

    subparsers.add_parser("summary", help="Show income, expenses and spending by category")

    recategorize = subparsers.add_parser(
        "recategorize", help="Change a transaction's category (optionally for similar ones too)"
    )
    recategorize.add_argument("transaction_id", help="Transaction id as shown by 'ledger'")
    recategorize.add_argument("category", help="Category key or custom category name")
    scope = recategorize.add_mutually_exclusive_group()
    scope.add_argument("--all", action="store_true", help="Also update similar transactions")
    scope.add_argument("--single", action="store_true", help="Only update this transaction")

    subparsers.add_parser("categories", help="List default and custom categories")

    add_category = subparsers.add_parser("add-category", help="Create a custom category")
    add_category.add_argument("name", nargs="+", help="Category name")

    remove_category = subparsers.add_parser(
        "remove-category", help="Delete a custom category (its transactions become 'other')"
    )
    remove_category.add_argument("key", help="Custom category key, e.g. custom_pet_care")

    export = subparsers.add_parser("export", help="Write a JSON backup")
    export.add_argument("file", type=Path)

    import_ = subparsers.add_parser("import", help="Replace all data with a JSON backup")
    import_.add_argument("file", type=Path)

    clear = subparsers.add_parser("clear", help="Delete all statements and custom categories")
    clear.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def format_amount(amount) -> str:
    """Format an amount with its sign and two decimals."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def confirm(prompt: str) -> bool:
    """Ask a yes/no question; empty input means yes."""
    response = console.input(f"[bold]{prompt} [Y/n]:[/bold] ").strip().lower()
    return response in ("y", "yes", "")


def resolve_category(store: FinanceStore, value: str) -> Optional[str]:
    """Map user input to a category key.

    Accepts a default key, a custom key, or a custom category name.
    """
    if store.is_known_category(value):
        return category_key(value)
    candidate = custom_key_for(value)
    if store.is_known_category(candidate):
        return candidate
    return None


def load_statement(
    parser: StatementParser,
    file_path: Path,
    account_type: Optional[AccountType],
    diagnostics: ParseDiagnostics,
) -> Statement:
    """Parse one input file.

    ``.json`` files are treated as document-extraction output; everything
    else is parsed as a CSV export.

    Raises:
        ParseError: If the file cannot be parsed.
        FileNotFoundError: If the file doesn't exist.
    """
    if file_path.suffix.lower() == ".json":
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return statement_from_extraction(
            file_path.read_text(encoding="utf-8"),
            file_name=file_path.name,
            account_type=account_type,
            categorizer=parser.categorizer,
            diagnostics=diagnostics,
        )
    return parser.parse_file(file_path, account_type=account_type, diagnostics=diagnostics)


def add_command(args: argparse.Namespace, store: FinanceStore, config: Config) -> int:
    """Parse files and add the resulting statements."""
    account_type = (
        AccountType.parse(args.account_type) if args.account_type
        else config.parsing.default_account_type
    )
    parser = StatementParser()
    errors = 0

    for file_path in args.files:
        diagnostics = ParseDiagnostics()
        try:
            statement = load_statement(parser, file_path, account_type, diagnostics)
        except (ParseError, FileNotFoundError) as e:
            console.print(f"[red]Error: {file_path.name}: {e}[/red]")
            logger.warning(f"{file_path.name}: {e}")
            errors += 1
            continue

        summary = statement.summary
        console.print(
            f"{escape(statement.file_name)}: {len(statement.transactions)} transactions "
            f"({statement.account_type.value}, {statement.statement_period.display}), "
            f"income {format_amount(summary.total_income)}, "
            f"expenses {format_amount(summary.total_expenses)}"
        )
        if diagnostics.skipped_count:
            console.print(f"  [yellow]{diagnostics.skipped_count} row(s) skipped[/yellow]")
            for row in diagnostics.skipped[:5]:
                console.print(f"  [dim]line {row.line_number}: {row.reason}[/dim]")

        if args.dry_run:
            continue
        if not store.add_statement(statement):
            console.print("  [yellow]Already imported, skipped[/yellow]")

    if args.dry_run:
        console.print("\n[yellow]Dry run - nothing saved[/yellow]")
    return 1 if errors else 0


def statements_command(store: FinanceStore) -> int:
    statements = store.statements
    if not statements:
        console.print("[dim]No statements loaded.[/dim]")
        return 0

    table = Table(title=f"{len(statements)} statement(s)")
    table.add_column("#", justify="right")
    table.add_column("File")
    table.add_column("Type")
    table.add_column("Period")
    table.add_column("Transactions", justify="right")
    table.add_column("Uploaded")
    for i, statement in enumerate(statements):
        table.add_row(
            str(i),
            escape(statement.file_name),
            statement.account_type.value,
            statement.statement_period.display,
            str(len(statement.transactions)),
            statement.uploaded_at,
        )
    console.print(table)
    return 0


def remove_command(args: argparse.Namespace, store: FinanceStore) -> int:
    removed = store.remove_statement(args.index)
    if removed is None:
        console.print(f"[red]Error: no statement #{args.index}[/red]")
        return 1
    console.print(
        f"[green]Removed {removed.file_name} ({len(removed.transactions)} transactions)[/green]"
    )
    return 0


def filter_ledger(
    transactions: list[Transaction],
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[Transaction]:
    """Apply the ledger view filters."""
    result = transactions
    if category:
        result = [t for t in result if t.category == category]
    if search:
        needle = search.lower()
        result = [t for t in result if needle in t.description.lower()]
    if limit is not None:
        result = result[: max(limit, 0)]
    return result


def ledger_command(args: argparse.Namespace, store: FinanceStore) -> int:
    transactions = filter_ledger(store.get_ledger(), args.category, args.search, args.limit)
    if not transactions:
        console.print("[dim]No transactions.[/dim]")
        return 0

    table = Table()
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Id", style="dim")
    for txn in transactions:
        config = store.get_category_config(txn.category)
        table.add_row(
            txn.date,
            escape(txn.description),
            format_amount(txn.amount),
            f"[{config.color}]{escape(config.label)}[/]",
            txn.id,
        )
    console.print(table)
    return 0


def summary_command(store: FinanceStore) -> int:
    summary = store.get_summary()
    period = store.get_period()

    console.print(f"\n[bold]Summary[/bold] ({period.display})")
    console.print(f"  Transactions: {summary.transaction_count}")
    console.print(f"  Income: [green]{format_amount(summary.total_income)}[/green]")
    console.print(f"  Expenses: [red]{format_amount(summary.total_expenses)}[/red]")
    net_style = "green" if summary.net_change >= ZERO else "red"
    console.print(f"  Net change: [{net_style}]{format_amount(summary.net_change)}[/{net_style}]")

    if not summary.by_category:
        return 0

    table = Table(title="Spending by category")
    table.add_column("Category")
    table.add_column("Total", justify="right")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for entry in summary.by_category:
        config = store.get_category_config(entry.category)
        table.add_row(
            f"[{config.color}]{escape(config.label)}[/]",
            format_amount(entry.total),
            str(entry.count),
            f"{entry.percentage:.1f}%",
        )
    console.print(table)
    return 0


def recategorize_command(args: argparse.Namespace, store: FinanceStore) -> int:
    """Recategorize a transaction, offering to update similar ones."""
    category = resolve_category(store, args.category)
    if category is None:
        console.print(f"[red]Error: unknown category '{args.category}'[/red]")
        return 1

    proposal = store.propose_category_change(args.transaction_id, category)
    if proposal is None:
        console.print(f"[red]Error: transaction '{args.transaction_id}' not found[/red]")
        return 1

    label = store.get_category_config(category).label
    include_similar = False
    if proposal.has_similar and not args.single:
        if args.all:
            include_similar = True
        else:
            count = len(proposal.similar)
            console.print(f"\nFound {count} other transaction(s) from the same vendor:")
            for txn in proposal.similar[:5]:
                console.print(f"  {txn.date}  {escape(txn.description)}  {format_amount(txn.amount)}")
            if count > 5:
                console.print(f"  ... and {count - 5} more")
            include_similar = confirm(f"Update all {count + 1} to {label}?")

    updated = store.apply_category_change(proposal, include_similar=include_similar)
    console.print(f"[green]Moved {updated} transaction(s) to {label}[/green]")
    return 0


def categories_command(store: FinanceStore) -> int:
    custom = store.custom_categories
    table = Table(title="Categories")
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Color")
    table.add_column("Custom")
    for key, config in store.all_categories().items():
        table.add_row(
            key,
            f"[{config.color}]{escape(config.label)}[/]",
            config.color,
            "yes" if key in custom else "",
        )
    console.print(table)
    return 0


def add_category_command(args: argparse.Namespace, store: FinanceStore) -> int:
    name = " ".join(args.name)
    key = store.add_custom_category(name)
    if key is None:
        console.print("[red]Error: category name is empty[/red]")
        return 1
    console.print(f"[green]Added category {key}[/green]")
    return 0


def remove_category_command(args: argparse.Namespace, store: FinanceStore) -> int:
    key = args.key if args.key in store.custom_categories else custom_key_for(args.key)
    if key not in store.custom_categories:
        console.print(f"[red]Error: no custom category '{args.key}'[/red]")
        return 1
    moved = store.remove_custom_category(key)
    console.print(f"[green]Removed {key}; {moved} transaction(s) moved to Other[/green]")
    return 0


def export_command(args: argparse.Namespace, store: FinanceStore) -> int:
    try:
        args.file.parent.mkdir(parents=True, exist_ok=True)
        args.file.write_text(store.export_json(), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error: could not write {args.file}: {e}[/red]")
        return 1
    console.print(f"[green]Exported {len(store.statements)} statement(s) to {args.file}[/green]")
    return 0


def import_command(args: argparse.Namespace, store: FinanceStore) -> int:
    try:
        text = args.file.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error: could not read {args.file}: {e}[/red]")
        return 1
    if not store.import_json(text):
        console.print(f"[red]Error: {args.file} is not a valid backup; nothing changed[/red]")
        return 1
    console.print(f"[green]Imported {len(store.statements)} statement(s)[/green]")
    return 0


def clear_command(args: argparse.Namespace, store: FinanceStore) -> int:
    if not args.yes and not confirm("Delete all statements and custom categories?"):
        console.print("[yellow]Cancelled[/yellow]")
        return 0
    store.clear_all()
    console.print("[green]All data cleared[/green]")
    return 0


def dispatch(args: argparse.Namespace, store: FinanceStore, config: Config) -> int:
    """Run the selected command against the store."""
    if args.command == "add":
        return add_command(args, store, config)
    if args.command == "statements":
        return statements_command(store)
    if args.command == "remove":
        return remove_command(args, store)
    if args.command == "ledger":
        return ledger_command(args, store)
    if args.command == "summary":
        return summary_command(store)
    if args.command == "recategorize":
        return recategorize_command(args, store)
    if args.command == "categories":
        return categories_command(store)
    if args.command == "add-category":
        return add_category_command(args, store)
    if args.command == "remove-category":
        return remove_category_command(args, store)
    if args.command == "export":
        return export_command(args, store)
    if args.command == "import":
        return import_command(args, store)
    if args.command == "clear":
        return clear_command(args, store)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    log_level = get_log_level(args.verbose) if args.verbose else config.logging.level
    setup_logging(
        level=log_level,
        log_file=config.logging.file,
        console_output=args.verbose > 0,
    )

    data_path = args.data or config.storage.path
    try:
        persistence = JsonFilePersistence(data_path)
    except StorageError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    store = FinanceStore(persistence=persistence)
    store.load()

    result = dispatch(args, store, config)

    if args.command in MUTATING_COMMANDS and not getattr(args, "dry_run", False):
        if not store.save():
            console.print(f"[red]Error: could not save data to {data_path}[/red]")
            return 1

    return result


if __name__ == "__main__":
    sys.exit(main())
