"""Interactive shell for the JTQ (JSON Tables Query) language."""

from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Any

from json_tables.database import DEFAULT_ROOT
from json_tables.errors import JsonTablesError
from json_tables.parsing.query_parser import QueryParser
from json_tables.statements import QueryResult, StatementRunner


def _split_statements(content: str) -> list[str]:
    """Split content into statements on semicolons outside string literals.

    ``--`` comments run to the end of the line and are dropped, unless
    they appear inside a string or a backtick identifier.
    """
    statements = []
    current: list[str] = []
    quote: str | None = None
    escape_next = False
    i = 0

    while i < len(content):
        ch = content[i]
        if escape_next:
            current.append(ch)
            escape_next = False
        elif quote is not None:
            if ch == "\\" and quote == '"':
                escape_next = True
            elif ch == quote:
                quote = None
            current.append(ch)
        elif ch == "-" and content.startswith("--", i):
            end = content.find("\n", i)
            i = len(content) if end == -1 else end
            continue
        elif ch == ";":
            stmt = "".join(current).strip()
            if stmt:
                statements.append(stmt)
            current = []
        else:
            if ch in ('"', "`"):
                quote = ch
            current.append(ch)
        i += 1

    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)

    return statements


def format_value(value: Any, max_items: int = 10, max_width: int = 40) -> str:
    """Format a value for display.

    Args:
        value: The value to format
        max_items: Maximum number of array items to show before eliding
        max_width: Maximum character width before truncating
    """
    if value is None:
        return "NULL"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, int):
        return str(value)
    elif isinstance(value, float):
        return f"{value:.6g}"
    elif isinstance(value, str):
        if len(value) > max_width:
            return repr(value[:max_width - 3] + "...")
        return repr(value)
    elif isinstance(value, list):
        formatted = []
        for i, v in enumerate(value):
            if i >= max_items:
                formatted.append(f"...+{len(value) - max_items} more")
                break
            formatted.append(format_value(v, max_items, max_width))
        return "[" + ", ".join(formatted) + "]"
    elif isinstance(value, dict):
        entries = [f"{k}: {format_value(v, max_items, max_width)}" for k, v in list(value.items())[:max_items]]
        if len(value) > max_items:
            entries.append(f"...+{len(value) - max_items} more")
        return "{" + ", ".join(entries) + "}"
    return str(value)


def print_result(result: QueryResult) -> None:
    """Print a statement result as an aligned table."""
    if result.message:
        print(result.message)
    if not result.columns:
        return

    if not result.rows:
        print("(no results)")
        return

    col_widths = {col: len(col) for col in result.columns}
    for row in result.rows:
        for col in result.columns:
            val = format_value(row.get(col))
            col_widths[col] = max(col_widths[col], len(val))

    max_col_width = 40
    for col in col_widths:
        col_widths[col] = min(col_widths[col], max_col_width)

    header = " | ".join(col.ljust(col_widths[col])[:col_widths[col]] for col in result.columns)
    print(header)
    print("-" * len(header))

    for row in result.rows:
        values = []
        for col in result.columns:
            # Missing fields show blank, explicit nulls show NULL
            val = format_value(row[col]) if col in row else ""
            if len(val) > col_widths[col]:
                val = val[: col_widths[col] - 3] + "..."
            values.append(val.ljust(col_widths[col]))
        print(" | ".join(values))

    print(f"\n({len(result.rows)} row{'s' if len(result.rows) != 1 else ''})")


def print_help() -> None:
    """Print help information."""
    print("""
JTQ - JSON Tables Query Language

DATABASES:
  use <name>                         Select a database directory under the root
  show tables                        List tables in the current database

QUERIES:
  from <table> select *              All records
  from <table> select first          First matching record
  from <table> select last           Last matching record
  from <table> select count()        Number of matching records

  Clauses (in this order, all optional):
    where <field> <op> <value> [and <field> <op> <value> ...]
    order by <field> [asc|desc]
    limit <n>                        (select * only)

  Operators: =  !=  <  >  <=  >=  like
  like matches when the value's text appears anywhere in the field.
  Comparisons are loose: "5" = 5 is true.

CHANGES:
  insert <table>(field=value, ...)   Add a record; the id is generated
  update <table> set field=value, ... where ...
                                     A where clause is required; id cannot change

VALUES:
  42  -3.5  "text"  true  false  null  [1, 2]  {"key": "value"}
  Use backticks for fields named like keywords: `order` = 1

OTHER:
  help                     Show this help
  exit, quit               Exit the shell

Statements end with a semicolon or the end of the line.
""")


def run_statement(runner: StatementRunner, parser: QueryParser, text: str) -> QueryResult:
    """Parse and execute one statement."""
    query = parser.parse(text)
    return runner.execute(query)


def run_repl(runner: StatementRunner) -> int:
    """Run the interactive shell."""
    print("JTQ - JSON Tables Query Language")
    print(f"Database root: {runner.root}")
    if runner.database:
        print(f"Database: {runner.database.name}")
    else:
        print("No database selected. Use 'use <name>' to select one.")
    print("Type 'help' for commands, 'exit' to quit.\n")

    parser = QueryParser()

    history_file = Path.home() / ".jtq_history"
    try:
        readline.read_history_file(history_file)
    except (FileNotFoundError, OSError):
        pass

    try:
        while True:
            try:
                line = input("jtq> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue

            command = line.rstrip(";").strip().lower()
            if command in ("exit", "quit"):
                break
            elif command == "help":
                print_help()
                continue

            for statement in _split_statements(line):
                try:
                    print_result(run_statement(runner, parser, statement))
                except SyntaxError as e:
                    print(f"Syntax error: {e}")
                except JsonTablesError as e:
                    print(f"Error: {e}")
            print()
    except KeyboardInterrupt:
        print()
    finally:
        try:
            readline.set_history_length(1000)
            readline.write_history_file(history_file)
        except OSError:
            pass

    return 0


def run_file(file_path: Path, runner: StatementRunner, verbose: bool = False) -> int:
    """Execute statements from a file.

    Args:
        file_path: Path to the file containing statements
        runner: Runner holding the root and current database
        verbose: If True, print each statement before executing

    Returns:
        0 on success, 1 on the first error
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    statements = _split_statements(content)
    if not statements:
        print("No statements found in file", file=sys.stderr)
        return 1

    parser = QueryParser()
    for text in statements:
        if verbose:
            for i, line in enumerate(text.split("\n")):
                prefix = ">>> " if i == 0 else "... "
                print(f"{prefix}{line}")
        try:
            print_result(run_statement(runner, parser, text))
        except SyntaxError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            return 1
        except JsonTablesError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Interactive shell for JSON Tables Query Language"
    )
    arg_parser.add_argument(
        "database",
        nargs="?",
        default=None,
        help="Name of the database to select on start (optional)",
    )
    arg_parser.add_argument(
        "-r", "--root",
        type=Path,
        default=DEFAULT_ROOT,
        help=f"Directory containing the databases (default: {DEFAULT_ROOT})",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute statements and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each statement before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for engine messages (default: WARNING)",
    )

    args = arg_parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if not args.root.is_dir():
        print(f"Error: Database root not found: {args.root}", file=sys.stderr)
        return 1

    try:
        runner = StatementRunner(args.root, args.database)
    except JsonTablesError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        return run_file(args.file, runner, args.verbose)

    if args.command:
        parser = QueryParser()
        for text in _split_statements(args.command):
            try:
                print_result(run_statement(runner, parser, text))
            except SyntaxError as e:
                print(f"Syntax error: {e}", file=sys.stderr)
                return 1
            except JsonTablesError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        return 0

    return run_repl(runner)


if __name__ == "__main__":
    sys.exit(main())
