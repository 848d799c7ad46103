import argparse
import json
import logging
import sys
from typing import Any, Optional

from process_foundry.container import DependencyContainer
from process_foundry.entities.app_query import AppQuery
from process_foundry.exceptions import BaseFoundryError, ConfigurationError
from process_foundry.use_cases.actions.run_command import RunCommandAction


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="foundry",
        description="Find tools through the local shell and run commands against them.",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty print output (tables/JSON) with colors",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: FOUNDRY_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    find = sub.add_parser("find", help="Find an application by name")
    find.add_argument("name", help="Application name, matched case-insensitively")
    find.add_argument(
        "--all",
        dest="find_all",
        action="store_true",
        help="Return every match instead of requiring exactly one",
    )
    find.add_argument("--works-with", default=None, help="Version requirement, e.g. '>=1.25'")
    find.add_argument("--alias", action="append", default=[], help="Alternate name")
    find.add_argument(
        "--search-path", action="append", default=[], help="Extra directory to look in"
    )

    run = sub.add_parser("exec", help="Resolve an application and run it")
    run.add_argument("name", help="Application name")
    run.add_argument("--user", default=None, help="Run as this user")
    run.add_argument("--works-with", default=None, help="Version requirement")
    run.add_argument("args", nargs=argparse.REMAINDER, help="Arguments (after --)")

    sub.add_parser("topology", help="Show the known containers and their cached apps")
    return parser


def _query(**kwargs: Any) -> AppQuery:
    try:
        return AppQuery(**kwargs)
    except ValueError as e:
        raise ConfigurationError(f"Invalid query: {e}") from e


def _print(data: Any, pretty: bool) -> None:
    if not pretty:
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return
    from rich.console import Console
    from rich.table import Table

    console = Console(soft_wrap=True)
    if isinstance(data, list) and data and isinstance(data[0], dict):
        table = Table(show_header=True, header_style="bold magenta")
        columns = list(data[0].keys())
        for column in columns:
            table.add_column(column)
        for row in data:
            table.add_row(*["" if row[c] is None else str(row[c]) for c in columns])
        console.print(table)
    else:
        console.print_json(data=data)


def main(argv: Optional[list[str]] = None, container: Optional[DependencyContainer] = None) -> int:
    args = _build_parser().parse_args(argv)
    container = container or DependencyContainer()
    level = (args.log_level or container.get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        shell = container.get_local_shell().running
        if args.command == "find":
            query = _query(
                name=args.name,
                works_with=args.works_with,
                aliases=tuple(args.alias),
                search_paths=tuple(args.search_path),
                find_all=args.find_all,
            )
            found = container.get_find_application_use_case().execute(shell, query)
            _print([app.get_details() for app in found], args.pretty)
        elif args.command == "exec":
            query = _query(name=args.name, works_with=args.works_with)
            target = container.get_find_application_use_case().execute(shell, query)[0]
            extra = args.args[1:] if args.args[:1] == ["--"] else args.args
            action = RunCommandAction(extra, run_as=args.user)
            via = container.get_forward_message_use_case().container_for(target)
            outputs = container.get_execute_action_use_case().forward(action, target, via)
            sys.stdout.write("".join(outputs))
        elif args.command == "topology":
            _print(container.get_container_tree().to_dict()["nodes"], args.pretty)
    except BaseFoundryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
