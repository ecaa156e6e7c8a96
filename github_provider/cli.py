"""CLI entry point: sync, init-db, tables, status, scheduler."""

from __future__ import annotations

import argparse
import logging
import os
from collections import Counter
from dataclasses import replace

from github_provider.config import load_config
from github_provider.db import FETCH_RUNS_DDL, Database
from github_provider.logging_config import configure_logging
from github_provider.provider import RESOURCE_MAP, GitHubProvider, select_tables
from github_provider.schema import create_table_sql

logger = logging.getLogger("github_provider.cli")

TABLE_CHOICES = sorted(RESOURCE_MAP)


def _config_for(args: argparse.Namespace, require_database: bool = True):
    config = load_config(require_database=require_database)
    tables = getattr(args, "table", None)
    if tables:
        config = replace(config, tables=tuple(tables))
    return config


def cmd_sync(args: argparse.Namespace) -> None:
    """Fetch the selected tables for every org and upsert them."""
    if args.dry_run:
        config = _config_for(args, require_database=False)
        provider = GitHubProvider(config)
        counts: Counter = Counter()
        for table in provider.tables:
            for resource in provider.fetch(table):
                counts[resource.table.name] += 1
        logger.info("Dry run fetched: %s", dict(counts))
        return

    config = _config_for(args)
    db = Database(config.database)
    try:
        provider = GitHubProvider(config, db)
        results = provider.sync_with_tracking()
        logger.info("Sync results: %s", results)
    finally:
        db.close()


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create all tables that do not exist yet."""
    config = _config_for(args)
    db = Database(config.database)
    try:
        created = db.create_tables(select_tables(config.tables))
        logger.info("Tables ready: %s", created)
    finally:
        db.close()


def cmd_tables(args: argparse.Namespace) -> None:
    """Print the table tree, or the DDL with --ddl. Needs no configuration."""
    tables = select_tables(args.table or [])
    if args.ddl:
        statements = [FETCH_RUNS_DDL]
        statements.extend(create_table_sql(t) for top in tables for t in top.walk())
        print(";\n\n".join(statements) + ";")
        return

    def show(table, depth: int) -> None:
        indent = "  " * depth
        print(f"{indent}{table.name}  -  {table.description}")
        for rel in table.relations:
            show(rel, depth + 1)

    for top in tables:
        show(top, 0)


def cmd_scheduler(args: argparse.Namespace) -> None:
    """Start the APScheduler-based scheduling loop."""
    from github_provider.scheduler import start_scheduler

    config = _config_for(args)
    db = Database(config.database)
    try:
        start_scheduler(config, db)
    finally:
        db.close()


def cmd_status(args: argparse.Namespace) -> None:
    """Show recent fetch runs."""
    config = _config_for(args)
    db = Database(config.database)

    try:
        runs = db.get_recent_runs(limit=args.limit)
        if not runs:
            print("No fetch runs found.")
            return

        fmt = "{:<36}  {:<8}  {:<8}  {:<20}  {:<20}  {:>8}  {}"
        print(fmt.format(
            "RUN ID", "PROVIDER", "STATUS", "STARTED", "FINISHED", "UPSERTED", "ERROR",
        ))
        print("-" * 140)
        for r in runs:
            started = str(r["started_at"])[:19] if r["started_at"] else ""
            finished = str(r["finished_at"])[:19] if r["finished_at"] else ""
            error = (r.get("error_message") or "")[:40]
            print(fmt.format(
                str(r["id"])[:36],
                r["provider"],
                r["status"],
                started,
                finished,
                r.get("records_upserted") or 0,
                error,
            ))
    finally:
        db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-provider",
        description="Fetch GitHub organisation resources into PostgreSQL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Run one-shot sync")
    sync_parser.add_argument(
        "--table", "-t",
        action="append",
        choices=TABLE_CHOICES,
        help="Resource to fetch; repeatable (default: GITHUB_TABLES or all)",
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and count rows without writing to the database",
    )
    sync_parser.set_defaults(func=cmd_sync)

    init_parser = subparsers.add_parser("init-db", help="Create missing tables")
    init_parser.add_argument("--table", "-t", action="append", choices=TABLE_CHOICES)
    init_parser.set_defaults(func=cmd_init_db)

    tables_parser = subparsers.add_parser("tables", help="List tables and relations")
    tables_parser.add_argument("--table", "-t", action="append", choices=TABLE_CHOICES)
    tables_parser.add_argument("--ddl", action="store_true", help="Print CREATE TABLE statements")
    tables_parser.set_defaults(func=cmd_tables)

    sched_parser = subparsers.add_parser("scheduler", help="Start scheduled sync loop")
    sched_parser.set_defaults(func=cmd_scheduler)

    status_parser = subparsers.add_parser("status", help="Show recent fetch runs")
    status_parser.add_argument(
        "--limit", "-l",
        type=int,
        default=10,
        help="Number of runs to show (default: 10)",
    )
    status_parser.set_defaults(func=cmd_status)
    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
