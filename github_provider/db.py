"""Database helpers: connection pool, table creation, resource upserts, run tracking."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, Iterable, Optional, Sequence

import psycopg2
import psycopg2.extras
import psycopg2.pool

from github_provider.config import DatabaseConfig
from github_provider.schema import (
    CQ_FETCH_DATE,
    CQ_ID,
    ColumnType,
    Resource,
    Table,
    create_table_sql,
)

logger = logging.getLogger("github_provider.db")

FETCH_RUNS_DDL = """CREATE TABLE IF NOT EXISTS fetch_runs (
    id uuid PRIMARY KEY,
    provider text NOT NULL,
    tables text[],
    status text NOT NULL,
    started_at timestamptz NOT NULL DEFAULT NOW(),
    finished_at timestamptz,
    records_upserted bigint NOT NULL DEFAULT 0,
    error_message text,
    error_detail jsonb,
    run_metadata jsonb
)"""


def upsert_sql(table: Table) -> str:
    """INSERT ... ON CONFLICT statement for execute_values."""
    columns = table.column_names()
    conflict = list(table.primary_keys) or [CQ_ID]
    skip = set(conflict) | {CQ_ID}
    set_clauses = ", ".join(
        f"{c} = EXCLUDED.{c}" for c in columns if c not in skip
    )
    return (
        f"INSERT INTO {table.name} ({', '.join(columns)}) VALUES %s "
        f"ON CONFLICT ({', '.join(conflict)}) DO UPDATE SET {set_clauses}"
    )


def resource_row(resource: Resource, fetch_date: datetime) -> tuple:
    row: list[Any] = [resource.cq_id, fetch_date]
    for column in resource.table.columns:
        value = resource.get(column.name)
        if column.type is ColumnType.JSON and value is not None:
            value = psycopg2.extras.Json(value)
        row.append(value)
    return tuple(row)


class Database:
    """Thin wrapper around a ThreadedConnectionPool with upsert helpers."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=config.min_connections,
            maxconn=config.max_connections,
            dsn=config.url,
        )

    def close(self) -> None:
        self._pool.closeall()

    @contextmanager
    def connection(self) -> Generator:
        conn = self._pool.getconn()
        try:
            yield conn
        finally:
            self._pool.putconn(conn)

    @contextmanager
    def transaction(self) -> Generator:
        """Yield a cursor inside an auto-commit/rollback transaction."""
        with self.connection() as conn:
            try:
                with conn.cursor() as cur:
                    yield cur
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def create_tables(self, tables: Iterable[Table]) -> list[str]:
        """Create every table (and relation) that does not exist yet."""
        created: list[str] = []
        with self.transaction() as cur:
            cur.execute(FETCH_RUNS_DDL)
            for top in tables:
                for table in top.walk():
                    cur.execute(create_table_sql(table))
                    created.append(table.name)
        logger.info("Ensured %d tables", len(created))
        return created

    def upsert_resources(
        self,
        cur,
        table: Table,
        resources: Sequence[Resource],
        fetch_date: datetime,
    ) -> int:
        """Bulk upsert with execute_values. Returns the number of rows sent.

        Resources sharing a cq_id are collapsed (last one wins); ON CONFLICT
        cannot touch the same row twice in one statement.
        """
        unique: dict[str, Resource] = {}
        for r in resources:
            unique[r.cq_id] = r
        if not unique:
            return 0
        rows = [resource_row(r, fetch_date) for r in unique.values()]
        psycopg2.extras.execute_values(cur, upsert_sql(table), rows, page_size=500)
        return len(rows)

    # ------------------------------------------------------------------
    # Fetch run tracking
    # ------------------------------------------------------------------

    def record_run_start(
        self,
        provider: str,
        tables: Optional[list[str]] = None,
        metadata: Optional[dict] = None,
    ) -> str:
        """Insert a fetch_runs row with status RUNNING. Returns the run id."""
        run_id = str(uuid.uuid4())
        with self.transaction() as cur:
            cur.execute(
                """INSERT INTO fetch_runs
                   (id, provider, tables, status, run_metadata)
                   VALUES (%s, %s, %s, 'RUNNING', %s)""",
                (
                    run_id,
                    provider,
                    tables,
                    psycopg2.extras.Json(metadata or {}),
                ),
            )
        return run_id

    def record_run_end(
        self,
        run_id: str,
        status: str,
        records_upserted: int = 0,
        error_message: Optional[str] = None,
        error_detail: Optional[dict] = None,
    ) -> None:
        with self.transaction() as cur:
            cur.execute(
                """UPDATE fetch_runs
                   SET status = %s,
                       finished_at = NOW(),
                       records_upserted = %s,
                       error_message = %s,
                       error_detail = %s
                   WHERE id = %s""",
                (
                    status,
                    records_upserted,
                    error_message,
                    psycopg2.extras.Json(error_detail) if error_detail else None,
                    run_id,
                ),
            )

    def get_recent_runs(self, limit: int = 10) -> list[dict[str, Any]]:
        with self.transaction() as cur:
            cur.execute(
                """SELECT id, provider, tables, status, started_at,
                          finished_at, records_upserted, error_message
                   FROM fetch_runs
                   ORDER BY started_at DESC LIMIT %s""",
                (limit,),
            )
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, row)) for row in cur.fetchall()]
