"""Table and column declarations shared by every resource module.

A ``Table`` names a PostgreSQL table, the function that fetches its items
and the columns each item is flattened into. Relations are child tables
fetched once per parent item.

Resolver signatures:
  - table resolver:  ``fn(client, parent) -> Iterable[dict]``
  - column resolver: ``fn(client, resource, column) -> value``
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional, Sequence

CQ_ID = "cq_id"
CQ_FETCH_DATE = "cq_fetch_date"
INTERNAL_COLUMNS = (CQ_ID, CQ_FETCH_DATE)

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "https://github.com/github-provider")


class ColumnType(enum.Enum):
    STRING = "text"
    BIGINT = "bigint"
    INT = "integer"
    FLOAT = "double precision"
    BOOL = "boolean"
    TIMESTAMP = "timestamptz"
    JSON = "jsonb"
    UUID = "uuid"
    STRING_ARRAY = "text[]"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _to_int(value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value!r} is not a whole number")
    return int(value)


def _to_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{value!r} is not a boolean")
    return value


def _to_str(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set)):
        raise ValueError(f"{type(value).__name__} is not a scalar")
    return str(value)


_COERCERS: dict[ColumnType, Callable[[Any], Any]] = {
    ColumnType.STRING: _to_str,
    ColumnType.BIGINT: _to_int,
    ColumnType.INT: _to_int,
    ColumnType.FLOAT: float,
    ColumnType.BOOL: _to_bool,
    ColumnType.TIMESTAMP: _parse_timestamp,
    ColumnType.JSON: lambda v: v,
    ColumnType.UUID: str,
    ColumnType.STRING_ARRAY: lambda v: [str(x) for x in v],
}


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType
    description: str = ""
    resolver: Optional[Callable[..., Any]] = None
    # Parent table name; the column then references <parent>(cq_id).
    foreign_key: Optional[str] = None

    def coerce(self, value: Any) -> Any:
        if value is None:
            return None
        return _COERCERS[self.type](value)

    def ddl(self) -> str:
        sql = f"{self.name} {self.type.value}"
        if self.foreign_key:
            sql += f" REFERENCES {self.foreign_key}({CQ_ID}) ON DELETE CASCADE"
        return sql


@dataclass
class Table:
    name: str
    description: str
    resolver: Callable[..., Any]
    columns: list[Column]
    primary_keys: Sequence[str] = ()
    # Fans the table out over several clients, e.g. one per organisation.
    multiplex: Optional[Callable[..., list]] = None
    relations: list["Table"] = field(default_factory=list)

    def __post_init__(self) -> None:
        names = [c.name for c in self.columns]
        if len(set(names)) != len(names):
            dupes = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"{self.name}: duplicate columns {dupes}")
        reserved = set(names) & set(INTERNAL_COLUMNS)
        if reserved:
            raise ValueError(f"{self.name}: reserved column names {sorted(reserved)}")
        missing = [pk for pk in self.primary_keys if pk not in names]
        if missing:
            raise ValueError(f"{self.name}: primary keys {missing} are not columns")

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(f"{self.name} has no column {name!r}")

    def column_names(self) -> list[str]:
        return list(INTERNAL_COLUMNS) + [c.name for c in self.columns]

    def walk(self) -> Iterator["Table"]:
        """Yield this table and every descendant relation, parents first."""
        yield self
        for rel in self.relations:
            yield from rel.walk()


@dataclass
class Resource:
    """One fetched item together with its resolved column values."""

    table: Table
    item: Any
    parent: Optional["Resource"] = None
    values: dict[str, Any] = field(default_factory=dict)
    cq_id: Optional[str] = None
    # Per-item scratch space for resolvers, e.g. a lookup shared by several columns.
    cache: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> Any:
        return self.values.get(name)

    def set(self, name: str, value: Any) -> None:
        self.values[name] = self.table.column(name).coerce(value)

    def compute_id(self) -> str:
        """Stable id from the primary key, so children keep valid FKs across runs."""
        if self.table.primary_keys:
            key = "/".join(str(self.values.get(pk)) for pk in self.table.primary_keys)
            self.cq_id = str(uuid.uuid5(_ID_NAMESPACE, f"{self.table.name}/{key}"))
        else:
            self.cq_id = str(uuid.uuid4())
        return self.cq_id


# ----------------------------------------------------------------------
# Column resolvers
# ----------------------------------------------------------------------

def lookup_path(item: Any, path: str) -> Any:
    """Walk a dotted path through nested dicts; any missing step gives None."""
    value = item
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


def path_resolver(path: str) -> Callable[..., Any]:
    def resolve(client, resource: Resource, column: Column) -> Any:
        return lookup_path(resource.item, path)

    resolve.__name__ = f"path_resolver({path})"
    return resolve


def default_resolver(client, resource: Resource, column: Column) -> Any:
    return lookup_path(resource.item, column.name)


def parent_id_resolver(client, resource: Resource, column: Column) -> Any:
    if resource.parent is None:
        return None
    return resource.parent.cq_id


def parent_field_resolver(name: str) -> Callable[..., Any]:
    def resolve(client, resource: Resource, column: Column) -> Any:
        if resource.parent is None:
            return None
        return resource.parent.get(name)

    resolve.__name__ = f"parent_field_resolver({name})"
    return resolve


# ----------------------------------------------------------------------
# DDL
# ----------------------------------------------------------------------

def create_table_sql(table: Table) -> str:
    lines = [
        f"{CQ_ID} uuid NOT NULL UNIQUE",
        f"{CQ_FETCH_DATE} timestamptz NOT NULL",
    ]
    lines.extend(c.ddl() for c in table.columns)
    if table.primary_keys:
        lines.append(f"PRIMARY KEY ({', '.join(table.primary_keys)})")
    body = ",\n    ".join(lines)
    return f"CREATE TABLE IF NOT EXISTS {table.name} (\n    {body}\n)"
