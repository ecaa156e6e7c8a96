"""Unit tests for the table/column declarations."""

import uuid
from datetime import datetime, timezone

import pytest

from github_provider.schema import (
    Column,
    ColumnType,
    Resource,
    Table,
    create_table_sql,
    default_resolver,
    lookup_path,
    parent_field_resolver,
    parent_id_resolver,
    path_resolver,
)


def _noop(client, parent):
    return iter(())


@pytest.fixture
def parent_table() -> Table:
    return Table(
        name="things",
        description="",
        resolver=_noop,
        primary_keys=["id"],
        columns=[Column("id", ColumnType.BIGINT), Column("name", ColumnType.STRING)],
        relations=[
            Table(
                name="thing_parts",
                description="",
                resolver=_noop,
                primary_keys=["thing_id", "id"],
                columns=[
                    Column("thing_cq_id", ColumnType.UUID, resolver=parent_id_resolver, foreign_key="things"),
                    Column("thing_id", ColumnType.BIGINT, resolver=parent_field_resolver("id")),
                    Column("id", ColumnType.BIGINT),
                ],
            )
        ],
    )


class TestColumnCoerce:

    def test_none_is_preserved_for_every_type(self):
        for column_type in ColumnType:
            assert Column("c", column_type).coerce(None) is None

    def test_timestamp_with_trailing_z(self):
        value = Column("c", ColumnType.TIMESTAMP).coerce("2020-01-02T03:04:05Z")
        assert value == datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_timestamp_passthrough(self):
        now = datetime.now(timezone.utc)
        assert Column("c", ColumnType.TIMESTAMP).coerce(now) is now

    def test_bigint_and_float(self):
        assert Column("c", ColumnType.BIGINT).coerce("12") == 12
        assert Column("c", ColumnType.FLOAT).coerce(3) == 3.0

    def test_string_array(self):
        assert Column("c", ColumnType.STRING_ARRAY).coerce(["a", 1]) == ["a", "1"]

    def test_json_keeps_python_objects(self):
        payload = {"admin": True}
        assert Column("c", ColumnType.JSON).coerce(payload) is payload

    def test_bad_int_raises(self):
        with pytest.raises(ValueError):
            Column("c", ColumnType.BIGINT).coerce("abc")

    def test_fractional_float_is_not_truncated_to_int(self):
        with pytest.raises(ValueError, match="whole number"):
            Column("c", ColumnType.BIGINT).coerce(305.75)
        with pytest.raises(ValueError):
            Column("c", ColumnType.INT).coerce(0.5)

    def test_whole_float_becomes_int(self):
        value = Column("c", ColumnType.BIGINT).coerce(305.0)
        assert value == 305
        assert isinstance(value, int)

    def test_bool_rejects_strings(self):
        with pytest.raises(ValueError, match="not a boolean"):
            Column("c", ColumnType.BOOL).coerce("false")
        assert Column("c", ColumnType.BOOL).coerce(False) is False

    def test_string_rejects_containers(self):
        with pytest.raises(ValueError, match="not a scalar"):
            Column("c", ColumnType.STRING).coerce({"name": "x"})
        assert Column("c", ColumnType.STRING).coerce(12) == "12"


class TestTableValidation:

    def test_primary_key_must_be_a_column(self):
        with pytest.raises(ValueError, match="primary keys"):
            Table("t", "", _noop, [Column("id", ColumnType.BIGINT)], primary_keys=["nope"])

    def test_duplicate_columns_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            Table("t", "", _noop, [Column("id", ColumnType.BIGINT), Column("id", ColumnType.STRING)])

    def test_reserved_column_rejected(self):
        with pytest.raises(ValueError, match="reserved"):
            Table("t", "", _noop, [Column("cq_id", ColumnType.UUID)])

    def test_walk_is_parent_first(self, parent_table):
        assert [t.name for t in parent_table.walk()] == ["things", "thing_parts"]

    def test_column_names_start_with_internal_columns(self, parent_table):
        assert parent_table.column_names() == ["cq_id", "cq_fetch_date", "id", "name"]

    def test_unknown_column_lookup(self, parent_table):
        with pytest.raises(KeyError):
            parent_table.column("missing")


class TestResolvers:

    def test_lookup_path_handles_missing_steps(self):
        item = {"plan": {"name": "team"}, "parent": None}
        assert lookup_path(item, "plan.name") == "team"
        assert lookup_path(item, "plan.seats") is None
        assert lookup_path(item, "parent.id") is None
        assert lookup_path(item, "license.key") is None

    def test_path_and_default_resolvers(self, parent_table):
        resource = Resource(parent_table, {"id": 5, "name": "x", "owner": {"login": "me"}})
        assert path_resolver("owner.login")(None, resource, parent_table.column("name")) == "me"
        assert default_resolver(None, resource, parent_table.column("name")) == "x"

    def test_parent_resolvers(self, parent_table):
        parent = Resource(parent_table, {"id": 5})
        parent.set("id", 5)
        parent.compute_id()
        child_table = parent_table.relations[0]
        child = Resource(child_table, {"id": 9}, parent=parent)

        assert parent_id_resolver(None, child, child_table.column("thing_cq_id")) == parent.cq_id
        assert parent_field_resolver("id")(None, child, child_table.column("thing_id")) == 5

    def test_parent_resolvers_without_parent(self, parent_table):
        resource = Resource(parent_table, {})
        assert parent_id_resolver(None, resource, parent_table.column("id")) is None
        assert parent_field_resolver("id")(None, resource, parent_table.column("id")) is None


class TestResourceId:

    def test_id_is_stable_for_same_primary_key(self, parent_table):
        a = Resource(parent_table, {})
        a.set("id", 1)
        b = Resource(parent_table, {})
        b.set("id", 1)
        b.set("name", "renamed")
        assert a.compute_id() == b.compute_id()
        uuid.UUID(a.cq_id)

    def test_id_differs_between_tables(self, parent_table):
        child_table = parent_table.relations[0]
        a = Resource(parent_table, {})
        a.set("id", 1)
        b = Resource(child_table, {})
        b.set("id", 1)
        assert a.compute_id() != b.compute_id()

    def test_table_without_primary_key_gets_random_id(self):
        table = Table("t", "", _noop, [Column("x", ColumnType.STRING)])
        assert Resource(table, {}).compute_id() != Resource(table, {}).compute_id()


class TestCreateTableSql:

    def test_parent_table(self, parent_table):
        sql = create_table_sql(parent_table)
        assert sql.startswith("CREATE TABLE IF NOT EXISTS things (")
        assert "cq_id uuid NOT NULL UNIQUE" in sql
        assert "cq_fetch_date timestamptz NOT NULL" in sql
        assert "id bigint" in sql
        assert "name text" in sql
        assert "PRIMARY KEY (id)" in sql

    def test_foreign_key_column(self, parent_table):
        sql = create_table_sql(parent_table.relations[0])
        assert "thing_cq_id uuid REFERENCES things(cq_id) ON DELETE CASCADE" in sql
        assert "PRIMARY KEY (thing_id, id)" in sql
