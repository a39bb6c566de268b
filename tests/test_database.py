"""Tests for the database and table handles."""

import json

import pytest

from json_tables import (
    ConfigurationError,
    Database,
    ImmutableField,
    InvalidOperator,
    MalformedData,
    MissingFilter,
    NotFound,
    UnknownField,
    open_database,
)


@pytest.fixture
def root(tmp_path):
    (tmp_path / "app").mkdir()
    return tmp_path


@pytest.fixture
def db(root):
    return open_database("app", root)


def write_table(db: Database, name: str, records: list) -> None:
    (db.path / f"{name}.json").write_text(json.dumps(records))


class TestOpenDatabase:
    """Tests for opening databases."""

    def test_open_existing(self, root):
        """An existing directory opens."""
        db = open_database("app", root)
        assert db.name == "app"
        assert db.path == root / "app"

    def test_name_is_trimmed(self, root):
        """Surrounding whitespace in the name is ignored."""
        assert open_database("  app ", root).name == "app"

    def test_unknown_database(self, root):
        """Opening a missing directory fails."""
        with pytest.raises(ConfigurationError, match="Unable to find database directory"):
            open_database("nope", root)

    def test_file_is_not_a_database(self, root):
        """A plain file is not a database directory."""
        (root / "file").write_text("")
        with pytest.raises(ConfigurationError):
            open_database("file", root)

    def test_unreadable_database(self, root, monkeypatch):
        """A directory without read and search permission cannot be opened."""
        monkeypatch.setattr("json_tables.database.os.access", lambda path, mode: False)
        with pytest.raises(ConfigurationError, match="not readable"):
            open_database("app", root)

    @pytest.mark.parametrize("name", ["", "   ", None, "..", ".", "a/b", "../app"])
    def test_invalid_names(self, root, name):
        """Empty names and names that escape the root are rejected."""
        with pytest.raises(ConfigurationError):
            open_database(name, root)

    def test_tables(self, db):
        """Tables are listed from the JSON files present."""
        write_table(db, "users", [])
        write_table(db, "orders", [])
        (db.path / "notes.txt").write_text("")
        (db.path / ".users.json.abc.tmp").write_text("")
        assert db.tables() == ["orders", "users"]

    @pytest.mark.parametrize("name", ["", "  ", "x/y", ".."])
    def test_invalid_table_names(self, db, name):
        """Table names follow the same rules as database names."""
        with pytest.raises(ConfigurationError):
            db.table(name)


class TestSelect:
    """Tests for read terminal calls."""

    @pytest.fixture
    def users(self, db):
        write_table(db, "users", [
            {"id": 1, "name": "John", "age": 30},
            {"id": 2, "name": "Amy", "age": 25},
            {"id": 3, "name": "Johanna", "age": 41},
        ])
        return db.table("users")

    def test_missing_table_is_empty(self, db):
        """Selecting a table without a file returns no records."""
        assert db.table("ghosts").all() == []
        assert not (db.path / "ghosts.json").exists()

    def test_all(self, users):
        """all() returns every record in file order."""
        assert [r["id"] for r in users.all()] == [1, 2, 3]

    def test_all_with_limit(self, users):
        """all() honours a positive limit."""
        assert [r["id"] for r in users.order("age", "DESC").all(2)] == [3, 1]
        assert len(users.all(0)) == 3

    def test_where_like(self, users):
        """LIKE filters by substring."""
        assert [r["name"] for r in users.where("name", "LIKE", "oh").all()] == ["John", "Johanna"]

    def test_get_and_first(self, users):
        """get() and first() return the first result."""
        assert users.where("age", ">", 26).get()["id"] == 1
        assert users.order("age").first()["id"] == 2

    def test_last(self, users):
        """last() returns the final result."""
        assert users.order("age").last()["id"] == 3

    def test_not_found(self, users):
        """Single-record calls raise when nothing matches."""
        with pytest.raises(NotFound):
            users.where("name", "=", "Zed").get()
        with pytest.raises(NotFound):
            users.where("name", "=", "Zed").last()

    def test_count(self, users):
        """count() counts the matching records."""
        assert users.where("age", ">=", 30).count() == 2
        assert users.count() == 3

    def test_malformed_table(self, db):
        """A corrupt table file fails at selection."""
        (db.path / "broken.json").write_text('{"id": 1}')
        with pytest.raises(MalformedData):
            db.table("broken")

    def test_reads_fresh_data(self, db):
        """Each terminal call after the first re-reads the file."""
        write_table(db, "items", [{"id": 1}])
        table = db.table("items")
        assert table.count() == 1
        write_table(db, "items", [{"id": 1}, {"id": 2}])
        assert table.count() == 2


class TestQueryStateReset:
    """The pending query is consumed by every terminal call."""

    @pytest.fixture
    def users(self, db):
        write_table(db, "users", [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
        return db.table("users")

    def test_reset_after_success(self, users):
        """Filters do not carry into the next query."""
        assert len(users.where("name", "=", "a").all()) == 1
        assert users.pending.is_empty
        assert len(users.all()) == 2

    def test_reset_after_failure(self, users):
        """A failing terminal call still clears the pending query."""
        users.where("missing", "=", 1)
        with pytest.raises(UnknownField):
            users.all()
        assert users.pending.is_empty
        assert len(users.all()) == 2

    def test_reset_after_not_found(self, users):
        """NotFound also clears the pending query."""
        with pytest.raises(NotFound):
            users.where("name", "=", "zzz").first()
        assert users.first()["id"] == 1

    def test_reset_after_update(self, users):
        """Update consumes its WHERE conditions."""
        users.where("id", "=", 1).update({"name": "z"})
        assert users.pending.is_empty
        with pytest.raises(MissingFilter):
            users.update({"name": "y"})

    def test_invalid_operator_at_call_time(self, users):
        """Bad operators fail when where() is called, not at execution."""
        with pytest.raises(InvalidOperator):
            users.where("name", "~=", "a")

    def test_order_replaces(self, db):
        """A second order() replaces the first."""
        write_table(db, "t", [{"a": 1, "b": 2}, {"a": 2, "b": 1}])
        result = db.table("t").order("a").order("b").all()
        assert [r["b"] for r in result] == [1, 2]


class TestInsert:
    """Tests for inserting through the table handle."""

    def test_round_trip(self, db):
        """An inserted record reads back with its id."""
        table = db.table("users")
        new_id = table.insert({"name": "a"})
        assert table.where("id", "=", new_id).get() == {"id": new_id, "name": "a"}

    def test_ids_are_sequential(self, db):
        """Sequential inserts into an empty table get ids 1..N."""
        table = db.table("users")
        ids = [table.insert({"n": i}) for i in range(5)]
        assert ids == [1, 2, 3, 4, 5]
        assert [r["id"] for r in table.all()] == [1, 2, 3, 4, 5]

    def test_id_written_first(self, db):
        """The id is the first key of the stored record."""
        db.table("users").insert({"name": "a", "age": 3})
        stored = json.loads((db.path / "users.json").read_text())
        assert list(stored[0]) == ["id", "name", "age"]

    def test_insert_ignores_pending_query(self, db):
        """Pending filters are discarded by an insert."""
        table = db.table("users")
        table.where("x", "=", 1).insert({"name": "a"})
        assert table.pending.is_empty
        assert table.count() == 1

    def test_nested_values_round_trip(self, db):
        """Nested arrays and objects are stored as-is."""
        table = db.table("docs")
        new_id = table.insert({"tags": ["a", "b"], "meta": {"k": [1, None]}})
        assert table.where("id", "=", new_id).first()["meta"] == {"k": [1, None]}


class TestUpdate:
    """Tests for updating through the table handle."""

    @pytest.fixture
    def table(self, db):
        write_table(db, "rows", [{"id": 1, "a": 1, "b": 2}, {"id": 2, "a": 5, "b": 2}])
        return db.table("rows")

    def test_partial_merge(self, table):
        """Only the given fields change."""
        assert table.where("id", "=", 1).update({"b": 9}) == 1
        assert table.where("id", "=", 1).get() == {"id": 1, "a": 1, "b": 9}
        assert table.where("id", "=", 2).get() == {"id": 2, "a": 5, "b": 2}

    def test_update_many(self, table):
        """Every matching record is updated."""
        assert table.where("b", "=", 2).update({"c": True}) == 2
        assert all(r["c"] is True for r in table.all())

    def test_no_match(self, table, db):
        """Zero matches is a valid result and leaves the file alone."""
        path = db.path / "rows.json"
        before = path.read_bytes()
        assert table.where("a", ">", 100).update({"b": 0}) == 0
        assert path.read_bytes() == before

    def test_guarded_update(self, table, db):
        """An update without where() fails and modifies nothing."""
        path = db.path / "rows.json"
        before = path.read_bytes()
        mtime = path.stat().st_mtime_ns
        with pytest.raises(MissingFilter):
            table.update({"b": 0})
        assert path.read_bytes() == before
        assert path.stat().st_mtime_ns == mtime

    def test_order_is_not_a_filter(self, table):
        """An order directive alone does not satisfy the filter guard."""
        with pytest.raises(MissingFilter):
            table.order("a").update({"b": 0})

    @pytest.mark.parametrize("with_where", [True, False])
    def test_immutable_id(self, table, with_where):
        """Setting id always fails."""
        if with_where:
            table.where("id", "=", 1)
        with pytest.raises(ImmutableField):
            table.update({"id": 5})
        assert table.where("id", "=", 5).count() == 0
