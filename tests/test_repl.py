"""Tests for the JTQ shell."""

import json
from pathlib import Path

import pytest

from json_tables.repl import _split_statements, format_value, main, print_result, run_file
from json_tables.statements import QueryResult, StatementRunner


@pytest.fixture
def root(tmp_path: Path) -> Path:
    (tmp_path / "shop").mkdir()
    return tmp_path


class TestHelperFunctions:
    """Tests for REPL helper functions."""

    def test_split_statements(self):
        """Semicolons inside strings do not split."""
        content = 'use shop; insert t(a="x;y");\n-- comment; here\nfrom t select *'
        assert _split_statements(content) == ["use shop", 'insert t(a="x;y")', "from t select *"]

    def test_split_escaped_quote(self):
        """Escaped quotes do not end a string."""
        assert _split_statements(r'insert t(a="x\";y"); show tables') == [r'insert t(a="x\";y")', "show tables"]

    def test_split_trailing_comment(self):
        """A comment after a statement is dropped, semicolons in it included."""
        assert _split_statements("from t select * -- a; b") == ["from t select *"]
        content = 'from t select *; -- a; b\ninsert t(a="--;x"); from `x--y` select *'
        assert _split_statements(content) == [
            "from t select *",
            'insert t(a="--;x")',
            "from `x--y` select *",
        ]

    def test_format_value(self):
        """Values are formatted for display."""
        assert format_value(None) == "NULL"
        assert format_value(True) == "true"
        assert format_value(3) == "3"
        assert format_value("hi") == "'hi'"
        assert format_value([1, "a"]) == "[1, 'a']"
        assert format_value({"k": None}) == "{k: NULL}"

    def test_print_result_table(self, capsys):
        """Rows print as an aligned table with a count."""
        print_result(QueryResult(columns=["id", "name"], rows=[{"id": 1, "name": "a"}, {"id": 2}]))
        out = capsys.readouterr().out
        assert "id | name" in out
        assert "'a'" in out
        assert "(2 rows)" in out

    def test_print_result_empty(self, capsys):
        """An empty selection says so."""
        print_result(QueryResult(columns=[], rows=[], message="Inserted into t with id 1"))
        print_result(QueryResult(columns=["id"], rows=[]))
        out = capsys.readouterr().out
        assert "Inserted into t with id 1" in out
        assert "(no results)" in out


class TestRunFile:
    """Tests for file execution."""

    def test_run_file(self, root: Path, capsys):
        """A script can insert and query."""
        script = root / "script.jtq"
        script.write_text("""
-- Add some products
insert products(name="Pen", price=2);
insert into products(name="Ink", price=7);

from products select * where price > 5
""")
        runner = StatementRunner(root, "shop")
        assert run_file(script, runner) == 0
        out = capsys.readouterr().out
        assert "Inserted into products with id 2" in out
        assert "'Ink'" in out
        assert "(1 row)" in out

    def test_run_file_use(self, root: Path):
        """A script can select its database."""
        script = root / "script.jtq"
        script.write_text('use shop; insert t(a=1)')
        assert run_file(script, StatementRunner(root)) == 0
        assert json.loads((root / "shop" / "t.json").read_text()) == [{"id": 1, "a": 1}]

    def test_run_file_no_database(self, root: Path, capsys):
        """Queries fail when no database is selected."""
        script = root / "script.jtq"
        script.write_text("from t select *;")
        assert run_file(script, StatementRunner(root)) == 1
        assert "No database selected" in capsys.readouterr().err

    def test_run_file_syntax_error(self, root: Path, capsys):
        """Syntax errors stop the script."""
        script = root / "script.jtq"
        script.write_text("from t select; insert t(a=1)")
        assert run_file(script, StatementRunner(root, "shop")) == 1
        assert "Syntax error" in capsys.readouterr().err
        assert not (root / "shop" / "t.json").exists()

    def test_run_file_empty(self, root: Path):
        """A file with only comments has nothing to run."""
        script = root / "script.jtq"
        script.write_text("-- nothing\n")
        assert run_file(script, StatementRunner(root)) == 1

    def test_run_file_verbose(self, root: Path, capsys):
        """Verbose mode echoes statements."""
        script = root / "script.jtq"
        script.write_text("show tables")
        assert run_file(script, StatementRunner(root, "shop"), verbose=True) == 0
        assert ">>> show tables" in capsys.readouterr().out


class TestMain:
    """Tests for the command line entry point."""

    def test_command(self, root: Path, capsys):
        """-c runs statements and exits."""
        code = main(["--root", str(root), "shop", "-c", 'insert t(a="x"); from t select count()'])
        assert code == 0
        out = capsys.readouterr().out
        assert "Inserted into t with id 1" in out
        assert "count" in out

    def test_update_without_where(self, root: Path, capsys):
        """The filter guard surfaces as an error exit."""
        (root / "shop" / "t.json").write_text('[{"id": 1, "a": 1}]')
        assert main(["-r", str(root), "shop", "-c", "update t set a=2"]) == 1
        assert "Error:" in capsys.readouterr().err
        assert json.loads((root / "shop" / "t.json").read_text()) == [{"id": 1, "a": 1}]

    def test_missing_root(self, tmp_path: Path, capsys):
        """A missing root directory is reported."""
        assert main(["-r", str(tmp_path / "nope"), "-c", "show tables"]) == 1
        assert "Database root not found" in capsys.readouterr().err

    def test_unknown_database(self, root: Path, capsys):
        """An unknown database on the command line is reported."""
        assert main(["-r", str(root), "nope", "-c", "show tables"]) == 1
        assert "Unable to find database directory" in capsys.readouterr().err

    def test_file(self, root: Path):
        """-f runs a script file."""
        script = root / "script.jtq"
        script.write_text("insert t(a=1);")
        assert main(["-r", str(root), "shop", "-f", str(script)]) == 0

    def test_missing_file(self, root: Path, capsys):
        """A missing script is reported."""
        assert main(["-r", str(root), "shop", "-f", str(root / "none.jtq")]) == 1
        assert "File not found" in capsys.readouterr().err
