"""
Unit tests for CLI module (qldb_util/cli.py).

Tests cover:
- JSON argument parsing and output rendering
- query, tables, document-id, history and encode commands
- Ledger name resolution and error exit codes
"""

import argparse
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest

from qldb_util import cli
from qldb_util.config import LedgerSettings


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch, tmp_path):
    """Keep main() from touching real config files, env vars or root logging."""
    monkeypatch.delenv("QLDB_LEDGER", raising=False)
    monkeypatch.setattr("qldb_util.config.CONFIG_FILE", tmp_path / "missing.ini")
    monkeypatch.setattr("qldb_util.config.CONFIG_EXAMPLE", tmp_path / "missing.example.ini")
    monkeypatch.setattr(cli, "configure_logging", lambda settings: None)


# ============================================================================
# PARSING AND RENDERING
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"a": 1}', {"a": 1}),
        ("[1, 2]", [1, 2]),
        ("12.50", Decimal("12.50")),
        ("true", True),
        ('"quoted"', "quoted"),
        ("LEWISR261LL", "LEWISR261LL"),
    ],
)
def test_parse_json_argument(text, expected):
    assert cli.parse_json_argument(text) == expected


@pytest.mark.unit
def test_render_json_handles_ion_scalars():
    out = cli.render_json(
        {
            "price": Decimal("1.10"),
            "when": datetime(2024, 1, 2, tzinfo=UTC),
            "blob": b"hi",
        }
    )
    assert '"price": "1.10"' in out
    assert '"when": "2024-01-02T00:00:00+00:00"' in out
    assert '"blob": "aGk="' in out


@pytest.mark.unit
def test_render_table_columns_from_all_rows():
    out = cli.render_table([{"id": 1, "name": "Ana"}, {"id": 2, "city": "Porto"}])
    lines = out.splitlines()

    assert lines[0].split() == ["id", "name", "city"]
    assert lines[2].split() == ["1", "Ana"]
    assert lines[3].split() == ["2", "Porto"]


@pytest.mark.unit
def test_render_table_scalars_and_empty():
    assert cli.render_table(None) == "(no rows)"
    assert cli.render_table([3, 4]).splitlines()[0] == "value"


@pytest.mark.unit
def test_render_table_mixed_rows_keep_scalars_in_value_column():
    lines = cli.render_table([{"id": 1, "name": "Ana"}, 7]).splitlines()

    assert lines[0].split() == ["id", "name", "value"]
    assert lines[2].split() == ["1", "Ana"]
    assert lines[3].split() == ["7"]
    assert lines[3].index("7") == lines[0].index("value")


@pytest.mark.unit
def test_render_ion():
    assert cli.render_ion(None) == ""
    assert "identity" in cli.render_ion({"id": 1, "identity": 2})


# ============================================================================
# COMMANDS
# ============================================================================


def _args(**kwargs) -> argparse.Namespace:
    defaults = {"ledger": "cars", "settings": LedgerSettings()}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


@pytest.mark.unit
def test_cmd_query_success(capsys):
    with patch("qldb_util.executor.execute_query", return_value={"id": 1}) as mock_exec:
        result = cli.cmd_query(_args(statement="SELECT * FROM t WHERE a = ?", param=['"x"'], format="json"))

    assert result == 0
    assert mock_exec.call_args.args == ("cars", "SELECT * FROM t WHERE a = ?", ["x"])
    assert '"id": 1' in capsys.readouterr().out


@pytest.mark.unit
def test_cmd_query_error(capsys):
    with patch("qldb_util.executor.execute_query", side_effect=RuntimeError("denied")):
        result = cli.cmd_query(_args(statement="SELECT * FROM t", param=None, format="json"))

    assert result == 1
    assert "denied" in capsys.readouterr().err


@pytest.mark.unit
def test_cmd_query_without_ledger_name(capsys):
    result = cli.cmd_query(_args(ledger=None, statement="SELECT 1", param=None, format="json"))

    assert result == 1
    assert "No ledger name" in capsys.readouterr().err


@pytest.mark.unit
def test_cmd_query_uses_settings_ledger_name():
    args = _args(ledger=None, settings=LedgerSettings(ledger_name="from-config"))
    args.statement, args.param, args.format = "SELECT 1", None, "json"
    with patch("qldb_util.executor.execute_query", return_value=None) as mock_exec:
        assert cli.cmd_query(args) == 0
    assert mock_exec.call_args.args[0] == "from-config"


@pytest.mark.unit
def test_cmd_tables(capsys):
    with patch("qldb_util.documents.list_tables", return_value=["Person", "Vehicle"]):
        assert cli.cmd_tables(_args()) == 0
    assert capsys.readouterr().out.split() == ["Person", "Vehicle"]


@pytest.mark.unit
def test_cmd_document_id(capsys):
    with patch("qldb_util.documents.get_document_id", return_value="doc-9") as mock_lookup:
        assert cli.cmd_document_id(_args(table="Person", field="GovId", value="LEWISR261LL")) == 0

    assert mock_lookup.call_args.args == ("cars", "Person", "GovId", "LEWISR261LL")
    assert capsys.readouterr().out.strip() == "doc-9"


@pytest.mark.unit
def test_cmd_document_id_not_found(capsys):
    from qldb_util.errors import NotFoundError, OperationContext

    error = NotFoundError(context=OperationContext("documents.get_document_id", "none"))
    with patch("qldb_util.documents.get_document_id", side_effect=error):
        assert cli.cmd_document_id(_args(table="Person", field="GovId", value="x")) == 1
    assert "documents.get_document_id" in capsys.readouterr().err


@pytest.mark.unit
def test_cmd_history(capsys):
    revisions = [{"linha": {"VIN": "V1"}, "versao": 0}]
    with patch("qldb_util.documents.view_document_history", return_value=revisions):
        assert cli.cmd_history(_args(table="Vehicle", document_id="doc-1")) == 0
    assert '"VIN": "V1"' in capsys.readouterr().out


@pytest.mark.unit
def test_cmd_encode(capsys):
    assert cli.cmd_encode(_args(value='{"id": 1, "tags": ["a"]}')) == 0
    out = capsys.readouterr().out
    assert "id" in out
    assert '"a"' in out


@pytest.mark.unit
def test_cmd_encode_plain_text(capsys):
    assert cli.cmd_encode(_args(value="{")) == 0  # not JSON: encoded as a string
    assert capsys.readouterr().out.strip() == "\"{\""


# ============================================================================
# MAIN
# ============================================================================


@pytest.mark.unit
def test_main_without_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


@pytest.mark.unit
def test_main_encode(capsys):
    assert cli.main(["encode", "[1, 2]"]) == 0
    assert "1" in capsys.readouterr().out


@pytest.mark.unit
def test_main_query_end_to_end(capsys, fake_driver, ion_records):
    fake_driver.results = ion_records('{id: 1, identity: 2}')

    code = cli.main(["--ledger", "cars", "query", "SELECT * FROM t WHERE a = ?", "-p", "5", "-f", "table"])

    assert code == 0
    assert fake_driver.statements == [("SELECT * FROM t WHERE a = ?", (5,))]
    assert capsys.readouterr().out.splitlines()[0].split() == ["id", "identity"]


@pytest.mark.unit
def test_main_missing_config_file(capsys, tmp_path):
    assert cli.main(["--config", str(tmp_path / "nope.ini"), "tables"]) == 1
    assert "configuration" in capsys.readouterr().err


@pytest.mark.unit
def test_main_unknown_log_level_falls_back(capsys, monkeypatch):
    monkeypatch.setenv("QLDB_LOG_LEVEL", "verbose")
    seen = []
    monkeypatch.setattr(cli, "configure_logging", seen.append)

    assert cli.main(["encode", "1"]) == 0
    assert seen[0].level == "INFO"


@pytest.mark.unit
def test_main_logging_setup_error(capsys, monkeypatch):
    def broken(settings):
        raise ValueError("Unknown level: 'VERBOSE'")

    monkeypatch.setattr(cli, "configure_logging", broken)

    assert cli.main(["encode", "1"]) == 1
    assert "VERBOSE" in capsys.readouterr().err
