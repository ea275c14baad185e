"""Tests for the sheetsql command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sheetsql.cli.main import app

runner = CliRunner()


@pytest.fixture
def archive_path(tmp_path: Path, sales_archive: bytes) -> Path:
    path = tmp_path / "sales.zip"
    path.write_bytes(sales_archive)
    return path


@pytest.fixture
def ingested_dir(data_dir: Path, archive_path: Path) -> Path:
    result = runner.invoke(app, ["ingest", str(archive_path), "-d", str(data_dir)])
    assert result.exit_code == 0, result.output
    return data_dir


class TestIngestCommand:
    def test_ingest(self, data_dir: Path, archive_path: Path):
        result = runner.invoke(app, ["ingest", str(archive_path), "--data-dir", str(data_dir)])

        assert result.exit_code == 0, result.output
        assert "Created 3 table(s), 7 rows" in result.stdout
        assert (data_dir / "data.duckdb").exists()
        assert (data_dir / "metadata.db").exists()

    def test_row_cap(self, data_dir: Path, archive_path: Path):
        result = runner.invoke(
            app, ["ingest", str(archive_path), "-d", str(data_dir), "--max-rows", "2"]
        )

        assert result.exit_code == 0, result.output
        assert "truncated" in result.stdout

    def test_invalid_archive(self, data_dir: Path, tmp_path: Path):
        bogus = tmp_path / "bogus.zip"
        bogus.write_bytes(b"not a zip")

        result = runner.invoke(app, ["ingest", str(bogus), "-d", str(data_dir)])

        assert result.exit_code == 1
        assert "Ingestion failed" in result.stdout


class TestQueryCommand:
    def test_json_output(self, ingested_dir: Path):
        result = runner.invoke(
            app,
            [
                "query",
                'SELECT "Region" FROM regions ORDER BY 1',
                "-d",
                str(ingested_dir),
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["ok"] is True
        assert body["rowCount"] == 3
        assert body["rows"][0] == {"Region": "East"}

    def test_table_output(self, ingested_dir: Path):
        result = runner.invoke(
            app, ["query", "SELECT COUNT(*) AS n FROM sales_orders", "-d", str(ingested_dir)]
        )

        assert result.exit_code == 0, result.output
        assert "1 row(s)" in result.stdout

    def test_rejected(self, ingested_dir: Path):
        result = runner.invoke(
            app, ["query", "DELETE FROM regions", "-d", str(ingested_dir), "--json"]
        )

        assert result.exit_code == 1
        body = json.loads(result.stdout)
        assert body["ok"] is False
        assert "DELETE" in body["error"]

    def test_missing_database(self, tmp_path: Path):
        result = runner.invoke(app, ["query", "SELECT 1", "-d", str(tmp_path / "empty")])

        assert result.exit_code == 1
        assert "No database found" in result.stdout


class TestCatalogCommand:
    def test_json(self, ingested_dir: Path):
        result = runner.invoke(app, ["catalog", "-d", str(ingested_dir), "--json"])

        assert result.exit_code == 0, result.output
        entries = json.loads(result.stdout)
        assert [e["table_name"] for e in entries] == ["regions", "sales_orders", "sales_returns"]

    def test_table(self, ingested_dir: Path):
        result = runner.invoke(app, ["catalog", "-d", str(ingested_dir)])

        assert result.exit_code == 0, result.output
        assert "sales_orders" in result.stdout

        # One column name per line
        lines = result.stdout.splitlines()
        assert any("Region" in line and "Manager" not in line for line in lines)
        assert any("Manager" in line and "Region" not in line for line in lines)


class TestResetCommand:
    def test_force(self, ingested_dir: Path):
        result = runner.invoke(app, ["reset", "-d", str(ingested_dir), "-f"])

        assert result.exit_code == 0, result.output
        assert not (ingested_dir / "data.duckdb").exists()
        assert not (ingested_dir / "metadata.db").exists()

    def test_cancelled(self, ingested_dir: Path):
        result = runner.invoke(app, ["reset", "-d", str(ingested_dir)], input="n\n")

        assert result.exit_code == 0
        assert (ingested_dir / "data.duckdb").exists()

    def test_nothing_to_delete(self, data_dir: Path):
        result = runner.invoke(app, ["reset", "-d", str(data_dir), "-f"])

        assert result.exit_code == 0
        assert "No database files" in result.stdout
