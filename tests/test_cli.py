"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from prodoc.cli.app import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("PRODOC_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("PRODOC_STORAGE_DIR", str(tmp_path / "storage"))
    for name in ("PRODOC_STORAGE_KEY", "PRODOC_EXPORT_DIR", "PRODOC_DEFAULT_TITLE", "PRODOC_AUTOSAVE"):
        monkeypatch.delenv(name, raising=False)


def import_text(tmp_path, name="notes.txt", content="Hello brave world"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return runner.invoke(app, ["import", str(path)])


class TestImport:
    def test_import_text_file(self, tmp_path):
        result = import_text(tmp_path)

        assert result.exit_code == 0
        assert "Imported 'notes'" in result.output
        assert (tmp_path / "storage" / "prodoc_document.json").exists()

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["import", str(tmp_path / "missing.txt")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_unsupported_file(self, tmp_path):
        result = import_text(tmp_path, name="picture.png", content="x")
        assert result.exit_code == 1


class TestInspection:
    def test_stats(self, tmp_path):
        import_text(tmp_path)

        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Document Statistics" in result.output
        assert "3" in result.output
        assert "1 min" in result.output

    def test_outline_without_headings(self, tmp_path):
        import_text(tmp_path)

        result = runner.invoke(app, ["outline"])

        assert result.exit_code == 0
        assert "Use heading formats to generate an outline" in result.output

    def test_outline_with_headings(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps({"title": "Guide", "content": "<h1>Start</h1><h2>Install</h2>"}))
        runner.invoke(app, ["import", str(path)])

        result = runner.invoke(app, ["outline"])

        assert "H1 Start" in result.output
        assert "H2 Install" in result.output

    def test_info(self, tmp_path):
        import_text(tmp_path)

        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Document Information" in result.output
        assert "notes" in result.output


class TestExport:
    def test_export_markdown(self, tmp_path):
        import_text(tmp_path)
        out = tmp_path / "out"

        result = runner.invoke(app, ["export", "MD", "--output", str(out)])

        assert result.exit_code == 0
        assert (out / "notes.md").read_text(encoding="utf-8") == "Hello brave world"

    def test_export_pdf_without_backend_fails(self, tmp_path):
        import_text(tmp_path)

        result = runner.invoke(app, ["export", "pdf", "-o", str(tmp_path / "out")])

        assert result.exit_code == 1

    def test_unknown_format_fails(self, tmp_path):
        result = runner.invoke(app, ["export", "rtf", "-o", str(tmp_path / "out")])
        assert result.exit_code == 1


class TestConfigCommand:
    def test_create_default(self, tmp_path):
        result = runner.invoke(app, ["config", "--create-default"])

        assert result.exit_code == 0
        assert (tmp_path / "config" / "config.yaml").exists()

    def test_show(self):
        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "ProDoc Configuration" in result.output

    def test_hints(self):
        result = runner.invoke(app, ["config"])
        assert "--show" in result.output
