"""Integration tests for the validate CLI command.

These tests verify the validate command works correctly end-to-end,
including:
- Valid requests pass validation
- Invalid requests produce errors
- Advisories are displayed
- Exit codes are correct
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from coilnest.cli.main import app

pytestmark = pytest.mark.integration


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


def _part(**overrides) -> dict:
    part = {
        "id": "A",
        "width": 1000,
        "length": 2500,
        "quantity": 2,
        "thickness": 20,
        "grade": "SS400",
    }
    part.update(overrides)
    return part


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_request(self, runner: CliRunner, tmp_path: Path) -> None:
        request = _write(tmp_path / "request.json", {"parts": [_part()]})
        result = runner.invoke(app, ["validate", str(request)])

        assert result.exit_code == 0, result.output
        assert "Validation passed. Request is valid." in result.output

    def test_advisories_exit_with_two(self, runner: CliRunner, tmp_path: Path) -> None:
        request = _write(tmp_path / "request.json", {"parts": [_part(thickness=2)]})
        result = runner.invoke(app, ["validate", str(request)])

        assert result.exit_code == 2
        assert "Warnings:" in result.output
        assert "Suggestion:" in result.output
        assert "Validation passed with 1 warning(s)" in result.output

    def test_invalid_part_values(self, runner: CliRunner, tmp_path: Path) -> None:
        request = _write(tmp_path / "request.json", {"parts": [_part(width=-5)]})
        result = runner.invoke(app, ["validate", str(request)])

        assert result.exit_code == 1
        assert "parts[0].width" in result.output
        assert "Validation failed" in result.output

    def test_file_not_found(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_json_syntax(self, runner: CliRunner, tmp_path: Path) -> None:
        request = _write(tmp_path / "request.json", '{"parts": [}')
        result = runner.invoke(app, ["validate", str(request)])

        assert result.exit_code == 1
        assert "Invalid JSON syntax" in result.output
        assert "Validation failed" in result.output

    def test_unknown_field_rejected(self, runner: CliRunner, tmp_path: Path) -> None:
        request = _write(tmp_path / "request.json", {"parts": [], "colour": "blue"})
        result = runner.invoke(app, ["validate", str(request)])

        assert result.exit_code == 1
        assert "colour" in result.output

    def test_csv_parts(self, runner: CliRunner, tmp_path: Path) -> None:
        request = _write(tmp_path / "request.json", {"parts": []})
        parts = _write(tmp_path / "parts.csv", "id,width,length\nA,1,2\n")
        result = runner.invoke(app, ["validate", str(request), "--parts", str(parts)])

        assert result.exit_code == 1
        assert "Invalid part list" in result.output
