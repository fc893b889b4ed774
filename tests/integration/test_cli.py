"""End-to-end tests for the command line interface."""

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cutpath import __version__
from cutpath.cli.app import app
from cutpath.domain import Arc, Circle, Line, Point2D, Shape

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_handlers():
    """Drop handlers that configure_logging attaches to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def drawing_path(tmp_path: Path) -> Path:
    """Rounded-corner bracket outline with a bolt hole, split into shapes."""
    shapes = [
        Shape(id="bottom", geometry=Line(Point2D(10, 0), Point2D(90, 0))),
        Shape(id="corner-br", geometry=Arc(Point2D(90, 10), 10, -1.5707963267948966, 0.0)),
        Shape(id="right", geometry=Line(Point2D(100, 10), Point2D(100, 50))),
        Shape(id="top", geometry=Line(Point2D(100, 50), Point2D(0, 50))),
        Shape(id="left", geometry=Line(Point2D(0, 50), Point2D(0, 10))),
        Shape(id="corner-bl", geometry=Arc(Point2D(10, 10), 10, 3.141592653589793, 4.71238898038469)),
        Shape(id="bolt", geometry=Circle(Point2D(50, 25), 6)),
    ]
    path = tmp_path / "bracket.json"
    path.write_text(json.dumps({"shapes": [s.to_dict() for s in shapes]}), encoding="utf-8")
    return path


def _invoke(*args: str):
    return runner.invoke(app, list(args))


class TestPlanCommand:
    """Tests for the plan command."""

    def test_writes_plan(self, drawing_path: Path, tmp_path: Path):
        output_path = tmp_path / "out.json"
        log_path = tmp_path / "run.log"

        result = _invoke(
            str(drawing_path),
            "--lead-in", "arc",
            "--lead-in-length", "5",
            "--lead-out", "line",
            "--lead-out-length", "3",
            "-o", str(output_path),
            "--log-file", str(log_path),
            "-j", "1",
        )

        assert result.exit_code == 0, result.output
        plan = json.loads(output_path.read_text(encoding="utf-8"))
        assert len(plan["chains"]) == 2
        assert plan["parts"][0]["shell"]["chain_id"] == "chain-1"
        assert plan["parts"][0]["holes"][0]["chain_id"] == "chain-2"
        shell_lead = plan["leads"]["chain-1"]
        assert shell_lead["lead_in"]["type"] == "arc"
        assert shell_lead["lead_out"]["type"] == "line"
        assert plan["stats"]["leads"] == 4
        assert log_path.exists()

    def test_default_output_path(self, drawing_path: Path, tmp_path: Path):
        result = _invoke(str(drawing_path), "-q", "--log-file", str(tmp_path / "run.log"))

        assert result.exit_code == 0, result.output
        assert (tmp_path / "bracket-plan.json").exists()

    def test_dry_run(self, drawing_path: Path, tmp_path: Path):
        result = _invoke(str(drawing_path), "--dry-run", "--log-file", str(tmp_path / "run.log"))

        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert not (tmp_path / "bracket-plan.json").exists()

    def test_verbose_lists_parts(self, drawing_path: Path, tmp_path: Path):
        result = _invoke(
            str(drawing_path), "-v", "--dry-run", "--log-file", str(tmp_path / "run.log")
        )

        assert result.exit_code == 0, result.output
        assert "part-1" in result.output

    def test_empty_document(self, tmp_path: Path):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")

        result = _invoke(str(path), "--log-file", str(tmp_path / "run.log"))

        assert result.exit_code == 0
        assert "No shapes found" in result.output
        assert not (tmp_path / "empty-plan.json").exists()


class TestPlanCommandErrors:
    """Tests for error exits."""

    def test_missing_input(self, tmp_path: Path):
        result = _invoke(str(tmp_path / "nope.json"))
        assert result.exit_code == 1
        assert "Input file not found" in result.output

    def test_invalid_lead_type(self, drawing_path: Path):
        result = _invoke(str(drawing_path), "--lead-in", "spiral")
        assert result.exit_code == 1
        assert "Invalid lead-in type" in result.output

    def test_invalid_cut_direction(self, drawing_path: Path):
        result = _invoke(str(drawing_path), "--cut-direction", "sideways")
        assert result.exit_code == 1
        assert "Invalid cut direction" in result.output

    def test_verbose_and_quiet(self, drawing_path: Path):
        result = _invoke(str(drawing_path), "-v", "-q")
        assert result.exit_code == 1

    def test_malformed_document(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"id": "x", "type": "hatch", "geometry": {}}]), encoding="utf-8")

        result = _invoke(str(path), "--log-file", str(tmp_path / "run.log"))

        assert result.exit_code == 1
        assert "Could not load shapes" in result.output

    def test_invalid_tolerance(self, drawing_path: Path):
        result = _invoke(str(drawing_path), "--tolerance", "0")
        assert result.exit_code == 1
        assert "Invalid settings" in result.output


def test_version():
    result = _invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output
