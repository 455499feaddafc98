from __future__ import annotations

import shutil
from pathlib import Path

import orjson
from typer.testing import CliRunner

from app.cli import app
from tests.helpers.terraform_fixtures import terraform_fixture_path

runner = CliRunner()


def _copy_fixtures(target: Path) -> Path:
    target.mkdir(parents=True, exist_ok=True)
    for name in ("three_tier.tf", "two_vpcs.tf"):
        shutil.copy(terraform_fixture_path(name), target / name)
    return target


def test_import_writes_one_diagram_per_source(tmp_path: Path) -> None:
    source_dir = _copy_fixtures(tmp_path / "tf")
    output_dir = tmp_path / "out"

    result = runner.invoke(app, ["import", str(source_dir), "--output-dir", str(output_dir)])

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in output_dir.glob("*.json")) == [
        "three_tier.diagram.json",
        "two_vpcs.diagram.json",
    ]
    payload = orjson.loads((output_dir / "two_vpcs.diagram.json").read_bytes())
    assert payload["version"] == "1.0"
    assert payload["metadata"]["name"] == "two_vpcs"
    assert len(payload["nodes"]) == 2


def test_import_single_file_with_custom_name(tmp_path: Path) -> None:
    output_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "import",
            str(terraform_fixture_path("three_tier.tf")),
            "--output-dir",
            str(output_dir),
            "--name",
            "Production",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = orjson.loads((output_dir / "three_tier.diagram.json").read_bytes())
    assert payload["metadata"]["name"] == "Production"


def test_import_reports_empty_directory(tmp_path: Path) -> None:
    result = runner.invoke(app, ["import", str(tmp_path), "--output-dir", str(tmp_path / "out")])

    assert result.exit_code == 0
    assert "No Terraform files found" in result.output


def test_import_fails_for_missing_source(tmp_path: Path) -> None:
    result = runner.invoke(app, ["import", str(tmp_path / "absent")])

    assert result.exit_code == 1


def test_validate_accepts_imported_diagram(tmp_path: Path) -> None:
    output_dir = tmp_path / "out"
    runner.invoke(
        app,
        ["import", str(terraform_fixture_path("two_vpcs.tf")), "--output-dir", str(output_dir)],
    )

    result = runner.invoke(app, ["validate", str(output_dir / "two_vpcs.diagram.json")])

    assert result.exit_code == 0, result.output
    assert "Valid diagram" in result.output


def test_validate_rejects_envelope_without_nodes(tmp_path: Path) -> None:
    target = tmp_path / "broken.json"
    target.write_bytes(orjson.dumps({"version": "1.0", "edges": []}))

    result = runner.invoke(app, ["validate", str(target)])

    assert result.exit_code == 1
    assert "Validation failed" in result.output


def test_validate_reports_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["validate", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_relationship_map_writes_output(tmp_path: Path) -> None:
    source = tmp_path / "itil.json"
    source.write_bytes(
        orjson.dumps(
            {
                "problems": [{"id": "p1", "title": "Pool exhaustion"}],
                "incidents": [{"id": "i1", "title": "Errors", "problemId": "p1"}],
                "changes": [],
            }
        )
    )
    output = tmp_path / "map.json"

    result = runner.invoke(app, ["relationship-map", str(source), "--output", str(output)])

    assert result.exit_code == 0, result.output
    payload = orjson.loads(output.read_bytes())
    assert [node["id"] for node in payload["nodes"]] == ["p1", "i1"]
    assert payload["summary"]["related_incidents"] == 1


def test_relationship_map_rejects_invalid_input(tmp_path: Path) -> None:
    source = tmp_path / "itil.json"
    source.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["relationship-map", str(source)])

    assert result.exit_code == 1
    assert "Invalid input" in result.output


def test_missing_config_file_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.yaml"), "validate", "x.json"])

    assert result.exit_code == 1
