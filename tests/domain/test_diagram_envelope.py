from __future__ import annotations

from datetime import UTC, datetime

import orjson
import pytest

from adapters.layout.hierarchical import HierarchicalLayoutEngine
from domain.models import DiagramMetadata, InvalidDiagramFormat
from domain.services.diagram_envelope import export_diagram, import_diagram
from domain.services.import_terraform import TerraformImporter
from tests.helpers.terraform_fixtures import load_terraform_fixture

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_export_fills_metadata_defaults_and_resets_editor_flags() -> None:
    payload = {
        "nodes": [{"id": "n1", "selected": True, "dragging": True}],
        "edges": [{"id": "e1", "source": "n1", "target": "n1", "selected": True}],
    }

    document = export_diagram(payload, now=FIXED_NOW)
    exported = document.to_dict()

    assert exported["version"] == "1.0"
    assert exported["metadata"] == {
        "name": "Infrastructure Diagram",
        "description": "Exported infrastructure diagram",
        "created": "2024-01-02T03:04:05+00:00",
        "lastModified": "2024-01-02T03:04:05+00:00",
        "environment": None,
    }
    assert exported["nodes"] == [{"id": "n1", "selected": False, "dragging": False}]
    assert exported["edges"][0]["selected"] is False


def test_export_preserves_created_timestamp_and_extra_metadata() -> None:
    metadata = {"name": "Prod", "created": "2023-05-01T00:00:00+00:00", "owner": "platform"}

    document = export_diagram({"nodes": [], "edges": []}, metadata, now=FIXED_NOW)

    assert document.metadata.name == "Prod"
    assert document.metadata.created == "2023-05-01T00:00:00+00:00"
    assert document.metadata.last_modified == "2024-01-02T03:04:05+00:00"
    assert document.to_dict()["metadata"]["owner"] == "platform"


def test_exported_layout_imports_back() -> None:
    result = TerraformImporter(HierarchicalLayoutEngine()).convert(load_terraform_fixture("three_tier.tf"))
    document = export_diagram(result, DiagramMetadata(name="three-tier"), now=FIXED_NOW)

    restored = import_diagram(orjson.dumps(document.to_dict()))

    assert restored.metadata.name == "three-tier"
    assert [node["id"] for node in restored.nodes] == [node.id for node in result.nodes()]
    assert restored.nodes[0]["data"]["terraformConfig"]["cidr_block"] == "10.0.0.0/16"


@pytest.mark.parametrize("missing", ["version", "nodes", "edges"])
def test_import_requires_top_level_fields(missing: str) -> None:
    payload = {"version": "1.0", "metadata": {}, "nodes": [], "edges": []}
    payload.pop(missing)

    with pytest.raises(InvalidDiagramFormat, match=missing):
        import_diagram(orjson.dumps(payload))


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '"diagram"', ""])
def test_import_rejects_non_object_payloads(text: str) -> None:
    with pytest.raises(InvalidDiagramFormat):
        import_diagram(text)


def test_import_rejects_wrongly_typed_fields() -> None:
    with pytest.raises(InvalidDiagramFormat):
        import_diagram('{"version": "1.0", "nodes": {}, "edges": []}')


def test_invalid_format_is_a_value_error() -> None:
    assert issubclass(InvalidDiagramFormat, ValueError)
