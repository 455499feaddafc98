from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.config import AppSettings, ImporterSettings
from app.web_main import create_app
from tests.helpers.terraform_fixtures import load_terraform_fixture


@pytest.fixture
def client(app_settings: AppSettings) -> TestClient:
    return TestClient(create_app(app_settings))


def _nodes_by_id(payload: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return {node["id"]: node for node in payload["nodes"]}


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_layout_accepts_plain_terraform_text(client: TestClient) -> None:
    response = client.post(
        "/api/terraform/layout",
        content=load_terraform_fixture("three_tier.tf"),
        headers={"Content-Type": "text/plain"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["version"] == "1.0"
    assert payload["metadata"]["environment"] == "imported"
    assert payload["edges"] == []
    nodes = _nodes_by_id(payload)
    assert nodes["terraform-aws_vpc-main"]["type"] == "zone"
    web = nodes["terraform-aws_instance-web"]
    assert web["type"] == "infrastructure"
    assert web["parentId"] == "terraform-aws_subnet-public"
    assert web["data"]["isLocked"] is True
    assert web["selected"] is False
    assert "terraform-aws_route_table_association-public" not in nodes


def test_layout_accepts_json_body_with_name(client: TestClient) -> None:
    response = client.post(
        "/api/terraform/layout",
        json={"content": load_terraform_fixture("two_vpcs.tf"), "name": "Peered VPCs"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["metadata"]["name"] == "Peered VPCs"
    positions = [node["position"] for node in payload["nodes"]]
    assert positions == [{"x": 50.0, "y": 50.0}, {"x": 650.0, "y": 50.0}]


def test_layout_serializes_integers_wider_than_int64(client: TestClient) -> None:
    response = client.post(
        "/api/terraform/layout",
        content='resource "aws_instance" "web" {\n  volume_bytes = 99999999999999999999\n}\n',
        headers={"Content-Type": "text/plain"},
    )

    assert response.status_code == 200
    nodes = _nodes_by_id(response.json())
    assert "terraform-aws_instance-web" in nodes


def test_layout_rejects_empty_source(client: TestClient) -> None:
    response = client.post("/api/terraform/layout", content="   ", headers={"Content-Type": "text/plain"})

    assert response.status_code == 400


def test_layout_rejects_json_without_content(client: TestClient) -> None:
    response = client.post("/api/terraform/layout", json={"name": "nothing"})

    assert response.status_code == 422


def test_layout_honours_importer_settings(app_settings_factory: Callable[..., AppSettings]) -> None:
    settings = app_settings_factory(importer=ImporterSettings(lock_root_zones=False))
    client = TestClient(create_app(settings))

    response = client.post(
        "/api/terraform/layout",
        content=load_terraform_fixture("two_vpcs.tf"),
        headers={"Content-Type": "text/plain"},
    )

    assert all(node["data"]["isLocked"] is False for node in response.json()["nodes"])


def test_validate_accepts_exported_envelope(client: TestClient) -> None:
    exported = client.post(
        "/api/terraform/layout",
        content=load_terraform_fixture("three_tier.tf"),
        headers={"Content-Type": "text/plain"},
    ).json()

    response = client.post("/api/diagrams/validate", json=exported)

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "1.0", "nodes": 7, "edges": 0}


@pytest.mark.parametrize(
    "body",
    [
        {"nodes": [], "edges": []},
        {"version": "1.0", "edges": []},
        {"version": "1.0", "nodes": []},
    ],
)
def test_validate_rejects_missing_fields(client: TestClient, body: dict[str, Any]) -> None:
    response = client.post("/api/diagrams/validate", json=body)

    assert response.status_code == 422
    assert "missing required fields" in response.json()["detail"]


def test_relationship_map_endpoint(client: TestClient) -> None:
    response = client.post(
        "/api/relationship-map",
        json={
            "problems": [{"id": "p1", "title": "Pool exhaustion", "problem_number": "PRB1"}],
            "incidents": [{"id": "i1", "title": "Checkout errors", "problemId": "p1"}],
            "changes": [{"id": "c1", "title": "Raise pool", "problemId": "p1"}],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert [node["id"] for node in payload["nodes"]] == ["p1", "i1", "c1"]
    assert payload["nodes"][0]["data"]["label"] == "PRB1\nPool exhaustion"
    assert payload["summary"] == {"problems": 1, "related_incidents": 1, "related_changes": 1}
    assert {edge["id"] for edge in payload["edges"]} == {"ii1", "cc1"}


def test_relationship_map_rejects_invalid_records(client: TestClient) -> None:
    response = client.post("/api/relationship-map", json={"problems": [{"title": "no id"}]})

    assert response.status_code == 422
