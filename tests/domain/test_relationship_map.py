from __future__ import annotations

import pytest

from adapters.layout.spiral import SpiralPlacer
from domain.models import Change, Incident, Point, Problem
from domain.services.build_relationship_map import BuildRelationshipMap

LONG_TITLE = "Database connection pool exhausted during the nightly batch window"


@pytest.fixture
def service() -> BuildRelationshipMap:
    return BuildRelationshipMap(SpiralPlacer)


def _records() -> tuple[list[Problem], list[Incident], list[Change]]:
    problems = [
        Problem(id="p1", problem_number="PRB0001", title=LONG_TITLE),
        Problem(id="p2-0123456789", title="Slow DNS"),
    ]
    incidents = [
        Incident.model_validate({"id": "i1", "incident_number": "INC0001", "title": "Checkout 500s", "problemId": "p1"}),
        Incident.model_validate({"id": "i2-abcdefghij", "title": "VPN flapping"}),
        Incident.model_validate({"id": "i3", "title": "Unrelated"}),
    ]
    changes = [
        Change.model_validate({"id": "c1", "change_number": "CHG0001", "title": "Raise pool size", "problemId": "p1"}),
        Change.model_validate({"id": "c2", "title": "Replace VPN gateway", "incidentId": "i2-abcdefghij"}),
        Change.model_validate({"id": "c3", "title": "Routine patching"}),
    ]
    return problems, incidents, changes


def test_problems_sit_on_a_ring_around_the_centre(service: BuildRelationshipMap) -> None:
    problems, incidents, changes = _records()

    result = service.build(problems, incidents, changes)

    first, second = result.nodes[0], result.nodes[1]
    assert first.position == Point(505, 260)
    assert second.position.x == pytest.approx(145)
    assert second.position.y == pytest.approx(260)


def test_only_related_records_are_placed(service: BuildRelationshipMap) -> None:
    result = service.build(*_records())

    kinds = {node.node_id: node.kind for node in result.nodes}

    assert kinds == {
        "p1": "problem",
        "p2-0123456789": "problem",
        "i1": "incident",
        "i2-abcdefghij": "incident",
        "c1": "change",
        "c2": "change",
    }
    assert result.summary == {"problems": 2, "related_incidents": 2, "related_changes": 2}


def test_labels_use_numbers_or_short_ids(service: BuildRelationshipMap) -> None:
    result = service.build(*_records())

    labels = {node.node_id: node.label for node in result.nodes}

    assert labels["p1"] == "PRB0001\n" + LONG_TITLE[:35] + "..."
    assert labels["p2-0123456789"] == "PRB-p2-01234\nSlow DNS"
    assert labels["i1"] == "INC0001\nCheckout 500s"
    assert labels["c2"] == "CHG-c2\nReplace VPN gateway"


def test_edges_link_incidents_problems_and_changes(service: BuildRelationshipMap) -> None:
    result = service.build(*_records())

    edges = {(edge.edge_id, edge.source, edge.target, edge.kind) for edge in result.edges}

    assert edges == {
        ("ii1", "i1", "p1", "incident_problem"),
        ("cc1", "p1", "c1", "problem_change"),
        ("icc2", "i2-abcdefghij", "c2", "incident_change"),
    }


def test_nodes_never_share_a_position(service: BuildRelationshipMap) -> None:
    problems = [Problem(id=f"p{index}", title="Problem") for index in range(4)]
    incidents = [
        Incident.model_validate({"id": f"i{index}", "title": "Incident", "problemId": f"p{index % 4}"})
        for index in range(8)
    ]
    changes = [
        Change.model_validate({"id": f"c{index}", "title": "Change", "problemId": f"p{index % 4}"})
        for index in range(4)
    ]

    result = service.build(problems, incidents, changes)

    positions = [(node.position.x, node.position.y) for node in result.nodes]
    assert len(result.nodes) == 16
    assert len(set(positions)) == len(positions)


def test_records_pointing_at_unknown_parents_are_skipped(service: BuildRelationshipMap) -> None:
    incidents = [Incident.model_validate({"id": "i1", "title": "Lost", "problemId": "missing"})]
    changes = [Change.model_validate({"id": "c1", "title": "Lost", "problemId": "missing"})]

    result = service.build([], incidents, changes)

    assert result.nodes == []
    assert result.edges == []


def test_each_build_starts_with_a_fresh_placer(service: BuildRelationshipMap) -> None:
    problems = [Problem(id="p1", title="Only")]

    first = service.build(problems, [], [])
    second = service.build(problems, [], [])

    assert first.nodes[0].position == second.nodes[0].position


def test_to_dict_shape(service: BuildRelationshipMap) -> None:
    payload = service.build(*_records()).to_dict()

    node = payload["nodes"][0]
    assert node["id"] == "p1"
    assert node["type"] == "problem"
    assert node["style"] == {"width": 150, "height": 80}
    assert set(payload["summary"]) == {"problems", "related_incidents", "related_changes"}
