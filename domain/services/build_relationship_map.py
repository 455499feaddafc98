from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from domain.models import (
    Change,
    Incident,
    MapEdge,
    MapNodePlacement,
    Point,
    Problem,
    RelationshipMap,
    Size,
)
from domain.ports.layout import BoxPlacer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RelationshipMapConfig:
    center: Point = Point(400.0, 300.0)
    problem_size: Size = Size(150.0, 80.0)
    incident_size: Size = Size(130.0, 70.0)
    change_size: Size = Size(120.0, 60.0)
    problem_min_radius: float = 180.0
    problem_radius_per_item: float = 30.0
    incident_distance: float = 140.0
    change_distance: float = 120.0
    standalone_min_radius: float = 300.0
    standalone_radius_per_item: float = 40.0
    incident_change_distance: float = 100.0
    problem_title_length: int = 35
    incident_title_length: int = 28
    change_title_length: int = 25


class BuildRelationshipMap:
    def __init__(
        self,
        placer_factory: Callable[[], BoxPlacer],
        config: RelationshipMapConfig | None = None,
    ) -> None:
        self.placer_factory = placer_factory
        self.config = config or RelationshipMapConfig()

    def build(
        self,
        problems: Sequence[Problem],
        incidents: Sequence[Incident],
        changes: Sequence[Change],
    ) -> RelationshipMap:
        placer = self.placer_factory()
        nodes: list[MapNodePlacement] = []
        problem_centers = self._problem_centers(problems)
        incident_centers: dict[str, Point] = {}

        for problem in problems:
            nodes.append(
                self._place(
                    placer,
                    node_id=problem.id,
                    kind="problem",
                    label=_label(
                        problem.problem_number or f"PRB-{problem.id[:8]}",
                        problem.title,
                        self.config.problem_title_length,
                    ),
                    center=problem_centers[problem.id],
                    size=self.config.problem_size,
                )
            )

        incidents_by_problem = _group(incidents, lambda incident: incident.problem_id)
        for problem_id, group in incidents_by_problem.items():
            anchor = problem_centers.get(problem_id)
            if anchor is None:
                logger.debug("Skipping %d incidents of unknown problem %s", len(group), problem_id)
                continue
            for index, incident in enumerate(group):
                center = _orbit(anchor, index, len(group), self.config.incident_distance)
                incident_centers[incident.id] = center
                nodes.append(self._place_incident(placer, incident, center))

        linked_incident_ids = {change.incident_id for change in changes if change.incident_id}
        standalone = [
            incident
            for incident in incidents
            if not incident.problem_id and incident.id in linked_incident_ids
        ]
        standalone_radius = max(
            self.config.standalone_min_radius,
            len(incidents) * self.config.standalone_radius_per_item,
        )
        for index, incident in enumerate(standalone):
            center = _orbit(self.config.center, index, len(standalone), standalone_radius)
            incident_centers[incident.id] = center
            nodes.append(self._place_incident(placer, incident, center))

        changes_by_problem = _group(changes, lambda change: change.problem_id)
        for problem_id, group in changes_by_problem.items():
            anchor = problem_centers.get(problem_id)
            if anchor is None:
                continue
            for index, change in enumerate(group):
                center = _orbit(
                    anchor,
                    index,
                    len(group),
                    self.config.change_distance,
                    offset=math.pi,
                )
                nodes.append(self._place_change(placer, change, center))

        changes_by_incident = _group(
            [change for change in changes if not change.problem_id],
            lambda change: change.incident_id,
        )
        for incident_id, group in changes_by_incident.items():
            anchor = incident_centers.get(incident_id)
            if anchor is None:
                continue
            for index, change in enumerate(group):
                center = _orbit(anchor, index, len(group), self.config.incident_change_distance)
                nodes.append(self._place_change(placer, change, center))

        placed_ids = {node.node_id for node in nodes}
        edges = _build_edges(incidents, changes, placed_ids)
        summary = {
            "problems": len(problems),
            "related_incidents": sum(
                1
                for incident in incidents
                if incident.problem_id or incident.id in linked_incident_ids
            ),
            "related_changes": sum(
                1 for change in changes if change.problem_id or change.incident_id
            ),
        }
        return RelationshipMap(nodes=nodes, edges=edges, summary=summary)

    def _problem_centers(self, problems: Sequence[Problem]) -> dict[str, Point]:
        radius = max(
            self.config.problem_min_radius,
            len(problems) * self.config.problem_radius_per_item,
        )
        return {
            problem.id: _orbit(self.config.center, index, len(problems), radius)
            for index, problem in enumerate(problems)
        }

    def _place_incident(self, placer: BoxPlacer, incident: Incident, center: Point) -> MapNodePlacement:
        return self._place(
            placer,
            node_id=incident.id,
            kind="incident",
            label=_label(
                incident.incident_number or f"INC-{incident.id[:8]}",
                incident.title,
                self.config.incident_title_length,
            ),
            center=center,
            size=self.config.incident_size,
        )

    def _place_change(self, placer: BoxPlacer, change: Change, center: Point) -> MapNodePlacement:
        return self._place(
            placer,
            node_id=change.id,
            kind="change",
            label=_label(
                change.change_number or f"CHG-{change.id[:8]}",
                change.title,
                self.config.change_title_length,
            ),
            center=center,
            size=self.config.change_size,
        )

    def _place(
        self,
        placer: BoxPlacer,
        *,
        node_id: str,
        kind: str,
        label: str,
        center: Point,
        size: Size,
    ) -> MapNodePlacement:
        # Boxes are positioned by their top-left corner.
        preferred = Point(center.x - size.width / 2, center.y - size.height / 2)
        position = placer.place(preferred, size)
        return MapNodePlacement(node_id=node_id, kind=kind, label=label, position=position, size=size)


def _orbit(anchor: Point, index: int, count: int, radius: float, offset: float = 0.0) -> Point:
    angle = (index / count) * 2 * math.pi + offset if count else offset
    return Point(anchor.x + math.cos(angle) * radius, anchor.y + math.sin(angle) * radius)


def _group(items: Iterable[T], key: Callable[[T], str | None]) -> dict[str, list[T]]:
    grouped: dict[str, list[T]] = defaultdict(list)
    for item in items:
        value = key(item)
        if value:
            grouped[value].append(item)
    return grouped


def _label(number: str, title: str, limit: int) -> str:
    short_title = title[:limit] + ("..." if len(title) > limit else "")
    return f"{number}\n{short_title}"


def _build_edges(
    incidents: Sequence[Incident],
    changes: Sequence[Change],
    placed_ids: set[str],
) -> list[MapEdge]:
    edges: list[MapEdge] = []
    for incident in incidents:
        if incident.problem_id and {incident.id, incident.problem_id} <= placed_ids:
            edges.append(
                MapEdge(
                    edge_id=f"i{incident.id}",
                    source=incident.id,
                    target=incident.problem_id,
                    kind="incident_problem",
                )
            )
    for change in changes:
        if change.problem_id:
            if {change.id, change.problem_id} <= placed_ids:
                edges.append(
                    MapEdge(
                        edge_id=f"c{change.id}",
                        source=change.problem_id,
                        target=change.id,
                        kind="problem_change",
                    )
                )
        elif change.incident_id and {change.id, change.incident_id} <= placed_ids:
            edges.append(
                MapEdge(
                    edge_id=f"ic{change.id}",
                    source=change.incident_id,
                    target=change.id,
                    kind="incident_change",
                )
            )
    return edges
