from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import ClassifiedNode, TerraformResource
from domain.resource_catalog import classify_resource, extract_display_name
from domain.services.dependency_graph import DependencyGraph, build_dependency_graph
from domain.services.zone_relationships import (
    ZoneHierarchy,
    order_zones,
    resolve_zone_relationships,
)
from domain.services.zone_scoring import ZoneAssignment, assign_components
from domain.services.zone_sizing import SizingConfig, ZoneSizing, size_zones

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZonePlan:
    zones: list[ClassifiedNode]
    components: list[ClassifiedNode]
    graph: DependencyGraph
    hierarchy: ZoneHierarchy
    sizing: dict[str, ZoneSizing]
    assignment: ZoneAssignment

    def zone(self, zone_id: str) -> ClassifiedNode | None:
        for zone in self.zones:
            if zone.id == zone_id:
                return zone
        return None


def classify_resources(resources: Sequence[TerraformResource]) -> list[ClassifiedNode]:
    classified: list[ClassifiedNode] = []
    for resource in resources:
        resource_class = classify_resource(resource.type)
        classified.append(
            ClassifiedNode(
                resource=resource,
                semantic_type=resource_class.semantic_type,
                is_zone=resource_class.is_zone,
                hierarchy_level=resource_class.hierarchy_level,
                display_name=extract_display_name(resource),
            )
        )
    return classified


def build_zone_plan(
    resources: Sequence[TerraformResource],
    sizing_config: SizingConfig | None = None,
) -> ZonePlan:
    graph = build_dependency_graph(resources)
    cycle = graph.find_cycle()
    if cycle:
        logger.info("Dependency cycle between resources: %s", " -> ".join(cycle))
    classified = classify_resources(resources)
    zones = order_zones(node for node in classified if node.is_zone)
    components = [node for node in classified if not node.is_zone]

    hierarchy = resolve_zone_relationships(zones, graph)
    sizing = size_zones(zones, components, graph, sizing_config)
    assignment = assign_components(components, zones, graph)
    return ZonePlan(
        zones=zones,
        components=components,
        graph=graph,
        hierarchy=hierarchy,
        sizing=sizing,
        assignment=assignment,
    )
