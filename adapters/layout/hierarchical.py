from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from domain.models import (
    ClassifiedNode,
    ComponentNode,
    LayoutResult,
    Point,
    Size,
    ZoneNode,
)
from domain.ports.layout import LayoutEngine
from domain.resource_catalog import zone_style
from domain.services.node_locking import lock_nodes, split_nodes
from domain.services.zone_plan import ZonePlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    root_origin: Point = Point(50.0, 50.0)
    root_zones_per_row: int = 2
    root_row_height: float = 700.0
    root_gap_x: float = 100.0
    child_origin: Point = Point(30.0, 80.0)
    child_columns: int = 2
    child_gap: float = 50.0
    component_origin: Point = Point(20.0, 60.0)
    component_columns: int = 4
    component_spacing: Size = Size(110.0, 80.0)
    orphan_origin: Point = Point(30.0, 600.0)
    orphan_columns: int = 5
    orphan_spacing: Size = Size(130.0, 120.0)
    lock_root_zones: bool = True


class HierarchicalLayoutEngine(LayoutEngine):
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def build_layout(self, plan: ZonePlan) -> LayoutResult:
        positions: Dict[str, Point] = {}
        self._position_root_zones(plan, positions)

        assigned_counts = {
            zone_id: len(members) for zone_id, members in plan.assignment.by_zone.items()
        }
        zones = [
            self._build_zone(plan, zone, positions, assigned_counts.get(zone.id, 0))
            for zone in plan.zones
        ]
        components = self._place_assigned_components(plan) + self._place_orphans(plan)

        nodes = lock_nodes([*zones, *components], lock_root_zones=self.config.lock_root_zones)
        locked_zones, locked_components = split_nodes(nodes)
        logger.info(
            "Zone layout complete: %d zones, %d assigned components, %d orphaned components",
            len(locked_zones),
            plan.assignment.assigned_count,
            len(plan.assignment.orphans),
        )
        return LayoutResult(zones=locked_zones, components=locked_components, edges=[])

    def _position_root_zones(self, plan: ZonePlan, positions: Dict[str, Point]) -> None:
        root_ids = plan.hierarchy.roots(zone.id for zone in plan.zones)
        current_x = self.config.root_origin.x
        row = 0
        for index, zone_id in enumerate(root_ids):
            if index > 0 and index % self.config.root_zones_per_row == 0:
                row += 1
                current_x = self.config.root_origin.x
            positions[zone_id] = Point(
                current_x,
                self.config.root_origin.y + row * self.config.root_row_height,
            )
            self._position_child_zones(plan, zone_id, positions)
            current_x += self._zone_size(plan, zone_id).width + self.config.root_gap_x

    def _position_child_zones(
        self,
        plan: ZonePlan,
        parent_id: str,
        positions: Dict[str, Point],
    ) -> None:
        children = plan.hierarchy.children_of(parent_id)
        if not children:
            return
        cols = min(self.config.child_columns, len(children))
        for index, child_id in enumerate(children):
            row, col = divmod(index, cols)
            child_size = self._zone_size(plan, child_id)
            positions[child_id] = Point(
                self.config.child_origin.x + col * (child_size.width + self.config.child_gap),
                self.config.child_origin.y + row * (child_size.height + self.config.child_gap),
            )
            self._position_child_zones(plan, child_id, positions)

    def _zone_size(self, plan: ZonePlan, zone_id: str) -> Size:
        sizing = plan.sizing.get(zone_id)
        if sizing is not None:
            return sizing.size
        zone = plan.zone(zone_id)
        return zone_style(zone.semantic_type if zone else "").base_size

    def _build_zone(
        self,
        plan: ZonePlan,
        zone: ClassifiedNode,
        positions: Dict[str, Point],
        assigned_count: int,
    ) -> ZoneNode:
        sizing = plan.sizing.get(zone.id)
        parent_id = plan.hierarchy.parent_of(zone.id)
        style = zone_style(zone.semantic_type)
        metadata: Dict[str, Any] = {
            "name": zone.display_name,
            "terraformType": zone.terraform_type,
            "terraformConfig": zone.resource.config,
            "terraformResource": _resource_payload(zone),
            "hierarchy": zone.hierarchy_level,
            "nodeCount": assigned_count,
            "potentialComponents": sizing.potential_components if sizing else 0,
            "childZones": sizing.child_zones if sizing else 0,
            "style": {
                "backgroundColor": style.background_color,
                "border": f"2px solid {style.border_color}",
                "borderRadius": 8,
                "zIndex": 1,
            },
        }
        return ZoneNode(
            id=zone.id,
            semantic_type=zone.semantic_type,
            size=self._zone_size(plan, zone.id),
            position=positions.get(zone.id, Point(0.0, 0.0)),
            parent_id=parent_id,
            locked=parent_id is not None,
            constrained_to_parent=parent_id is not None,
            expected_children=sizing.content_count if sizing else 0,
            metadata=metadata,
        )

    def _place_assigned_components(self, plan: ZonePlan) -> List[ComponentNode]:
        placed: List[ComponentNode] = []
        for zone_id, members in plan.assignment.by_zone.items():
            zone = plan.zone(zone_id)
            zone_name = zone.display_name if zone else zone_id
            for index, component in enumerate(members):
                row, col = divmod(index, self.config.component_columns)
                position = Point(
                    self.config.component_origin.x + col * self.config.component_spacing.width,
                    self.config.component_origin.y + row * self.config.component_spacing.height,
                )
                placed.append(
                    ComponentNode(
                        id=component.id,
                        semantic_type=component.semantic_type,
                        position=position,
                        parent_id=zone_id,
                        locked=True,
                        constrained_to_parent=True,
                        metadata={
                            **_component_metadata(component),
                            "parentZoneName": zone_name,
                        },
                    )
                )
        return placed

    def _place_orphans(self, plan: ZonePlan) -> List[ComponentNode]:
        placed: List[ComponentNode] = []
        for index, component in enumerate(plan.assignment.orphans):
            row, col = divmod(index, self.config.orphan_columns)
            placed.append(
                ComponentNode(
                    id=component.id,
                    semantic_type=component.semantic_type,
                    position=Point(
                        self.config.orphan_origin.x + col * self.config.orphan_spacing.width,
                        self.config.orphan_origin.y + row * self.config.orphan_spacing.height,
                    ),
                    metadata=_component_metadata(component),
                )
            )
        return placed


def _resource_payload(node: ClassifiedNode) -> Dict[str, Any]:
    return {
        "type": node.resource.type,
        "name": node.resource.name,
        "config": node.resource.config,
    }


def _component_metadata(component: ClassifiedNode) -> Dict[str, Any]:
    return {
        "label": component.resource.name,
        "customTitle": component.display_name,
        "terraformType": component.terraform_type,
        "terraformConfig": component.resource.config,
        "terraformResource": _resource_payload(component),
        "environment": "imported",
        "status": "running",
    }
