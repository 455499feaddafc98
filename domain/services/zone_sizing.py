from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import ClassifiedNode, Size
from domain.resource_catalog import zone_base_size
from domain.services.dependency_graph import DependencyGraph
from domain.services.zone_relationships import is_zone_parent
from domain.services.zone_scoring import score_component_zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SizingConfig:
    items_per_row: int = 4
    max_width: float = 800.0
    max_height: float = 600.0


@dataclass(frozen=True)
class ZoneSizing:
    zone_id: str
    size: Size
    potential_components: int
    child_zones: int

    @property
    def content_count(self) -> int:
        return self.potential_components + self.child_zones


def compute_zone_size(
    semantic_type: str,
    content_count: int,
    config: SizingConfig | None = None,
) -> Size:
    config = config or SizingConfig()
    base = zone_base_size(semantic_type)
    multiplier = max(1, math.ceil(content_count / config.items_per_row))
    return Size(
        min(base.width * multiplier, config.max_width),
        min(base.height * multiplier, config.max_height),
    )


def size_zones(
    zones: Sequence[ClassifiedNode],
    components: Sequence[ClassifiedNode],
    graph: DependencyGraph,
    config: SizingConfig | None = None,
) -> dict[str, ZoneSizing]:
    sizing: dict[str, ZoneSizing] = {}
    for zone in zones:
        potential = sum(
            1 for component in components if score_component_zone(component, zone, graph) > 0
        )
        child_zones = sum(
            1
            for other in zones
            if other.id != zone.id and is_zone_parent(zone, other, graph)
        )
        size = compute_zone_size(zone.semantic_type, potential + child_zones, config)
        sizing[zone.id] = ZoneSizing(
            zone_id=zone.id,
            size=size,
            potential_components=potential,
            child_zones=child_zones,
        )
        logger.debug(
            "%s: %d components + %d child zones -> %sx%s",
            zone.id,
            potential,
            child_zones,
            size.width,
            size.height,
        )
    return sizing
