from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from domain.models import ClassifiedNode
from domain.services.dependency_graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass
class ZoneHierarchy:
    """Parent/child zone containment. Each zone has at most one parent."""

    children: dict[str, list[str]] = field(default_factory=dict)
    parents: dict[str, str] = field(default_factory=dict)

    def add(self, parent_id: str, child_id: str) -> bool:
        if parent_id == child_id:
            return False
        existing = self.parents.get(child_id)
        if existing is not None:
            if existing != parent_id:
                logger.debug(
                    "Ignoring parent claim %s -> %s, already contained by %s",
                    parent_id,
                    child_id,
                    existing,
                )
            return False
        if self._is_descendant(parent_id, child_id):
            logger.warning("Refusing zone edge %s -> %s: it would close a cycle", parent_id, child_id)
            return False
        self.children.setdefault(parent_id, []).append(child_id)
        self.parents[child_id] = parent_id
        return True

    def children_of(self, zone_id: str) -> list[str]:
        return list(self.children.get(zone_id, []))

    def parent_of(self, zone_id: str) -> str | None:
        return self.parents.get(zone_id)

    def is_root(self, zone_id: str) -> bool:
        return zone_id not in self.parents

    def roots(self, zone_ids: Iterable[str]) -> list[str]:
        return [zone_id for zone_id in zone_ids if self.is_root(zone_id)]

    def _is_descendant(self, candidate: str, ancestor: str) -> bool:
        stack = list(self.children.get(ancestor, []))
        while stack:
            node = stack.pop()
            if node == candidate:
                return True
            stack.extend(self.children.get(node, []))
        return False


def order_zones(zones: Iterable[ClassifiedNode]) -> list[ClassifiedNode]:
    return sorted(zones, key=lambda zone: zone.hierarchy_level)


def is_zone_parent(
    parent: ClassifiedNode,
    child: ClassifiedNode,
    graph: DependencyGraph,
) -> bool:
    if parent.hierarchy_level >= child.hierarchy_level:
        return False

    if graph.depends_on(child.id, parent.id):
        return True

    parent_type = parent.terraform_type
    child_type = child.terraform_type
    if parent_type == "aws_vpc" and child_type == "aws_subnet":
        vpc_ref = child.resource.config.get("vpc_id")
        if isinstance(vpc_ref, str) and parent.resource.name in vpc_ref:
            return True

    # Security groups are drawn inside subnets regardless of references.
    if parent_type == "aws_subnet" and child_type == "aws_security_group":
        return True

    return False


def resolve_zone_relationships(
    zones: Sequence[ClassifiedNode],
    graph: DependencyGraph,
) -> ZoneHierarchy:
    hierarchy = ZoneHierarchy()
    ordered = order_zones(zones)
    for parent in ordered:
        for child in ordered:
            if parent.id == child.id:
                continue
            if is_zone_parent(parent, child, graph):
                hierarchy.add(parent.id, child.id)

    logger.debug(
        "Resolved %d zone containment edges, %d root zones",
        len(hierarchy.parents),
        len(hierarchy.roots(zone.id for zone in ordered)),
    )
    return hierarchy
