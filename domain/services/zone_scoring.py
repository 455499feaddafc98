from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from domain.models import ClassifiedNode
from domain.services.dependency_graph import DependencyGraph

logger = logging.getLogger(__name__)

DIRECT_DEPENDENCY_SCORE = 100
SECURITY_GROUP_PENALTY = 20


def _is_instance(terraform_type: str) -> bool:
    return terraform_type == "aws_instance"


def _is_database_like(terraform_type: str) -> bool:
    return "rds" in terraform_type or "db" in terraform_type


@dataclass(frozen=True)
class PairBonus:
    matches_component: Callable[[str], bool]
    zone_type: str
    bonus: int


# Only applied when both the component and the zone are AWS resources.
AWS_PAIR_BONUSES: tuple[PairBonus, ...] = (
    PairBonus(_is_instance, "aws_vpc", 30),
    PairBonus(_is_instance, "aws_subnet", 50),
    PairBonus(_is_database_like, "aws_vpc", 40),
    PairBonus(_is_database_like, "aws_subnet", 60),
)


@dataclass
class ZoneAssignment:
    by_zone: dict[str, list[ClassifiedNode]] = field(default_factory=dict)
    orphans: list[ClassifiedNode] = field(default_factory=list)
    zone_of: dict[str, str] = field(default_factory=dict)

    @property
    def assigned_count(self) -> int:
        return len(self.zone_of)


def score_component_zone(
    component: ClassifiedNode,
    zone: ClassifiedNode,
    graph: DependencyGraph,
) -> int:
    score = 0
    if graph.depends_on(component.id, zone.id):
        score += DIRECT_DEPENDENCY_SCORE

    component_type = component.terraform_type
    zone_type = zone.terraform_type
    if component_type.startswith("aws_") and zone_type.startswith("aws_"):
        for rule in AWS_PAIR_BONUSES:
            if zone_type == rule.zone_type and rule.matches_component(component_type):
                score += rule.bonus

    if "security_group" in zone_type:
        score -= SECURITY_GROUP_PENALTY
    return score


def best_zone_for(
    component: ClassifiedNode,
    zones: Sequence[ClassifiedNode],
    graph: DependencyGraph,
) -> tuple[ClassifiedNode | None, int]:
    best: ClassifiedNode | None = None
    best_score = 0
    for zone in zones:
        score = score_component_zone(component, zone, graph)
        # Strict comparison keeps the first zone on ties.
        if best is None or score > best_score:
            best, best_score = zone, score
    if best is None or best_score <= 0:
        return None, best_score
    return best, best_score


def assign_components(
    components: Sequence[ClassifiedNode],
    zones: Sequence[ClassifiedNode],
    graph: DependencyGraph,
) -> ZoneAssignment:
    """Assign each component to its highest-scoring zone; zones are taken in the given order."""
    assignment = ZoneAssignment()
    for component in components:
        zone, score = best_zone_for(component, zones, graph)
        if zone is None:
            assignment.orphans.append(component)
            logger.debug("Orphaned %s (best score %d)", component.id, score)
            continue
        assignment.by_zone.setdefault(zone.id, []).append(component)
        assignment.zone_of[component.id] = zone.id
        logger.debug("Assigned %s -> %s (score %d)", component.id, zone.id, score)
    return assignment
