from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from domain.models import ComponentNode, DiagramNode, ZoneNode

logger = logging.getLogger(__name__)


def should_lock(node: DiagramNode, *, lock_root_zones: bool = True) -> bool:
    if node.parent_id:
        return True
    return isinstance(node, ZoneNode) and lock_root_zones


def lock_nodes(
    nodes: Sequence[DiagramNode],
    *,
    lock_root_zones: bool = True,
) -> list[DiagramNode]:
    """Mark nested nodes (and zones) as locked to their parent in the editor."""
    locked: list[DiagramNode] = []
    newly_locked = 0
    for node in nodes:
        if node.locked or not should_lock(node, lock_root_zones=lock_root_zones):
            locked.append(node)
            continue
        newly_locked += 1
        locked.append(replace(node, locked=True))
    logger.debug("Locked %d nodes to their parent zones", newly_locked)
    return locked


def split_nodes(nodes: Sequence[DiagramNode]) -> tuple[list[ZoneNode], list[ComponentNode]]:
    zones = [node for node in nodes if isinstance(node, ZoneNode)]
    components = [node for node in nodes if isinstance(node, ComponentNode)]
    return zones, components
