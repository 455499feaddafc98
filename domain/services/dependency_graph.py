from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from domain.models import TerraformResource, resource_node_id

logger = logging.getLogger(__name__)

_REFERENCE_PATTERN = re.compile(r"([A-Za-z0-9_-]+)\.([A-Za-z0-9_-]+)\.[A-Za-z0-9_.-]+")


@dataclass
class DependencyGraph:
    """Id-indexed vertex arena with an ordered adjacency list per vertex."""

    vertices: list[str] = field(default_factory=list)
    adjacency: dict[str, list[str]] = field(default_factory=dict)

    def add_vertex(self, vertex: str) -> None:
        if vertex in self.adjacency:
            return
        self.vertices.append(vertex)
        self.adjacency[vertex] = []

    def add_edge(self, source: str, target: str) -> bool:
        self.add_vertex(source)
        self.add_vertex(target)
        targets = self.adjacency[source]
        if target in targets:
            return False
        targets.append(target)
        return True

    def targets(self, source: str) -> list[str]:
        return list(self.adjacency.get(source, []))

    def depends_on(self, source: str, target: str) -> bool:
        return target in self.adjacency.get(source, [])

    def edges(self) -> list[tuple[str, str]]:
        return [(source, target) for source in self.vertices for target in self.adjacency[source]]

    def has_path(self, start: str, goal: str) -> bool:
        stack = [start]
        visited: set[str] = set()
        while stack:
            node = stack.pop()
            if node == goal:
                return True
            if node in visited:
                continue
            visited.add(node)
            stack.extend(self.adjacency.get(node, []))
        return False

    def find_cycle(self) -> list[str] | None:
        return find_cycle_path(self.adjacency)


def build_dependency_graph(resources: Sequence[TerraformResource]) -> DependencyGraph:
    graph = DependencyGraph()
    known_ids = {resource.node_id for resource in resources}
    for resource in resources:
        graph.add_vertex(resource.node_id)

    dropped = 0
    for resource in resources:
        source_id = resource.node_id
        for referenced_id in find_resource_references(resource):
            if referenced_id == source_id:
                continue
            if referenced_id not in known_ids:
                dropped += 1
                continue
            graph.add_edge(source_id, referenced_id)

    if dropped:
        logger.debug("Dropped %d references to unknown resources", dropped)
    return graph


def find_resource_references(resource: TerraformResource) -> list[str]:
    serialized = json.dumps(resource.config, sort_keys=False, default=str)
    return [
        resource_node_id(match.group(1), match.group(2))
        for match in _REFERENCE_PATTERN.finditer(serialized)
    ]


def find_cycle_path(adjacency: Mapping[str, Iterable[str]]) -> list[str] | None:
    normalized = {node: list(targets) for node, targets in adjacency.items()}
    color: dict[str, int] = {node: 0 for node in normalized}
    stack: list[str] = []

    def dfs(node: str) -> list[str] | None:
        color[node] = 1
        stack.append(node)
        for neighbor in normalized.get(node, []):
            if color.get(neighbor, 0) == 0:
                found = dfs(neighbor)
                if found:
                    return found
            elif color.get(neighbor) == 1:
                idx = stack.index(neighbor)
                return stack[idx:] + [neighbor]
        stack.pop()
        color[node] = 2
        return None

    for node in normalized:
        if color[node] == 0:
            cycle = dfs(node)
            if cycle:
                return cycle
    return None
