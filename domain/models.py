from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DIAGRAM_FORMAT_VERSION = "1.0"
NODE_ID_PREFIX = "terraform"


class InvalidDiagramFormat(ValueError):
    """Raised when a diagram envelope lacks one of its required top-level fields."""


class Reference(str):
    """A symbolic ``type.name.attr`` reference kept verbatim from the source text."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Reference({str.__repr__(self)})"


def resource_node_id(resource_type: str, name: str) -> str:
    return f"{NODE_ID_PREFIX}-{resource_type}-{name}"


class TerraformResource(BaseModel):
    type: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)

    @property
    def node_id(self) -> str:
        return resource_node_id(self.type, self.name)


@dataclass(frozen=True)
class RawResourceBlock:
    type: str
    name: str
    body: str
    offset: int


@dataclass(frozen=True)
class ResourceClass:
    semantic_type: str
    is_zone: bool
    hierarchy_level: int


@dataclass(frozen=True)
class ClassifiedNode:
    resource: TerraformResource
    semantic_type: str
    is_zone: bool
    hierarchy_level: int
    display_name: str

    @property
    def id(self) -> str:
        return self.resource.node_id

    @property
    def terraform_type(self) -> str:
        return self.resource.type


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class ZoneNode:
    id: str
    semantic_type: str
    size: Size
    position: Point = Point(0.0, 0.0)
    parent_id: Optional[str] = None
    locked: bool = False
    constrained_to_parent: bool = False
    expected_children: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    kind: Literal["zone"] = "zone"

    def to_dict(self) -> dict:
        payload: dict = {
            "id": self.id,
            "type": "zone",
            "position": {"x": self.position.x, "y": self.position.y},
            "style": {
                "width": self.size.width,
                "height": self.size.height,
                **self.metadata.get("style", {}),
            },
            "data": {
                **{key: value for key, value in self.metadata.items() if key != "style"},
                "type": self.semantic_type,
                "zoneType": self.semantic_type,
                "expectedChildren": self.expected_children,
                "isLocked": self.locked,
            },
        }
        if self.parent_id:
            payload["parentId"] = self.parent_id
        if self.constrained_to_parent:
            payload["extent"] = "parent"
        return payload


@dataclass(frozen=True)
class ComponentNode:
    id: str
    semantic_type: str
    position: Point = Point(0.0, 0.0)
    parent_id: Optional[str] = None
    locked: bool = False
    constrained_to_parent: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    kind: Literal["component"] = "component"

    def to_dict(self) -> dict:
        payload: dict = {
            "id": self.id,
            "type": "infrastructure",
            "position": {"x": self.position.x, "y": self.position.y},
            "data": {
                **self.metadata,
                "type": self.semantic_type,
                "isLocked": self.locked,
            },
        }
        if self.parent_id:
            payload["parentId"] = self.parent_id
        if self.constrained_to_parent:
            payload["extent"] = "parent"
        return payload


DiagramNode = Union[ZoneNode, ComponentNode]


@dataclass(frozen=True)
class LayoutResult:
    zones: List[ZoneNode]
    components: List[ComponentNode]
    edges: List[dict] = field(default_factory=list)

    def nodes(self) -> List[DiagramNode]:
        return [*self.zones, *self.components]

    def node_by_id(self, node_id: str) -> DiagramNode | None:
        for node in self.nodes():
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict:
        return {
            "nodes": [node.to_dict() for node in self.nodes()],
            "edges": [dict(edge) for edge in self.edges],
        }


@dataclass(frozen=True)
class ImportSummary:
    resources: int
    filtered: int
    zones: int
    assigned_components: int
    orphaned_components: int
    locked_nodes: int


class DiagramMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = "Infrastructure Diagram"
    description: Optional[str] = None
    created: str = ""
    last_modified: str = Field(default="", alias="lastModified")
    environment: Optional[str] = None


class DiagramDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str
    metadata: DiagramMetadata = Field(default_factory=DiagramMetadata)
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "metadata": self.metadata.model_dump(by_alias=True),
            "nodes": [dict(node) for node in self.nodes],
            "edges": [dict(edge) for edge in self.edges],
        }


class _ItilRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str = ""
    priority: Optional[str] = None
    status: Optional[str] = None


class Problem(_ItilRecord):
    problem_number: Optional[str] = None


class Incident(_ItilRecord):
    incident_number: Optional[str] = None
    problem_id: Optional[str] = Field(default=None, alias="problemId")


class Change(_ItilRecord):
    change_number: Optional[str] = None
    problem_id: Optional[str] = Field(default=None, alias="problemId")
    incident_id: Optional[str] = Field(default=None, alias="incidentId")


class ItilSnapshot(BaseModel):
    problems: List[Problem] = Field(default_factory=list)
    incidents: List[Incident] = Field(default_factory=list)
    changes: List[Change] = Field(default_factory=list)


@dataclass(frozen=True)
class MapNodePlacement:
    node_id: str
    kind: str  # "problem", "incident" or "change"
    label: str
    position: Point
    size: Size


@dataclass(frozen=True)
class MapEdge:
    edge_id: str
    source: str
    target: str
    kind: str


@dataclass(frozen=True)
class RelationshipMap:
    nodes: List[MapNodePlacement]
    edges: List[MapEdge]
    summary: Dict[str, int]

    def to_dict(self) -> dict:
        return {
            "nodes": [
                {
                    "id": node.node_id,
                    "type": node.kind,
                    "position": {"x": node.position.x, "y": node.position.y},
                    "data": {"label": node.label},
                    "style": {"width": node.size.width, "height": node.size.height},
                }
                for node in self.nodes
            ],
            "edges": [
                {
                    "id": edge.edge_id,
                    "source": edge.source,
                    "target": edge.target,
                    "type": edge.kind,
                }
                for edge in self.edges
            ],
            "summary": dict(self.summary),
        }
