from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import orjson
from pydantic import ValidationError

from domain.models import (
    DIAGRAM_FORMAT_VERSION,
    DiagramDocument,
    DiagramMetadata,
    InvalidDiagramFormat,
    LayoutResult,
)

DEFAULT_DESCRIPTION = "Exported infrastructure diagram"
REQUIRED_FIELDS = ("version", "nodes", "edges")


def export_diagram(
    content: LayoutResult | Mapping[str, Sequence[Mapping[str, Any]]],
    metadata: DiagramMetadata | Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> DiagramDocument:
    """Wrap laid-out nodes and edges into a versioned, timestamped document.

    Editor-only flags (``selected``, ``dragging``) are reset so a reopened
    diagram starts with nothing selected.
    """
    payload = content.to_dict() if isinstance(content, LayoutResult) else content
    timestamp = (now or datetime.now(UTC)).isoformat()

    if isinstance(metadata, DiagramMetadata):
        meta = metadata.model_copy()
    else:
        meta = DiagramMetadata.model_validate(dict(metadata or {}))
    if not meta.description:
        meta.description = DEFAULT_DESCRIPTION
    if not meta.created:
        meta.created = timestamp
    meta.last_modified = timestamp

    nodes = [{**node, "selected": False, "dragging": False} for node in payload.get("nodes", [])]
    edges = [{**edge, "selected": False} for edge in payload.get("edges", [])]
    return DiagramDocument(
        version=DIAGRAM_FORMAT_VERSION,
        metadata=meta,
        nodes=nodes,
        edges=edges,
    )


def import_diagram(text: str | bytes) -> DiagramDocument:
    try:
        payload = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise InvalidDiagramFormat(f"Diagram is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidDiagramFormat("Diagram must be a JSON object")
    missing = [name for name in REQUIRED_FIELDS if name not in payload]
    if missing:
        raise InvalidDiagramFormat(f"Diagram is missing required fields: {', '.join(missing)}")
    try:
        return DiagramDocument.model_validate(payload)
    except ValidationError as exc:
        raise InvalidDiagramFormat(str(exc)) from exc
