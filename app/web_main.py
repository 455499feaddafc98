from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import orjson
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ValidationError

from app.config import AppSettings, load_settings
from app.wiring import build_importer, build_relationship_map_service
from domain.models import DiagramMetadata, InvalidDiagramFormat, ItilSnapshot
from domain.services.build_relationship_map import BuildRelationshipMap
from domain.services.diagram_envelope import export_diagram, import_diagram
from domain.services.import_terraform import TerraformImporter

logger = logging.getLogger(__name__)


class TerraformLayoutRequest(BaseModel):
    content: str
    name: str | None = None


@dataclass(frozen=True)
class DiagramContext:
    settings: AppSettings
    importer: TerraformImporter
    relationship_map: BuildRelationshipMap


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.title)
    context = DiagramContext(
        settings=settings,
        importer=build_importer(settings),
        relationship_map=build_relationship_map_service(settings),
    )

    def get_context() -> DiagramContext:
        return context

    @app.get("/health")
    def health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.post("/api/terraform/layout")
    async def api_terraform_layout(
        request: Request,
        context: DiagramContext = Depends(get_context),
    ) -> ORJSONResponse:
        raw_bytes = await request.body()
        layout_request = parse_layout_request(raw_bytes, request.headers.get("content-type", ""))
        if not layout_request.content.strip():
            raise HTTPException(status_code=400, detail="Empty Terraform source")
        result = context.importer.convert(layout_request.content)
        metadata = DiagramMetadata(environment="imported")
        if layout_request.name:
            metadata.name = layout_request.name
        document = export_diagram(result, metadata)
        return ORJSONResponse(document.to_dict())

    @app.post("/api/diagrams/validate")
    async def api_validate_diagram(request: Request) -> ORJSONResponse:
        raw_bytes = await request.body()
        try:
            document = import_diagram(raw_bytes)
        except InvalidDiagramFormat as exc:
            logger.info("Rejected diagram envelope: %s", exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return ORJSONResponse(
            {
                "status": "ok",
                "version": document.version,
                "nodes": len(document.nodes),
                "edges": len(document.edges),
            }
        )

    @app.post("/api/relationship-map")
    async def api_relationship_map(
        request: Request,
        context: DiagramContext = Depends(get_context),
    ) -> ORJSONResponse:
        raw_bytes = await request.body()
        try:
            snapshot = ItilSnapshot.model_validate(orjson.loads(raw_bytes or b"{}"))
        except orjson.JSONDecodeError as exc:
            raise HTTPException(status_code=422, detail="Invalid JSON") from exc
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        result = context.relationship_map.build(
            snapshot.problems, snapshot.incidents, snapshot.changes
        )
        return ORJSONResponse(result.to_dict())

    return app


def parse_layout_request(raw_bytes: bytes, content_type: str) -> TerraformLayoutRequest:
    if "application/json" not in content_type:
        try:
            return TerraformLayoutRequest(content=raw_bytes.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=400, detail="Terraform source must be UTF-8") from exc
    try:
        payload: Any = orjson.loads(raw_bytes)
    except orjson.JSONDecodeError as exc:
        raise HTTPException(status_code=422, detail="Invalid JSON") from exc
    try:
        return TerraformLayoutRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc


app = create_app(load_settings())
