from __future__ import annotations

from functools import partial

from adapters.layout.hierarchical import HierarchicalLayoutEngine
from adapters.layout.spiral import SpiralPlacer
from app.config import AppSettings
from domain.services.build_relationship_map import BuildRelationshipMap
from domain.services.import_terraform import TerraformImporter


def build_importer(settings: AppSettings) -> TerraformImporter:
    layout = HierarchicalLayoutEngine(
        settings.layout.to_layout_config(lock_root_zones=settings.importer.lock_root_zones)
    )
    return TerraformImporter(
        layout,
        glue_resource_types=settings.importer.glue_resource_types,
        sizing_config=settings.layout.to_sizing_config(),
    )


def build_relationship_map_service(settings: AppSettings) -> BuildRelationshipMap:
    spiral_config = settings.relationship_map.to_spiral_config()
    return BuildRelationshipMap(
        partial(SpiralPlacer, spiral_config),
        config=settings.relationship_map.to_map_config(),
    )
