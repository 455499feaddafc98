from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from domain.models import ImportSummary, LayoutResult, TerraformResource
from domain.ports.layout import LayoutEngine
from domain.resource_catalog import GLUE_RESOURCE_TYPES
from domain.services.parse_terraform import parse_terraform
from domain.services.zone_plan import build_zone_plan
from domain.services.zone_sizing import SizingConfig

logger = logging.getLogger(__name__)


class TerraformImporter:
    def __init__(
        self,
        layout_engine: LayoutEngine,
        glue_resource_types: Iterable[str] = GLUE_RESOURCE_TYPES,
        sizing_config: SizingConfig | None = None,
    ) -> None:
        self.layout_engine = layout_engine
        self.glue_resource_types = frozenset(glue_resource_types)
        self.sizing_config = sizing_config

    def convert(self, text: str) -> LayoutResult:
        return self.convert_resources(parse_terraform(text))

    def convert_resources(self, resources: Sequence[TerraformResource]) -> LayoutResult:
        kept = self.drop_glue_resources(resources)
        plan = build_zone_plan(kept, self.sizing_config)
        result = self.layout_engine.build_layout(plan)
        self.summarize(resources, result)
        return result

    def drop_glue_resources(
        self, resources: Sequence[TerraformResource]
    ) -> list[TerraformResource]:
        kept = [resource for resource in resources if resource.type not in self.glue_resource_types]
        dropped = len(resources) - len(kept)
        if dropped:
            logger.debug("Dropped %d glue resources before layout", dropped)
        return kept

    def summarize(
        self, resources: Sequence[TerraformResource], result: LayoutResult
    ) -> ImportSummary:
        summary = ImportSummary(
            resources=len(resources),
            filtered=sum(1 for resource in resources if resource.type in self.glue_resource_types),
            zones=len(result.zones),
            assigned_components=sum(1 for node in result.components if node.parent_id),
            orphaned_components=sum(1 for node in result.components if not node.parent_id),
            locked_nodes=sum(1 for node in result.nodes() if node.locked),
        )
        logger.info(
            "Imported %d resources (%d filtered): %d zones, %d assigned, %d orphaned, %d locked",
            summary.resources,
            summary.filtered,
            summary.zones,
            summary.assigned_components,
            summary.orphaned_components,
            summary.locked_nodes,
        )
        return summary
