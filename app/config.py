from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.hierarchical import LayoutConfig
from adapters.layout.spiral import SpiralConfig
from domain.models import Point, Size
from domain.resource_catalog import GLUE_RESOURCE_TYPES
from domain.services.build_relationship_map import RelationshipMapConfig
from domain.services.zone_sizing import SizingConfig

DEFAULT_CONFIG_PATH = Path("config/app.yaml")


def _split_string_list_value(raw_value: str) -> list[str]:
    raw = raw_value.strip()
    if not raw:
        return []
    if (
        (raw.startswith('"') and raw.endswith('"')) or (raw.startswith("'") and raw.endswith("'"))
    ) and len(raw) >= 2:
        raw = raw[1:-1].strip()
    if raw.startswith("[") and raw.endswith("]"):
        raw = raw[1:-1].strip()
    if not raw:
        return []
    return [
        token for token in (part.strip().strip("'").strip('"') for part in raw.split(",")) if token
    ]


class LayoutSettings(BaseModel):
    root_origin_x: float = 50.0
    root_origin_y: float = 50.0
    root_zones_per_row: int = Field(default=2, ge=1)
    root_row_height: float = 700.0
    root_gap_x: float = 100.0
    child_origin_x: float = 30.0
    child_origin_y: float = 80.0
    child_columns: int = Field(default=2, ge=1)
    child_gap: float = 50.0
    component_origin_x: float = 20.0
    component_origin_y: float = 60.0
    component_columns: int = Field(default=4, ge=1)
    component_spacing_x: float = 110.0
    component_spacing_y: float = 80.0
    orphan_origin_x: float = 30.0
    orphan_origin_y: float = 600.0
    orphan_columns: int = Field(default=5, ge=1)
    orphan_spacing_x: float = 130.0
    orphan_spacing_y: float = 120.0
    items_per_row: int = Field(default=4, ge=1)
    max_zone_width: float = 800.0
    max_zone_height: float = 600.0

    def to_layout_config(self, lock_root_zones: bool = True) -> LayoutConfig:
        return LayoutConfig(
            root_origin=Point(self.root_origin_x, self.root_origin_y),
            root_zones_per_row=self.root_zones_per_row,
            root_row_height=self.root_row_height,
            root_gap_x=self.root_gap_x,
            child_origin=Point(self.child_origin_x, self.child_origin_y),
            child_columns=self.child_columns,
            child_gap=self.child_gap,
            component_origin=Point(self.component_origin_x, self.component_origin_y),
            component_columns=self.component_columns,
            component_spacing=Size(self.component_spacing_x, self.component_spacing_y),
            orphan_origin=Point(self.orphan_origin_x, self.orphan_origin_y),
            orphan_columns=self.orphan_columns,
            orphan_spacing=Size(self.orphan_spacing_x, self.orphan_spacing_y),
            lock_root_zones=lock_root_zones,
        )

    def to_sizing_config(self) -> SizingConfig:
        return SizingConfig(
            items_per_row=self.items_per_row,
            max_width=self.max_zone_width,
            max_height=self.max_zone_height,
        )


class ImporterSettings(BaseModel):
    glue_resource_types: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: sorted(GLUE_RESOURCE_TYPES)
    )
    lock_root_zones: bool = True

    @field_validator("glue_resource_types", mode="before")
    @classmethod
    def normalize_lists(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, list):
            normalized: list[str] = []
            for item in value:
                normalized.extend(_split_string_list_value(str(item)))
            return normalized
        return _split_string_list_value(str(value))


class RelationshipMapSettings(BaseModel):
    center_x: float = 400.0
    center_y: float = 300.0
    clearance: float = Field(default=20.0, ge=0)
    max_attempts: int = Field(default=50, ge=0)

    def to_spiral_config(self) -> SpiralConfig:
        return SpiralConfig(clearance=self.clearance, max_attempts=self.max_attempts)

    def to_map_config(self) -> RelationshipMapConfig:
        return RelationshipMapConfig(center=Point(self.center_x, self.center_y))


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TFD_", env_nested_delimiter="__")

    title: str = "Terraform Zone Diagrams"
    output_dir: Path = Path("data/diagrams")
    layout: LayoutSettings = LayoutSettings()
    importer: ImporterSettings = ImporterSettings()
    relationship_map: RelationshipMapSettings = RelationshipMapSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("TFD_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
