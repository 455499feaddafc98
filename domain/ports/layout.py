from __future__ import annotations

from typing import Protocol

from domain.models import LayoutResult, Point, Size
from domain.services.zone_plan import ZonePlan


class LayoutEngine(Protocol):
    def build_layout(self, plan: ZonePlan) -> LayoutResult:
        ...


class BoxPlacer(Protocol):
    def place(self, preferred: Point, size: Size) -> Point:
        ...
