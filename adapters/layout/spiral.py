from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List

from domain.models import Point, Size
from domain.ports.layout import BoxPlacer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpiralConfig:
    clearance: float = 20.0
    max_attempts: int = 50
    angle_step: float = 0.5
    base_radius: float = 50.0
    radius_step: float = 10.0


@dataclass(frozen=True)
class PlacedBox:
    position: Point
    size: Size


@dataclass
class SpiralPlacer(BoxPlacer):
    """Accepts boxes one at a time, nudging each along a spiral until it stops colliding."""

    config: SpiralConfig = field(default_factory=SpiralConfig)
    placed: List[PlacedBox] = field(default_factory=list)

    def place(self, preferred: Point, size: Size) -> Point:
        if not self.collides(preferred, size):
            return self._accept(preferred, size)

        for attempt in range(self.config.max_attempts):
            candidate = self.spiral_candidate(preferred, attempt)
            if not self.collides(candidate, size):
                return self._accept(candidate, size)

        logger.debug(
            "No free spot near (%.1f, %.1f) after %d attempts; keeping preferred position",
            preferred.x,
            preferred.y,
            self.config.max_attempts,
        )
        return self._accept(preferred, size)

    def collides(self, position: Point, size: Size) -> bool:
        for box in self.placed:
            min_dx = (size.width + box.size.width) / 2 + self.config.clearance
            min_dy = (size.height + box.size.height) / 2 + self.config.clearance
            dx = abs(position.x - box.position.x)
            dy = abs(position.y - box.position.y)
            if dx < min_dx and dy < min_dy:
                return True
        return False

    def spiral_candidate(self, preferred: Point, attempt: int) -> Point:
        angle = (attempt * self.config.angle_step) % (2 * math.pi)
        radius = self.config.base_radius + attempt * self.config.radius_step
        return Point(
            preferred.x + math.cos(angle) * radius,
            preferred.y + math.sin(angle) * radius,
        )

    def _accept(self, position: Point, size: Size) -> Point:
        self.placed.append(PlacedBox(position=position, size=size))
        return position
