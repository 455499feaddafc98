from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import DiagramDocument


class TerraformSourceRepository(Protocol):
    def list_sources(self, path: Path) -> Sequence[Path]: ...

    def load_text(self, path: Path) -> str: ...


class DiagramRepository(Protocol):
    def load(self, path: Path) -> DiagramDocument: ...

    def save(self, document: DiagramDocument, path: Path) -> None: ...
