from __future__ import annotations

from pathlib import Path
from typing import List

from domain.ports.repositories import TerraformSourceRepository


class FileSystemTerraformRepository(TerraformSourceRepository):
    suffix = ".tf"

    def list_sources(self, path: Path) -> List[Path]:
        if path.is_file():
            return [path]
        if not path.is_dir():
            raise FileNotFoundError(f"Terraform source not found: {path}")
        return sorted(item for item in path.glob(f"*{self.suffix}") if item.is_file())

    def load_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def load_all_with_paths(self, path: Path) -> List[tuple[Path, str]]:
        return [(source, self.load_text(source)) for source in self.list_sources(path)]
