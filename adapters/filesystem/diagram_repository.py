from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import write_json_atomic
from domain.models import DiagramDocument
from domain.ports.repositories import DiagramRepository
from domain.services.diagram_envelope import import_diagram


class FileSystemDiagramRepository(DiagramRepository):
    def load(self, path: Path) -> DiagramDocument:
        return import_diagram(path.read_bytes())

    def save(self, document: DiagramDocument, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, document.to_dict())

    def output_path(self, output_dir: Path, source: Path) -> Path:
        return output_dir / f"{source.stem}.diagram.json"
