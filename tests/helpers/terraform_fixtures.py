from __future__ import annotations

from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=1)
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


def terraform_fixture_path(name: str) -> Path:
    return repo_root() / "examples" / "terraform" / name


def load_terraform_fixture(name: str) -> str:
    return terraform_fixture_path(name).read_text(encoding="utf-8")
