from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


class ArtifactManager:
    """Owns the artifacts directory: unified diffs under ``patches/``, run logs under ``run_logs/``."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.patch_root = self.root / "patches"
        self.run_log_root = self.root / "run_logs"
        self._ensure_structure()

    @property
    def directories(self) -> tuple[Path, Path]:
        return self.patch_root, self.run_log_root

    def _ensure_structure(self) -> None:
        for directory in (self.root, *self.directories):
            directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def timestamp() -> str:
        return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")

    def write_patch(self, source_name: str, diff: str, timestamp: str | None = None) -> Path:
        slug = _UNSAFE_NAME.sub("_", source_name).strip("_") or "source"
        return self._write(self.patch_root / f"{timestamp or self.timestamp()}_{slug}.diff", diff)

    def write_run_log(self, message: str, timestamp: str | None = None) -> Path:
        return self._write(self.run_log_root / f"{timestamp or self.timestamp()}.log", message)

    @staticmethod
    def _write(path: Path, content: str) -> Path:
        path.write_text(content, encoding="utf-8")
        return path
