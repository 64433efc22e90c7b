from __future__ import annotations

import logging
import os
from pathlib import Path

from a11y_forge.config.schema import SearchConfig
from a11y_forge.core.metadata import CandidateNode, SearchResult
from a11y_forge.core.models import Signature
from a11y_forge.utils.dom_extract import extract_candidates
from a11y_forge.utils.scoring import rank_candidates

log = logging.getLogger(__name__)


class SourceSearcher:
    """Re-identifies a rendered DOM element inside the source tree of a project.

    Every supported file under the root is scanned on each call; the best positive
    score wins, ties going to the shorter path, then the earlier line.
    """

    def __init__(self, search_config: SearchConfig | None = None) -> None:
        self.search_config = search_config or SearchConfig()
        self._cache: dict[Path, tuple[int, list[CandidateNode]]] = {}

    def find(self, signature: Signature, root_dir: str | Path) -> SearchResult | None:
        candidates = [candidate for path in self.iter_source_files(root_dir) for candidate in self.candidates(path)]
        ranked = rank_candidates(signature, candidates)
        if not ranked:
            log.info("No source candidate matched <%s> under %s", signature.tag, root_dir)
            return None
        score, best = ranked[0]
        return SearchResult(
            file=Path(best.file),
            line=best.location.line,
            column=best.location.column,
            score=score,
            node=best,
        )

    def iter_source_files(self, root_dir: str | Path) -> list[Path]:
        root = Path(root_dir).resolve()
        extensions = {extension.lower() for extension in self.search_config.extensions}
        excluded = set(self.search_config.exclude_dirs)
        files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(name for name in dirnames if name not in excluded)
            for filename in sorted(filenames):
                if Path(filename).suffix.lower() in extensions:
                    files.append(Path(dirpath) / filename)
        return files

    def candidates(self, path: Path) -> list[CandidateNode]:
        try:
            mtime = path.stat().st_mtime_ns
            cached = self._cache.get(path)
            if self.search_config.cache_candidates and cached and cached[0] == mtime:
                return cached[1]
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Skipping unreadable source %s: %s", path, exc)
            return []
        try:
            candidates = extract_candidates(source, path)
        except Exception as exc:  # noqa: BLE001 - a broken file contributes no candidates.
            log.warning("Failed to parse %s: %s", path, exc)
            candidates = []
        if self.search_config.cache_candidates:
            self._cache[path] = (mtime, candidates)
        return candidates
