from __future__ import annotations

from pathlib import Path
from typing import Callable

from a11y_forge.core.exceptions import UnsupportedSourceError
from a11y_forge.core.metadata import CandidateNode
from a11y_forge.extract.html import extract_html
from a11y_forge.extract.jsx import extract_jsx
from a11y_forge.extract.vue import extract_vue

Extractor = Callable[[str, str], list[CandidateNode]]

EXTRACTORS: dict[str, Extractor] = {
    ".html": extract_html,
    ".jsx": extract_jsx,
    ".tsx": extract_jsx,
    ".vue": extract_vue,
}


def extract_candidates(source_text: str, file_path: str | Path) -> list[CandidateNode]:
    """Lists every markup element of one source file as a match candidate."""

    suffix = Path(file_path).suffix.lower()
    extractor = EXTRACTORS.get(suffix)
    if extractor is None:
        raise UnsupportedSourceError(f"No candidate extractor for {suffix or 'extensionless'} files")
    return extractor(source_text, str(file_path))
