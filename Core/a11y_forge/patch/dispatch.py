from __future__ import annotations

from pathlib import Path
from typing import Callable

from a11y_forge.core.models import Fix
from a11y_forge.patch.html import apply_html_fixes
from a11y_forge.patch.react import apply_jsx_fixes
from a11y_forge.patch.vue import apply_vue_fixes

PatchStrategy = Callable[[str, list[Fix]], str]

STRATEGIES: dict[str, PatchStrategy] = {
    ".html": apply_html_fixes,
    ".jsx": apply_jsx_fixes,
    ".tsx": apply_jsx_fixes,
    ".vue": apply_vue_fixes,
}


def strategy_for(file_path: str | Path) -> PatchStrategy | None:
    return STRATEGIES.get(Path(file_path).suffix.lower())
