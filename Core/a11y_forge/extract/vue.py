from __future__ import annotations

from a11y_forge.core.metadata import CandidateNode
from a11y_forge.extract.html import SYNTHETIC_TAGS, html_candidates
from a11y_forge.extract.sfc import parse_sfc
from a11y_forge.utils.treesitter import SourceText


def extract_vue(source_text: str, file_path: str) -> list[CandidateNode]:
    template = parse_sfc(source_text).template
    if template is None or not template.content.strip():
        return []
    block = SourceText(template.content)
    return html_candidates(
        block,
        block.parse("html"),
        file_path,
        lowercase=False,
        skip_tags=SYNTHETIC_TAGS,
        line_offset=template.content_start.line - 1,
        column_offset=template.content_start.column,
    )
