from __future__ import annotations

import html
import re

_WHITESPACE = re.compile(rb"\s")


def normalize_text(value: str) -> str:
    return " ".join(value.split())


def split_classes(value: str) -> list[str]:
    return [item for item in value.split() if item]


def join_text_nodes(source, nodes) -> str:
    """Concatenate text nodes the way ``textContent`` would read them.

    Adjacent nodes separated only by markup are glued together; nodes separated by
    whitespace in the source get a single space.
    """

    parts: list[str] = []
    previous_end: int | None = None
    for node in nodes:
        if previous_end is not None and _WHITESPACE.search(source.data[previous_end:node.start_byte]):
            parts.append(" ")
        parts.append(source.node_text(node))
        previous_end = node.end_byte
    return normalize_text(html.unescape("".join(parts)))


def escape_attribute(value: str, quote: str = '"') -> str:
    escaped = value.replace("&", "&amp;")
    if quote == "'":
        return escaped.replace("'", "&#39;")
    return escaped.replace('"', "&quot;")
