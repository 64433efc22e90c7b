from __future__ import annotations

import re
from bisect import bisect_right
from typing import Iterable, Iterator

from tree_sitter_language_pack import get_parser

from a11y_forge.core.metadata import Position, Replacement

GRAMMAR_BY_SUFFIX = {
    ".html": "html",
    ".htm": "html",
    ".vue": "html",
    ".jsx": "tsx",
    ".tsx": "tsx",
    ".ts": "typescript",
    ".mts": "typescript",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}


class SourceText:
    """UTF-8 view of a source file that maps tree-sitter byte positions to characters.

    Tree-sitter reports byte offsets and byte columns. Locations handed to the rest
    of the engine use 1-based lines and 0-based character columns so that they can
    be used directly on ``str.splitlines()`` output.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.data = text.encode("utf-8")
        self._line_starts = [0] + [match.end() for match in re.finditer(b"\n", self.data)]

    def parse(self, grammar: str):
        parser = get_parser(grammar)
        return parser.parse(self.data)

    def node_text(self, node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def position(self, byte_offset: int) -> Position:
        row = bisect_right(self._line_starts, byte_offset) - 1
        line_start = self._line_starts[row]
        column = len(self.data[line_start:byte_offset].decode("utf-8", errors="replace"))
        return Position(line=row + 1, column=column)

    def start(self, node) -> Position:
        return self.position(node.start_byte)

    def splice(self, replacements: Iterable[Replacement]) -> str:
        """Apply byte-range replacements, last range first so earlier offsets stay valid."""

        ordered = sorted(
            enumerate(replacements),
            key=lambda item: (item[1].start, item[1].end, item[0]),
            reverse=True,
        )
        data = self.data
        for _, replacement in ordered:
            data = data[:replacement.start] + replacement.content.encode("utf-8") + data[replacement.end:]
        return data.decode("utf-8")


def iter_nodes(root, types: set[str] | None = None) -> Iterator:
    """Pre-order walk, yielding nodes in document order."""

    stack = [root]
    while stack:
        node = stack.pop()
        if types is None or node.type in types:
            yield node
        stack.extend(reversed(node.children))


def child_of_type(node, *types: str):
    for child in node.children:
        if child.type in types:
            return child
    return None


def children_of_type(node, *types: str) -> list:
    return [child for child in node.children if child.type in types]
