from __future__ import annotations

from html.parser import HTMLParser
from pathlib import Path

from a11y_forge.core.metadata import Position, ValidationResult
from a11y_forge.extract.html import shift_position
from a11y_forge.extract.sfc import SfcBlock, parse_sfc
from a11y_forge.utils.treesitter import SourceText

SCRIPT_GRAMMARS = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}
LANG_GRAMMARS = {
    "js": "javascript",
    "javascript": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
    "jsx": "tsx",
    "tsx": "tsx",
}
VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}


class SourceValidator:
    """Syntax-only check that patched source still parses in its own grammar.

    Script files go through their tree-sitter grammar. Vue components validate the
    template and each script block on their own. Other formats are reported valid.
    """

    def validate(self, file_path: str | Path, content: str) -> ValidationResult:
        label = str(file_path)
        suffix = Path(file_path).suffix.lower()
        if suffix in SCRIPT_GRAMMARS:
            errors = self.syntax_errors(label, content, SCRIPT_GRAMMARS[suffix])
        elif suffix == ".vue":
            errors = self.vue_errors(label, content)
        else:
            return ValidationResult(is_valid=True)
        return ValidationResult(is_valid=not errors, errors=errors)

    def syntax_errors(self, label: str, content: str, grammar: str, origin: Position | None = None) -> list[str]:
        source = SourceText(content)
        tree = source.parse(grammar)
        if not tree.root_node.has_error:
            return []
        return [
            _format(label, source.start(node), message, origin)
            for node, message in _diagnostics(source, tree.root_node)
        ]

    def vue_errors(self, label: str, content: str) -> list[str]:
        descriptor = parse_sfc(content)
        errors: list[str] = []
        if descriptor.template is not None:
            errors.extend(self.template_errors(label, descriptor.template))
        for script in descriptor.scripts:
            grammar = LANG_GRAMMARS.get((script.lang or "js").lower(), "javascript")
            errors.extend(self.syntax_errors(label, script.content, grammar, script.content_start))
        return errors

    def template_errors(self, label: str, block: SfcBlock) -> list[str]:
        checker = _TagBalance()
        checker.feed(block.content)
        checker.close()
        return [
            _format(label, position, f"Template error: {message}", block.content_start)
            for position, message in checker.problems
        ]


class _TagBalance(HTMLParser):
    """Pairs raw start and end tags; no implicit closing, unlike browser parsing."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.open: list[tuple[str, Position]] = []
        self.problems: list[tuple[Position, str]] = []

    def handle_starttag(self, tag, attrs):
        if tag not in VOID_ELEMENTS:
            self.open.append((tag, self._position()))

    def handle_startendtag(self, tag, attrs):
        pass

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        for depth in range(len(self.open) - 1, -1, -1):
            if self.open[depth][0] == tag:
                self._unclosed(self.open[depth + 1:])
                del self.open[depth:]
                return
        self.problems.append((self._position(), f"stray closing tag </{tag}>"))

    def close(self):
        super().close()
        self._unclosed(self.open)
        self.open = []

    def _unclosed(self, entries):
        for tag, position in reversed(entries):
            self.problems.append((position, f"<{tag}> has no matching end tag"))

    def _position(self) -> Position:
        line, column = self.getpos()
        return Position(line=line, column=column)


def _diagnostics(source: SourceText, root):
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_missing:
            yield node, f"missing '{node.type}'"
        elif node.type == "ERROR":
            snippet = source.node_text(node).strip().splitlines()
            yield node, f"unexpected '{snippet[0][:40]}'" if snippet else "unexpected token"
        elif node.has_error:
            stack.extend(reversed(node.children))


def _format(label: str, position: Position, message: str, origin: Position | None) -> str:
    if origin is not None:
        position = shift_position(position, origin.line - 1, origin.column)
    return f"{label}({position.line},{position.column + 1}): {message}"
