from __future__ import annotations

import pytest

from a11y_forge.core.exceptions import UnsupportedSourceError
from a11y_forge.core.metadata import Position
from a11y_forge.extract.html import extract_html
from a11y_forge.extract.jsx import extract_jsx
from a11y_forge.extract.sfc import parse_sfc
from a11y_forge.extract.vue import extract_vue
from a11y_forge.utils.dom_extract import extract_candidates

HTML_SOURCE = """<!DOCTYPE html>
<main>
  <img src="a.png" class="hero wide">
  <button id="go" type="button">Go &amp; see</button>
</main>
"""

JSX_SOURCE = """import { Card } from "./Card";

export function Hero({ title }: { title: string }) {
  return (
    <section className="hero main">
      <Card.Header>Welcome</Card.Header>
      <img src="/logo.png" alt={title} data-id="logo" />
      <button type="button" disabled>
        Save {"now"} {title}
      </button>
    </section>
  );
}
"""

VUE_SOURCE = """<script setup lang="ts">
const title = "Hi";
</script>

<template>
  <div class="card">
    <img src="/a.png">
    <MyButton @click="go">Go</MyButton>
  </div>
</template>
"""


def test_html_extractor_emits_only_elements_present_in_source():
    candidates = extract_html(HTML_SOURCE, "index.html")
    assert [node.tag for node in candidates] == ["main", "img", "button"]


def test_html_extractor_reads_locations_attributes_and_text():
    _, image, button = extract_html(HTML_SOURCE, "index.html")
    assert image.location == Position(line=3, column=2)
    assert image.classes == ["hero", "wide"]
    assert image.closing_location is None
    assert button.attributes == {"id": "go", "type": "button"}
    assert button.text == "Go & see"
    assert button.closing_location == Position(line=4, column=44)


def test_html_columns_count_characters_not_bytes():
    candidates = extract_html("<p>Café <a href=\"/menu\">Menu</a></p>\n", "menu.html")
    link = candidates[1]
    assert link.tag == "a"
    assert link.location == Position(line=1, column=8)


def test_jsx_extractor_resolves_tags_attributes_and_text():
    section, header, image, button = extract_jsx(JSX_SOURCE, "Hero.tsx")
    assert section.tag == "section"
    assert section.classes == ["hero", "main"]
    assert section.location == Position(line=5, column=4)
    assert section.closing_location == Position(line=11, column=4)
    assert header.tag == "Component"
    assert header.text == "Welcome"
    assert image.attributes == {"src": "/logo.png", "data-id": "logo"}
    assert image.closing_location is None
    assert button.attributes == {"type": "button", "disabled": ""}
    assert button.text == "Save now"


def test_sfc_parser_lists_blocks():
    descriptor = parse_sfc(VUE_SOURCE)
    assert [block.type for block in descriptor.blocks] == ["script", "template"]
    script = descriptor.scripts[0]
    assert script.setup is True
    assert script.lang == "ts"
    assert script.content_start == Position(line=1, column=24)
    assert script.content_offset == 24
    assert script.content.strip() == 'const title = "Hi";'
    assert descriptor.template.content_start == Position(line=5, column=10)


def test_vue_extractor_reports_file_relative_locations():
    div, image, button = extract_vue(VUE_SOURCE, "Card.vue")
    assert div.location == Position(line=6, column=2)
    assert div.closing_location == Position(line=9, column=2)
    assert image.location == Position(line=7, column=4)
    assert button.tag == "MyButton"
    assert button.attributes == {"@click": "go"}
    assert button.text == "Go"
    assert button.closing_location == Position(line=8, column=28)


def test_vue_extractor_offsets_columns_on_the_template_line():
    candidates = extract_vue("<template><span>Hi</span></template>\n", "Inline.vue")
    assert candidates[0].location == Position(line=1, column=10)


def test_vue_without_template_has_no_candidates():
    assert extract_vue("<script>\nexport default {};\n</script>\n", "Logic.vue") == []


def test_dispatch_rejects_unknown_extensions():
    assert [node.tag for node in extract_candidates("<b>x</b>", "page.html")] == ["b"]
    with pytest.raises(UnsupportedSourceError):
        extract_candidates("body {}", "site.css")
