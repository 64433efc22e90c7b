from __future__ import annotations

import re

from a11y_forge.core.validator import SourceValidator

VALID_VUE = """<template>
  <div>
    <img src="/a.png" alt="A">
    <MyIcon name="x" />
  </div>
</template>

<script setup lang="ts">
const count: number = 1;
</script>
"""


def test_valid_tsx_passes():
    source = 'export const App = () => <main className="app">Hi</main>;\n'
    assert SourceValidator().validate("App.tsx", source).is_valid


def test_broken_tsx_reports_positioned_errors():
    result = SourceValidator().validate("src/App.tsx", "export const value = ;\n")
    assert not result.is_valid
    assert result.errors
    assert all(re.match(r"src/App\.tsx\(\d+,\d+\): ", error) for error in result.errors)


def test_valid_vue_component_passes():
    result = SourceValidator().validate("Card.vue", VALID_VUE)
    assert result.is_valid, result.errors


def test_vue_template_with_unclosed_element_is_invalid():
    source = "<template>\n  <section>\n    <button>Go\n  </section>\n</template>\n"
    result = SourceValidator().validate("Card.vue", source)
    assert not result.is_valid
    assert any("<button> has no matching end tag" in error for error in result.errors)
    assert any(error.startswith("Card.vue(3,5)") for error in result.errors)


def test_vue_template_with_stray_closing_tag_is_invalid():
    source = "<template>\n  <div></span></div>\n</template>\n"
    result = SourceValidator().validate("Card.vue", source)
    assert not result.is_valid
    assert any("</span>" in error for error in result.errors)


def test_vue_script_errors_use_file_lines():
    source = "<template>\n  <p>Hi</p>\n</template>\n<script>\nexport default {\n</script>\n"
    result = SourceValidator().validate("Card.vue", source)
    assert not result.is_valid
    lines = [int(re.match(r"Card\.vue\((\d+),", error).group(1)) for error in result.errors]
    assert all(line >= 4 for line in lines)


def test_html_and_unknown_files_are_not_checked():
    validator = SourceValidator()
    assert validator.validate("index.html", "<div><span></div>").is_valid
    assert validator.validate("styles.css", "body {").is_valid


def test_paragraph_wrapping_a_block_element_is_valid():
    source = "<template>\n  <p>\n    <div>x</div>\n  </p>\n</template>\n"
    result = SourceValidator().validate("A.vue", source)
    assert result.is_valid, result.errors


def test_unmatched_closing_tag_reports_the_inner_unclosed_element():
    source = "<template>\n  <ul>\n    <li>One\n  </ul>\n  </p>\n</template>\n"
    errors = SourceValidator().validate("List.vue", source).errors
    assert "List.vue(3,5): Template error: <li> has no matching end tag" in errors
    assert "List.vue(5,3): Template error: stray closing tag </p>" in errors
