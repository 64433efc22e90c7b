from __future__ import annotations

import os

from a11y_forge.config.schema import SearchConfig
from a11y_forge.core import finder
from a11y_forge.core.finder import SourceSearcher
from tests.helpers import make_signature

APP_TSX = """export function App() {
  return (
    <form>
      <button className="btn">Save</button>
      <button id="save-btn">Store</button>
    </form>
  );
}
"""


def test_find_prefers_id_match_over_text_and_class(tmp_path, write_source):
    path = write_source("src/App.tsx", APP_TSX)
    signature = make_signature(tag="button", text="Save", classes=["btn"], attributes={"id": "save-btn"})

    result = SourceSearcher().find(signature, tmp_path)

    assert result is not None
    assert result.file == path.resolve()
    assert (result.line, result.column) == (5, 6)
    assert result.score == 110
    assert result.node.text == "Store"


def test_find_returns_none_when_no_tag_matches(tmp_path, write_source):
    write_source("src/App.tsx", APP_TSX)
    assert SourceSearcher().find(make_signature(tag="img", attributes={"src": "/x.png"}), tmp_path) is None


def test_find_skips_dependency_and_build_directories(tmp_path, write_source):
    write_source("node_modules/ui/Button.jsx", 'export const B = () => <button id="save-btn">Save</button>;\n')
    write_source("dist/index.html", '<button id="save-btn">Save</button>\n')
    page = write_source("src/index.html", "<main>\n  <button>Save</button>\n</main>\n")

    result = SourceSearcher().find(make_signature(tag="button", text="Save", attributes={"id": "save-btn"}), tmp_path)

    assert result is not None
    assert result.file == page.resolve()
    assert result.score == 60


def test_find_breaks_ties_towards_the_shorter_path(tmp_path, write_source):
    write_source("src/components/Logo.html", '<img src="logo.png">\n')
    shallow = write_source("src/Logo.html", '<p>Brand</p>\n<img src="logo.png">\n')

    searcher = SourceSearcher()
    first = searcher.find(make_signature(tag="img", attributes={"src": "logo.png"}), tmp_path)
    second = searcher.find(make_signature(tag="img", attributes={"src": "logo.png"}), tmp_path)

    assert first.file == shallow.resolve()
    assert first.line == 2
    assert (second.file, second.line) == (first.file, first.line)


def test_find_ignores_unparseable_and_unreadable_files(tmp_path, write_source, monkeypatch):
    good = write_source("src/Good.vue", "<template>\n  <img src=\"/a.png\">\n</template>\n")
    write_source("src/Broken.vue", "<template><img src=\"/a.png\"></template>\n")
    (tmp_path / "src" / "Binary.html").write_bytes(b"\xff\xfe<img src='/a.png'>")
    real_extract = finder.extract_candidates

    def flaky_extract(source_text, file_path):
        if str(file_path).endswith("Broken.vue"):
            raise ValueError("parser exploded")
        return real_extract(source_text, file_path)

    monkeypatch.setattr(finder, "extract_candidates", flaky_extract)

    result = SourceSearcher().find(make_signature(tag="img", attributes={"src": "/a.png"}), tmp_path)

    assert result is not None
    assert result.file == good.resolve()
    assert (result.line, result.column) == (2, 2)


def test_extension_filter_limits_the_scan(tmp_path, write_source):
    write_source("src/App.tsx", APP_TSX)
    write_source("src/index.html", "<button>Save</button>\n")

    searcher = SourceSearcher(SearchConfig(extensions=["html"]))

    assert [path.name for path in searcher.iter_source_files(tmp_path)] == ["index.html"]
    assert searcher.find(make_signature(tag="button", text="Save"), tmp_path).file.name == "index.html"


def test_candidate_cache_refreshes_when_the_file_changes(tmp_path, write_source):
    path = write_source("index.html", "<img src=\"a.png\">\n")
    searcher = SourceSearcher()
    assert searcher.find(make_signature(tag="img"), tmp_path).line == 1

    path.write_text("<p>moved</p>\n<img src=\"a.png\">\n", encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))

    assert searcher.find(make_signature(tag="img"), tmp_path).line == 2
