from __future__ import annotations

from pathlib import Path

import pytest

from a11y_forge.config.loader import ConfigLoader
from a11y_forge.core.models import Fix


@pytest.fixture()
def forge_config():
    config_path = Path(__file__).resolve().parents[1] / "config" / "forge.json"
    return ConfigLoader.load(config_path)


@pytest.fixture()
def make_fix():
    def _make_fix(fix_type: str, payload: dict, line: int | None = None, column: int = 0, **extra):
        data = {"fixType": fix_type, "selector": extra.pop("selector", ""), "payload": payload}
        metadata = {}
        if line is not None:
            location = {"source": extra.pop("source", "component"), "line": line, "column": column}
            if "closing" in extra:
                closing_line, closing_column = extra.pop("closing")
                location["closingLocation"] = {"line": closing_line, "column": closing_column}
            metadata["sourceLocation"] = location
        if "signature" in extra:
            metadata["signature"] = extra.pop("signature")
        data["metadata"] = metadata
        return Fix.model_validate(data)

    return _make_fix


@pytest.fixture()
def write_source(tmp_path):
    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
