from __future__ import annotations

import json
from pathlib import Path

from a11y_forge.config.schema import ForgeConfig


class ConfigLoader:
    """Loads and validates the JSON engine configuration."""

    @staticmethod
    def load(path: str | Path) -> ForgeConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return ForgeConfig.model_validate(payload)
