from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

SUPPORTED_EXTENSIONS = {".html", ".jsx", ".tsx", ".vue"}


class SearchConfig(BaseModel):
    extensions: list[str] = Field(default_factory=lambda: [".tsx", ".jsx", ".vue", ".html"])
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", "dist", "build", ".git", ".next", ".nuxt", "coverage", "out"]
    )
    cache_candidates: bool = True

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, value: list[str]) -> list[str]:
        normalized = [item.lower() if item.startswith(".") else f".{item.lower()}" for item in value]
        invalid = [item for item in normalized if item not in SUPPORTED_EXTENSIONS]
        if invalid:
            raise ValueError(f"Unsupported source extensions: {', '.join(invalid)}")
        return normalized


class PatchConfig(BaseModel):
    apply: bool = True
    verify: bool = True
    write_diffs: bool = True


class HealingConfig(BaseModel):
    enabled: bool = True


class ForgeConfig(BaseModel):
    search: SearchConfig = Field(default_factory=SearchConfig)
    patch: PatchConfig = Field(default_factory=PatchConfig)
    healing: HealingConfig = Field(default_factory=HealingConfig)
    artifacts_root: str = "artifacts"
