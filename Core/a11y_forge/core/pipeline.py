from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from a11y_forge.config.schema import ForgeConfig
from a11y_forge.core.exceptions import HealingError
from a11y_forge.core.finder import SourceSearcher
from a11y_forge.core.healer import AutoHealer
from a11y_forge.core.metadata import FileOutcome, PatchAttempt
from a11y_forge.core.models import Fix, LinePosition, SourceLocation
from a11y_forge.core.validator import SourceValidator
from a11y_forge.llm.client import LazyCodeRepairClient
from a11y_forge.logging.artifacts import ArtifactManager
from a11y_forge.logging.audit import PatchAuditLogger
from a11y_forge.patch.base import describe
from a11y_forge.patch.diff import generate_patch
from a11y_forge.patch.dispatch import strategy_for

log = logging.getLogger(__name__)

BUILD_DIRS = ("/dist/", "/build/")
SOURCE_DIRS = ("/public/", "/src/", "/")


class FixPipeline:
    """Resolves fixes to source elements, patches each file once, and verifies the result.

    Per file: ``Patched -> Validate -> Done | Heal -> Validate -> Done | Discard``. The
    healer runs at most once; a file is only written after it validated.
    """

    def __init__(
        self,
        config: ForgeConfig | None = None,
        *,
        searcher: SourceSearcher | None = None,
        validator: SourceValidator | None = None,
        healer=None,
        audit_logger: PatchAuditLogger | None = None,
        artifact_manager: ArtifactManager | None = None,
    ) -> None:
        self.config = config or ForgeConfig()
        self.searcher = searcher or SourceSearcher(self.config.search)
        self.validator = validator or SourceValidator()
        if not self.config.healing.enabled:
            healer = None
        elif healer is None:
            healer = AutoHealer(LazyCodeRepairClient())
        self.healer = healer
        self.audit_logger = audit_logger or PatchAuditLogger(self.config.artifacts_root)
        self.artifact_manager = artifact_manager or ArtifactManager(self.config.artifacts_root)

    def run(
        self,
        fixes: Iterable[Fix],
        root_dir: str | Path,
        fallback_source: str | Path | None = None,
    ) -> list[FileOutcome]:
        outcomes = self.apply(self.resolve(fixes, root_dir, fallback_source))
        self.artifact_manager.write_run_log(_run_summary(outcomes))
        return outcomes

    def resolve(
        self,
        fixes: Iterable[Fix],
        root_dir: str | Path,
        fallback_source: str | Path | None = None,
    ) -> dict[Path, list[Fix]]:
        fallback = redirect_build_artifact(Path(fallback_source)) if fallback_source else None
        grouped: dict[Path, list[Fix]] = {}
        for fix in fixes:
            target = self._resolve_fix(fix, Path(root_dir))
            if target is None and fallback is not None and fallback.exists():
                log.info("Using scanned file %s for %s", fallback, describe(fix))
                target = fallback
            if target is None:
                log.warning("Dropping %s: no source match and no fallback file", describe(fix))
                continue
            grouped.setdefault(target, []).append(fix)
        return grouped

    def apply(self, fixes_by_file: dict[Path, list[Fix]]) -> list[FileOutcome]:
        return [self.apply_file(path, fixes) for path, fixes in fixes_by_file.items()]

    def apply_file(self, path: str | Path, fixes: list[Fix]) -> FileOutcome:
        path = Path(path)
        strategy = strategy_for(path)
        if strategy is None:
            log.warning("Skipping %s: unsupported source type", path)
            return self._record(FileOutcome(file=path, status="unsupported", fixes=len(fixes)), fixes)
        try:
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Skipping unreadable source %s: %s", path, exc)
            return self._record(FileOutcome(file=path, status="missing", fixes=len(fixes), errors=[str(exc)]), fixes)

        try:
            modified = strategy(original, fixes)
        except Exception as exc:  # noqa: BLE001 - an unparseable file keeps its original text.
            log.warning("Failed to patch %s: %s", path, exc)
            modified = original
        if modified == original:
            return self._record(FileOutcome(file=path, status="unchanged", fixes=len(fixes)), fixes)

        content, errors, healed = self.verify(path, modified)
        if content is None:
            log.error("Discarding patch for %s: %s", path, "; ".join(errors))
            return self._record(
                FileOutcome(file=path, status="discarded", fixes=len(fixes), errors=errors), fixes
            )

        outcome = FileOutcome(
            file=path,
            status="healed" if healed else "applied",
            fixes=len(fixes),
            errors=errors,
            healed=healed,
            diff=generate_patch(original, content, _display_name(path)),
        )
        if self.config.patch.apply:
            path.write_text(content, encoding="utf-8")
            outcome.written = True
            log.info("Updated %s", path)
        return self._record(outcome, fixes)

    def verify(self, path: Path, content: str) -> tuple[str | None, list[str], bool]:
        """Returns ``(accepted content or None, errors seen, healed)``."""

        if not self.config.patch.verify:
            return content, [], False
        validation = self.validator.validate(path, content)
        if validation.is_valid:
            return content, [], False
        log.warning("Validation failed for %s with %d errors", path, len(validation.errors))
        if self.healer is None:
            return None, validation.errors, False
        try:
            healed = self.healer.heal(content, validation.errors, path)
        except HealingError as exc:
            return None, [*validation.errors, f"heal failed: {exc}"], False
        second = self.validator.validate(path, healed)
        if second.is_valid:
            log.info("Auto-heal repaired %s", path)
            return healed, validation.errors, True
        return None, second.errors, False

    def _resolve_fix(self, fix: Fix, root_dir: Path) -> Path | None:
        location = fix.source_location
        if location is not None:
            source = Path(location.source)
            return source if source.is_absolute() else (root_dir / source).resolve()
        signature = fix.metadata.signature
        if signature is None:
            return None
        match = self.searcher.find(signature, root_dir)
        if match is None:
            return None
        log.info("Found <%s> in %s at line %s (score %s)", signature.tag, match.file, match.line, match.score)
        closing = match.node.closing_location
        fix.metadata.source_location = SourceLocation(
            source=str(match.file),
            line=match.line,
            column=match.column,
            closing_location=LinePosition(line=closing.line, column=closing.column) if closing else None,
        )
        return match.file

    def _record(self, outcome: FileOutcome, fixes: list[Fix]) -> FileOutcome:
        artifact_paths: dict[str, str] = {}
        if outcome.diff and self.config.patch.write_diffs:
            artifact_paths["diff"] = str(self.artifact_manager.write_patch(_display_name(outcome.file), outcome.diff))
        self.audit_logger.write(
            PatchAttempt(
                file=str(outcome.file),
                status=outcome.status,
                fix_types=[fix.fix_type for fix in fixes],
                validation_errors=outcome.errors,
                heal_provider=getattr(self.healer, "provider_name", "none"),
                healed=outcome.healed,
                artifact_paths=artifact_paths,
            )
        )
        return outcome


def redirect_build_artifact(path: Path) -> Path:
    """Maps a file scanned from a build directory back to its source copy, if one exists."""

    posix = path.as_posix()
    for build_dir in BUILD_DIRS:
        if build_dir not in posix:
            continue
        for source_dir in SOURCE_DIRS:
            candidate = Path(posix.replace(build_dir, source_dir, 1))
            if candidate.exists():
                log.info("Redirecting build artifact %s to source %s", path, candidate)
                return candidate
    return path


def _display_name(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.name


def _run_summary(outcomes: list[FileOutcome]) -> str:
    lines = [f"{len(outcomes)} file(s) processed"]
    for outcome in outcomes:
        lines.append(f"{outcome.status}\t{_display_name(outcome.file)}")
        lines.extend(f"\t{error}" for error in outcome.errors)
    return "\n".join(lines) + "\n"
