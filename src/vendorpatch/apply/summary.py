from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from .discovery import PatchFile

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PatchSummary:
    """What a patch touches, for display only; applying is always left to the external tool."""

    patch: PatchFile
    files: list[str] = field(default_factory=list)
    added: int = 0
    removed: int = 0
    error: str | None = None

    @property
    def message(self) -> str:
        if self.error:
            return f"{self.patch.name}: unreadable ({self.error})"
        return f"{self.patch.name}: {len(self.files)} file(s), +{self.added} -{self.removed}"


def summarize_patch(patch: PatchFile) -> PatchSummary:
    summary = PatchSummary(patch=patch)
    try:
        parsed = PatchSet.from_filename(str(patch.path), encoding="utf-8")
    except (UnidiffParseError, UnicodeDecodeError) as exc:
        logger.warning("patch_summary.unparseable", patch=patch.name, error=str(exc))
        summary.error = str(exc)
        return summary
    for patched_file in parsed:
        summary.files.append(patched_file.path)
        summary.added += patched_file.added
        summary.removed += patched_file.removed
    return summary
