from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from .errors import EmptyPatchSet, MissingPatchDirectory

DEFAULT_SUFFIX = ".patch"
logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PatchFile:
    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path) -> PatchFile:
        return cls(path=path, name=path.name)


def normalize_suffix(suffix: str) -> str:
    suffix = suffix.strip()
    if not suffix:
        raise ValueError("patch suffix must not be empty")
    return suffix if suffix.startswith(".") else f".{suffix}"


def _has_suffix(entry: Path, suffix: str) -> bool:
    # multi-part suffixes such as ".patch.gz" match on the full tail of the name
    return entry.name.endswith(suffix) and entry.name != suffix


def _collation_key(patch: PatchFile) -> bytes:
    return patch.name.encode("utf-8", errors="surrogateescape")


def discover_patches(directory: Path, suffix: str = DEFAULT_SUFFIX) -> list[PatchFile]:
    """Return every ``*<suffix>`` file directly inside ``directory`` in byte-wise name order.

    Directory listing order differs between platforms and filesystems, so the
    result is always sorted explicitly; later patches in a series may depend on
    earlier ones having landed.
    """

    suffix = normalize_suffix(suffix)
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingPatchDirectory(directory)
    patches = [
        PatchFile.from_path(entry)
        for entry in directory.iterdir()
        if entry.is_file() and _has_suffix(entry, suffix)
    ]
    if not patches:
        raise EmptyPatchSet(directory, suffix)
    patches.sort(key=_collation_key)
    logger.info("patch_discovery.found", directory=str(directory), count=len(patches))
    return patches
