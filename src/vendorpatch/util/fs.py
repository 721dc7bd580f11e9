from __future__ import annotations

import pathlib


def find_reject_files(directory: str | pathlib.Path) -> list[pathlib.Path]:
    """List ``.rej`` files left under ``directory`` by hunks that did not apply."""
    root = pathlib.Path(directory)
    if not root.is_dir():
        return []
    return sorted(path for path in root.rglob("*.rej") if path.is_file())
