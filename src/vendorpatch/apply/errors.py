from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .discovery import PatchFile
    from .invoker import ApplyOutcome


class PatchApplyError(Exception):
    """Base class for every fatal condition raised while applying a patch series."""


class SettingsError(PatchApplyError):
    """Raised when the configuration file cannot be interpreted."""


class MissingTargetDirectory(PatchApplyError):
    def __init__(self, directory: Path) -> None:
        super().__init__(f"target directory not found: {directory} (provision the source tree first)")
        self.directory = directory


class MissingPatchDirectory(PatchApplyError):
    def __init__(self, directory: Path) -> None:
        super().__init__(f"patch directory not found: {directory}")
        self.directory = directory


class EmptyPatchSet(PatchApplyError):
    def __init__(self, directory: Path, suffix: str) -> None:
        super().__init__(f"no *{suffix} patches found in {directory}")
        self.directory = directory
        self.suffix = suffix


class ProcessLaunchFailure(PatchApplyError):
    def __init__(self, patch: PatchFile, command: list[str], reason: str) -> None:
        super().__init__(f"could not start {command[0]!r} for patch {patch.name}: {reason}")
        self.patch = patch
        self.command = command
        self.reason = reason


class InvocationTimeout(PatchApplyError):
    def __init__(self, patch: PatchFile, timeout: float, output: str) -> None:
        super().__init__(f"patch {patch.name} did not finish within {timeout:g}s")
        self.patch = patch
        self.timeout = timeout
        self.output = output


class PatchApplicationFailure(PatchApplyError):
    """A patch exited nonzero; the session stopped at it."""

    def __init__(self, outcome: ApplyOutcome) -> None:
        super().__init__(f"Patch {outcome.patch.name} failed to apply.")
        self.outcome = outcome


class SessionStateError(PatchApplyError):
    """Raised when a session that already ran is asked to run again."""
