from __future__ import annotations

__all__ = [
    "ApplyOutcome",
    "ApplySession",
    "EmptyPatchSet",
    "GitApplyInvoker",
    "InvocationTimeout",
    "MissingPatchDirectory",
    "MissingTargetDirectory",
    "PatchApplicationFailure",
    "PatchApplyError",
    "PatchFile",
    "PatchInvoker",
    "PatchSummary",
    "ProcessLaunchFailure",
    "SessionState",
    "SessionStateError",
    "Settings",
    "SettingsError",
    "TargetSpec",
    "apply_all_patches",
    "discover_patches",
    "load_settings",
    "summarize_patch",
]

from .config import Settings, load_settings
from .discovery import PatchFile, discover_patches
from .engine import apply_all_patches
from .errors import (
    EmptyPatchSet,
    InvocationTimeout,
    MissingPatchDirectory,
    MissingTargetDirectory,
    PatchApplicationFailure,
    PatchApplyError,
    ProcessLaunchFailure,
    SessionStateError,
    SettingsError,
)
from .summary import PatchSummary, summarize_patch
from .invoker import ApplyOutcome, GitApplyInvoker, PatchInvoker, TargetSpec
from .session import ApplySession, SessionState
