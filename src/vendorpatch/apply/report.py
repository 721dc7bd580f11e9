from __future__ import annotations

from .discovery import PatchFile
from .invoker import ApplyOutcome

SUCCESS_NOTICE = "All patches applied successfully!"


def applying_notice(patch: PatchFile) -> str:
    return f"Applying patch: {patch.name}"


def failure_report(outcome: ApplyOutcome) -> str:
    # tool output is passed through untouched
    return f"Failed to apply patch {outcome.patch.name}:\n{outcome.output}"


def success_notice() -> str:
    return SUCCESS_NOTICE


def outcome_line(outcome: ApplyOutcome) -> str:
    label = "ok" if outcome.succeeded else f"failed (exit {outcome.status})"
    return f"{outcome.patch.name}: {label} in {outcome.duration:.2f}s"


def timeout_report(patch: PatchFile, timeout: float, output: str) -> str:
    return f"Patch {patch.name} did not finish within {timeout:g}s; output so far:\n{output}"
