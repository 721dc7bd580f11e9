from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

import structlog

from .discovery import PatchFile
from .errors import InvocationTimeout, ProcessLaunchFailure

DEFAULT_TOOL = "git"
logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TargetSpec:
    """Where patches land: ``directory`` is relative to ``root``, the tool's working directory."""

    root: Path
    directory: str

    @property
    def absolute(self) -> Path:
        return self.root / self.directory


@dataclass(frozen=True, slots=True)
class ApplyOutcome:
    patch: PatchFile
    status: int
    output: str
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == 0

    @property
    def failed(self) -> bool:
        return not self.succeeded


class PatchInvoker:
    def apply(self, patch: PatchFile, target: TargetSpec) -> ApplyOutcome:
        raise NotImplementedError


def _decode(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


class GitApplyInvoker(PatchInvoker):
    """Runs ``git apply`` once per patch with stdout and stderr merged into one stream.

    Hunks that do not apply are written as ``.rej`` files next to their targets,
    so a failed apply can still leave the tree modified.
    """

    def __init__(self, tool: str = DEFAULT_TOOL, timeout: float | None = None) -> None:
        self.tool = tool
        self.timeout = timeout

    def command(self, patch: PatchFile, target: TargetSpec) -> list[str]:
        return [
            self.tool,
            "apply",
            "--ignore-whitespace",
            "--reject",
            f"--directory={target.directory}",
            str(Path(patch.path).resolve()),
        ]

    def apply(self, patch: PatchFile, target: TargetSpec) -> ApplyOutcome:
        cmd = self.command(patch, target)
        logger.debug("patch_invoker.start", patch=patch.name, command=cmd, cwd=str(target.root))
        started = time.monotonic()
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(target.root),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("patch_invoker.timeout", patch=patch.name, timeout=self.timeout)
            raise InvocationTimeout(patch, exc.timeout, _decode(exc.output)) from exc
        except OSError as exc:
            logger.error("patch_invoker.launch_failed", patch=patch.name, tool=self.tool, error=str(exc))
            raise ProcessLaunchFailure(patch, cmd, exc.strerror or str(exc)) from exc
        outcome = ApplyOutcome(
            patch=patch,
            status=proc.returncode,
            output=_decode(proc.stdout),
            duration=time.monotonic() - started,
        )
        logger.info("patch_invoker.exit", patch=patch.name, status=outcome.status, duration=round(outcome.duration, 3))
        return outcome
