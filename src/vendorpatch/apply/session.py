from __future__ import annotations

from enum import Enum
from typing import Callable, Sequence

import structlog

from . import report
from .discovery import PatchFile
from .errors import InvocationTimeout, PatchApplyError, SessionStateError
from .invoker import ApplyOutcome, PatchInvoker, TargetSpec

logger = structlog.get_logger(__name__)

Emit = Callable[[str], None]


class SessionState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


def _discard(_: str) -> None:
    return None


class ApplySession:
    """Applies an ordered patch series one patch at a time, stopping at the first failure.

    ``outcomes`` is always a prefix of ``patches``: nothing after the first
    failing patch is invoked. A session runs once; build a new one to retry.
    """

    def __init__(
        self,
        patches: Sequence[PatchFile],
        target: TargetSpec,
        invoker: PatchInvoker,
        *,
        emit: Emit | None = None,
    ) -> None:
        self.patches: tuple[PatchFile, ...] = tuple(patches)
        self.target = target
        self.invoker = invoker
        self.emit = emit or _discard
        self.outcomes: list[ApplyOutcome] = []
        self.state = SessionState.PENDING

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.COMPLETED, SessionState.ABORTED)

    @property
    def failure(self) -> ApplyOutcome | None:
        if self.outcomes and self.outcomes[-1].failed:
            return self.outcomes[-1]
        return None

    @property
    def pending(self) -> tuple[PatchFile, ...]:
        return self.patches[len(self.outcomes) :]

    def run(self) -> SessionState:
        if self.state is not SessionState.PENDING:
            raise SessionStateError(f"session already {self.state.value}; start a new session to re-apply")
        self.state = SessionState.RUNNING
        logger.info("apply_session.start", target=self.target.directory, patches=len(self.patches))
        for patch in self.patches:
            self.emit(report.applying_notice(patch))
            try:
                outcome = self.invoker.apply(patch, self.target)
            except PatchApplyError as exc:
                self.state = SessionState.ABORTED
                if isinstance(exc, InvocationTimeout):
                    self.emit(report.timeout_report(exc.patch, exc.timeout, exc.output))
                logger.error("apply_session.aborted", patch=patch.name, applied=len(self.outcomes))
                raise
            self.outcomes.append(outcome)
            if outcome.failed:
                self.state = SessionState.ABORTED
                self.emit(report.failure_report(outcome))
                logger.error(
                    "apply_session.aborted",
                    patch=patch.name,
                    status=outcome.status,
                    applied=len(self.outcomes) - 1,
                    skipped=len(self.pending),
                )
                return self.state
        self.state = SessionState.COMPLETED
        self.emit(report.success_notice())
        logger.info("apply_session.completed", applied=len(self.outcomes))
        return self.state
