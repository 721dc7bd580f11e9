from __future__ import annotations

import structlog

from .config import Settings
from .discovery import discover_patches
from .errors import MissingTargetDirectory, PatchApplicationFailure
from .invoker import GitApplyInvoker, PatchInvoker
from .session import ApplySession, Emit, SessionState

logger = structlog.get_logger(__name__)


def apply_all_patches(
    settings: Settings,
    *,
    invoker: PatchInvoker | None = None,
    emit: Emit | None = None,
) -> ApplySession:
    """Apply every patch in ``settings.patches_path`` to the target tree, stopping at the first failure.

    Returns the completed session. Any fatal condition is raised as a
    ``PatchApplyError``; a patch that exits nonzero surfaces as
    ``PatchApplicationFailure`` after its output has been emitted.
    """

    target = settings.target_spec()
    if not target.absolute.is_dir():
        raise MissingTargetDirectory(target.absolute)
    patches = discover_patches(settings.patches_path, settings.suffix)
    if invoker is None:
        invoker = GitApplyInvoker(tool=settings.tool, timeout=settings.timeout)
    session = ApplySession(patches, target, invoker, emit=emit)
    state = session.run()
    if state is SessionState.ABORTED and session.failure is not None:
        raise PatchApplicationFailure(session.failure)
    return session
