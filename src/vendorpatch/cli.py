from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from .apply import (
    PatchApplicationFailure,
    PatchApplyError,
    Settings,
    apply_all_patches,
    discover_patches,
    load_settings,
    summarize_patch,
)
from .apply.report import outcome_line
from .util.fs import find_reject_files

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()
logger = structlog.get_logger(__name__)


def _log_level() -> int:
    name = os.environ.get("VENDORPATCH_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level()),
        cache_logger_on_first_use=False,
    )


def _emit(message: str) -> None:
    # tool output is written as-is; rich would expand tabs and drop carriage returns
    stream = console.file
    stream.write(message if message.endswith("\n") else message + "\n")
    stream.flush()


def _settings(
    root: Path | None,
    patches: Path | None,
    target: str | None,
    suffix: str | None,
    tool: str | None,
    timeout: float | None,
    config: Path | None,
) -> Settings:
    overrides: dict[str, Any] = {
        "root": root,
        "patches_dir": patches,
        "target_dir": target,
        "suffix": suffix,
        "tool": tool,
        "timeout": timeout,
    }
    return load_settings(config_file=config, overrides=overrides)


RootOption = typer.Option(  # noqa: B008
    None,
    "--root",
    file_okay=False,
    dir_okay=True,
    help="Project root; the patch tool runs from here. Defaults to the current directory.",
)
PatchesOption = typer.Option(None, "--patches", help="Directory holding the patch series.")  # noqa: B008
TargetOption = typer.Option(None, "--target", help="Target subdirectory, relative to the root.")
SuffixOption = typer.Option(None, "--suffix", help="File extension that marks a patch file.")
ToolOption = typer.Option(None, "--tool", help="Patch tool executable (invoked as `<tool> apply ...`).")
TimeoutOption = typer.Option(None, "--timeout", min=0.001, help="Seconds to wait for each patch before giving up.")
ConfigOption = typer.Option(  # noqa: B008
    None,
    "--config",
    file_okay=True,
    dir_okay=False,
    help="YAML settings file. Defaults to vendorpatch.yaml in the root when present.",
)


@app.callback()
def main() -> None:  # pragma: no cover
    _configure_structlog()


@app.command("apply")
def apply_cmd(
    root: Path | None = RootOption,
    patches: Path | None = PatchesOption,
    target: str | None = TargetOption,
    suffix: str | None = SuffixOption,
    tool: str | None = ToolOption,
    timeout: float | None = TimeoutOption,
    config: Path | None = ConfigOption,
) -> None:
    """Apply all patches to the target tree, stopping at the first one that fails."""

    try:
        settings = _settings(root, patches, target, suffix, tool, timeout, config)
        session = apply_all_patches(settings, emit=_emit)
    except PatchApplicationFailure as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        rejects = find_reject_files(settings.target_spec().absolute)
        for reject in rejects:
            console.print(f"[yellow]reject:[/yellow] {escape(str(reject))}")
        logger.error(
            "cli.apply.failed",
            patch=exc.outcome.patch.name,
            status=exc.outcome.status,
            rejects=[str(reject) for reject in rejects],
        )
        raise typer.Exit(code=1) from exc
    except PatchApplyError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        logger.error("cli.apply.failed", error=str(exc), kind=type(exc).__name__)
        raise typer.Exit(code=1) from exc

    for outcome in session.outcomes:
        console.print(f"[dim]{escape(outcome_line(outcome))}[/dim]", highlight=False)
    logger.info("cli.apply.complete", applied=len(session.outcomes), target=settings.target_dir)


@app.command("list")
def list_cmd(
    root: Path | None = RootOption,
    patches: Path | None = PatchesOption,
    suffix: str | None = SuffixOption,
    config: Path | None = ConfigOption,
) -> None:
    """Show the patch series in the order it would be applied."""

    try:
        settings = _settings(root, patches, None, suffix, None, None, config)
        series = discover_patches(settings.patches_path, settings.suffix)
    except PatchApplyError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    for index, patch in enumerate(series, start=1):
        summary = summarize_patch(patch)
        style = "yellow" if summary.error else "cyan"
        console.print(f"[{style}]{index:>3}.[/{style}] {escape(summary.message)}", highlight=False)
        for path in summary.files:
            console.print(f"       {path}", markup=False, highlight=False)


@app.command()
def doctor(
    root: Path | None = RootOption,
    patches: Path | None = PatchesOption,
    target: str | None = TargetOption,
    suffix: str | None = SuffixOption,
    tool: str | None = ToolOption,
    config: Path | None = ConfigOption,
) -> None:
    """Check that the tool, the target tree, and the patch series are all in place."""

    try:
        settings = _settings(root, patches, target, suffix, tool, None, config)
    except PatchApplyError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    problems: list[str] = []
    if shutil.which(settings.tool) is None:
        problems.append(f"patch tool not found on PATH: {settings.tool}")
    target_path = settings.target_spec().absolute
    if not target_path.is_dir():
        problems.append(f"target directory not found: {target_path}")
    else:
        leftovers = find_reject_files(target_path)
        if leftovers:
            console.print(f"[yellow]{len(leftovers)} reject file(s) under {target_path}[/yellow]")
    try:
        count = len(discover_patches(settings.patches_path, settings.suffix))
    except PatchApplyError as exc:
        problems.append(str(exc))
    else:
        console.print(f"[green]{count} patch(es) ready[/green] in {settings.patches_path}")

    if problems:
        for problem in problems:
            console.print(f"[red]{escape(problem)}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Environment OK[/green]")


if __name__ == "__main__":
    app()
