from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Mapping, cast

import yaml

from .discovery import DEFAULT_SUFFIX, normalize_suffix
from .errors import SettingsError
from .invoker import DEFAULT_TOOL, TargetSpec

CONFIG_FILENAME = "vendorpatch.yaml"
ENV_PREFIX = "VENDORPATCH_"
_KEYS = ("root", "patches_dir", "target_dir", "suffix", "tool", "timeout")


@dataclass(slots=True)
class Settings:
    root: Path
    patches_dir: Path = Path("patches")
    target_dir: str = "vendor"
    suffix: str = DEFAULT_SUFFIX
    tool: str = DEFAULT_TOOL
    timeout: float | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, base: Settings | None = None) -> Settings:
        settings = base or cls(root=Path.cwd())
        unknown = sorted(set(raw) - set(_KEYS))
        if unknown:
            raise SettingsError(f"unknown settings: {', '.join(unknown)}")
        updates: dict[str, Any] = {}
        if raw.get("root") is not None:
            updates["root"] = Path(str(raw["root"])).expanduser()
        if raw.get("patches_dir") is not None:
            updates["patches_dir"] = Path(str(raw["patches_dir"]))
        if raw.get("target_dir") is not None:
            updates["target_dir"] = _parse_target_dir(raw["target_dir"])
        if raw.get("suffix") is not None:
            try:
                updates["suffix"] = normalize_suffix(str(raw["suffix"]))
            except ValueError as exc:
                raise SettingsError(str(exc)) from exc
        if raw.get("tool") is not None:
            updates["tool"] = str(raw["tool"])
        if "timeout" in raw:
            updates["timeout"] = _parse_timeout(raw["timeout"])
        return replace(settings, **updates)

    @property
    def patches_path(self) -> Path:
        return self.patches_dir if self.patches_dir.is_absolute() else self.root / self.patches_dir

    def target_spec(self) -> TargetSpec:
        return TargetSpec(root=self.root, directory=self.target_dir)


def _parse_target_dir(value: object) -> str:
    target = str(value).strip()
    if not target:
        raise SettingsError("target_dir must not be empty")
    if PurePosixPath(target).is_absolute() or PureWindowsPath(target).is_absolute():
        raise SettingsError(f"target_dir must be relative to the root, got {target!r}")
    return target


def _parse_timeout(value: object) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise SettingsError(f"invalid timeout: {value!r}")
    try:
        timeout = float(cast(Any, value))
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"invalid timeout: {value!r}") from exc
    if timeout <= 0:
        raise SettingsError(f"timeout must be positive, got {value!r}")
    return timeout


def load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"Expected mapping in {path} but found {type(data).__name__}")
    return cast(dict[str, Any], data)


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for key in _KEYS:
        value = environ.get(ENV_PREFIX + key.upper())
        if value:
            raw[key] = value
    return raw


def load_settings(
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Merge defaults, the YAML file, ``VENDORPATCH_*`` variables and explicit overrides, in that order."""

    environ = os.environ if environ is None else environ
    env_raw = _from_env(environ)
    explicit = {key: value for key, value in (overrides or {}).items() if value is not None}

    chosen_root = explicit.get("root") or env_raw.get("root")
    root = Path(str(chosen_root or Path.cwd())).expanduser()
    file_raw: dict[str, Any] = {}
    if config_file is not None:
        if not config_file.is_file():
            raise SettingsError(f"config file not found: {config_file}")
        file_raw = load_yaml(config_file)
        # a root named in an explicit config file is relative to that file
        if file_raw.get("root") is not None and not chosen_root:
            root = config_file.parent / Path(str(file_raw["root"])).expanduser()
    elif (root / CONFIG_FILENAME).is_file():
        file_raw = load_yaml(root / CONFIG_FILENAME)
    file_raw.pop("root", None)
    explicit.pop("root", None)
    env_raw.pop("root", None)

    settings = Settings.from_dict(file_raw, base=Settings(root=root))
    settings = Settings.from_dict(env_raw, base=settings)
    settings = Settings.from_dict(explicit, base=settings)
    return replace(settings, root=settings.root.resolve())
