from __future__ import annotations

from pathlib import Path

import pytest

from vendorpatch.apply.config import CONFIG_FILENAME, Settings, load_settings
from vendorpatch.apply.errors import SettingsError


def test_defaults(tmp_path: Path) -> None:
    settings = load_settings(overrides={"root": tmp_path}, environ={})

    assert settings.root == tmp_path.resolve()
    assert settings.patches_path == tmp_path.resolve() / "patches"
    assert settings.target_dir == "vendor"
    assert settings.suffix == ".patch"
    assert settings.tool == "git"
    assert settings.timeout is None
    spec = settings.target_spec()
    assert spec.root == settings.root
    assert spec.directory == "vendor"


def test_yaml_file_in_root_is_picked_up(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        "patches_dir: series\ntarget_dir: Nukkit-MOT\nsuffix: diff\ntimeout: 45\n",
        encoding="utf-8",
    )

    settings = load_settings(overrides={"root": tmp_path}, environ={})

    assert settings.patches_path == tmp_path.resolve() / "series"
    assert settings.target_dir == "Nukkit-MOT"
    assert settings.suffix == ".diff"
    assert settings.timeout == 45.0  # noqa: PLR2004


def test_precedence_file_then_env_then_explicit(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("target_dir: from-file\ntool: file-git\n", encoding="utf-8")
    environ = {"VENDORPATCH_TARGET_DIR": "from-env", "VENDORPATCH_TIMEOUT": "12.5"}

    settings = load_settings(overrides={"root": tmp_path, "tool": "cli-git"}, environ=environ)

    assert settings.target_dir == "from-env"
    assert settings.tool == "cli-git"
    assert settings.timeout == 12.5  # noqa: PLR2004


def test_root_from_environment(tmp_path: Path) -> None:
    settings = load_settings(environ={"VENDORPATCH_ROOT": str(tmp_path)})
    assert settings.root == tmp_path.resolve()


def test_explicit_config_root_is_relative_to_file(tmp_path: Path) -> None:
    config_dir = tmp_path / "conf"
    config_dir.mkdir()
    config = config_dir / "patching.yaml"
    config.write_text("root: ../checkout\ntarget_dir: tree\n", encoding="utf-8")

    settings = load_settings(config_file=config, environ={})

    assert settings.root == (tmp_path / "checkout").resolve()
    assert settings.target_dir == "tree"


def test_explicit_config_must_exist(tmp_path: Path) -> None:
    with pytest.raises(SettingsError):
        load_settings(config_file=tmp_path / "missing.yaml", environ={})


def test_non_mapping_yaml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(SettingsError, match="Expected mapping"):
        load_settings(overrides={"root": tmp_path}, environ={})


def test_empty_yaml_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("", encoding="utf-8")
    assert load_settings(overrides={"root": tmp_path}, environ={}).target_dir == "vendor"


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("target: vendor\n", encoding="utf-8")
    with pytest.raises(SettingsError, match="unknown settings: target"):
        load_settings(overrides={"root": tmp_path}, environ={})


@pytest.mark.parametrize("value", ["soon", 0, -3, True])
def test_invalid_timeout(tmp_path: Path, value: object) -> None:
    with pytest.raises(SettingsError):
        Settings.from_dict({"timeout": value}, base=Settings(root=tmp_path))


def test_absolute_patches_dir_is_kept(tmp_path: Path) -> None:
    elsewhere = tmp_path / "elsewhere"
    settings = Settings.from_dict({"patches_dir": str(elsewhere)}, base=Settings(root=tmp_path / "root"))
    assert settings.patches_path == elsewhere


@pytest.mark.parametrize("raw", ['suffix: ""\n', "suffix: '   '\n"])
def test_blank_suffix_in_yaml_is_a_settings_error(tmp_path: Path, raw: str) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(raw, encoding="utf-8")
    with pytest.raises(SettingsError, match="suffix must not be empty"):
        load_settings(overrides={"root": tmp_path}, environ={})


def test_blank_suffix_from_environment_is_a_settings_error(tmp_path: Path) -> None:
    with pytest.raises(SettingsError):
        load_settings(overrides={"root": tmp_path}, environ={"VENDORPATCH_SUFFIX": " "})


def test_multi_part_suffix_is_kept(tmp_path: Path) -> None:
    settings = load_settings(overrides={"root": tmp_path, "suffix": "patch.gz"}, environ={})
    assert settings.suffix == ".patch.gz"


@pytest.mark.parametrize("value", ["/srv/vendor", "C:\\vendor", "", "  "])
def test_target_dir_must_be_relative_and_non_empty(tmp_path: Path, value: str) -> None:
    with pytest.raises(SettingsError, match="target_dir"):
        Settings.from_dict({"target_dir": value}, base=Settings(root=tmp_path))


def test_nested_relative_target_dir_is_accepted(tmp_path: Path) -> None:
    settings = Settings.from_dict({"target_dir": "third_party/tree"}, base=Settings(root=tmp_path))
    assert settings.target_spec().absolute == tmp_path / "third_party" / "tree"
