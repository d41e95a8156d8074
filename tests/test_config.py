"""Tests for settings file loading and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from cascadefs.cli import _parse_args  # pyright: ignore[reportPrivateUsage]
from cascadefs.config import (
    CascadeSettings,
    find_config_file,
    load_config,
    merge_cli_with_config,
)
from cascadefs.errors import InvalidConfigurationError


def test_find_config_cascadefs_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text('roots = ["app"]\n')
    result = find_config_file(tmp_path)
    assert result == config_file


def test_find_config_dot_cascadefs_toml_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "cascadefs.toml").write_text('roots = ["app"]\n')
    dot_config = tmp_path / ".cascadefs.toml"
    dot_config.write_text('roots = ["system"]\n')
    result = find_config_file(tmp_path)
    assert result == dot_config


def test_find_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text('[tool.cascadefs]\nroots = ["app"]\n')
    result = find_config_file(tmp_path)
    assert result == config_file


def test_find_config_pyproject_without_section_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n")
    result = find_config_file(tmp_path)
    assert result is None


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text('roots = ["app"]\n')
    subdir = tmp_path / "sub" / "deep"
    subdir.mkdir(parents=True)
    result = find_config_file(subdir)
    assert result == config_file


def test_find_config_none_when_missing(tmp_path: Path) -> None:
    result = find_config_file(tmp_path)
    assert result is None


def test_load_config_resolves_relative_roots(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text('roots = ["app", "modules/auth", "/opt/system"]\ncaching = false\n')
    config = load_config(config_file)
    base = tmp_path.resolve()
    assert config.roots == [str(base / "app"), str(base / "modules" / "auth"), "/opt/system"]
    assert config.caching is False
    # Unset fields should be None (not set)
    assert config.extensions is None
    assert config.ignore is None


def test_load_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text('[tool.cascadefs]\nextensions = ["php", "html"]\n')
    config = load_config(config_file)
    assert config.extensions == ["php", "html"]
    assert config.roots is None


def test_load_config_kebab_case_and_sections(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text(
        "[lookup]\n"
        'merge-categories = ["config", "i18n", "messages"]\n'
        "\n"
        "[enumeration]\n"
        'extend-ignore = ["*.bak"]\n'
        "respect-ignore-files = false\n"
        'log-level = "debug"\n'
    )
    config = load_config(config_file)
    assert config.merge_categories == ["config", "i18n", "messages"]
    assert config.extend_ignore == ["*.bak"]
    assert config.respect_ignore_files is False
    assert config.log_level == "debug"


def test_load_config_ignores_unknown_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text('unknown-key = 1\nextensions = ["php"]\n')
    config = load_config(config_file)
    assert config.extensions == ["php"]


def test_load_config_rejects_wrong_types(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text('roots = "app"\n')
    with pytest.raises(InvalidConfigurationError):
        load_config(config_file)

    config_file.write_text('caching = "yes"\n')
    with pytest.raises(InvalidConfigurationError):
        load_config(config_file)


def test_load_config_invalid_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text("roots = [\n")
    with pytest.raises(InvalidConfigurationError):
        load_config(config_file)


def test_load_config_log_level_must_be_string(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text("log-level = 10\n")
    with pytest.raises(InvalidConfigurationError, match="log-level"):
        load_config(config_file)


def test_load_config_undecodable_file(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_bytes(b'roots = ["\xff\xfe"]\n')
    with pytest.raises(InvalidConfigurationError, match="Cannot read settings file"):
        load_config(config_file)


def test_load_config_accepts_snake_case_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "cascadefs.toml"
    config_file.write_text('extend_ignore = ["*.tmp"]\n')
    assert load_config(config_file).extend_ignore == ["*.tmp"]


def test_find_config_nearest_directory_wins(tmp_path: Path) -> None:
    (tmp_path / ".cascadefs.toml").write_text('roots = ["app"]\n')
    subdir = tmp_path / "sub"
    subdir.mkdir()
    nearer = subdir / "pyproject.toml"
    nearer.write_text('[tool.cascadefs]\nroots = ["app"]\n')
    assert find_config_file(subdir) == nearer


def test_merge_config_fills_unset_options() -> None:
    options, explicit = _parse_args(["roots"])
    config = CascadeSettings(roots=["/app", "/sys"], caching=False, log_level="info")
    merge_cli_with_config(options, config, explicit)
    assert options.roots == ["/app", "/sys"]
    assert options.caching is False
    assert options.log_level == "info"


def test_merge_explicit_cli_flags_win() -> None:
    options, explicit = _parse_args(["--root", "/cli", "--ext", "php", "roots"])
    assert explicit == {"roots", "extensions"}
    config = CascadeSettings(roots=["/app"], extensions=["toml"], extend_ignore=["*.bak"])
    merge_cli_with_config(options, config, explicit)
    assert options.roots == ["/cli"]
    assert options.extensions == ["php"]
    assert options.extend_ignore == ["*.bak"]


def test_merge_none_config_is_noop() -> None:
    options, explicit = _parse_args(["roots"])
    assert merge_cli_with_config(options, None, explicit) is options
    assert options.roots is None
