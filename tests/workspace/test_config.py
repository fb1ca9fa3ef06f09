# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the project configuration module."""

from pathlib import Path

import pytest

from solbuild.workspace import (
    ProjectConfig,
    ProjectConfigError,
    ProjectKind,
    load_project_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a project config file and return its path."""
    config_file = tmp_path / ".solbuild.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    """An empty file yields the default configuration."""
    config = load_project_config(_write_config(tmp_path, ""))

    assert isinstance(config, ProjectConfig)
    assert config.cache_directory == ".tmp"
    assert config.compiler_version is None
    assert config.project is ProjectKind.AUTO
    assert config.compiler_timeout == 600


def test_full_config(tmp_path: Path) -> None:
    """All supported keys are parsed."""
    content = """\
cache-directory: build/cache
compiler-version: v0.8.20
project: solidity_folder
compiler-timeout: 120
"""
    config = load_project_config(_write_config(tmp_path, content))

    assert config.cache_directory == "build/cache"
    assert config.compiler_version == "v0.8.20"
    assert config.project is ProjectKind.SOLIDITY_FOLDER
    assert config.compiler_timeout == 120


def test_partial_config_keeps_other_defaults(tmp_path: Path) -> None:
    """Keys that are not given keep their defaults."""
    config = load_project_config(_write_config(tmp_path, "project: forge\n"))

    assert config.project is ProjectKind.FORGE
    assert config.cache_directory == ".tmp"


# ###############
# Error Cases
# ###############


def test_missing_file_raises(tmp_path: Path) -> None:
    """A missing file raises ProjectConfigError."""
    with pytest.raises(ProjectConfigError, match="not found"):
        load_project_config(tmp_path / ".solbuild.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    """Malformed YAML raises ProjectConfigError."""
    with pytest.raises(ProjectConfigError, match="Invalid YAML"):
        load_project_config(_write_config(tmp_path, "project: [unclosed\n"))


def test_non_mapping_raises(tmp_path: Path) -> None:
    """A YAML list at the top level raises ProjectConfigError."""
    with pytest.raises(ProjectConfigError, match="must be a YAML mapping"):
        load_project_config(_write_config(tmp_path, "- a\n- b\n"))


def test_unknown_project_raises(tmp_path: Path) -> None:
    """An unknown project kind lists the valid choices."""
    with pytest.raises(ProjectConfigError, match="unknown project 'truffle'.*solidity_folder"):
        load_project_config(_write_config(tmp_path, "project: truffle\n"))


def test_non_string_version_raises(tmp_path: Path) -> None:
    """A numeric compiler version is rejected (YAML would read 0.8 as a float)."""
    with pytest.raises(ProjectConfigError, match="'compiler-version' must be a string"):
        load_project_config(_write_config(tmp_path, "compiler-version: 0.8\n"))


@pytest.mark.parametrize("value", ["0", "-5", "true", "'60'"])
def test_invalid_timeout_raises(tmp_path: Path, value: str) -> None:
    """The compiler timeout must be a positive integer."""
    with pytest.raises(ProjectConfigError, match="positive integer"):
        load_project_config(_write_config(tmp_path, f"compiler-timeout: {value}\n"))


def test_error_message_contains_path(tmp_path: Path) -> None:
    """Error messages name the offending file."""
    config_file = _write_config(tmp_path, "cache-directory: 3\n")
    with pytest.raises(ProjectConfigError, match=str(config_file)):
        load_project_config(config_file)
