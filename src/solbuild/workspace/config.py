# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the optional ``.solbuild.yaml`` project file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from solbuild.workspace.project import ProjectKind

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".solbuild.yaml"
DEFAULT_CACHE_DIRECTORY = ".tmp"
DEFAULT_COMPILER_TIMEOUT = 600


class ProjectConfigError(Exception):
    """Raised when a project configuration file is invalid or cannot be loaded."""


@dataclass
class ProjectConfig:
    """The parsed configuration of a project.

    Attributes:
        cache_directory: Path (relative to the project root) of the compiler cache.
        compiler_version: Default compiler version for folder builds.
        project: How the project is built; ``AUTO`` detects it from the layout.
        compiler_timeout: Limit in seconds for each compiler subprocess.
    """

    cache_directory: str = DEFAULT_CACHE_DIRECTORY
    compiler_version: str | None = None
    project: ProjectKind = ProjectKind.AUTO
    compiler_timeout: int = DEFAULT_COMPILER_TIMEOUT


def load_project_config(path: Path) -> ProjectConfig:
    """Load and parse a project configuration file.

    Args:
        path: Path to the ``.solbuild.yaml`` file.

    Returns:
        A ProjectConfig instance populated from the file.

    Raises:
        ProjectConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ProjectConfigError(f"Project config file not found: {path}") from None
    except OSError as exc:
        raise ProjectConfigError(f"Cannot read project config file: {exc}") from exc

    return _parse_project_config(text, source_label=str(path))


# ################
# Implementation
# ################


def _parse_project_config(text: str, source_label: str = "<string>") -> ProjectConfig:
    """Parse project config YAML text into a ProjectConfig.

    An empty document yields the defaults.

    Raises:
        ProjectConfigError: If the YAML is invalid or a field has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ProjectConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return ProjectConfig()
    if not isinstance(data, dict):
        raise ProjectConfigError(f"{source_label}: project config must be a YAML mapping")

    config = ProjectConfig()
    if "cache-directory" in data:
        config.cache_directory = _require_string(data, "cache-directory", source_label)
    if "compiler-version" in data:
        config.compiler_version = _require_string(data, "compiler-version", source_label)
    if "project" in data:
        raw_project = _require_string(data, "project", source_label)
        try:
            config.project = ProjectKind(raw_project)
        except ValueError:
            choices = ", ".join(kind.value for kind in ProjectKind)
            raise ProjectConfigError(
                f"{source_label}: unknown project '{raw_project}' (expected one of: {choices})"
            ) from None
    if "compiler-timeout" in data:
        timeout = data["compiler-timeout"]
        # bool is an int subclass
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ProjectConfigError(f"{source_label}: 'compiler-timeout' must be a positive integer")
        config.compiler_timeout = timeout
    return config


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a string field from a mapping, raising ProjectConfigError if it is not a string."""
    value = mapping[key]
    if not isinstance(value, str):
        raise ProjectConfigError(f"{source_label}: '{key}' must be a string")
    return value
