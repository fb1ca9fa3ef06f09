# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project layout helpers: type detection, source collection, and remappings."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

import structlog

from solbuild.model.documents import SourceFile

logger = structlog.get_logger(__name__)

# ###############
# Public Interface
# ###############

REMAPPINGS_FILE_NAME = "remappings.txt"
SOLIDITY_SUFFIX = ".sol"


class ProjectFileError(Exception):
    """Raised when a project file cannot be read or is not valid UTF-8.

    Attributes:
        path: The file that could not be read.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read project file '{path}': {reason}")
        self.path = path


class ProjectKind(Enum):
    """How the sources of a project are turned into compiler inputs."""

    AUTO = "auto"
    HARDHAT = "hardhat"
    FORGE = "forge"
    SOLIDITY_FOLDER = "solidity_folder"


def detect_project(task_dir: Path) -> ProjectKind:
    """Infer the project kind from marker files at the top of *task_dir*.

    Foundry markers (``forge.toml`` / ``foundry.toml``) win over Hardhat
    markers (``hardhat.config.js`` / ``hardhat.config.ts``).  Without any
    marker every ``.sol`` file in the directory is treated as a source.
    """
    names = [entry.name for entry in task_dir.iterdir()] if task_dir.is_dir() else []

    if any(_FORGE_CONFIG_RE.search(name) for name in names):
        return ProjectKind.FORGE
    if any(_HARDHAT_CONFIG_RE.search(name) for name in names):
        return ProjectKind.HARDHAT

    logger.warning("unknown_project_layout", task_dir=str(task_dir), fallback=ProjectKind.SOLIDITY_FOLDER.value)
    return ProjectKind.SOLIDITY_FOLDER


def collect_sources(task_dir: Path) -> dict[str, SourceFile]:
    """Read every ``.sol`` file below *task_dir*.

    Keys are POSIX paths relative to *task_dir* (so that remappings, which
    are relative to the project root, resolve), in sorted order.  Empty
    files are skipped because the compiler input requires non-empty
    content.

    Raises:
        ProjectFileError: If a source file cannot be read or is not UTF-8.
    """
    sources: dict[str, SourceFile] = {}
    for path in sorted(task_dir.rglob("*" + SOLIDITY_SUFFIX)):
        if not path.is_file():
            continue
        content = _read_text(path)
        key = path.relative_to(task_dir).as_posix()
        if not content:
            logger.warning("empty_source_skipped", path=key)
            continue
        sources[key] = SourceFile(content=content)
    return sources


def load_remappings(task_dir: Path) -> list[str]:
    """Return the import remappings listed in ``remappings.txt``, if present.

    Lines are stripped and blank lines ignored.

    Raises:
        ProjectFileError: If the file exists but cannot be read.
    """
    remappings_file = task_dir / REMAPPINGS_FILE_NAME
    if not remappings_file.is_file():
        return []
    lines = _read_text(remappings_file).splitlines()
    return [line.strip() for line in lines if line.strip()]


# ################
# Implementation
# ################

_FORGE_CONFIG_RE = re.compile(r"(forge|foundry)\.toml$")
_HARDHAT_CONFIG_RE = re.compile(r"hardhat\.config\.(js|ts)$")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ProjectFileError(path, f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    except OSError as exc:
        raise ProjectFileError(path, exc.strerror or str(exc)) from exc
