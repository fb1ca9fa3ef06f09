# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Retrieving compiler inputs from framework build tools.

Hardhat and Foundry both record, per compilation, a *build-info* JSON file
holding the long compiler version and the standard JSON input they sent to
``solc``.  The providers here run the framework build and read those files
back.  They report failure through :class:`BuildInfoResult` instead of
raising, leaving the decision to the caller.
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = structlog.get_logger(__name__)

# ###############
# Public Interface
# ###############

DEFAULT_TIMEOUT = 600

HARDHAT_BUILD_COMMAND = ["npx", "hardhat", "compile"]
HARDHAT_BUILD_INFO_DIR = Path("artifacts") / "build-info"

FORGE_BUILD_COMMAND = ["forge", "build", "--build-info"]
FORGE_BUILD_INFO_DIR = Path("out") / "build-info"


class BuildInfo(BaseModel):
    """One build-info record: the compiler version and the input it was given."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    solc_long_version: str = Field(alias="solcLongVersion")
    input: dict[str, Any]


class BuildInfoResult(BaseModel):
    """Outcome of a framework build."""

    success: bool
    contents: list[BuildInfo] = Field(default_factory=list)
    err: str | None = None


BuildInfoProvider = Callable[[Path], BuildInfoResult]


def hardhat_build_info(task_dir: Path, *, timeout: int = DEFAULT_TIMEOUT) -> BuildInfoResult:
    """Run ``npx hardhat compile`` in *task_dir* and read its build-info files."""
    return _build_and_collect(HARDHAT_BUILD_COMMAND, task_dir, task_dir / HARDHAT_BUILD_INFO_DIR, timeout=timeout)


def forge_build_info(task_dir: Path, *, timeout: int = DEFAULT_TIMEOUT) -> BuildInfoResult:
    """Run ``forge build --build-info`` in *task_dir* and read its build-info files."""
    return _build_and_collect(FORGE_BUILD_COMMAND, task_dir, task_dir / FORGE_BUILD_INFO_DIR, timeout=timeout)


def read_build_info_dir(build_info_dir: Path) -> BuildInfoResult:
    """Load every ``*.json`` build-info file in *build_info_dir*, in name order."""
    if not build_info_dir.is_dir():
        return BuildInfoResult(success=False, err=f"Build-info directory not found: {build_info_dir}")

    contents: list[BuildInfo] = []
    for path in sorted(build_info_dir.glob("*.json")):
        try:
            contents.append(BuildInfo.model_validate(json.loads(path.read_text(encoding="utf-8"))))
        except OSError as exc:
            return BuildInfoResult(success=False, err=f"Cannot read build-info file '{path}': {exc}")
        except (json.JSONDecodeError, ValidationError) as exc:
            return BuildInfoResult(success=False, err=f"Invalid build-info file '{path}': {exc}")
    return BuildInfoResult(success=True, contents=contents)


# ################
# Implementation
# ################


def _build_and_collect(command: list[str], task_dir: Path, build_info_dir: Path, *, timeout: int) -> BuildInfoResult:
    logger.info("framework_build_started", command=" ".join(command), task_dir=str(task_dir))
    try:
        result = subprocess.run(
            command,
            cwd=task_dir,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return BuildInfoResult(success=False, err=f"{command[0]} executable not found on PATH")
    except subprocess.TimeoutExpired:
        return BuildInfoResult(success=False, err=f"Command timed out: {' '.join(command)}")

    if result.returncode != 0:
        return BuildInfoResult(success=False, err=result.stderr.strip() or result.stdout.strip())
    return read_build_info_dir(build_info_dir)
