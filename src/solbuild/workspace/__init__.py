# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project configuration, layout detection, and framework build-info retrieval."""

from solbuild.workspace.config import (
    CONFIG_FILE_NAME,
    ProjectConfig,
    ProjectConfigError,
    load_project_config,
)
from solbuild.workspace.frameworks import (
    BuildInfo,
    BuildInfoProvider,
    BuildInfoResult,
    forge_build_info,
    hardhat_build_info,
    read_build_info_dir,
)
from solbuild.workspace.project import (
    REMAPPINGS_FILE_NAME,
    ProjectFileError,
    ProjectKind,
    collect_sources,
    detect_project,
    load_remappings,
)

__all__ = [
    "BuildInfo",
    "BuildInfoProvider",
    "BuildInfoResult",
    "CONFIG_FILE_NAME",
    "ProjectConfig",
    "ProjectConfigError",
    "ProjectFileError",
    "ProjectKind",
    "REMAPPINGS_FILE_NAME",
    "collect_sources",
    "detect_project",
    "forge_build_info",
    "hardhat_build_info",
    "load_project_config",
    "load_remappings",
    "read_build_info_dir",
]
