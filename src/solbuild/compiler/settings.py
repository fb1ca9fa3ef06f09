# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler settings augmentation.

Guarantees that every compiler input requests the output sections the
normalizer reads, while keeping whatever the caller already configured.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

# ###############
# Public Interface
# ###############

WILDCARD = "*"
FILE_LEVEL = ""

# Selectors requested for every contract of every file.
CONTRACT_OUTPUTS: tuple[str, ...] = (
    "ast",
    "legacyAST",
    "evm.deployedBytecode.sourceMap",
    "evm.bytecode",
    "evm.deployedBytecode",
    "abi",
)

# Selectors requested for every file as a whole.
FILE_OUTPUTS: tuple[str, ...] = ("ast", "legacyAST")


def augment_settings(settings: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return a copy of *settings* whose ``outputSelection`` requests all mandatory outputs.

    Selectors already present are kept in their original order and the
    mandatory ones are appended when missing, so applying this function to
    its own result changes nothing.  Keys other than ``outputSelection`` are
    copied through untouched.  The argument is never mutated.

    Args:
        settings: Caller-supplied compiler settings, possibly ``None``.

    Returns:
        A new settings mapping.
    """
    augmented: dict[str, Any] = copy.deepcopy(dict(settings)) if settings else {}

    selection = augmented.get("outputSelection")
    if not isinstance(selection, dict):
        selection = {}
    file_selection = selection.get(WILDCARD)
    if not isinstance(file_selection, dict):
        file_selection = {}

    file_selection[WILDCARD] = _union(file_selection.get(WILDCARD), CONTRACT_OUTPUTS)
    file_selection[FILE_LEVEL] = _union(file_selection.get(FILE_LEVEL), FILE_OUTPUTS)

    selection[WILDCARD] = file_selection
    augmented["outputSelection"] = selection
    return augmented


# ################
# Implementation
# ################


def _union(existing: object, required: tuple[str, ...]) -> list[str]:
    """Return *existing* (deduplicated, order kept) extended by the missing *required* selectors."""
    merged: list[str] = []
    if isinstance(existing, list):
        for selector in existing:
            if selector not in merged:
                merged.append(selector)
    for selector in required:
        if selector not in merged:
            merged.append(selector)
    return merged
