# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Solbuild: cached Solidity compilation producing normalized contract artifacts."""

__version__ = "0.1.0"
