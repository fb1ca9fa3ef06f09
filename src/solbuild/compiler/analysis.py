# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interfaces for post-compilation AST analysis and invariant extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from solbuild.model.documents import CompilerOutput

# ###############
# Public Interface
# ###############


@dataclass
class AstAnalysis:
    """Result of an AST analyzer.

    Attributes:
        ast: Processed AST view attached to the build result.
        ast_tree: Tree handed to the invariant extractor.
    """

    ast: Any
    ast_tree: Any


class AstAnalyzer(Protocol):
    def analyze(self, output: CompilerOutput) -> AstAnalysis: ...


class InvariantExtractor(Protocol):
    def extract(self, ast_tree: Any) -> Any: ...


class SourceUnitAstAnalyzer:
    """Default analyzer exposing the compiler's per-file ASTs.

    ``ast`` maps each source path to its ``SourceUnit`` node; ``ast_tree`` is
    the list of ``SourceUnit`` nodes ordered by source id.
    """

    def analyze(self, output: CompilerOutput) -> AstAnalysis:
        missing = [path for path, info in output.sources.items() if info.ast is None]
        if missing:
            raise ValueError(f"Compiler output has no AST for: {', '.join(sorted(missing))}")
        ordered = sorted(output.sources.items(), key=lambda item: (item[1].id is None, item[1].id or 0, item[0]))
        return AstAnalysis(
            ast={path: info.ast for path, info in output.sources.items()},
            ast_tree=[info.ast for _, info in ordered],
        )
