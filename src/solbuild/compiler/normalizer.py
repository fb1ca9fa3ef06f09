# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Normalization of raw compiler output into a :class:`BuildResult`.

Normalization fails fast on compiler errors.  Post-processing does not: if
AST analysis or invariant extraction raises, the failure is logged and the
affected field degrades to a fallback (raw ASTs) or ``None``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from solbuild.compiler.analysis import AstAnalyzer, InvariantExtractor
from solbuild.compiler.errors import (
    AmbiguousContractNameError,
    CompilationDiagnosticError,
    ContractNotFoundError,
    MalformedCompilerOutputError,
)
from solbuild.model.documents import CompilerOutput, ContractInfo, SourceInfo
from solbuild.model.result import (
    AllContracts,
    AllContractsArtifactMatrix,
    BuildResult,
    CompilerArgs,
    ContractArtifacts,
    ContractSelection,
    PerContract,
    PerContractArtifact,
    SourceRecord,
)

logger = structlog.get_logger(__name__)

# ###############
# Public Interface
# ###############


def normalize(
    output_document: Mapping[str, Any],
    compiler_version: str,
    input_document: Mapping[str, Any],
    selection: ContractSelection | None = None,
    *,
    ast_analyzer: AstAnalyzer | None = None,
    invariant_extractor: InvariantExtractor | None = None,
) -> BuildResult:
    """Turn a raw compiler output document into a :class:`BuildResult`.

    Steps:
    1. Fail if any diagnostic has severity ``error``.
    2. Copy each input file's ``content`` into the output's ``sources`` as
       ``source``, since the compiler does not echo source text.
    3. Run *ast_analyzer*; on failure fall back to the raw per-file ASTs
       and skip invariant extraction.
    4. Run *invariant_extractor* over the analyzed tree; on failure leave
       ``invariants`` as ``None``.
    5. Extract bytecode, runtime bytecode, ABI and source map for the
       selected contract(s).

    Args:
        output_document: Standard JSON output of the compiler.
        compiler_version: Version string recorded in ``compiler_args``.
        input_document: The input document that produced *output_document*.
        selection: Single contract or all contracts (the default).
        ast_analyzer: Optional AST analysis collaborator.
        invariant_extractor: Optional invariant extraction collaborator.

    Raises:
        MalformedCompilerOutputError: If the output document has an unexpected shape.
        CompilationDiagnosticError: If the compiler reported errors.
        ContractNotFoundError: If the selected contract is not defined anywhere.
        AmbiguousContractNameError: If the selected contract name is defined in several files.
    """
    selection = selection if selection is not None else AllContracts()

    try:
        output = CompilerOutput.model_validate(output_document)
    except ValidationError as exc:
        raise MalformedCompilerOutputError(f"Unexpected compiler output document: {exc}") from exc

    fatal = output.fatal_diagnostics()
    if fatal:
        raise CompilationDiagnosticError([diagnostic.render() for diagnostic in fatal])
    for diagnostic in output.errors:
        logger.debug("compiler_diagnostic", severity=diagnostic.severity, message=diagnostic.render())

    _merge_sources(output, input_document)

    ast, ast_tree = _analyze_ast(output, ast_analyzer)
    invariants = _extract_invariants(ast_tree, invariant_extractor)

    settings = input_document.get("settings") or {}
    remappings = settings.get("remappings") if isinstance(settings, Mapping) else None

    return BuildResult(
        ast=ast,
        sources={
            path: SourceRecord(id=info.id, source=info.source or "")
            for path, info in output.sources.items()
        },
        artifacts=extract_artifacts(output, selection),
        invariants=invariants,
        compiler_args=CompilerArgs(version=compiler_version, compiler_json=dict(input_document)),
        remappings=list(remappings) if remappings is not None else None,
    )


def extract_artifacts(output: CompilerOutput, selection: ContractSelection) -> ContractArtifacts:
    """Collect contract artifacts according to *selection*.

    Raises:
        ContractNotFoundError: If a :class:`PerContract` name matches nothing.
        AmbiguousContractNameError: If it matches contracts in several files.
    """
    if isinstance(selection, PerContract):
        return _single_contract(output, selection.name)

    matrix = AllContractsArtifactMatrix()
    for path, contracts in output.contracts.items():
        matrix.bytecode[path] = {}
        matrix.runtime_bytecode[path] = {}
        matrix.abi[path] = {}
        matrix.sourcemap[path] = {}
        for name, info in contracts.items():
            matrix.bytecode[path][name] = info.evm.bytecode.code
            matrix.runtime_bytecode[path][name] = info.evm.deployed_bytecode.code
            matrix.abi[path][name] = info.abi
            matrix.sourcemap[path][name] = info.evm.deployed_bytecode.source_map
    return matrix


# ################
# Implementation
# ################


def _merge_sources(output: CompilerOutput, input_document: Mapping[str, Any]) -> None:
    for path, source_file in (input_document.get("sources") or {}).items():
        content = source_file.get("content") if isinstance(source_file, Mapping) else None
        if content is None:
            continue
        info = output.sources.setdefault(path, SourceInfo())
        info.source = content


def _analyze_ast(output: CompilerOutput, ast_analyzer: AstAnalyzer | None) -> tuple[Any, Any]:
    """Return ``(ast, ast_tree)``; ``ast_tree`` is None when analysis was skipped or failed."""
    raw_ast = {path: info.ast for path, info in output.sources.items()}
    if ast_analyzer is None:
        return raw_ast, None

    started = time.monotonic()
    try:
        analysis = ast_analyzer.analyze(output)
    except Exception:
        logger.warning("ast_analysis_failed", exc_info=True)
        return raw_ast, None
    logger.info("ast_analyzed", elapsed=round(time.monotonic() - started, 3))
    return analysis.ast, analysis.ast_tree


def _extract_invariants(ast_tree: Any, invariant_extractor: InvariantExtractor | None) -> Any:
    if ast_tree is None or invariant_extractor is None:
        return None
    try:
        return invariant_extractor.extract(ast_tree)
    except Exception:
        logger.warning("invariant_extraction_failed", exc_info=True)
        return None


def _single_contract(output: CompilerOutput, contract_name: str) -> PerContractArtifact:
    matches: list[tuple[str, ContractInfo]] = [
        (path, contracts[contract_name])
        for path, contracts in output.contracts.items()
        if contract_name in contracts
    ]
    if not matches:
        raise ContractNotFoundError(f"Contract '{contract_name}' not found in compiler output")
    if len(matches) > 1:
        raise AmbiguousContractNameError(contract_name, [path for path, _ in matches])

    path, info = matches[0]
    return PerContractArtifact(
        contract_name=contract_name,
        source_path=path,
        bytecode=info.evm.bytecode.code,
        runtime_bytecode=info.evm.deployed_bytecode.code,
        abi=info.abi,
        sourcemap=info.evm.deployed_bytecode.source_map,
    )
