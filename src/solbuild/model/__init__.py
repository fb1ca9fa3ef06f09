# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model for compiler documents and normalized build results."""

from solbuild.model.documents import (
    ERROR_SEVERITY,
    Bytecode,
    CompilerDiagnostic,
    CompilerInput,
    CompilerOutput,
    ContractInfo,
    DeployedBytecode,
    EvmOutput,
    SourceFile,
    SourceInfo,
)
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

__all__ = [
    # Compiler documents
    "ERROR_SEVERITY",
    "SourceFile",
    "CompilerInput",
    "CompilerDiagnostic",
    "Bytecode",
    "DeployedBytecode",
    "EvmOutput",
    "ContractInfo",
    "SourceInfo",
    "CompilerOutput",
    # Build results
    "PerContract",
    "AllContracts",
    "ContractSelection",
    "PerContractArtifact",
    "AllContractsArtifactMatrix",
    "ContractArtifacts",
    "SourceRecord",
    "CompilerArgs",
    "BuildResult",
]
