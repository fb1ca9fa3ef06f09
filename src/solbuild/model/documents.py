# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Models for the Solidity compiler's standard JSON input and output documents.

Only the fields the build pipeline reads are declared.  Every model allows
extra keys so that a document round-trips without losing compiler options
or output sections this package does not interpret.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

ERROR_SEVERITY = "error"


class SourceFile(BaseModel):
    """One entry of the input document's ``sources`` mapping."""

    model_config = ConfigDict(extra="allow")

    content: str = _Field(min_length=1)


class CompilerInput(BaseModel):
    """A standard JSON compiler input document."""

    model_config = ConfigDict(extra="allow")

    language: str = "Solidity"
    sources: dict[str, SourceFile]
    settings: dict[str, Any] = _Field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        """Return the plain JSON document sent to the compiler."""
        return self.model_dump(mode="json", by_alias=True)


class CompilerDiagnostic(BaseModel):
    """An entry of the output document's ``errors`` list."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    severity: str
    message: str = ""
    formatted_message: str | None = _Field(default=None, alias="formattedMessage")

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR_SEVERITY

    def render(self) -> str:
        """Return the human-readable diagnostic text."""
        return self.formatted_message or self.message


class Bytecode(BaseModel):
    """The ``evm.bytecode`` section of a contract."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    code: str = _Field(default="", alias="object")


class DeployedBytecode(BaseModel):
    """The ``evm.deployedBytecode`` section of a contract."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    code: str = _Field(default="", alias="object")
    source_map: str | None = _Field(default=None, alias="sourceMap")


class EvmOutput(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    bytecode: Bytecode = _Field(default_factory=Bytecode)
    deployed_bytecode: DeployedBytecode = _Field(default_factory=DeployedBytecode, alias="deployedBytecode")


class ContractInfo(BaseModel):
    """Per-contract compiler output: ABI plus EVM artifacts."""

    model_config = ConfigDict(extra="allow")

    abi: list[dict[str, Any]] = _Field(default_factory=list)
    evm: EvmOutput = _Field(default_factory=EvmOutput)


class SourceInfo(BaseModel):
    """Per-file compiler output.

    The compiler never echoes source text; ``source`` is filled in from the
    input document during normalization.
    """

    model_config = ConfigDict(extra="allow")

    id: int | None = None
    ast: dict[str, Any] | None = None
    source: str | None = None


class CompilerOutput(BaseModel):
    """A standard JSON compiler output document."""

    model_config = ConfigDict(extra="allow")

    errors: list[CompilerDiagnostic] = _Field(default_factory=list)
    contracts: dict[str, dict[str, ContractInfo]] = _Field(default_factory=dict)
    sources: dict[str, SourceInfo] = _Field(default_factory=dict)

    def fatal_diagnostics(self) -> list[CompilerDiagnostic]:
        """Return the diagnostics with severity ``error``, in document order."""
        return [diagnostic for diagnostic in self.errors if diagnostic.is_error]
