# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""The normalized artifact bundle returned by the build pipeline."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PerContract(BaseModel):
    """Select the artifacts of a single contract, looked up by name."""

    kind: Literal["contract"] = "contract"
    name: str = _Field(min_length=1)


class AllContracts(BaseModel):
    """Select the artifacts of every contract in every source file."""

    kind: Literal["all"] = "all"


# Which contracts a build should extract artifacts for.
ContractSelection = Annotated[PerContract | AllContracts, _Field(discriminator="kind")]


class PerContractArtifact(BaseModel):
    """Artifacts of the one contract named by a :class:`PerContract` selection."""

    kind: Literal["contract"] = "contract"
    contract_name: str
    source_path: str
    bytecode: str
    runtime_bytecode: str
    abi: list[dict[str, Any]]
    sourcemap: str | None = None


class AllContractsArtifactMatrix(BaseModel):
    """Artifacts of every contract, keyed ``source path -> contract name``."""

    kind: Literal["matrix"] = "matrix"
    bytecode: dict[str, dict[str, str]] = _Field(default_factory=dict)
    runtime_bytecode: dict[str, dict[str, str]] = _Field(default_factory=dict)
    abi: dict[str, dict[str, list[dict[str, Any]]]] = _Field(default_factory=dict)
    sourcemap: dict[str, dict[str, str | None]] = _Field(default_factory=dict)


ContractArtifacts = Annotated[PerContractArtifact | AllContractsArtifactMatrix, _Field(discriminator="kind")]


class SourceRecord(BaseModel):
    """A source file as seen by the compiler: its numeric id and its text."""

    id: int | None = None
    source: str


class CompilerArgs(BaseModel):
    """Provenance of a build: the version string and the exact input document."""

    version: str
    compiler_json: dict[str, Any]


class BuildResult(BaseModel):
    """Everything extracted from one compiler run.

    Attributes:
        ast: Processed AST view produced by the AST analyzer, or the raw
            per-file ASTs when analysis failed.
        sources: Mapping from source path to its id and original text.
        artifacts: Bytecode, runtime bytecode, ABI and source map, either for
            one contract or for all of them depending on the selection.
        invariants: Output of the invariant extractor, ``None`` when no
            extractor ran or extraction failed.
        compiler_args: The version string and input document used.
        remappings: Import remappings from the input settings, if any.
    """

    ast: Any = None
    sources: dict[str, SourceRecord] = _Field(default_factory=dict)
    artifacts: ContractArtifacts
    invariants: Any = None
    compiler_args: CompilerArgs
    remappings: list[str] | None = None

    @property
    def bytecode(self) -> str | dict[str, dict[str, str]]:
        return self.artifacts.bytecode

    @property
    def runtime_bytecode(self) -> str | dict[str, dict[str, str]]:
        return self.artifacts.runtime_bytecode

    @property
    def abi(self) -> list[dict[str, Any]] | dict[str, dict[str, list[dict[str, Any]]]]:
        return self.artifacts.abi

    @property
    def sourcemap(self) -> str | None | dict[str, dict[str, str | None]]:
        return self.artifacts.sourcemap

    def to_legacy_dict(self) -> dict[str, Any]:
        """Return the flat JSON shape consumed by downstream tooling.

        The artifact fields are inlined: scalars for a single-contract build,
        two-level ``path -> name`` mappings for an all-contracts build.
        """
        return {
            "ast": self.ast,
            "sourcemap": self.sourcemap,
            "sources": {path: record.model_dump(mode="json") for path, record in self.sources.items()},
            "bytecode": self.bytecode,
            "runtime_bytecode": self.runtime_bytecode,
            "abi": self.abi,
            "invariants": self.invariants,
            "compiler_args": self.compiler_args.model_dump(mode="json"),
            "remappings": self.remappings,
        }
