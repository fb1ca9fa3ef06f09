# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build pipeline for Solidity projects.

A single compilation runs strictly in order:

1. **Augment** the input settings so all required outputs are selected.
2. **Resolve** the input against the cache, recording the input document.
3. **Invoke** the compiler, unless the output is already cached, and store
   its output.
4. **Normalize** the output into a :class:`~solbuild.model.result.BuildResult`.

:func:`build` sits on top and turns a project directory into compiler
inputs:

* **hardhat** / **forge**: the framework builds the project and each of
  its build-info records is compiled again through the pipeline, one after
  the other.
* **solidity_folder**: every ``.sol`` file below the directory, plus the
  remappings in ``remappings.txt``, forms one compiler input.  A compiler
  version must be given.
* **auto**: one of the above, chosen by
  :func:`~solbuild.workspace.project.detect_project`.
"""

from __future__ import annotations

import re
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from pydantic import ValidationError

from solbuild.compiler.analysis import AstAnalyzer, InvariantExtractor, SourceUnitAstAnalyzer
from solbuild.compiler.cache import CacheStore, resolve
from solbuild.compiler.errors import (
    MissingCompilerVersionError,
    SourceReadError,
    UnknownProjectError,
    UpstreamBuildError,
)
from solbuild.compiler.invoker import Invoker, invoke_compiler
from solbuild.compiler.normalizer import normalize
from solbuild.compiler.settings import augment_settings
from solbuild.model.documents import CompilerInput
from solbuild.model.result import AllContracts, BuildResult, ContractSelection
from solbuild.workspace.frameworks import BuildInfoProvider, forge_build_info, hardhat_build_info
from solbuild.workspace.project import (
    ProjectFileError,
    ProjectKind,
    collect_sources,
    detect_project,
    load_remappings,
)

logger = structlog.get_logger(__name__)

# ###############
# Public Interface
# ###############


def _default_frameworks() -> dict[ProjectKind, BuildInfoProvider]:
    return {ProjectKind.HARDHAT: hardhat_build_info, ProjectKind.FORGE: forge_build_info}


@dataclass
class BuildContext:
    """Collaborators shared by every compilation of a build.

    Attributes:
        store: Cache for input and output documents.
        invoker: Runs the compiler; defaults to ``solc`` via ``solc-select``.
        ast_analyzer: Produces the AST view and walkable tree.
        invariant_extractor: Derives invariants from the AST tree, if set.
        frameworks: Build-info providers for framework-managed projects.
    """

    store: CacheStore
    invoker: Invoker = invoke_compiler
    ast_analyzer: AstAnalyzer | None = field(default_factory=SourceUnitAstAnalyzer)
    invariant_extractor: InvariantExtractor | None = None
    frameworks: Mapping[ProjectKind, BuildInfoProvider] = field(default_factory=_default_frameworks)


def compile_json(
    compiler_version: str,
    compiler_input: CompilerInput,
    context: BuildContext,
    selection: ContractSelection | None = None,
) -> BuildResult:
    """Compile one standard JSON input and normalize the result.

    The compiler is not invoked if the cache already holds an output for the
    augmented input document.

    Args:
        compiler_version: Version string, e.g. ``v0.8.20+commit.a1b2c3d4``.
        compiler_input: The compiler input; its settings are augmented on a copy.
        context: Cache store and collaborators.
        selection: Single contract or all contracts (the default).

    Returns:
        The normalized build result.

    Raises:
        CompilerError: On invocation failure, compiler errors, cache failures,
            or an unresolvable contract selection.
    """
    selection = selection if selection is not None else AllContracts()

    document = compiler_input.to_document()
    document["settings"] = augment_settings(document.get("settings"))

    resolution = resolve(document, context.store)
    if resolution.has_output:
        logger.info("compiler_output_cached", cache_key=resolution.key)
        output = context.store.read(resolution.output_entry)
    else:
        started = time.monotonic()
        output = context.invoker(compiler_version, context.store.read(resolution.input_entry))
        context.store.write(resolution.output_entry, output)
        logger.info(
            "compiled",
            cache_key=resolution.key,
            version=compiler_version,
            elapsed=round(time.monotonic() - started, 3),
        )

    return normalize(
        output,
        compiler_version,
        document,
        selection,
        ast_analyzer=context.ast_analyzer,
        invariant_extractor=context.invariant_extractor,
    )


def build(
    project: ProjectKind | str,
    task_dir: Path,
    context: BuildContext,
    compiler_version: str | None = None,
    selection: ContractSelection | None = None,
) -> list[BuildResult]:
    """Build every compiler input of the project in *task_dir*.

    Args:
        project: Project kind, or its string value.
        task_dir: Project root directory.
        context: Cache store and collaborators.
        compiler_version: Required for folder builds; ignored for framework
            builds, which record their own versions.
        selection: Contract selection for folder builds.  Framework builds
            always extract all contracts.

    Returns:
        One build result per compiler input, in build order.

    Raises:
        UnknownProjectError: If *project* is not a known kind.
        MissingCompilerVersionError: If a folder build has no compiler version.
        SourceReadError: If a folder build cannot read its sources.
        UpstreamBuildError: If the framework build fails or yields invalid input.
        CompilerError: If any compilation fails.
    """
    kind = _project_kind(project)
    if kind is ProjectKind.AUTO:
        kind = detect_project(task_dir)
    logger.info("build_started", project=kind.value, task_dir=str(task_dir))

    if kind is ProjectKind.SOLIDITY_FOLDER:
        if not compiler_version:
            raise MissingCompilerVersionError("Compiler version not specified")
        return [build_folder(task_dir, compiler_version, context, selection)]

    provider = context.frameworks.get(kind)
    if provider is None:
        raise UnknownProjectError(f"No build-info provider for project kind '{kind.value}'")
    if selection is not None and not isinstance(selection, AllContracts):
        logger.warning("contract_selection_ignored", project=kind.value, selection=selection.model_dump())
    return build_from_build_info(task_dir, provider, context)


def build_from_build_info(task_dir: Path, provider: BuildInfoProvider, context: BuildContext) -> list[BuildResult]:
    """Compile, one after the other, every build-info record produced by *provider*.

    Raises:
        UpstreamBuildError: If the provider reports failure or a record's
            input is not a valid compiler input.
    """
    result = provider(task_dir)
    if not result.success:
        raise UpstreamBuildError(f"Build failed: {result.err}", payload=result.err)

    results: list[BuildResult] = []
    for build_info in result.contents:
        try:
            compiler_input = CompilerInput.model_validate(build_info.input)
        except ValidationError as exc:
            raise UpstreamBuildError(f"Invalid compiler input in build-info: {exc}") from exc
        version = version_from_long_version(build_info.solc_long_version)
        results.append(compile_json(version, compiler_input, context))
    return results


def build_folder(
    task_dir: Path,
    compiler_version: str,
    context: BuildContext,
    selection: ContractSelection | None = None,
) -> BuildResult:
    """Compile all ``.sol`` files below *task_dir* as a single compiler input.

    Raises:
        SourceReadError: If a source file or ``remappings.txt`` cannot be read.
        CompilerError: If the compilation fails.
    """
    try:
        sources = collect_sources(task_dir)
        remappings = load_remappings(task_dir)
    except ProjectFileError as exc:
        raise SourceReadError(str(exc)) from exc

    compiler_input = CompilerInput(language="Solidity", sources=sources, settings={"remappings": remappings})
    return compile_json(compiler_version, compiler_input, context, selection)


def version_from_long_version(long_version: str) -> str:
    """Convert a ``solcLongVersion`` such as ``0.8.20+commit.a1b2c3d4`` into ``v0.8.20+commit.a1b2c3d4``.

    Anything after the commit hash (e.g. a platform suffix) is dropped.
    Versions without a commit part are kept whole.
    """
    match = _LONG_VERSION_RE.match(long_version)
    version = match.group(0) if match else long_version
    return version if version.startswith("v") else "v" + version


# ################
# Implementation
# ################

_LONG_VERSION_RE = re.compile(r"^(.+?)\+commit\.[0-9a-z]+")


def _project_kind(project: ProjectKind | str) -> ProjectKind:
    if isinstance(project, ProjectKind):
        return project
    try:
        return ProjectKind(project)
    except ValueError:
        raise UnknownProjectError(f"Unknown project type '{project}'") from None
