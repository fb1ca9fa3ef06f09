# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline: settings augmentation, caching, invocation, and normalization."""

from solbuild.compiler.analysis import AstAnalysis, AstAnalyzer, InvariantExtractor, SourceUnitAstAnalyzer
from solbuild.compiler.build import (
    BuildContext,
    build,
    build_folder,
    build_from_build_info,
    compile_json,
    version_from_long_version,
)
from solbuild.compiler.cache import (
    CacheResolution,
    CacheStore,
    FileCacheStore,
    MemoryCacheStore,
    compute_cache_key,
    resolve,
)
from solbuild.compiler.errors import (
    AmbiguousContractNameError,
    CacheError,
    CompilationDiagnosticError,
    CompilationInvocationError,
    CompilerError,
    ContractNotFoundError,
    MalformedCompilerOutputError,
    MissingCompilerVersionError,
    SourceReadError,
    UnknownProjectError,
    UpstreamBuildError,
)
from solbuild.compiler.invoker import Invoker, find_tool, invoke_compiler, parse_compiler_version
from solbuild.compiler.normalizer import extract_artifacts, normalize
from solbuild.compiler.settings import augment_settings

__all__ = [
    "augment_settings",
    "CacheStore",
    "CacheResolution",
    "FileCacheStore",
    "MemoryCacheStore",
    "compute_cache_key",
    "resolve",
    "Invoker",
    "invoke_compiler",
    "find_tool",
    "parse_compiler_version",
    "AstAnalysis",
    "AstAnalyzer",
    "InvariantExtractor",
    "SourceUnitAstAnalyzer",
    "normalize",
    "extract_artifacts",
    "BuildContext",
    "compile_json",
    "build",
    "build_folder",
    "build_from_build_info",
    "version_from_long_version",
    "CompilerError",
    "CacheError",
    "MissingCompilerVersionError",
    "UnknownProjectError",
    "UpstreamBuildError",
    "CompilationInvocationError",
    "MalformedCompilerOutputError",
    "CompilationDiagnosticError",
    "ContractNotFoundError",
    "AmbiguousContractNameError",
    "SourceReadError",
]
