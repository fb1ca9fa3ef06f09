# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by the build pipeline.

Every fatal condition derives from :class:`CompilerError` so that callers can
handle a failed build with a single ``except`` clause.  Nothing in this
package terminates the process; the CLI decides the exit code.
"""

from __future__ import annotations

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Base class for all unrecoverable build failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class MissingCompilerVersionError(CompilerError):
    """Raised when a folder build is requested without a compiler version."""


class UnknownProjectError(CompilerError):
    """Raised when the requested project kind is not recognised."""


class UpstreamBuildError(CompilerError):
    """Raised when a framework build tool reports failure.

    Attributes:
        payload: The error text reported by the framework tool.
    """

    def __init__(self, message: str, payload: str | None = None) -> None:
        super().__init__(message)
        self.payload = payload


class CompilationInvocationError(CompilerError):
    """Raised when the compiler process cannot be installed, started, or exits non-zero.

    Attributes:
        stderr: Captured standard error of the failing command.
    """

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class MalformedCompilerOutputError(CompilerError):
    """Raised when the compiler output document does not have the expected shape."""


class CompilationDiagnosticError(CompilerError):
    """Raised when the compiler reports at least one ``error`` severity diagnostic.

    Attributes:
        diagnostics: Formatted text of every error diagnostic.
    """

    def __init__(self, diagnostics: list[str]) -> None:
        super().__init__("Compilation failed:\n" + "\n".join(diagnostics))
        self.diagnostics = diagnostics


class ContractNotFoundError(CompilerError):
    """Raised when no source file defines the requested contract."""


class AmbiguousContractNameError(CompilerError):
    """Raised when the requested contract name is defined in more than one file.

    Attributes:
        contract_name: The requested name.
        source_paths: Every source file defining a contract with that name.
    """

    def __init__(self, contract_name: str, source_paths: list[str]) -> None:
        super().__init__(
            f"Contract name '{contract_name}' is ambiguous: defined in {', '.join(repr(p) for p in source_paths)}"
        )
        self.contract_name = contract_name
        self.source_paths = source_paths


class CacheError(CompilerError):
    """Raised when a cache entry cannot be read or written."""


class SourceReadError(CompilerError):
    """Raised when a project source or ``remappings.txt`` cannot be read."""
