# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Running the Solidity compiler as a subprocess.

Compiler binaries are managed by ``solc-select``.  Tools are looked up on
PATH and then in the running interpreter's scripts directory; if
``solc-select`` is in neither it is installed with pip into that
interpreter's environment.  The requested version is then selected (and
downloaded if needed) and ``solc --standard-json`` is run with the input
document on standard input.
"""

from __future__ import annotations

import json
import re
import shutil
import subprocess
import sys
import sysconfig
from typing import Any, Protocol

import structlog

from solbuild.compiler.errors import CompilationInvocationError

logger = structlog.get_logger(__name__)

# ###############
# Public Interface
# ###############

DEFAULT_TIMEOUT = 600

SOLC_SELECT = "solc-select"
SOLC = "solc"

_VERSION_RE = re.compile(r"v?(\d+\.\d+\.\d+)")


class Invoker(Protocol):
    """Callable compiling an input document with the given compiler version."""

    def __call__(self, compiler_version: str, document: dict[str, Any]) -> dict[str, Any]: ...


def parse_compiler_version(compiler_version: str) -> str | None:
    """Extract ``MAJOR.MINOR.PATCH`` from a compiler version string.

    Accepts build-tool versions such as ``v0.8.20+commit.a1b2c3d4`` as well
    as bare tokens such as ``0.8.20``.

    Returns:
        The semantic version, or None if *compiler_version* contains none.
    """
    match = _VERSION_RE.search(compiler_version)
    return match.group(1) if match else None


def find_tool(name: str) -> str | None:
    """Locate an executable on PATH or in the running interpreter's scripts directory.

    The scripts directory is where ``pip install`` puts console scripts; it
    is not on PATH when the interpreter's environment is not activated.
    """
    found = shutil.which(name)
    if found is None:
        found = shutil.which(name, path=sysconfig.get_path("scripts"))
    return found


def ensure_solc_select(*, timeout: int = DEFAULT_TIMEOUT) -> str:
    """Make sure ``solc-select`` is available, installing it with pip if not.

    Returns:
        The path of the ``solc-select`` executable.

    Raises:
        CompilationInvocationError: If the installation fails or the
            installed executable cannot be found.
    """
    found = find_tool(SOLC_SELECT)
    if found is not None:
        return found
    logger.info("installing_solc_select")
    _run_checked([sys.executable, "-m", "pip", "install", SOLC_SELECT], timeout=timeout)
    found = find_tool(SOLC_SELECT)
    if found is None:
        raise CompilationInvocationError(
            f"{SOLC_SELECT} was installed but is neither on PATH nor in {sysconfig.get_path('scripts')}"
        )
    return found


def select_compiler(version: str, *, executable: str = SOLC_SELECT, timeout: int = DEFAULT_TIMEOUT) -> None:
    """Switch ``solc`` to *version*, downloading the binary if necessary.

    Raises:
        CompilationInvocationError: If the version cannot be installed or selected.
    """
    output = _run_checked([executable, "use", version, "--always-install"], timeout=timeout)
    if output.strip():
        logger.debug("solc_select_output", output=output.strip())


def invoke_compiler(
    compiler_version: str,
    document: dict[str, Any],
    *,
    timeout: int = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """Compile *document* with the compiler version named in *compiler_version*.

    If no semantic version can be found in *compiler_version* the selection
    step is skipped and whichever ``solc`` is currently selected is used.

    Args:
        compiler_version: Version string, e.g. ``v0.8.20+commit.a1b2c3d4``.
        document: Standard JSON input document.
        timeout: Limit in seconds for each subprocess.

    Returns:
        The parsed standard JSON output document.

    Raises:
        CompilationInvocationError: If installation, selection or compilation
            fails, or the compiler does not print a JSON document.
    """
    version = parse_compiler_version(compiler_version)
    if version is not None:
        logger.info("compiler_version_found", version=version)
    else:
        logger.warning("compiler_version_missing", compiler_version=compiler_version)

    solc_select = ensure_solc_select(timeout=timeout)
    if version is not None:
        select_compiler(version, executable=solc_select, timeout=timeout)

    # solc-select installs its solc shim next to itself
    solc = find_tool(SOLC) or SOLC
    result = _run([solc, "--standard-json"], stdin=json.dumps(document), timeout=timeout)
    if result.returncode != 0:
        raise CompilationInvocationError(
            f"{SOLC} exited with code {result.returncode}: {result.stderr.strip()}",
            stderr=result.stderr,
        )
    if result.stderr.strip():
        logger.debug("compiler_stderr", stderr=result.stderr.strip())

    try:
        output = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise CompilationInvocationError(
            f"{SOLC} did not print a JSON document: {exc}",
            stderr=result.stderr,
        ) from exc
    if not isinstance(output, dict):
        raise CompilationInvocationError(f"{SOLC} printed a JSON value that is not an object", stderr=result.stderr)
    return output


# ################
# Implementation
# ################


def _run(args: list[str], *, stdin: str | None = None, timeout: int) -> subprocess.CompletedProcess[str]:
    """Run a command and return the raw CompletedProcess result.

    Raises:
        CompilationInvocationError: If the executable is not found or the command times out.
    """
    try:
        return subprocess.run(
            args,
            input=stdin,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise CompilationInvocationError(f"{args[0]} executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise CompilationInvocationError(f"Command timed out: {' '.join(args)}") from exc


def _run_checked(args: list[str], *, timeout: int) -> str:
    """Run a command and return stdout, raising CompilationInvocationError on non-zero exit."""
    result = _run(args, timeout=timeout)
    if result.returncode != 0:
        raise CompilationInvocationError(f"{' '.join(args)}: {result.stderr.strip()}", stderr=result.stderr)
    return result.stdout
