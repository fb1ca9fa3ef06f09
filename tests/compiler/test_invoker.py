# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the compiler invoker."""

import json
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from solbuild.compiler.errors import CompilationInvocationError
from solbuild.compiler.invoker import (
    ensure_solc_select,
    find_tool,
    invoke_compiler,
    parse_compiler_version,
    select_compiler,
)

# ###############
# Helpers
# ###############

_DOCUMENT = {"language": "Solidity", "sources": {"A.sol": {"content": "contract Foo {}"}}, "settings": {}}
_OUTPUT = {"contracts": {"A.sol": {"Foo": {"abi": []}}}, "sources": {"A.sol": {"id": 0}}}


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def _commands(mock_run: MagicMock) -> list[list[str]]:
    return [c.args[0] for c in mock_run.call_args_list]


# ###############
# parse_compiler_version
# ###############


class TestParseCompilerVersion:
    def test_plain_version_with_prefix(self):
        assert parse_compiler_version("v0.8.20") == "0.8.20"

    def test_version_with_commit(self):
        assert parse_compiler_version("v0.8.20+commit.a1b2c3d4") == "0.8.20"

    def test_bare_version(self):
        """Folder builds may pass the version without the leading 'v'."""
        assert parse_compiler_version("0.7.6") == "0.7.6"

    def test_returns_none_without_version(self):
        assert parse_compiler_version("latest") is None

    def test_returns_none_for_partial_version(self):
        assert parse_compiler_version("v0.8") is None



# ###############
# Tool lookup
# ###############

_SCRIPTS_DIR = "/opt/venv/bin"


class _FakeTools:
    """Stand-in for ``shutil.which`` over PATH and the interpreter's scripts directory."""

    def __init__(self, on_path: tuple[str, ...] = (), in_scripts: tuple[str, ...] = ()) -> None:
        self.on_path = set(on_path)
        self.in_scripts = set(in_scripts)

    def which(self, name: str, path: str | None = None) -> str | None:
        if path is None:
            return f"/usr/bin/{name}" if name in self.on_path else None
        if path == _SCRIPTS_DIR and name in self.in_scripts:
            return f"{_SCRIPTS_DIR}/{name}"
        return None

    def patched(self):
        return patch("shutil.which", side_effect=self.which)


def _scripts_dir():
    return patch("sysconfig.get_path", return_value=_SCRIPTS_DIR)


class TestFindTool:
    def test_prefers_path(self):
        tools = _FakeTools(on_path=("solc",), in_scripts=("solc",))
        with tools.patched(), _scripts_dir():
            assert find_tool("solc") == "/usr/bin/solc"

    def test_falls_back_to_scripts_directory(self):
        tools = _FakeTools(in_scripts=("solc-select",))
        with tools.patched(), _scripts_dir():
            assert find_tool("solc-select") == f"{_SCRIPTS_DIR}/solc-select"

    def test_missing_everywhere(self):
        with _FakeTools().patched(), _scripts_dir():
            assert find_tool("solc") is None


# ###############
# solc-select management
# ###############


class TestEnsureSolcSelect:
    def test_no_install_when_on_path(self):
        tools = _FakeTools(on_path=("solc-select",))
        with tools.patched(), _scripts_dir(), patch("subprocess.run") as mock_run:
            assert ensure_solc_select() == "/usr/bin/solc-select"
        mock_run.assert_not_called()

    def test_no_install_when_in_scripts_directory(self):
        """An unactivated virtualenv must not reinstall on every build."""
        tools = _FakeTools(in_scripts=("solc-select",))
        with tools.patched(), _scripts_dir(), patch("subprocess.run") as mock_run:
            assert ensure_solc_select() == f"{_SCRIPTS_DIR}/solc-select"
        mock_run.assert_not_called()

    def test_installs_with_pip_and_finds_installed_script(self):
        tools = _FakeTools()

        def _install(args, **kwargs):
            tools.in_scripts.add("solc-select")
            return _completed()

        with tools.patched(), _scripts_dir(), patch("subprocess.run", side_effect=_install) as mock_run:
            assert ensure_solc_select() == f"{_SCRIPTS_DIR}/solc-select"
        assert _commands(mock_run) == [[sys.executable, "-m", "pip", "install", "solc-select"]]

    def test_installed_but_not_found_raises(self):
        with _FakeTools().patched(), _scripts_dir(), patch("subprocess.run", return_value=_completed()):
            with pytest.raises(CompilationInvocationError, match="neither on PATH nor in /opt/venv/bin"):
                ensure_solc_select()

    def test_install_failure_raises(self):
        with _FakeTools().patched(), _scripts_dir(), patch(
            "subprocess.run", return_value=_completed(1, stderr="no network")
        ):
            with pytest.raises(CompilationInvocationError, match="no network") as exc_info:
                ensure_solc_select()
        assert exc_info.value.stderr == "no network"


class TestSelectCompiler:
    def test_runs_solc_select_use(self):
        with patch("subprocess.run", return_value=_completed(stdout="Switched global version to 0.8.20")) as mock_run:
            select_compiler("0.8.20")
        assert _commands(mock_run) == [["solc-select", "use", "0.8.20", "--always-install"]]

    def test_runs_given_executable(self):
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            select_compiler("0.8.20", executable=f"{_SCRIPTS_DIR}/solc-select")
        assert _commands(mock_run)[0][0] == f"{_SCRIPTS_DIR}/solc-select"

    def test_failure_raises(self):
        with patch("subprocess.run", return_value=_completed(1, stderr="unknown version")):
            with pytest.raises(CompilationInvocationError, match="unknown version"):
                select_compiler("0.0.1")


# ###############
# invoke_compiler
# ###############

_INSTALLED = _FakeTools(on_path=("solc-select", "solc"))


class TestInvokeCompiler:
    def test_selects_version_then_compiles(self):
        responses = [_completed(), _completed(stdout=json.dumps(_OUTPUT))]
        with _INSTALLED.patched(), _scripts_dir(), patch("subprocess.run", side_effect=responses) as mock_run:
            output = invoke_compiler("v0.8.20+commit.a1b2c3d4", _DOCUMENT)

        assert output == _OUTPUT
        assert _commands(mock_run) == [
            ["/usr/bin/solc-select", "use", "0.8.20", "--always-install"],
            ["/usr/bin/solc", "--standard-json"],
        ]

    def test_document_is_sent_on_stdin(self):
        responses = [_completed(), _completed(stdout=json.dumps(_OUTPUT))]
        with _INSTALLED.patched(), _scripts_dir(), patch("subprocess.run", side_effect=responses) as mock_run:
            invoke_compiler("v0.8.20", _DOCUMENT)

        compile_call = mock_run.call_args_list[-1]
        assert json.loads(compile_call.kwargs["input"]) == _DOCUMENT

    def test_unparseable_version_skips_selection(self):
        with _INSTALLED.patched(), _scripts_dir(), patch(
            "subprocess.run", return_value=_completed(stdout=json.dumps(_OUTPUT))
        ) as mock_run:
            output = invoke_compiler("nightly", _DOCUMENT)

        assert output == _OUTPUT
        assert _commands(mock_run) == [["/usr/bin/solc", "--standard-json"]]

    def test_bootstrap_runs_tools_from_scripts_directory(self):
        """After a pip install outside PATH, solc-select and solc run by full path."""
        tools = _FakeTools()

        def _run(args, **kwargs):
            if args[:3] == [sys.executable, "-m", "pip"]:
                tools.in_scripts.update({"solc-select", "solc"})
                return _completed()
            if args[0] not in (f"{_SCRIPTS_DIR}/solc-select", f"{_SCRIPTS_DIR}/solc"):
                raise FileNotFoundError(args[0])
            if args[0].endswith("/solc"):
                return _completed(stdout=json.dumps(_OUTPUT))
            return _completed()

        with tools.patched(), _scripts_dir(), patch("subprocess.run", side_effect=_run) as mock_run:
            output = invoke_compiler("v0.8.20", _DOCUMENT)

        assert output == _OUTPUT
        commands = _commands(mock_run)
        assert commands[0][-1] == "solc-select"
        assert commands[1] == [f"{_SCRIPTS_DIR}/solc-select", "use", "0.8.20", "--always-install"]
        assert commands[2] == [f"{_SCRIPTS_DIR}/solc", "--standard-json"]

    def test_solc_missing_everywhere_runs_bare_name(self):
        tools = _FakeTools(on_path=("solc-select",))
        responses = [_completed(), FileNotFoundError("solc")]
        with tools.patched(), _scripts_dir(), patch("subprocess.run", side_effect=responses) as mock_run:
            with pytest.raises(CompilationInvocationError, match="solc executable not found on PATH"):
                invoke_compiler("v0.8.20", _DOCUMENT)
        assert _commands(mock_run)[-1] == ["solc", "--standard-json"]

    def test_non_zero_exit_raises_with_stderr(self):
        responses = [_completed(), _completed(2, stderr="solc: crashed")]
        with _INSTALLED.patched(), _scripts_dir(), patch("subprocess.run", side_effect=responses):
            with pytest.raises(CompilationInvocationError) as exc_info:
                invoke_compiler("v0.8.20", _DOCUMENT)
        assert exc_info.value.stderr == "solc: crashed"

    def test_non_json_output_raises(self):
        responses = [_completed(), _completed(stdout="Segmentation fault")]
        with _INSTALLED.patched(), _scripts_dir(), patch("subprocess.run", side_effect=responses):
            with pytest.raises(CompilationInvocationError, match="JSON"):
                invoke_compiler("v0.8.20", _DOCUMENT)

    def test_timeout_raises(self):
        with _INSTALLED.patched(), _scripts_dir(), patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="solc", timeout=1)
        ):
            with pytest.raises(CompilationInvocationError, match="timed out"):
                invoke_compiler("v0.8.20", _DOCUMENT, timeout=1)
