"""Go toolchain queries.

Thin wrappers around the ``go`` command: locating it, asking for its version
and GOROOT, and listing the main packages under a set of paths.
"""

import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .errors import GoxError
from .process_utils import run_captured

DEFAULT_GO_CMD = "go"

# `go version` output format is not guaranteed; runtime.Version() is.
VERSION_SOURCE = """package main

import (
	"fmt"
	"runtime"
)

func main() {
	fmt.Print(runtime.Version())
}
"""

_VERSION_PARTS = re.compile(r"^go(\d+)\.(\d+)")


class ToolchainError(GoxError):
    """Raised when querying the Go toolchain fails."""

    pass


class ToolchainNotFoundError(ToolchainError):
    """Raised when the go command is not on the PATH."""

    def __init__(self, go_cmd: str):
        super().__init__(f"{go_cmd} executable must be on the PATH")
        self.go_cmd = go_cmd


def look_path(go_cmd: str = DEFAULT_GO_CMD) -> str:
    """Resolve ``go_cmd`` on the PATH.

    Raises:
        ToolchainNotFoundError: If it cannot be found
    """
    resolved = shutil.which(go_cmd)
    if resolved is None:
        raise ToolchainNotFoundError(go_cmd)
    return resolved


def exec_go(
    go_cmd: str,
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
) -> str:
    """Run the go command and return its stdout.

    Args:
        go_cmd: Go binary name or path
        args: Arguments after the binary
        env: Full child environment (None inherits ours)
        cwd: Working directory

    Returns:
        Captured stdout

    Raises:
        ToolchainError: If the command can't be started or exits non-zero
    """
    try:
        result = run_captured([go_cmd, *args], env=env, cwd=cwd)
    except OSError as e:
        raise ToolchainError(f"failed to run {go_cmd}: {e}") from e

    if result.returncode != 0:
        raise ToolchainError(
            f"exit status {result.returncode}\nStderr: {result.stderr}"
        )
    return result.stdout


def go_version(go_cmd: str = DEFAULT_GO_CMD) -> str:
    """Return the toolchain version, e.g. ``go1.5.3``."""
    with tempfile.TemporaryDirectory(prefix="gox") as temp_dir:
        source_path = Path(temp_dir) / "version.go"
        source_path.write_text(VERSION_SOURCE)
        return exec_go(go_cmd, ["run", str(source_path)]).strip()


def go_version_parts(go_cmd: str = DEFAULT_GO_CMD) -> List[int]:
    """Return ``[major, minor]`` of the toolchain version.

    Raises:
        ToolchainError: If the version string can't be parsed
    """
    version = go_version(go_cmd)
    match = _VERSION_PARTS.match(version)
    if match is None:
        raise ToolchainError(f"unable to parse Go version: {version!r}")
    return [int(match.group(1)), int(match.group(2))]


def go_root(go_cmd: str = DEFAULT_GO_CMD) -> str:
    """Return GOROOT as reported by ``go env``."""
    return exec_go(go_cmd, ["env", "GOROOT"]).strip()


def go_main_dirs(paths: Sequence[str], go_cmd: str = DEFAULT_GO_CMD) -> List[str]:
    """List the import paths of main packages under ``paths``.

    Args:
        paths: Package patterns as accepted by ``go list``
        go_cmd: Go binary name or path

    Returns:
        Import paths of every package named ``main``
    """
    output = exec_go(go_cmd, ["list", "-f", "{{.Name}}|{{.ImportPath}}", *paths])

    results: List[str] = []
    for line in output.splitlines():
        if not line:
            continue
        parts = line.split("|", 1)
        if len(parts) != 2:
            logging.warning(f"Bad line reading packages: {line}")
            continue
        if parts[0] == "main":
            results.append(parts[1])
    return results
