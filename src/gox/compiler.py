"""Single-unit cross compiler.

This module runs one ``go build`` for one package and one target platform.

Design:
    - Options are a plain dataclass so the dispatcher can copy and tweak them
    - The output path comes from a ``{{.Dir}}_{{.OS}}_{{.Arch}}`` style template
    - cgo follows the ``-cgo`` flag, or turns on for native builds unless
      CGO_ENABLED=0 is set
"""

import logging
import os
import re
import sys
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .errors import GoxError
from .platform import Platform, host_platform
from .toolchain import DEFAULT_GO_CMD, ToolchainError, exec_go

DEFAULT_OUTPUT_TEMPLATE = "{{.Dir}}_{{.OS}}_{{.Arch}}"

_PLACEHOLDER = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")


class CompilationError(GoxError):
    """Raised when building a package for a platform fails."""

    pass


@dataclass
class CompileOptions:
    """Everything needed to build one package for one platform."""

    package_path: str
    platform: Platform
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    ldflags: str = ""
    tags: str = ""
    go_cmd: str = DEFAULT_GO_CMD
    cgo: bool = False
    rebuild: bool = False
    gcflags: str = ""


@dataclass(frozen=True)
class BuildSettings:
    """Values shared by every invocation of one cross-compile run."""

    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    ldflags: str = ""
    tags: str = ""
    go_cmd: str = DEFAULT_GO_CMD
    cgo: bool = False
    rebuild: bool = False
    gcflags: str = ""

    def options_for(self, package_path: str, platform: Platform) -> CompileOptions:
        """Fresh options for one package/platform pair."""
        return CompileOptions(
            package_path=package_path,
            platform=platform,
            output_template=self.output_template,
            ldflags=self.ldflags,
            tags=self.tags,
            go_cmd=self.go_cmd,
            cgo=self.cgo,
            rebuild=self.rebuild,
            gcflags=self.gcflags,
        )


def render_output_path(template: str, package_path: str, platform: Platform) -> str:
    """Expand an output path template.

    Supported placeholders are ``{{.Dir}}`` (base name of the package path),
    ``{{.OS}}`` and ``{{.Arch}}``. Windows targets get an ``.exe`` suffix.

    Raises:
        CompilationError: On an unknown placeholder
    """
    values = {
        "Dir": os.path.basename(package_path.rstrip("/\\")),
        "OS": platform.os,
        "Arch": platform.arch,
    }

    def substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in values:
            raise CompilationError(f"unknown output template field: .{name}")
        return values[name]

    output = _PLACEHOLDER.sub(substitute, template)
    if platform.os == "windows":
        output += ".exe"
    return output


def _cgo_enabled(options: CompileOptions, environ: Mapping[str, str]) -> bool:
    if options.cgo:
        return True
    if environ.get("CGO_ENABLED") == "0":
        return False
    return host_platform() == options.platform


def build_command(options: CompileOptions, output_path: str) -> List[str]:
    """Arguments for ``go build`` (without the go binary itself)."""
    args = ["build"]
    if options.rebuild:
        args.append("-a")
    args.extend([
        "-gcflags", options.gcflags,
        "-ldflags", options.ldflags,
        "-tags", options.tags,
        "-o", output_path,
    ])
    return args


def go_cross_compile(
    options: CompileOptions,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Build ``options.package_path`` for ``options.platform``.

    Args:
        options: Build options for this package/platform pair
        environ: Base environment for the child; defaults to ``os.environ``

    Returns:
        The rendered artifact name (relative to the output template)

    Raises:
        CompilationError: If the template is invalid or go build fails
    """
    if environ is None:
        environ = os.environ

    env: Dict[str, str] = dict(environ)
    env["GOOS"] = options.platform.os
    env["GOARCH"] = options.platform.arch
    env["CGO_ENABLED"] = "1" if _cgo_enabled(options, environ) else "0"

    artifact = render_output_path(options.output_template, options.package_path, options.platform)
    output_path = os.path.abspath(artifact)

    # Go reports packages outside GOPATH as "_/abs/path"; build those from
    # their directory instead.
    package_path = options.package_path
    chdir: Optional[str] = None
    if package_path.startswith("_"):
        chdir = package_path[1:]
        if sys.platform == "win32":
            # "_/C_/src/app" -> "C:\src/app"
            chdir = re.sub(r"^/([a-zA-Z])_/", r"\1:\\", chdir)
        package_path = ""

    args = build_command(options, output_path)
    if package_path:
        args.append(package_path)

    logging.debug(f"{options.platform}: go {' '.join(args)}")
    try:
        exec_go(options.go_cmd, args, env=env, cwd=chdir)
    except ToolchainError as e:
        raise CompilationError(str(e)) from e

    return artifact
