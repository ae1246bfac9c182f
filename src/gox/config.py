"""Run configuration.

Everything the command line decides is gathered into a CrossCompileConfig
once, at the process boundary, and passed down explicitly.
"""

import platform as _host
from dataclasses import dataclass, field
from typing import List, Optional

import psutil

from .compiler import DEFAULT_OUTPUT_TEMPLATE, BuildSettings
from .platform_filter import PlatformFilter
from .toolchain import DEFAULT_GO_CMD

# Solaris-derived hosts (e.g. Joyent containers) report far more CPUs than
# they can actually run builds on.
SOLARIS_DEFAULT_PARALLEL = 3


def resolve_parallelism(
    requested: int,
    cpu_count: Optional[int] = None,
    host_os: Optional[str] = None,
) -> int:
    """Turn the ``-parallel`` value into an effective worker count.

    Args:
        requested: Value from the command line; <= 0 means "pick for me"
        cpu_count: Available CPUs; detected with psutil when omitted
        host_os: Host OS name; detected when omitted

    Returns:
        ``requested`` when positive, otherwise CPUs - 1 (at least 1), or
        3 on Solaris hosts
    """
    if requested > 0:
        return requested

    if host_os is None:
        host_os = _host.system().lower()
    if host_os in ("solaris", "sunos"):
        return SOLARIS_DEFAULT_PARALLEL

    if cpu_count is None:
        cpu_count = psutil.cpu_count(logical=True) or 1
    if cpu_count < 2:
        return 1
    return cpu_count - 1


@dataclass
class CrossCompileConfig:
    """Options for one gox invocation."""

    packages: List[str] = field(default_factory=lambda: ["."])
    platform_filter: PlatformFilter = field(default_factory=PlatformFilter)
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    ldflags: str = ""
    tags: str = ""
    gcflags: str = ""
    parallel: int = -1
    build_toolchain: bool = False
    cgo: bool = False
    rebuild: bool = False
    list_osarch: bool = False
    verbose: bool = False
    go_cmd: str = DEFAULT_GO_CMD

    def effective_parallelism(self) -> int:
        return resolve_parallelism(self.parallel)

    def build_settings(self) -> BuildSettings:
        return BuildSettings(
            output_template=self.output_template,
            ldflags=self.ldflags,
            tags=self.tags,
            go_cmd=self.go_cmd,
            cgo=self.cgo,
            rebuild=self.rebuild,
            gcflags=self.gcflags,
        )
