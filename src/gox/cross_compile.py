"""Top-level cross-compile flow.

Resolves the toolchain, packages and platforms, then hands the work to the
dispatcher (or to the toolchain bootstrap when that was asked for).
"""

import logging
import sys
from typing import Callable, List, Optional, Sequence

from . import toolchain
from .bootstrap import main_build_toolchain
from .config import CrossCompileConfig
from .dispatcher import AggregateBuildError, ParallelBuildDispatcher
from .errors import NoValidPlatformsError
from .platform import Platform, supported_platforms


def list_osarch(version: str) -> List[str]:
    """Lines for ``-osarch-list``: every supported pair, defaults marked."""
    lines = ["Supported OS/Arch combinations for " + version + " are shown below. The \"default\""]
    lines.append("combinations are the ones that will be built if no OS/Arch flags are specified.")
    lines.append("")
    for platform in supported_platforms(version):
        suffix = "(default: true)" if platform.default else "(default: false)"
        lines.append(f"    {str(platform):<15} {suffix}")
    return lines


def print_build_errors(errors: Sequence[str]) -> None:
    print(f"\n{len(errors)} errors occurred:", file=sys.stderr)
    for error in errors:
        print(f"--> {error}", file=sys.stderr)


def cross_compile(
    config: CrossCompileConfig,
    dispatcher_factory: Optional[Callable[[int], ParallelBuildDispatcher]] = None,
) -> List[str]:
    """Run a full gox invocation.

    Args:
        config: Parsed command line
        dispatcher_factory: Builds the dispatcher for a parallelism factor;
            defaults to ParallelBuildDispatcher around ``go build``

    Returns:
        Paths of every built artifact. Empty for ``-build-toolchain`` and
        ``-osarch-list``.

    Raises:
        ToolchainNotFoundError: If the go command is not on the PATH
        ToolchainError: If the version or package list can't be read
        NoValidPlatformsError: If filtering leaves no platforms
        AggregateBuildError: If any build failed
    """
    parallel = config.effective_parallelism()

    if config.build_toolchain:
        try:
            main_build_toolchain(config.platform_filter, parallel, verbose=config.verbose)
        except AggregateBuildError as e:
            print_build_errors(e.errors)
            raise
        return []

    toolchain.look_path(config.go_cmd)

    try:
        version = toolchain.go_version(config.go_cmd)
    except toolchain.ToolchainError as e:
        raise toolchain.ToolchainError(f"error reading Go version: {e}") from e
    logging.debug(f"Go version: {version}")

    if config.list_osarch:
        for line in list_osarch(version):
            print(line)
        return []

    packages = config.packages or ["."]
    try:
        main_dirs = toolchain.go_main_dirs(packages, config.go_cmd)
    except toolchain.ToolchainError as e:
        raise toolchain.ToolchainError(f"Error reading packages: {e}") from e

    platforms: List[Platform] = config.platform_filter.resolve(supported_platforms(version))
    if not platforms:
        raise NoValidPlatformsError()

    print(f"Number of parallel builds: {parallel}")
    print()

    if dispatcher_factory is None:
        dispatcher = ParallelBuildDispatcher(parallel=parallel)
    else:
        dispatcher = dispatcher_factory(parallel)

    result = dispatcher.dispatch(main_dirs, platforms, config.build_settings())
    if not result.success:
        print_build_errors(result.errors)
        raise AggregateBuildError(result.errors)

    return result.artifacts
