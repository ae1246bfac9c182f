"""Toolchain Bootstrap Orchestrator.

Go releases before 1.5 can't cross-compile until the toolchain has been
built once per target with ``$GOROOT/src/make.bash --no-clean``. This module
runs that script for every requested platform.

Design:
    - One worker thread per platform behind a one-permit semaphore; the
      script rebuilds the shared GOROOT tree, so two platforms can never
      build at the same time
    - Output is captured and attached to the error on failure
    - Verbose mode streams merged stdout/stderr line by line, prefixed with
      the platform, and the worker only returns once the reader thread has
      drained the pipe
    - Failures are collected and raised together after every worker is done
"""

import logging
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .dispatcher import AggregateBuildError
from .errors import GoxError, NoValidPlatformsError
from .platform import Platform, supported_platforms
from .platform_filter import PlatformFilter
from .process_utils import terminate_process_tree
from . import toolchain


class BootstrapError(GoxError):
    """Raised when building the toolchain for one platform fails."""

    pass


def script_name() -> str:
    return "make.bat" if sys.platform == "win32" else "make.bash"


class ToolchainBootstrapOrchestrator:
    """Builds the Go toolchain for each platform, one at a time."""

    def __init__(
        self,
        go_root: str,
        parallel: int = 1,
        verbose: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the orchestrator.

        Args:
            go_root: GOROOT of the installed toolchain
            parallel: Requested parallelism; always reduced to 1
            verbose: Stream script output to the console
            environ: Base environment for the script; defaults to os.environ
        """
        if parallel > 1:
            print("The toolchain build can't be parallelized because compiling a single")
            print("Go source directory can only be done for one platform at a time. Therefore,")
            print("the toolchain for each platform will be built one at a time.")
            print()
        self.go_root = Path(go_root)
        self.parallel = 1
        self.verbose = verbose
        self.environ = environ if environ is not None else os.environ

    @property
    def script_dir(self) -> Path:
        return self.go_root / "src"

    def run(self, platforms: Sequence[Platform]) -> None:
        """Build the toolchain for every platform.

        Raises:
            AggregateBuildError: If any platform failed, after all have run
        """
        guard = threading.BoundedSemaphore(self.parallel)
        errors: List[str] = []
        errors_lock = threading.Lock()

        def worker(platform: Platform) -> None:
            with guard:
                try:
                    self.build_toolchain(platform)
                except BootstrapError as e:
                    with errors_lock:
                        errors.append(f"{platform}: {e}")
                except Exception as e:
                    logging.exception(f"Unexpected error building toolchain for {platform}")
                    with errors_lock:
                        errors.append(f"{platform}: {type(e).__name__}: {e}")

        threads = [
            threading.Thread(target=worker, args=(platform,), name=f"gox-toolchain-{platform}", daemon=True)
            for platform in platforms
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if errors:
            raise AggregateBuildError(errors)

    def build_toolchain(self, platform: Platform) -> None:
        """Run the build script for a single platform.

        Raises:
            BootstrapError: If the script can't start or exits non-zero
        """
        print(f"--> Toolchain: {platform}")

        script_path = self.script_dir / script_name()
        command = [str(script_path), "--no-clean"]
        env = dict(self.environ)
        env["GOOS"] = platform.os
        env["GOARCH"] = platform.arch

        logging.debug(f"Running {script_path} for {platform}")
        if self.verbose:
            self._run_streamed(platform, command, env)
        else:
            self._run_captured(platform, command, env)

    def _run_captured(self, platform: Platform, command: List[str], env: Mapping[str, str]) -> None:
        try:
            process = subprocess.Popen(
                command,
                cwd=str(self.script_dir),
                env=dict(env),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise BootstrapError(f"Error building '{platform}': {e}") from e

        try:
            stdout, stderr = process.communicate()
        except KeyboardInterrupt:
            terminate_process_tree(process.pid)
            raise

        if process.returncode != 0:
            raise BootstrapError(
                f"Error building '{platform}'.\n\nStdout: {stdout}\n\nStderr: {stderr}\n"
            )

    def _run_streamed(self, platform: Platform, command: List[str], env: Mapping[str, str]) -> None:
        try:
            process = subprocess.Popen(
                command,
                cwd=str(self.script_dir),
                env=dict(env),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise BootstrapError(f"Error building '{platform}': {e}") from e

        def drain() -> None:
            assert process.stdout is not None
            try:
                for line in process.stdout:
                    print(f"{platform}: {line}", end="" if line.endswith("\n") else "\n")
            finally:
                # The script blocks on a full pipe, so read to EOF no matter what.
                for _ in process.stdout:
                    pass

        reader = threading.Thread(target=drain, name=f"gox-output-{platform}", daemon=True)
        reader.start()
        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            terminate_process_tree(process.pid)
            raise
        finally:
            reader.join()
            if process.stdout is not None:
                process.stdout.close()

        if returncode != 0:
            raise BootstrapError(
                f"Error building '{platform}' (exit status {returncode}); "
                "stdout/stderr already streamed above."
            )


def main_build_toolchain(
    platform_filter: PlatformFilter,
    parallel: int,
    verbose: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Entry point for ``gox -build-toolchain``.

    Raises:
        ToolchainNotFoundError: If ``go`` is not on the PATH
        ToolchainError: If the version or GOROOT can't be read
        NoValidPlatformsError: If the filter leaves nothing to build
        AggregateBuildError: If any platform failed to build
    """
    try:
        toolchain.look_path("go")
    except toolchain.ToolchainNotFoundError:
        print("You must have Go already built for your native platform", file=sys.stderr)
        print("and the `go` binary on the PATH to build toolchains.", file=sys.stderr)
        raise

    major, minor = toolchain.go_version_parts()
    if (major, minor) >= (1, 5):
        print(
            "-build-toolchain is no longer required for Go 1.5 or later.\n"
            "You can start using Gox immediately!",
            file=sys.stderr,
        )
        return

    version = toolchain.go_version()
    root = toolchain.go_root()

    if verbose:
        print("Verbose mode enabled. Output from building each toolchain will be")
        print("outputted to stdout as they are built.")
        print()

    platforms = platform_filter.resolve(supported_platforms(version))
    if not platforms:
        raise NoValidPlatformsError()

    orchestrator = ToolchainBootstrapOrchestrator(root, parallel=parallel, verbose=verbose, environ=environ)
    orchestrator.run(platforms)
