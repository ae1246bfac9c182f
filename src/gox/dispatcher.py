"""Parallel Build Dispatcher.

Fans out one compile per (platform, package) pair and collects the results.

Design:
    - One worker thread per pair, started in platform-major order
    - A BoundedSemaphore caps how many compiles run at once; every worker
      holds it only around its own compile and always gives it back
    - Results go into an accumulator with one lock per list, held for a
      single append and never across a compile
    - The accumulator is only read once every worker has been joined
    - A failed compile never stops its siblings; failures are reported
      together once everything has finished
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Sequence

from .compiler import BuildSettings, CompileOptions, go_cross_compile
from .env_override import apply_override
from .errors import GoxError
from .platform import Platform

CompileFunction = Callable[[CompileOptions], str]


class AggregateBuildError(GoxError):
    """Raised when one or more builds failed.

    Attributes:
        errors: One ``"<os/arch>: <message>"`` line per failure
    """

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        lines = "\n".join(f"--> {error}" for error in self.errors)
        super().__init__(f"{len(self.errors)} errors occurred:\n{lines}")


@dataclass
class DispatchResult:
    """Artifacts and errors gathered from a finished dispatch.

    Artifacts are in completion order, which varies between runs.
    """

    artifacts: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise AggregateBuildError if anything failed."""
        if self.errors:
            raise AggregateBuildError(self.errors)


class BuildResultAccumulator:
    """Thread-safe collection of artifact paths and error messages."""

    def __init__(self) -> None:
        self._artifacts: List[str] = []
        self._errors: List[str] = []
        self._artifacts_lock = threading.Lock()
        self._errors_lock = threading.Lock()

    def add_artifact(self, path: str) -> None:
        with self._artifacts_lock:
            self._artifacts.append(path)

    def add_error(self, message: str) -> None:
        with self._errors_lock:
            self._errors.append(message)

    def result(self) -> DispatchResult:
        """Snapshot of both lists. Call only after all workers are done."""
        with self._artifacts_lock, self._errors_lock:
            return DispatchResult(artifacts=list(self._artifacts), errors=list(self._errors))


class ParallelBuildDispatcher:
    """Runs compiles for every package/platform pair with bounded parallelism."""

    def __init__(
        self,
        compile_fn: CompileFunction = go_cross_compile,
        parallel: int = 1,
        environ: Optional[Mapping[str, str]] = None,
        show_progress: bool = True,
    ):
        """Initialize the dispatcher.

        Args:
            compile_fn: Builds one CompileOptions and returns the artifact name
            parallel: Maximum number of compiles running at once (>= 1)
            environ: Environment consulted for per-platform flag overrides;
                defaults to ``os.environ``
            show_progress: Print a line as each compile starts
        """
        if parallel < 1:
            raise ValueError(f"parallel must be at least 1, got {parallel}")
        self.compile_fn = compile_fn
        self.parallel = parallel
        self.environ = environ if environ is not None else os.environ
        self.show_progress = show_progress
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Stop starting new compiles. Running compiles finish normally."""
        self._cancelled.set()

    def dispatch(
        self,
        packages: Sequence[str],
        platforms: Sequence[Platform],
        settings: BuildSettings,
    ) -> DispatchResult:
        """Build every package for every platform.

        Args:
            packages: Package paths to build
            platforms: Target platforms
            settings: Flags shared by every compile

        Returns:
            DispatchResult with artifact paths (``<package>/<artifact>``) for
            each successful compile and one message per failed compile
        """
        accumulator = BuildResultAccumulator()
        guard = threading.BoundedSemaphore(self.parallel)

        workers: List[threading.Thread] = []
        for platform in platforms:
            for package in packages:
                worker = threading.Thread(
                    target=self._build_one,
                    args=(package, platform, settings, guard, accumulator),
                    name=f"gox-{platform}-{package}",
                    daemon=True,
                )
                worker.start()
                workers.append(worker)

        logging.debug(f"Dispatched {len(workers)} builds with parallelism {self.parallel}")

        try:
            for worker in workers:
                worker.join()
        except KeyboardInterrupt:
            self.cancel()
            raise

        return accumulator.result()

    def _build_one(
        self,
        package: str,
        platform: Platform,
        settings: BuildSettings,
        guard: threading.BoundedSemaphore,
        accumulator: BuildResultAccumulator,
    ) -> None:
        with guard:
            if self._cancelled.is_set():
                accumulator.add_error(f"{platform}: cancelled")
                return

            if self.show_progress:
                print(f"--> {str(platform):>15}: {package}")

            options = settings.options_for(package, platform)
            apply_override(options, "ldflags", platform, "LDFLAGS", self.environ)
            apply_override(options, "gcflags", platform, "GCFLAGS", self.environ)

            try:
                artifact = self.compile_fn(options)
            except GoxError as e:
                accumulator.add_error(f"{platform}: {e}")
                return
            except Exception as e:
                logging.exception(f"Unexpected error building {package} for {platform}")
                accumulator.add_error(f"{platform}: {type(e).__name__}: {e}")
                return

            accumulator.add_artifact(os.path.join(package, artifact))
