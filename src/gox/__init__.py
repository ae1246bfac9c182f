"""
gox - parallel cross-compilation for Go programs.

This package provides the `gox` CLI tool which builds Go main packages for
many GOOS/GOARCH targets at once.
"""

from .dispatcher import (
    AggregateBuildError,
    BuildResultAccumulator,
    DispatchResult,
    ParallelBuildDispatcher,
)
from .errors import GoxError
from .platform import Platform, supported_platforms
from .platform_filter import PlatformFilter

__version__ = "0.4.0"

__all__ = [
    "AggregateBuildError",
    "BuildResultAccumulator",
    "DispatchResult",
    "GoxError",
    "ParallelBuildDispatcher",
    "Platform",
    "PlatformFilter",
    "supported_platforms",
]
