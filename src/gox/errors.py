"""Exception types shared across gox modules."""


class GoxError(Exception):
    """Base class for all gox errors."""

    pass


class NoValidPlatformsError(GoxError):
    """Raised when platform filtering leaves nothing to build."""

    def __init__(self) -> None:
        super().__init__(
            "No valid platforms to build for. If you specified a value "
            "for the 'os', 'arch', or 'osarch' flags, make sure you're "
            "using a valid value."
        )
