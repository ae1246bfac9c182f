"""Platform model and supported platform tables.

A platform is a GOOS/GOARCH pair. The tables below mirror what each Go
release can cross-compile to out of the box; ``default`` marks the pairs that
have been buildable since the oldest release that lists them.
"""

import platform as _host
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Platform:
    """A target operating system and architecture."""

    os: str
    arch: str
    default: bool = field(default=True, compare=False)

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """Parse an ``os/arch`` pair.

        A leading ``!`` stays attached to the OS part so a negated pair can be
        told apart after parsing.

        Raises:
            ValueError: If the value is not exactly one ``os/arch`` pair
        """
        parts = value.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"{value!r} must be an os/arch pair")
        return cls(os=parts[0], arch=parts[1])


def _extend(base: List[Platform], *pairs: Tuple[str, str, bool]) -> List[Platform]:
    return base + [Platform(os, arch, default) for os, arch, default in pairs]


PLATFORMS_1_0: List[Platform] = _extend(
    [],
    ("darwin", "386", True),
    ("darwin", "amd64", True),
    ("linux", "386", True),
    ("linux", "amd64", True),
    ("linux", "arm", True),
    ("freebsd", "386", True),
    ("freebsd", "amd64", True),
    ("openbsd", "386", True),
    ("openbsd", "amd64", True),
    ("windows", "386", True),
    ("windows", "amd64", True),
)

PLATFORMS_1_1: List[Platform] = _extend(
    PLATFORMS_1_0,
    ("freebsd", "arm", True),
    ("netbsd", "386", True),
    ("netbsd", "amd64", True),
    ("netbsd", "arm", True),
    ("plan9", "386", False),
)

PLATFORMS_1_3: List[Platform] = _extend(
    PLATFORMS_1_1,
    ("dragonfly", "386", False),
    ("dragonfly", "amd64", False),
    ("nacl", "amd64", False),
    ("nacl", "amd64p32", False),
    ("nacl", "arm", False),
    ("solaris", "amd64", False),
)

PLATFORMS_1_4: List[Platform] = _extend(
    PLATFORMS_1_3,
    ("android", "arm", False),
    ("plan9", "amd64", False),
)

PLATFORMS_1_5: List[Platform] = _extend(
    PLATFORMS_1_4,
    ("darwin", "arm", False),
    ("darwin", "arm64", False),
    ("linux", "arm64", False),
    ("linux", "ppc64", False),
    ("linux", "ppc64le", False),
)

PLATFORMS_1_6: List[Platform] = _extend(
    PLATFORMS_1_5,
    ("android", "386", False),
    ("linux", "mips64", False),
    ("linux", "mips64le", False),
)

PLATFORMS_1_7: List[Platform] = _extend(
    PLATFORMS_1_5,
    ("linux", "s390x", True),
    ("plan9", "arm", False),
    # go1.6 additions; mips64 is fully supported from go1.7
    ("android", "386", False),
    ("linux", "mips64", True),
    ("linux", "mips64le", True),
)

# Checked newest first; "go1.1" would otherwise match "go1.10".
_VERSION_TABLES: List[Tuple[str, List[Platform]]] = [
    ("go1.7", PLATFORMS_1_7),
    ("go1.6", PLATFORMS_1_6),
    ("go1.5", PLATFORMS_1_5),
    ("go1.4", PLATFORMS_1_4),
    ("go1.3", PLATFORMS_1_3),
    ("go1.2", PLATFORMS_1_1),
    ("go1.1", PLATFORMS_1_1),
    ("go1.0", PLATFORMS_1_0),
]


def supported_platforms(version: str) -> List[Platform]:
    """Return the platforms a given Go version can target.

    Args:
        version: Version string as printed by ``runtime.Version()``
            (e.g. ``go1.5.3``, ``devel +abc``)

    Returns:
        Ordered list of supported platforms. Unknown and development versions
        get the newest table.
    """
    if version == "go1":
        return list(PLATFORMS_1_0)

    for prefix, table in _VERSION_TABLES:
        if version == prefix or version.startswith(prefix + "."):
            return list(table)
        # go1.5beta1, go1.5rc2
        if version.startswith(prefix) and not version[len(prefix):][:1].isdigit():
            return list(table)
    return list(PLATFORMS_1_7)


# Python's names for the host, mapped onto Go's.
_HOST_OS: Dict[str, str] = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
    "dragonfly": "dragonfly",
    "sunos": "solaris",
}

_HOST_ARCH: Dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "mips64": "mips64",
}


def host_platform() -> Platform:
    """Detect the running machine as a Go platform.

    Unrecognized names are passed through lowercased.
    """
    system = _host.system().lower()
    machine = _host.machine().lower()

    if system.startswith("cygwin") or system.startswith("msys") or sys.platform == "win32":
        system = "windows"

    return Platform(_HOST_OS.get(system, system), _HOST_ARCH.get(machine, machine))
