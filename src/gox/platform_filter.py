"""Platform Filter.

Resolves which platforms to build for from the ``-os``, ``-arch`` and
``-osarch`` selectors.

Design:
    - Each selector list may mix positive entries and ``!``-negated entries
    - ``-osarch`` pairs win over ``-os``/``-arch``: a listed pair is built even
      if its OS or arch is negated, and a negated pair is never built
    - A list holding only negations starts from everything it could match
    - The result keeps the candidate list's order and holds no duplicates
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Set, Tuple

from .platform import Platform


def _split(entries: Iterable[str]) -> Tuple[Set[str], Set[str]]:
    include: Set[str] = set()
    ignore: Set[str] = set()
    for entry in entries:
        if entry.startswith("!"):
            ignore.add(entry[1:])
        else:
            include.add(entry)
    return include, ignore


def _passes(value: str, include: Set[str], ignore: Set[str]) -> bool:
    if value in ignore:
        return False
    return not include or value in include


@dataclass
class PlatformFilter:
    """Selector lists for OS, arch and exact os/arch pairs."""

    os: List[str] = field(default_factory=list)
    arch: List[str] = field(default_factory=list)
    osarch: List[Platform] = field(default_factory=list)

    @classmethod
    def from_strings(cls, os: str = "", arch: str = "", osarch: str = "") -> "PlatformFilter":
        """Build a filter from space-separated flag values.

        Raises:
            ValueError: If an ``-osarch`` entry is not an os/arch pair
        """
        return cls(
            os=os.split(),
            arch=arch.split(),
            osarch=[Platform.parse(value) for value in osarch.split()],
        )

    def resolve(self, candidates: Iterable[Platform]) -> List[Platform]:
        """Select the platforms to build for.

        Args:
            candidates: Every platform the toolchain supports, in display order

        Returns:
            Ordered, de-duplicated platforms. May be empty; the caller decides
            whether that is an error.
        """
        include_os, ignore_os = _split(self.os)
        include_arch, ignore_arch = _split(self.arch)

        include_pairs: List[Platform] = []
        ignore_pairs: Set[Platform] = set()
        for pair in self.osarch:
            if pair.os.startswith("!"):
                ignore_pairs.add(Platform(pair.os[1:], pair.arch))
            else:
                include_pairs.append(pair)
        forced = set(include_pairs)

        # Only pairs were asked for, so nothing else gets in.
        pairs_only = bool(include_pairs) and not include_os and not include_arch

        result: List[Platform] = []
        seen: Set[Platform] = set()
        for candidate in candidates:
            if candidate in seen or candidate in ignore_pairs:
                continue
            if candidate not in forced:
                if pairs_only:
                    continue
                if not _passes(candidate.os, include_os, ignore_os):
                    continue
                if not _passes(candidate.arch, include_arch, ignore_arch):
                    continue
            seen.add(candidate)
            result.append(candidate)

        # Explicit pairs the candidate table doesn't know about.
        for pair in include_pairs:
            if pair in seen or pair in ignore_pairs:
                continue
            seen.add(pair)
            result.append(pair)

        return result
