"""Per-platform flag overrides from the environment.

``-ldflags`` and ``-gcflags`` can be replaced for a single platform by setting
``GOX_<OS>_<ARCH>_LDFLAGS`` or ``GOX_<OS>_<ARCH>_GCFLAGS``.
"""

import logging
import os
import re
from typing import Any, Mapping, Optional

from .platform import Platform

ENV_PREFIX = "GOX"

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def _normalize(value: str) -> str:
    return _NON_ALNUM.sub("_", value.upper())


def override_variable(platform: Platform, suffix: str) -> str:
    """Name of the environment variable overriding ``suffix`` for a platform."""
    return f"{ENV_PREFIX}_{_normalize(platform.os)}_{_normalize(platform.arch)}_{_normalize(suffix)}"


def apply_override(
    target: Any,
    attribute: str,
    platform: Platform,
    suffix: str,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """Replace one attribute of ``target`` if an override variable is set.

    Only ``attribute`` is touched. An unset or empty variable leaves the
    current value in place.

    Args:
        target: Object to update (normally a CompileOptions)
        attribute: Attribute name on ``target``
        platform: Platform the options are being built for
        suffix: Logical flag name, e.g. ``LDFLAGS``
        environ: Environment to read; defaults to ``os.environ``

    Returns:
        True if the attribute was overridden
    """
    if environ is None:
        environ = os.environ

    name = override_variable(platform, suffix)
    value = environ.get(name)
    if not value:
        return False

    logging.debug(f"{platform}: {attribute} overridden by {name}")
    setattr(target, attribute, value)
    return True
