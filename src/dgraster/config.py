"""Global configuration for dgraster conversions.

This module provides a package-wide configuration surface for the defaults
used when converting DG output to rasters (maximum supported refinement level,
cell-to-node averaging) and the package log level. Defaults are read from the
environment once at import time and can be changed programmatically.
"""

from __future__ import annotations

import contextlib
import logging
import os
from typing import Any, Iterator


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
_LOGGER = logging.getLogger("dgraster")


def _parse_log_level(val: str | int | None, default: int = logging.WARNING) -> int:
    """Resolve a ``DGRASTER_LOGLEVEL`` value for the "dgraster" logger.

    Names are matched case-insensitively against the `logging` constants;
    unknown names fall back to `default` so a typo in the environment never
    breaks ``import dgraster``.

    Args:
        val: Level name such as "info", a numeric level, or None.
        default: Level used when `val` is None or not a known name.

    Returns:
        The numeric level to apply to the package logger.
    """
    if val is None:
        return default
    if isinstance(val, int):
        return val
    lvl = getattr(logging, str(val).upper(), None)
    if isinstance(lvl, int):
        return lvl
    return default


def set_log_level(level: str | int = "WARNING") -> None:
    """Set the package logger level programmatically.

    Args:
        level: A standard logging level name or integer.
    """
    _LOGGER.setLevel(_parse_log_level(level))


# Default level can be overridden by env.
set_log_level(os.getenv("DGRASTER_LOGLEVEL", "WARNING"))


# -----------------------------------------------------------------------------
# Env helpers
# -----------------------------------------------------------------------------
def bool_env(varname: str, default: bool) -> bool:
    """Read a ``DGRASTER_*`` switch such as ``DGRASTER_CELL2NODE``.

    Accepts y/yes/t/true/on/1 and n/no/f/false/off/0, in any case.

    Args:
        varname: Environment variable to read.
        default: Value used when the variable is unset.

    Returns:
        The parsed switch.

    Raises:
        ValueError: If the variable holds anything else.
    """
    val = os.getenv(varname, str(default))
    val = val.lower()
    if val in ("y", "yes", "t", "true", "on", "1"):
        return True
    if val in ("n", "no", "f", "false", "off", "0"):
        return False
    raise ValueError(f"invalid truth value {val!r} for environment {varname!r}")


def int_env(varname: str, default: int) -> int:
    """Read a numeric ``DGRASTER_*`` default such as the maximum refinement level.

    Raises:
        ValueError: If the variable is set but not an integer.
    """
    return int(os.getenv(varname, str(default)))


# Relative tolerance, in units of the root element length, for element faces
# matching the domain boundary.
BOUNDS_RTOL = 1e-12


# -----------------------------------------------------------------------------
# Config singleton
# -----------------------------------------------------------------------------
class Config:
    """Package defaults for raster conversion.

    Attributes:
        max_supported_level (int): Highest refinement level a conversion accepts.
            Together with the requested visualization nodes it bounds the raster
            resolution to ``2**max_supported_level`` pixels per axis.
        cell2node (bool): Whether conversions average cell-centered rasters to
            node-centered rasters by default.
    """

    _FIELDS = ("max_supported_level", "cell2node")

    def __init__(self) -> None:
        """Initialize config using environment defaults."""
        self.max_supported_level: int = int_env("DGRASTER_MAX_SUPPORTED_LEVEL", 11)
        self.cell2node: bool = bool_env("DGRASTER_CELL2NODE", False)
        _LOGGER.debug(
            "Config initialized: max_supported_level=%d cell2node=%s",
            self.max_supported_level,
            self.cell2node,
        )

    def _snapshot(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self._FIELDS}

    def configure(self, **kwargs: Any) -> Config:
        """Update one or more defaults.

        Args:
            **kwargs: New values keyed by attribute name.

        Returns:
            The `Config` instance (for chaining).

        Raises:
            ValueError: If an unknown option is given or a level is negative.
        """
        unknown = set(kwargs) - set(self._FIELDS)
        if unknown:
            raise ValueError(
                f"unknown configuration option(s) {sorted(unknown)}, "
                f"supported options are {list(self._FIELDS)}"
            )
        if "max_supported_level" in kwargs:
            level = int(kwargs["max_supported_level"])
            if level < 0:
                raise ValueError(f"max_supported_level must be >= 0, got {level}")
            self.max_supported_level = level
        if "cell2node" in kwargs:
            self.cell2node = bool(kwargs["cell2node"])
        _LOGGER.info("Reconfigured: %s", self._snapshot())
        return self

    @contextlib.contextmanager
    def use(self, **kwargs: Any) -> Iterator[Config]:
        """Temporarily change defaults within a context manager.

        Args:
            **kwargs: Values passed to `configure`.

        Yields:
            The `Config` instance. Previous values are restored on exit.
        """
        prev = self._snapshot()
        try:
            yield self.configure(**kwargs)
        finally:
            for name, value in prev.items():
                setattr(self, name, value)
            _LOGGER.debug("Restored previous configuration: %s", prev)


# Singleton & forwards
config = Config()


def configure(**kwargs: Any) -> Config:
    """Update package defaults (module-level)."""
    return config.configure(**kwargs)


def use(**kwargs: Any) -> contextlib.AbstractContextManager[Config]:
    """Temporarily change package defaults (module-level)."""
    return config.use(**kwargs)
