# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0
"""Errors raised by the fileserver and lookup of the default base directory.

Each :class:`FileServerError` subclass maps onto one HTTP status in the
dispatcher. :class:`HomeDirectory` resolves the user's home directory from
the environment variable used by the running platform family.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

HOME_ENV_DEFAULT = "HOME"
HOME_ENV_WINDOWS = "USERPROFILE"
HOME_ENV_PLAN9 = "home"


class FileServerError(Exception):
    """Base class for errors translated into HTTP responses."""

    pass


class BadRequestError(FileServerError):
    """Raised when a client input is invalid."""

    pass


class ConflictError(FileServerError):
    """Raised when the target of a creation request already exists."""

    pass


class NotImplementedOperationError(FileServerError):
    """Raised for recognised operations that are not supported."""

    pass


class PathOutsideBaseError(FileServerError):
    """Raised when a request path escapes the base directory."""

    pass


class UnsupportedFileTypeError(FileServerError):
    """Raised when a path is neither a regular file nor a directory."""

    pass


class HomeDirectoryError(FileServerError):
    """Raised when the home directory cannot be determined."""

    pass


@dataclass(frozen=True)
class HomeDirectory:
    """Home directory lookup for one platform family."""

    platform: str
    env_var: str

    def resolve(self, environ: Mapping[str, str] | None = None) -> Path:
        """Return the home directory from the environment.

        Raises HomeDirectoryError when the variable is unset or empty.
        """
        if environ is None:
            environ = os.environ
        value = environ.get(self.env_var)
        if not value:
            raise HomeDirectoryError(f"{self.env_var} is not set")
        return Path(value)


DEFAULT_HOME = HomeDirectory("default", HOME_ENV_DEFAULT)
WINDOWS_HOME = HomeDirectory("windows", HOME_ENV_WINDOWS)
PLAN9_HOME = HomeDirectory("plan9", HOME_ENV_PLAN9)


def home_directory_for(platform: str | None = None) -> HomeDirectory:
    """Select the home directory lookup matching ``platform``.

    ``platform`` follows ``sys.platform`` naming and defaults to it.
    """
    if platform is None:
        platform = sys.platform
    if platform.startswith("win"):
        return WINDOWS_HOME
    if platform.startswith("plan9"):
        return PLAN9_HOME
    return DEFAULT_HOME


def get_home_dir() -> Path:
    """Return the home directory of the current user on this platform."""
    return home_directory_for().resolve()
