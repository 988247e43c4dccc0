# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0
"""Map request paths onto the filesystem.

A request path is joined to the base directory and the target is classified
once, before any operation runs. The result is carried through the rest of
the request as an immutable :class:`RequestContext`.
"""

import enum
import os
import stat
from dataclasses import dataclass

from .utils import PathOutsideBaseError, UnsupportedFileTypeError


class Classification(enum.Enum):
    """What a resolved path points at."""

    FILE = "file"
    DIRECTORY = "directory"
    ABSENT = "absent"


@dataclass(frozen=True)
class RequestContext:
    """Per-request resolution result."""

    resolved_path: str
    classification: Classification
    last_error: Exception | None = None

    @property
    def outside_base(self) -> bool:
        return isinstance(self.last_error, PathOutsideBaseError)


def join_path(base_path: str, url_path: str) -> str:
    """Join ``url_path`` under ``base_path``.

    Raises PathOutsideBaseError if the normalised result is not the base
    directory or below it. Symlinks are left alone.
    """
    base = os.path.normpath(os.path.abspath(base_path))
    relative = url_path.lstrip("/")
    joined = os.path.normpath(os.path.join(base, relative)) if relative else base
    try:
        inside = os.path.commonpath([base, joined]) == base
    except ValueError:
        inside = False
    if not inside:
        raise PathOutsideBaseError(f"{url_path} escapes {base}")
    return joined


def classify(path: str) -> RequestContext:
    """Classify ``path`` as file, directory or absent."""
    try:
        mode = os.stat(path).st_mode
    except (OSError, ValueError) as exc:
        return RequestContext(path, Classification.ABSENT, exc)
    if stat.S_ISDIR(mode):
        return RequestContext(path, Classification.DIRECTORY)
    if stat.S_ISREG(mode):
        return RequestContext(path, Classification.FILE)
    return RequestContext(
        path, Classification.ABSENT, UnsupportedFileTypeError(f"unsupported file type: {path}")
    )


def resolve(base_path: str, url_path: str) -> RequestContext:
    """Resolve ``url_path`` under ``base_path`` and classify the target."""
    try:
        path = join_path(base_path, url_path)
    except PathOutsideBaseError as exc:
        return RequestContext(base_path + url_path, Classification.ABSENT, exc)
    return classify(path)
