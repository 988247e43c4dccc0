# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0
"""Fileserver package exposing a directory tree over HTTP.

GET reads files and lists directories, POST creates empty files. Request
paths are resolved under the base directory, the user's home by default.
"""

from .server import application

__all__ = [
    "application",
]
