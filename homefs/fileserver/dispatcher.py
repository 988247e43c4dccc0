# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0
"""Translate HTTP requests into filesystem operations.

Each request is routed on its method and on the classification of the
resolved path:

========  ==============  ==============  ==============
Method    File            Directory       Absent
========  ==============  ==============  ==============
GET       cat             ls              404
POST      409             409             touch / mkdir
PUT       501             501             501
DELETE    501             501             501
========  ==============  ==============  ==============

Filesystem errors are caught where the operation runs and turned into an
:class:`OperationOutcome`; nothing raised by the filesystem escapes
:func:`dispatch`.
"""

import mimetypes
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping

from oslo_log import log as logging
from webob import Response

from .resolver import Classification, RequestContext
from .utils import (
    BadRequestError,
    ConflictError,
    FileServerError,
    NotImplementedOperationError,
)

LOG = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"

NOT_FOUND_BODY = b"404 page not found\n"
CONFLICT_BODY = b"conflict\n"
BAD_REQUEST_BODY = b"bad request\n"

NO_OPERATION = "none"
FILE_TYPE = "file"
DIR_TYPE = "dir"

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE")


@dataclass
class OperationOutcome:
    """Status, body and log details produced for one request."""

    status: int
    operation: str = NO_OPERATION
    body: bytes | Iterable[bytes] = b""
    error: str | None = None
    content_type: str = TEXT_PLAIN
    headers: Dict[str, str] = field(default_factory=dict)

    def log_record(self, path: str, method: str) -> Dict[str, Any]:
        """Return the structured log fields for this outcome."""
        return {
            "path": path,
            "method": method,
            "operation": self.operation,
            "status": self.status,
            "error": self.error,
        }

    def to_response(self) -> Response:
        """Build the WebOb response for this outcome."""
        if isinstance(self.body, bytes):
            response = Response(
                body=self.body, status=self.status, content_type=self.content_type
            )
        else:
            response = Response(
                app_iter=self.body, status=self.status, content_type=self.content_type
            )
        response.headers.update(self.headers)
        return response


def _error(exc: FileServerError, operation: str = NO_OPERATION) -> OperationOutcome:
    """Map a fileserver error onto its HTTP outcome."""
    if isinstance(exc, BadRequestError):
        return OperationOutcome(400, operation, BAD_REQUEST_BODY, str(exc))
    if isinstance(exc, ConflictError):
        return OperationOutcome(409, operation, CONFLICT_BODY, str(exc))
    if isinstance(exc, NotImplementedOperationError):
        return OperationOutcome(501, operation, b"", str(exc))
    return OperationOutcome(404, operation, NOT_FOUND_BODY, str(exc))


def _not_found(operation: str, exc: Exception) -> OperationOutcome:
    return OperationOutcome(404, operation, NOT_FOUND_BODY, str(exc))


def _iter_lines(names: Iterable[str]) -> Iterator[bytes]:
    for name in names:
        yield os.fsencode(name) + b"\n"


def read_file(ctx: RequestContext) -> OperationOutcome:
    """Return the whole content of the file (``cat``)."""
    operation = f"cat {ctx.resolved_path}"
    try:
        with open(ctx.resolved_path, "rb") as f:
            data = f.read()
    except (OSError, ValueError) as exc:
        return _not_found(operation, exc)
    content_type, _ = mimetypes.guess_type(ctx.resolved_path)
    return OperationOutcome(200, operation, data, content_type=content_type or OCTET_STREAM)


def list_directory(ctx: RequestContext) -> OperationOutcome:
    """Return the directory entry names, one per line (``ls``).

    Entries keep the order the platform lists them in.
    """
    operation = f"ls {ctx.resolved_path}"
    try:
        names = os.listdir(ctx.resolved_path)
    except (OSError, ValueError) as exc:
        return _not_found(operation, exc)
    return OperationOutcome(200, operation, _iter_lines(names))


def create_file(ctx: RequestContext) -> OperationOutcome:
    """Create an empty file, failing if anything exists at the path (``touch``)."""
    operation = f"touch {ctx.resolved_path}"
    try:
        with open(ctx.resolved_path, "xb"):
            pass
    except (OSError, ValueError) as exc:
        return _error(ConflictError(str(exc)), operation)
    return OperationOutcome(201, operation)


def create_directory(ctx: RequestContext) -> OperationOutcome:
    """Directory creation placeholder (``mkdir``)."""
    operation = f"mkdir {ctx.resolved_path}"
    return _error(NotImplementedOperationError("not implemented"), operation)


def handle_get(ctx: RequestContext, form: Mapping[str, str]) -> OperationOutcome:
    """Read a file or list a directory."""
    if ctx.classification is Classification.FILE:
        return read_file(ctx)
    if ctx.classification is Classification.DIRECTORY:
        return list_directory(ctx)
    return _not_found(NO_OPERATION, ctx.last_error or FileNotFoundError(ctx.resolved_path))


def handle_post(ctx: RequestContext, form: Mapping[str, str]) -> OperationOutcome:
    """Create a file or directory at an absent path."""
    if ctx.classification is not Classification.ABSENT:
        return _error(ConflictError("file/dir exists"))

    # file parts of a multipart body are not form values
    target_type = form.get("type")
    if not isinstance(target_type, str) or not target_type:
        return _error(BadRequestError("type missing"))
    if target_type == FILE_TYPE:
        return create_file(ctx)
    if target_type == DIR_TYPE:
        return create_directory(ctx)
    return _error(BadRequestError("wrong type"))


def handle_put(ctx: RequestContext, form: Mapping[str, str]) -> OperationOutcome:
    """Write file content placeholder (``echo``)."""
    operation = f"echo {ctx.resolved_path}"
    return _error(NotImplementedOperationError("not implemented"), operation)


def handle_delete(ctx: RequestContext, form: Mapping[str, str]) -> OperationOutcome:
    """Removal placeholder (``rm``)."""
    operation = f"rm {ctx.resolved_path}"
    return _error(NotImplementedOperationError("not implemented"), operation)


HANDLERS: Dict[str, Callable[[RequestContext, Mapping[str, str]], OperationOutcome]] = {
    "GET": handle_get,
    "POST": handle_post,
    "PUT": handle_put,
    "DELETE": handle_delete,
}


def log_outcome(ctx: RequestContext, method: str, outcome: OperationOutcome) -> None:
    """Emit the single log line describing ``outcome``."""
    record = outcome.log_record(ctx.resolved_path, method)
    if outcome.error is None:
        LOG.info(
            "path=%(path)s,method=%(method)s,op=%(operation)s,response_code=%(status)d",
            record,
        )
    else:
        LOG.warning(
            "path=%(path)s,method=%(method)s,op=%(operation)s,"
            "response_code=%(status)d,err=%(error)s",
            record,
        )


def dispatch(
    ctx: RequestContext, method: str, form: Mapping[str, str] | None = None
) -> OperationOutcome:
    """Run the operation selected by ``method`` and ``ctx`` and log the outcome.

    ``form`` holds the decoded form fields of a POST body.
    """
    handler = HANDLERS.get(method)
    if handler is None:
        outcome = OperationOutcome(
            405,
            body=b"method not allowed\n",
            error=f"method {method} not allowed",
            headers={"Allow": ", ".join(ALLOWED_METHODS)},
        )
    elif ctx.outside_base:
        outcome = _error(ctx.last_error)
    else:
        outcome = handler(ctx, form or {})
    log_outcome(ctx, method, outcome)
    return outcome
