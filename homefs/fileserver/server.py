# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0
"""WSGI server exposing a directory tree over HTTP (threaded backend).

This module exposes a minimal WebOb-based WSGI application with a single
catch-all route, hosted by a threaded ``wsgiref`` server under
``oslo_service``. Every request path is resolved under the base directory
and handed to :mod:`homefs.fileserver.dispatcher`. TLS support is configured
via ``oslo_service.sslutils`` and ``oslo_config``.
"""

import os
import ssl
import sys
import threading
from socketserver import ThreadingMixIn
from typing import List
from wsgiref.simple_server import WSGIServer, make_server

from oslo_config import cfg
from oslo_log import log as logging
from oslo_service import service, sslutils
from webob import Request, Response

from .dispatcher import TEXT_PLAIN, dispatch
from .resolver import resolve
from .utils import HomeDirectoryError, get_home_dir

LOG = logging.getLogger(__name__)

PROJECT = "homefs"
VERSION = "1.0.0"

INTERNAL_ERROR_BODY = b"internal server error\n"

fileserver_opts = [
    cfg.StrOpt(
        "host",
        default=os.environ.get("HOMEFS_HOST", "0.0.0.0"),
        help="Listen address for the file server",
    ),
    cfg.PortOpt(
        "port",
        default=int(os.environ.get("HOMEFS_PORT", "8080")),
        help="TCP listen port for the file server",
    ),
    cfg.StrOpt(
        "base_dir",
        default=os.environ.get("HOMEFS_BASE_DIR"),
        help="Directory served at /. Defaults to the home directory of the "
        "user running the server",
    ),
]

CONF = cfg.CONF
CONF.register_cli_opts(fileserver_opts, group="fileserver")
sslutils.register_opts(CONF)


def base_dir() -> str:
    """Return the directory request paths are resolved under.

    Raises HomeDirectoryError when no base directory is configured and the
    home directory cannot be determined.
    """
    if CONF.fileserver.base_dir:
        return CONF.fileserver.base_dir
    return str(get_home_dir())


def _internal_error() -> Response:
    return Response(body=INTERNAL_ERROR_BODY, status=500, content_type=TEXT_PLAIN)


def request_path(environ) -> str:
    """Return PATH_INFO decoded with the filesystem encoding.

    WSGI carries the path as latin-1 text; names that are not valid UTF-8
    keep their raw bytes, matching what directory listings emit.
    """
    return os.fsdecode(environ.get("PATH_INFO", "").encode("latin-1"))


def _route(request: Request) -> Response:
    """Resolve the request path and dispatch it to a filesystem operation."""
    raw_path = request.environ.get("PATH_INFO", "")
    try:
        base = base_dir()
    except HomeDirectoryError as exc:
        LOG.error(
            "path=%s,method=%s,response_code=500,err=%s",
            raw_path,
            request.method,
            exc,
        )
        return _internal_error()

    ctx = resolve(base, request_path(request.environ))
    form = request.POST if request.method == "POST" else {}
    return dispatch(ctx, request.method, form).to_response()


def application(environ, start_response):
    """WSGI application callable."""
    request = Request(environ)
    try:
        response = _route(request)
    except Exception as exc:
        LOG.exception(
            "request %s %s failed: %s", request.method, environ.get("PATH_INFO", ""), exc
        )
        response = _internal_error()
    return response(environ, start_response)


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Threading-based WSGI server."""

    daemon_threads = True


class ThreadingWSGIService(service.ServiceBase):
    """Threading-based WSGI service."""

    def __init__(self, app, host: str, port: int, ssl_context: ssl.SSLContext | None):
        self._app = app
        self._host = host
        self._port = port
        self._ssl_context = ssl_context
        self._httpd = None
        self._thread = None

    def start(self):
        """Start the WSGI service."""
        self._httpd = make_server(
            self._host, self._port, self._app, server_class=ThreadingWSGIServer
        )
        if self._ssl_context is not None:
            self._httpd.socket = self._ssl_context.wrap_socket(
                self._httpd.socket, server_side=True
            )
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="fileserver", daemon=True
        )
        self._thread.start()
        LOG.info("Listening on %s:%d...", self._host, self._port)

    def stop(self, graceful=True):
        """Stop the WSGI service."""
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()

    def wait(self):
        """Wait for the WSGI service to finish."""
        if self._thread is not None:
            self._thread.join()

    def reset(self):
        """Reset service state (no-op)."""
        return


def build_ssl_context() -> ssl.SSLContext | None:
    """Return a server-side TLS context when TLS is enabled, else None."""
    if not sslutils.is_enabled(CONF):
        LOG.info("TLS disabled for fileserver")
        return None
    ssl_ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ssl_ctx.load_cert_chain(CONF.ssl.cert_file, CONF.ssl.key_file)
    LOG.info("TLS enabled for fileserver")
    return ssl_ctx


def main(argv: List[str] | None = None):
    """Parse configuration, set up logging and serve until stopped."""
    logging.register_options(CONF)
    CONF(
        sys.argv[1:] if argv is None else argv,
        project=PROJECT,
        prog="homefs-fileserver",
        version=VERSION,
    )
    logging.setup(CONF, PROJECT)

    service_obj = ThreadingWSGIService(
        application, CONF.fileserver.host, CONF.fileserver.port, build_ssl_context()
    )
    launcher = service.ServiceLauncher(CONF)
    launcher.launch_service(service_obj, workers=1)
    launcher.wait()


if __name__ == "__main__":
    main()
