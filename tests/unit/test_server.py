# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0

import os
from unittest.mock import MagicMock

import pytest

from homefs.fileserver import server


@pytest.fixture
def conf():
    """Reset parsed configuration after the test."""
    yield server.CONF
    server.CONF.reset()


class TestThreadingWSGIService:
    """Tests for ThreadingWSGIService."""

    def test_start_stop(self, mocker):
        httpd = MagicMock()
        make_server = mocker.patch("homefs.fileserver.server.make_server", return_value=httpd)
        svc = server.ThreadingWSGIService(server.application, "127.0.0.1", 8080, None)
        svc.start()
        make_server.assert_called_once_with(
            "127.0.0.1", 8080, server.application, server_class=server.ThreadingWSGIServer
        )
        svc.stop()
        svc.wait()
        httpd.shutdown.assert_called_once_with()
        httpd.server_close.assert_called_once_with()

    def test_start_wraps_socket_with_tls(self, mocker):
        httpd = MagicMock()
        mocker.patch("homefs.fileserver.server.make_server", return_value=httpd)
        ssl_context = MagicMock()
        raw_socket = httpd.socket
        svc = server.ThreadingWSGIService(server.application, "127.0.0.1", 8443, ssl_context)
        svc.start()
        ssl_context.wrap_socket.assert_called_once_with(raw_socket, server_side=True)
        assert httpd.socket is ssl_context.wrap_socket.return_value
        svc.stop()

    def test_stop_before_start(self):
        svc = server.ThreadingWSGIService(server.application, "127.0.0.1", 8080, None)
        svc.stop()
        svc.wait()


def test_build_ssl_context_disabled(mocker):
    mocker.patch("homefs.fileserver.server.sslutils.is_enabled", return_value=False)
    assert server.build_ssl_context() is None


def test_build_ssl_context_enabled(mocker):
    mocker.patch("homefs.fileserver.server.sslutils.is_enabled", return_value=True)
    context = mocker.patch("homefs.fileserver.server.ssl.SSLContext")
    assert server.build_ssl_context() is context.return_value
    context.return_value.load_cert_chain.assert_called_once()


def test_default_options():
    assert server.CONF.fileserver.port == 8080
    assert server.CONF.fileserver.host == "0.0.0.0"


def test_main(mocker, conf):
    mocker.patch("homefs.fileserver.server.logging.register_options")
    setup = mocker.patch("homefs.fileserver.server.logging.setup")
    mocker.patch("homefs.fileserver.server.build_ssl_context", return_value=None)
    launcher_cls = mocker.patch("homefs.fileserver.server.service.ServiceLauncher")

    server.main(["--fileserver-host", "127.0.0.1", "--fileserver-port", "9000"])

    setup.assert_called_once_with(conf, "homefs")
    launcher = launcher_cls.return_value
    service_obj = launcher.launch_service.call_args.args[0]
    assert isinstance(service_obj, server.ThreadingWSGIService)
    assert service_obj._host == "127.0.0.1"
    assert service_obj._port == 9000
    launcher.launch_service.assert_called_once_with(service_obj, workers=1)
    launcher.wait.assert_called_once_with()


@pytest.mark.parametrize(
    "path_info, expected",
    [
        ("/notes.txt", "/notes.txt"),
        ("/caf\xc3\xa9", "/caf\xe9"),
        ("", ""),
    ],
)
def test_request_path(path_info: str, expected: str):
    assert server.request_path({"PATH_INFO": path_info}) == expected


def test_request_path_keeps_undecodable_bytes():
    path = server.request_path({"PATH_INFO": "/caf\xe9"})
    assert os.fsencode(path) == b"/caf\xe9"
