# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0

from pathlib import Path

import pytest

from homefs.fileserver.server import CONF


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Home directory holding notes.txt and an empty drafts/ directory."""
    home = tmp_path / "home"
    home.mkdir()
    (home / "notes.txt").write_bytes(b"hello\n")
    (home / "drafts").mkdir()
    monkeypatch.setenv("HOME", str(home))
    CONF.set_override("base_dir", None, group="fileserver")
    yield home
    CONF.clear_override("base_dir", group="fileserver")
