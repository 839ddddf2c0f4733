# SPDX-License-Identifier: LGPL-3.0-or-later
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

for _p in (_REPO_ROOT, _THIS_DIR):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))

from fakes.fake_xenapi import FakeXenAPI  # noqa: E402
from xenvbd.xen.connection import Connection  # noqa: E402


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: fast tests without a XenServer host")
    config.addinivalue_line("markers", "security: secret redaction tests")


@pytest.fixture
def xapi():
    return FakeXenAPI()


@pytest.fixture
def conn(xapi):
    return Connection.from_session(xapi)
