# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/xen/connection.py
"""
XenAPI session wrapper.

All calls are synchronous; the XenAPI client owns transport, timeouts and
XML-RPC marshalling. Remote errors surface as ``XenAPI.Failure``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import XenAPI

LOG = logging.getLogger(__name__)

ORIGINATOR = "xenvbd"
API_VERSION = "1.0"


class Connection:
    """
    Holds one logged-in XenAPI session.

    Usage:
      with Connection(url, user, password) as conn:
          refs = conn.xenapi.VM.get_VBDs(vm_ref)
    """

    def __init__(self, url: str, username: str, password: str, *, session: Any = None):
        self.url = url
        self.username = username
        self._password = password
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_session(cls, session: Any, *, url: str = "") -> "Connection":
        """Wrap an already logged-in session (caller keeps ownership)."""
        return cls(url, "", "", session=session)

    def _create_session(self, url: str) -> Any:
        """Stubout point. This can be replaced with a fake session."""
        return XenAPI.Session(url)

    @property
    def session(self) -> Any:
        if self._session is None:
            raise RuntimeError("XenAPI session is not logged in")
        return self._session

    @property
    def xenapi(self) -> Any:
        return self.session.xenapi

    def login(self) -> "Connection":
        if self._session is not None:
            return self
        LOG.debug("Logging in to %s as %s", self.url, self.username)
        session = self._create_session(self.url)
        session.xenapi.login_with_password(self.username, self._password, API_VERSION, ORIGINATOR)
        self._session = session
        LOG.debug("XenAPI session established")
        return self

    def logout(self) -> None:
        if self._session is None or not self._owns_session:
            return
        try:
            self._session.xenapi.session.logout()
        except XenAPI.Failure as e:
            LOG.warning("XenAPI logout failed: %s", e)
        finally:
            self._session = None

    def __enter__(self) -> "Connection":
        return self.login()

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Any) -> None:
        self.logout()

    def __repr__(self) -> str:
        state = "open" if self._session is not None else "closed"
        return f"Connection(url={self.url!r}, user={self.username!r}, {state})"
