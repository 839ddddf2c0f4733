# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/config/models.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..core.exceptions import ConfigError
from ..schema.fields import CDROM, HARD_DRIVE


def _require(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, str):
        return v.strip() != ""
    return True


@dataclass
class ConnectionConfig:
    url: str = ""
    username: str = ""
    password: Optional[str] = None
    password_env: Optional[str] = None

    def resolve_password(self) -> str:
        """Direct value wins, then the variable named by ``password_env``."""
        if _require(self.password):
            return str(self.password)
        if _require(self.password_env):
            v = os.environ.get(str(self.password_env))
            if _require(v):
                return str(v)
            raise ConfigError(code=1, msg=f"Environment variable {self.password_env} is not set")
        raise ConfigError(code=1, msg="connection.password or connection.password_env is required")

    def validate(self) -> None:
        if not _require(self.url):
            raise ConfigError(code=1, msg="connection.url is required (or XENSERVER_URL)")
        if not _require(self.username):
            raise ConfigError(code=1, msg="connection.username is required (or XENSERVER_USERNAME)")


@dataclass
class VMSelector:
    uuid: Optional[str] = None
    name: Optional[str] = None

    def validate(self) -> None:
        if not _require(self.uuid) and not _require(self.name):
            raise ConfigError(code=1, msg="vm.uuid or vm.name is required")


@dataclass
class XenServerConfig:
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    vm: VMSelector = field(default_factory=VMSelector)
    hard_drive: List[Dict[str, Any]] = field(default_factory=list)
    cdrom: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, conf: Mapping[str, Any]) -> "XenServerConfig":
        conn = conf.get("connection") or {}
        vm = conf.get("vm") or {}
        if not isinstance(conn, Mapping):
            raise ConfigError(code=1, msg="connection must be a mapping")
        if isinstance(vm, str):
            vm = {"uuid": vm}
        if not isinstance(vm, Mapping):
            raise ConfigError(code=1, msg="vm must be a mapping or a UUID string")

        disks: Dict[str, List[Dict[str, Any]]] = {}
        for section in (HARD_DRIVE, CDROM):
            items = conf.get(section) or []
            if not isinstance(items, list) or not all(isinstance(x, Mapping) for x in items):
                raise ConfigError(code=1, msg=f"{section} must be a list of mappings")
            disks[section] = [dict(x) for x in items]

        return cls(
            connection=ConnectionConfig(
                url=str(conn.get("url") or ""),
                username=str(conn.get("username") or ""),
                password=conn.get("password"),
                password_env=conn.get("password_env"),
            ),
            vm=VMSelector(uuid=vm.get("uuid"), name=vm.get("name")),
            hard_drive=disks[HARD_DRIVE],
            cdrom=disks[CDROM],
        )
