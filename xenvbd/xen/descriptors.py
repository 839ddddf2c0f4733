# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/xen/descriptors.py
"""
In-memory views of XenAPI objects.

A descriptor is built from a reference (or a UUID / name) and populated by
``query()`` / ``load()``. Only the VBD descriptor writes anything back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from ..core.exceptions import VMLookupError
from ..core.utils import U
from .connection import Connection
from .types import NULL_REF, VbdMode, VbdType, VMPowerState

LOG = logging.getLogger(__name__)

# other_config key carrying the template-origin marker of a VBD
TEMPLATE_DEVICE_KEY = "tf_template_device"


def _enum_or_raw(enum_cls: Any, value: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class VMDescriptor:
    ref: str = ""
    uuid: str = ""
    name: str = ""
    power_state: Union[VMPowerState, str] = VMPowerState.HALTED
    is_a_template: bool = False

    @property
    def is_running(self) -> bool:
        return self.power_state == VMPowerState.RUNNING

    def query(self, conn: Connection) -> "VMDescriptor":
        rec = conn.xenapi.VM.get_record(self.ref)
        self.uuid = rec.get("uuid", "")
        self.name = rec.get("name_label", "")
        self.power_state = _enum_or_raw(VMPowerState, rec.get("power_state", ""))
        self.is_a_template = bool(rec.get("is_a_template", False))
        return self

    def load(self, conn: Connection) -> "VMDescriptor":
        """Resolve the VM by UUID, or by name label when no UUID is set."""
        if self.uuid:
            self.ref = conn.xenapi.VM.get_by_uuid(self.uuid)
        elif self.name:
            refs = conn.xenapi.VM.get_by_name_label(self.name)
            if len(refs) != 1:
                raise VMLookupError(
                    f"expected exactly one VM named {self.name!r}, found {len(refs)}",
                    name=self.name,
                )
            self.ref = refs[0]
        else:
            raise VMLookupError("VM uuid or name is required")
        return self.query(conn)


@dataclass
class VDIDescriptor:
    ref: str = ""
    uuid: str = ""
    name_label: str = ""

    def query(self, conn: Connection) -> "VDIDescriptor":
        rec = conn.xenapi.VDI.get_record(self.ref)
        self.uuid = rec.get("uuid", "")
        self.name_label = rec.get("name_label", "")
        return self

    def load(self, conn: Connection) -> "VDIDescriptor":
        self.ref = conn.xenapi.VDI.get_by_uuid(self.uuid)
        return self.query(conn)


@dataclass
class VBDDescriptor:
    ref: str = ""
    uuid: str = ""
    type: Union[VbdType, str] = VbdType.DISK
    vm: Optional[VMDescriptor] = None
    mode: Union[VbdMode, str] = VbdMode.RW
    bootable: bool = False
    user_device: str = ""
    is_template_device: bool = False
    vdi: Optional[VDIDescriptor] = None
    other_config: Dict[str, str] = field(default_factory=dict)

    @property
    def vdi_uuid(self) -> str:
        return self.vdi.uuid if self.vdi is not None else ""

    def query(self, conn: Connection) -> "VBDDescriptor":
        rec = conn.xenapi.VBD.get_record(self.ref)

        self.uuid = rec.get("uuid", "")
        # Unknown types are kept verbatim so callers can reject them.
        self.type = _enum_or_raw(VbdType, rec.get("type", ""))
        self.mode = _enum_or_raw(VbdMode, rec.get("mode", ""))
        self.bootable = bool(rec.get("bootable", False))
        self.user_device = rec.get("userdevice", "")
        self.other_config = dict(rec.get("other_config") or {})
        self.is_template_device = U.to_bool(self.other_config.get(TEMPLATE_DEVICE_KEY))

        vm_ref = rec.get("VM", NULL_REF)
        if self.vm is None or self.vm.ref != vm_ref:
            self.vm = VMDescriptor(ref=vm_ref)

        vdi_ref = rec.get("VDI", NULL_REF)
        if rec.get("empty") or not vdi_ref or vdi_ref == NULL_REF:
            self.vdi = None
        else:
            self.vdi = VDIDescriptor(ref=vdi_ref).query(conn)

        LOG.debug("Queried VBD %s (type=%s, device=%s)", self.uuid, self.type, self.user_device)
        return self

    def commit(self, conn: Connection) -> "VBDDescriptor":
        """Push the template-origin marker back with a single call."""
        other_config = dict(self.other_config)
        if self.is_template_device:
            other_config[TEMPLATE_DEVICE_KEY] = "true"
        else:
            other_config.pop(TEMPLATE_DEVICE_KEY, None)
        conn.xenapi.VBD.set_other_config(self.ref, other_config)
        self.other_config = other_config
        return self
