# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/orchestrator/vbd.py
"""
VBD reconciliation between declared records and a XenServer VM.

Flows:
  - read:     VM VBDs -> (hard_drive, cdrom) records
  - bind:     template VBDs <-> declared template records (by slot)
  - create:   declared non-template records -> new VBDs (+ hot-plug)
  - destroy:  VDIs behind template disks

Every call is blocking and the first failure aborts the flow. Nothing that
was already done on the server is rolled back.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, MutableMapping, Optional, Sequence, Tuple

from ..core.exceptions import NoAvailableDeviceError, TemplateBindingError, UnsupportedVBDTypeError
from ..core.logger import Log
from ..schema.fields import CDROM, HARD_DRIVE
from ..schema.mapper import fill_vbd_schema, read_vbd_from_schema
from ..schema.records import VBDRecord, records_to_mappings
from ..xen.connection import Connection
from ..xen.descriptors import VBDDescriptor, VMDescriptor
from ..xen.types import NULL_REF, VbdMode, VbdType

LOG = logging.getLogger(__name__)


def _vm_vbds(conn: Connection, vm: VMDescriptor) -> List[VBDDescriptor]:
    vbds = []
    for ref in conn.xenapi.VM.get_VBDs(vm.ref):
        vbds.append(VBDDescriptor(ref=ref, vm=vm).query(conn))
    return vbds


def query_template_vbds(conn: Connection, vm: VMDescriptor) -> List[VBDDescriptor]:
    vbds = []
    for vbd in _vm_vbds(conn, vm):
        if vbd.is_template_device:
            LOG.debug("VBD %s (type = %s) comes from template", vbd.uuid, vbd.type)
            vbds.append(vbd)

    LOG.debug("Got %d template VBDs", len(vbds))
    return vbds


def mark_template_vbds(
    conn: Connection,
    vm: VMDescriptor,
    vbd_type: Optional[VbdType] = None,
) -> List[VBDDescriptor]:
    """
    Flag every VBD of a freshly cloned VM as template-origin.

    With ``vbd_type`` only VBDs of that type are flagged.
    """
    marked = []
    for vbd in _vm_vbds(conn, vm):
        if vbd_type is not None and vbd.type != vbd_type:
            continue
        if not vbd.is_template_device:
            vbd.is_template_device = True
            vbd.commit(conn)
        marked.append(vbd)
    LOG.debug("Marked %d VBDs of VM %s as template devices", len(marked), vm.uuid)
    return marked


def read_template_vbds_to_schema(
    conn: Connection,
    vm: VMDescriptor,
    records: Sequence[VBDRecord],
    vbd_type: VbdType,
) -> None:
    """
    Bind template VBDs of ``vbd_type`` to the declared template records.

    A template VBD matches the first record that is marked
    ``is_from_template`` and has the same ``user_device``. The matched record
    is overwritten with what the server has. Records nobody matched are left
    for the creation flow.
    """
    for vbd in _vm_vbds(conn, vm):
        if vbd.type != vbd_type or not vbd.is_template_device:
            continue

        match = next(
            (r for r in records if r.is_from_template and r.user_device == vbd.user_device),
            None,
        )
        if match is None:
            raise TemplateBindingError(f"template VBD {vbd.uuid} is not referenced", vbd_uuid=vbd.uuid)

        vbd.is_template_device = True
        vbd.commit(conn)

        bound = fill_vbd_schema(vbd)
        match.user_device = bound.user_device
        match.vdi_uuid = bound.vdi_uuid
        match.bootable = bound.bootable
        match.mode = bound.mode
        match.is_from_template = True
        LOG.debug("Bound template VBD %s to device %s", vbd.uuid, vbd.user_device)


def destroy_template_vdis(conn: Connection, vbds: Sequence[VBDDescriptor]) -> None:
    LOG.debug("Destroying VDIs of %d VBDs", len(vbds))
    for vbd in vbds:
        # CDs point at shared ISOs; nothing to reclaim.
        if vbd.type != VbdType.DISK or vbd.vdi is None:
            continue

        LOG.debug("Destroy VDI %s of VBD %s", vbd.vdi.uuid, vbd.uuid)
        conn.xenapi.VDI.destroy(vbd.vdi.ref)


def read_vbds(conn: Connection, vm: VMDescriptor) -> Tuple[List[VBDRecord], List[VBDRecord]]:
    refs = conn.xenapi.VM.get_VBDs(vm.ref)
    LOG.debug("Got %d VBDs", len(refs))

    hdd: List[VBDRecord] = []
    cdrom: List[VBDRecord] = []
    for ref in refs:
        vbd = VBDDescriptor(ref=ref, vm=vm).query(conn)
        record = fill_vbd_schema(vbd)
        LOG.debug("Found VBD %s type=%s: %s", vbd.uuid, vbd.type, record)

        if vbd.type == VbdType.CD:
            cdrom.append(record)
        elif vbd.type == VbdType.DISK:
            hdd.append(record)
        else:
            raise UnsupportedVBDTypeError(
                f'Unsupported VBD type "{getattr(vbd.type, "value", vbd.type)}"',
                vbd_uuid=vbd.uuid,
            )

    return hdd, cdrom


def set_schema_vbds(conn: Connection, vm: VMDescriptor, state: MutableMapping[str, Any]) -> None:
    """Store the observed VBDs of ``vm`` in ``state`` under hard_drive/cdrom."""
    try:
        hdd, cdrom = read_vbds(conn, vm)
    except Exception as e:
        LOG.error("Reading VBDs of VM %s failed: %s", vm.uuid, e)
        raise

    LOG.debug("Found %d CDs and %d HDDs", len(cdrom), len(hdd))
    Log.trace(LOG, "Current - %r", state.get(HARD_DRIVE))

    state[HARD_DRIVE] = records_to_mappings(hdd)
    state[CDROM] = records_to_mappings(cdrom)


def _vbd_create_record(vbd: VBDDescriptor, vm: VMDescriptor, user_device: str) -> Dict[str, Any]:
    return {
        "VM": vm.ref,
        "VDI": vbd.vdi.ref if vbd.vdi is not None else NULL_REF,
        "userdevice": user_device,
        "bootable": vbd.bootable,
        "mode": getattr(vbd.mode, "value", vbd.mode),
        "type": getattr(vbd.type, "value", vbd.type),
        "unpluggable": True,
        "empty": vbd.vdi is None,
        "other_config": {},
        "qos_algorithm_type": "",
        "qos_algorithm_params": {},
    }


def create_vbd(conn: Connection, vbd: VBDDescriptor) -> VBDDescriptor:
    """
    Create ``vbd`` on its VM in the first allowed device slot and plug it
    when the VM is running.
    """
    vm = vbd.vm
    if vm is None:
        raise ValueError("VBD descriptor has no VM")
    LOG.debug("Creating VBD for VM %r", vm.name)

    devices = conn.xenapi.VM.get_allowed_VBD_devices(vm.ref)
    if not devices:
        raise NoAvailableDeviceError("No available devices to attach to", vm_uuid=vm.uuid)
    user_device = devices[0]
    LOG.debug("Selected device for VBD: %s", user_device)

    vbd.ref = conn.xenapi.VBD.create(_vbd_create_record(vbd, vm, user_device))
    LOG.debug("Created VBD %s", vbd.ref)

    vbd.query(conn)
    vbd.vm = vm
    LOG.debug("VBD UUID %r", vbd.uuid)

    if vm.is_running:
        conn.xenapi.VBD.plug(vbd.ref)
        LOG.debug("Plugged VBD %r to VM %r", vbd.uuid, vm.name)

    return vbd


def create_vbds(
    conn: Connection,
    records: Sequence[VBDRecord],
    vbd_type: VbdType,
    vm: VMDescriptor,
) -> None:
    """
    Make the VM match ``records``: bind template devices, then create one VBD
    per remaining record, writing the server's values back into it.
    """
    log = Log.bind(LOG, vm=vm.uuid, vbd_type=getattr(vbd_type, "value", vbd_type))
    log.trace("createVBDs")
    read_template_vbds_to_schema(conn, vm, records, vbd_type)

    log.trace("Creating %d VBDs", len(records))

    created: List[str] = []
    for record in records:
        log.trace("Creating VBD for %r", record)

        if record.is_from_template:
            log.trace("Template device, skipping")
            continue

        try:
            vbd = read_vbd_from_schema(conn, record)
            vbd.type = vbd_type
            vbd.vm = vm
            if vbd_type == VbdType.CD:
                vbd.mode = VbdMode.RO

            vbd = create_vbd(conn, vbd)
        except Exception:
            if created:
                log.error("Aborted after creating VBDs %s; they are left in place", ", ".join(created))
            raise
        created.append(vbd.uuid)

        bound = fill_vbd_schema(vbd)
        record.user_device = bound.user_device
        record.vdi_uuid = bound.vdi_uuid
        record.bootable = bound.bootable
        record.mode = bound.mode
