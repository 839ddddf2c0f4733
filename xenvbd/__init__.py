# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/__init__.py
"""
xenvbd - XenServer virtual block device reconciliation

Maps ``hard_drive`` / ``cdrom`` records onto a VM's VBDs through XenAPI and
reads the VM's VBDs back into records.

Usage as a library:

    from xenvbd import Connection, VMDescriptor, VBDRecord, VbdType, create_vbds

    with Connection(url, user, password) as conn:
        vm = VMDescriptor(uuid=vm_uuid).load(conn)
        disks = [VBDRecord(vdi_uuid=vdi_uuid, mode="RW")]
        create_vbds(conn, disks, VbdType.DISK, vm)
"""

__version__ = "0.1.0"

from .orchestrator import (
    create_vbd,
    create_vbds,
    destroy_template_vdis,
    mark_template_vbds,
    query_template_vbds,
    read_template_vbds_to_schema,
    read_vbds,
    set_schema_vbds,
)
from .schema import VBDRecord, vbd_hash
from .xen import Connection, VBDDescriptor, VDIDescriptor, VMDescriptor, VbdMode, VbdType

__all__ = [
    "__version__",
    # XenAPI layer
    "Connection",
    "VBDDescriptor",
    "VDIDescriptor",
    "VMDescriptor",
    "VbdMode",
    "VbdType",
    # Records
    "VBDRecord",
    "vbd_hash",
    # Reconciliation
    "create_vbd",
    "create_vbds",
    "destroy_template_vdis",
    "mark_template_vbds",
    "query_template_vbds",
    "read_template_vbds_to_schema",
    "read_vbds",
    "set_schema_vbds",
]
