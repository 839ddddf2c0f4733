# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/schema/mapper.py
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..core.exceptions import InvalidModeError
from ..core.logger import Log
from ..xen.connection import Connection
from ..xen.descriptors import VBDDescriptor, VDIDescriptor
from ..xen.types import VbdMode
from .records import VBDRecord

LOG = logging.getLogger(__name__)


def parse_mode(value: str) -> VbdMode:
    v = (value or "").lower()
    if v == VbdMode.RO.value.lower():
        return VbdMode.RO
    if v == VbdMode.RW.value.lower():
        return VbdMode.RW
    raise InvalidModeError(f'"{value}" is not valid mode (either RO or RW)', mode=value)


def fill_vbd_schema(vbd: VBDDescriptor) -> VBDRecord:
    return VBDRecord(
        vdi_uuid=vbd.vdi_uuid,
        bootable=vbd.bootable,
        mode=str(getattr(vbd.mode, "value", vbd.mode)),
        user_device=vbd.user_device,
        is_from_template=vbd.is_template_device,
    )


def read_vbd_from_schema(conn: Connection, record: VBDRecord) -> VBDDescriptor:
    """Build an (unsaved) VBD descriptor from a declared record."""
    Log.trace(LOG, "Reading VBD from schema %r", record)

    vdi: Optional[VDIDescriptor] = None
    if record.vdi_uuid:
        LOG.debug("Loading VDI %s", record.vdi_uuid)
        vdi = VDIDescriptor(uuid=record.vdi_uuid).load(conn)

    return VBDDescriptor(
        vdi=vdi,
        bootable=record.bootable,
        mode=parse_mode(record.mode),
        user_device=record.user_device,
    )


def read_vbds_from_schema(conn: Connection, records: Iterable[VBDRecord]) -> List[VBDDescriptor]:
    return [read_vbd_from_schema(conn, r) for r in records]
