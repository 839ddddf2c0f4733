# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/schema/hashing.py
from __future__ import annotations

import logging
import zlib
from typing import Any, Mapping, Union

from ..core.logger import Log
from .records import VBDRecord

LOG = logging.getLogger(__name__)


def hash_string(s: str) -> int:
    """CRC-32 (IEEE) of ``s`` as a non-negative int."""
    return zlib.crc32(s.encode("utf-8")) & 0xFFFFFFFF


def vbd_fingerprint_source(record: VBDRecord) -> str:
    """
    The string a record is hashed from.

    Template devices are keyed by slot only; the other fields are filled in
    from the template later. For the rest the slot is left out because the
    server may assign it.
    """
    if record.is_from_template:
        return record.user_device

    parts = [f"-{record.vdi_uuid}"]
    if record.mode != "":
        parts.append(f"-{record.mode.lower()}")
    parts.append(f"-{'true' if record.bootable else 'false'}")
    return "".join(parts)


def vbd_hash(v: Union[VBDRecord, Mapping[str, Any]]) -> int:
    record = v if isinstance(v, VBDRecord) else VBDRecord.from_mapping(v)
    s = vbd_fingerprint_source(record)
    Log.trace(LOG, "String for hash: %s", s)
    return hash_string(s)
