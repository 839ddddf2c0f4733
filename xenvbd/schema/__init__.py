# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""Record schema, typed records, descriptor mapping and fingerprints."""

from __future__ import annotations

from .fields import CDROM, HARD_DRIVE, VBD_SCHEMA, validate_declared
from .hashing import vbd_hash
from .mapper import fill_vbd_schema, parse_mode, read_vbd_from_schema, read_vbds_from_schema
from .records import VBDRecord, records_from_mappings, records_to_mappings

__all__ = [
    "CDROM",
    "HARD_DRIVE",
    "VBDRecord",
    "VBD_SCHEMA",
    "fill_vbd_schema",
    "parse_mode",
    "read_vbd_from_schema",
    "read_vbds_from_schema",
    "records_from_mappings",
    "records_to_mappings",
    "validate_declared",
    "vbd_hash",
]
