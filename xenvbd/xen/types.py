# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/xen/types.py
"""XenAPI enum values used by the VBD layer (wire strings as xapi sends them)."""
from __future__ import annotations

from enum import Enum

NULL_REF = "OpaqueRef:NULL"


class VbdType(str, Enum):
    DISK = "Disk"
    CD = "CD"
    FLOPPY = "Floppy"

    @classmethod
    def parse(cls, value: str) -> "VbdType":
        """Case-insensitive lookup; raises ValueError for unknown types."""
        v = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == v:
                return member
        raise ValueError(f"unknown VBD type {value!r}")


class VbdMode(str, Enum):
    RO = "RO"
    RW = "RW"


class VMPowerState(str, Enum):
    HALTED = "Halted"
    PAUSED = "Paused"
    RUNNING = "Running"
    SUSPENDED = "Suspended"
