# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""XenAPI access layer: session wrapper, enums and object descriptors."""

from __future__ import annotations

from .connection import Connection
from .descriptors import TEMPLATE_DEVICE_KEY, VBDDescriptor, VDIDescriptor, VMDescriptor
from .types import NULL_REF, VbdMode, VbdType, VMPowerState

__all__ = [
    "Connection",
    "NULL_REF",
    "TEMPLATE_DEVICE_KEY",
    "VBDDescriptor",
    "VDIDescriptor",
    "VMDescriptor",
    "VMPowerState",
    "VbdMode",
    "VbdType",
]
