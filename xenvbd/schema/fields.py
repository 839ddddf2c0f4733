# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/schema/fields.py
"""
Field names and the declarative schema of a ``hard_drive`` / ``cdrom`` record.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..core.exceptions import SchemaConflictError

VDI_UUID = "vdi_uuid"
BOOTABLE = "bootable"
MODE = "mode"
USER_DEVICE = "user_device"
TEMPLATE_DEVICE = "is_from_template"

HARD_DRIVE = "hard_drive"
CDROM = "cdrom"

_TEMPLATE_CONFLICT = [f"{HARD_DRIVE}.0.{TEMPLATE_DEVICE}", f"{CDROM}.0.{TEMPLATE_DEVICE}"]

VBD_SCHEMA: Dict[str, Dict[str, Any]] = {
    TEMPLATE_DEVICE: {
        "type": bool,
        "optional": True,
        "default": False,
    },
    VDI_UUID: {
        "type": str,
        "optional": True,
        "computed": True,
        "conflicts_with": _TEMPLATE_CONFLICT,
    },
    USER_DEVICE: {
        "type": str,
        "optional": True,
        "computed": True,
        "diff_suppress": "ignore_case",
    },
    BOOTABLE: {
        "type": bool,
        "optional": True,
        "computed": True,
        "conflicts_with": _TEMPLATE_CONFLICT,
    },
    MODE: {
        "type": str,
        "optional": True,
        "computed": True,
        "conflicts_with": _TEMPLATE_CONFLICT,
    },
}


def default_for(key: str) -> Any:
    spec = VBD_SCHEMA[key]
    if "default" in spec:
        return spec["default"]
    return spec["type"]()


def suppress_diff(key: str, old: Any, new: Any) -> bool:
    """True when a change from ``old`` to ``new`` is not a real change for ``key``."""
    if VBD_SCHEMA.get(key, {}).get("diff_suppress") == "ignore_case":
        return str(old).lower() == str(new).lower()
    return old == new


def _conflicting_fields(raw: Mapping[str, Any]) -> List[str]:
    if not raw.get(TEMPLATE_DEVICE):
        return []
    out = []
    for key, spec in VBD_SCHEMA.items():
        if not spec.get("conflicts_with"):
            continue
        if raw.get(key) not in (None, ""):
            out.append(key)
    return out


def validate_declared(raw: Mapping[str, Any], *, section: str = HARD_DRIVE, index: int = 0) -> None:
    """
    Check a user-declared record against the schema before it is used.

    Rejects unknown keys, wrongly typed values, and fields that conflict
    with ``is_from_template``.
    """
    where = f"{section}.{index}"
    for key, value in raw.items():
        spec = VBD_SCHEMA.get(key)
        if spec is None:
            raise SchemaConflictError(f"{where}: unknown field {key!r}", field=key)
        if value is not None and not isinstance(value, spec["type"]):
            raise SchemaConflictError(
                f"{where}.{key}: expected {spec['type'].__name__}, got {type(value).__name__}",
                field=key,
            )

    conflicts = _conflicting_fields(raw)
    if conflicts:
        raise SchemaConflictError(
            f"{where}: {', '.join(conflicts)} conflicts with {TEMPLATE_DEVICE}",
            fields=conflicts,
        )
