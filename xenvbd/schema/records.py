# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/schema/records.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from ..core.utils import U
from .fields import BOOTABLE, MODE, TEMPLATE_DEVICE, USER_DEVICE, VDI_UUID, default_for


def _str(v: Any, key: str) -> str:
    return default_for(key) if v is None else str(v)


@dataclass
class VBDRecord:
    """
    One ``hard_drive`` / ``cdrom`` entry.

    Flat mappings only exist at the boundary with the caller's state;
    everything inside the project works on this type.
    """
    vdi_uuid: str = ""
    bootable: bool = False
    mode: str = ""
    user_device: str = ""
    is_from_template: bool = False

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any]) -> "VBDRecord":
        return cls(
            vdi_uuid=_str(m.get(VDI_UUID), VDI_UUID),
            bootable=U.to_bool(m.get(BOOTABLE, default_for(BOOTABLE))),
            mode=_str(m.get(MODE), MODE),
            user_device=_str(m.get(USER_DEVICE), USER_DEVICE),
            is_from_template=U.to_bool(m.get(TEMPLATE_DEVICE, default_for(TEMPLATE_DEVICE))),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            VDI_UUID: self.vdi_uuid,
            BOOTABLE: self.bootable,
            MODE: self.mode,
            USER_DEVICE: self.user_device,
            TEMPLATE_DEVICE: self.is_from_template,
        }


def records_from_mappings(items: Iterable[Mapping[str, Any]]) -> List[VBDRecord]:
    return [VBDRecord.from_mapping(m) for m in items or []]


def records_to_mappings(records: Iterable[VBDRecord]) -> List[Dict[str, Any]]:
    return [r.to_mapping() for r in records]
