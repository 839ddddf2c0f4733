# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest
import XenAPI

from xenvbd.core.exceptions import InvalidModeError
from xenvbd.schema.mapper import fill_vbd_schema, parse_mode, read_vbd_from_schema, read_vbds_from_schema
from xenvbd.schema.records import VBDRecord
from xenvbd.xen.descriptors import VBDDescriptor, VDIDescriptor
from xenvbd.xen.types import VbdMode, VbdType


@pytest.mark.unit
class TestParseMode:
    @pytest.mark.parametrize("value", ["ro", "RO", "Ro", "rO"])
    def test_read_only(self, value):
        assert parse_mode(value) is VbdMode.RO

    @pytest.mark.parametrize("value", ["rw", "RW", "Rw"])
    def test_read_write(self, value):
        assert parse_mode(value) is VbdMode.RW

    @pytest.mark.parametrize("value", ["", "r", "RWX", "read-only", " ro"])
    def test_invalid(self, value):
        with pytest.raises(InvalidModeError) as ei:
            parse_mode(value)
        assert "is not valid mode (either RO or RW)" in str(ei.value)
        assert ei.value.code == 2


@pytest.mark.unit
class TestFillVbdSchema:
    def test_copies_fields(self):
        vbd = VBDDescriptor(
            type=VbdType.DISK,
            mode=VbdMode.RO,
            bootable=True,
            user_device="2",
            is_template_device=True,
            vdi=VDIDescriptor(ref="r", uuid="vdi-1"),
        )
        assert fill_vbd_schema(vbd) == VBDRecord(
            vdi_uuid="vdi-1", bootable=True, mode="RO", user_device="2", is_from_template=True
        )

    def test_empty_drive_has_blank_vdi_uuid(self):
        vbd = VBDDescriptor(type=VbdType.CD, mode=VbdMode.RO, user_device="3")
        assert fill_vbd_schema(vbd).vdi_uuid == ""


@pytest.mark.unit
class TestReadVbdFromSchema:
    def test_loads_vdi(self, xapi, conn):
        vdi_ref = xapi.add_vdi(uuid="vdi-1", name="data")
        vbd = read_vbd_from_schema(conn, VBDRecord(vdi_uuid="vdi-1", mode="rw", bootable=True, user_device="4"))
        assert vbd.vdi.ref == vdi_ref
        assert vbd.vdi.name_label == "data"
        assert vbd.mode is VbdMode.RW
        assert vbd.bootable is True
        assert vbd.user_device == "4"
        assert vbd.ref == ""

    def test_no_vdi_no_lookup(self, xapi, conn):
        vbd = read_vbd_from_schema(conn, VBDRecord(mode="RO"))
        assert vbd.vdi is None
        assert xapi.called("VDI.get_by_uuid") == []

    def test_unknown_vdi_propagates_failure(self, xapi, conn):
        with pytest.raises(XenAPI.Failure):
            read_vbd_from_schema(conn, VBDRecord(vdi_uuid="missing", mode="RW"))

    def test_invalid_mode(self, conn):
        with pytest.raises(InvalidModeError):
            read_vbd_from_schema(conn, VBDRecord(mode="XX"))

    def test_many_stops_at_first_failure(self, xapi, conn):
        xapi.add_vdi(uuid="vdi-1")
        records = [VBDRecord(vdi_uuid="vdi-1", mode="RW"), VBDRecord(mode="bad"), VBDRecord(mode="RO")]
        with pytest.raises(InvalidModeError):
            read_vbds_from_schema(conn, records)

        vbds = read_vbds_from_schema(conn, [records[0], records[2]])
        assert [v.mode for v in vbds] == [VbdMode.RW, VbdMode.RO]
