# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from xenvbd.core.exceptions import SchemaConflictError, ValidationError
from xenvbd.schema.fields import VBD_SCHEMA, default_for, suppress_diff, validate_declared
from xenvbd.schema.records import VBDRecord, records_from_mappings, records_to_mappings


@pytest.mark.unit
class TestSchemaDeclaration:
    def test_fields_present(self):
        assert set(VBD_SCHEMA) == {"vdi_uuid", "bootable", "mode", "user_device", "is_from_template"}

    def test_defaults(self):
        assert default_for("is_from_template") is False
        assert default_for("vdi_uuid") == ""
        assert default_for("bootable") is False

    def test_user_device_diff_ignores_case(self):
        assert suppress_diff("user_device", "XVDA", "xvda")
        assert not suppress_diff("mode", "RO", "ro")


@pytest.mark.unit
class TestValidateDeclared:
    def test_plain_disk_ok(self):
        validate_declared({"vdi_uuid": "u", "mode": "RW", "bootable": True})

    def test_template_slot_only_ok(self):
        validate_declared({"is_from_template": True, "user_device": "0"})

    @pytest.mark.parametrize("field,value", [("vdi_uuid", "u"), ("mode", "RO"), ("bootable", True)])
    def test_template_conflicts(self, field, value):
        with pytest.raises(SchemaConflictError) as ei:
            validate_declared({"is_from_template": True, "user_device": "0", field: value}, section="cdrom", index=2)
        assert field in str(ei.value)
        assert "cdrom.2" in str(ei.value)
        assert isinstance(ei.value, ValidationError)

    def test_unknown_field(self):
        with pytest.raises(SchemaConflictError, match="unknown field"):
            validate_declared({"size": 10})

    def test_wrong_type(self):
        with pytest.raises(SchemaConflictError, match="expected bool"):
            validate_declared({"bootable": "yes"})


@pytest.mark.unit
class TestVBDRecord:
    def test_from_mapping_fills_defaults(self):
        r = VBDRecord.from_mapping({"vdi_uuid": "u"})
        assert r == VBDRecord(vdi_uuid="u", bootable=False, mode="", user_device="", is_from_template=False)

    def test_none_values_become_defaults(self):
        r = VBDRecord.from_mapping({"vdi_uuid": None, "mode": None})
        assert r.vdi_uuid == ""
        assert r.mode == ""

    def test_to_mapping_keys(self):
        m = VBDRecord(vdi_uuid="u", mode="RO", user_device="3").to_mapping()
        assert m == {
            "vdi_uuid": "u",
            "bootable": False,
            "mode": "RO",
            "user_device": "3",
            "is_from_template": False,
        }

    def test_list_helpers(self):
        items = [{"vdi_uuid": "a"}, {"vdi_uuid": "b", "is_from_template": True}]
        records = records_from_mappings(items)
        assert [r.vdi_uuid for r in records] == ["a", "b"]
        assert records_to_mappings(records)[1]["is_from_template"] is True
        assert records_from_mappings(None) == []
