# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import importlib

import pytest
import XenAPI

from xenvbd.core.exceptions import VMLookupError
from xenvbd.xen.descriptors import TEMPLATE_DEVICE_KEY, VBDDescriptor, VDIDescriptor, VMDescriptor
from xenvbd.xen.types import VbdMode, VbdType, VMPowerState


@pytest.mark.unit
class TestVMDescriptor:
    def test_load_by_uuid(self, xapi, conn):
        ref = xapi.add_vm(name="web", power_state="Running", uuid="vm-1")
        vm = VMDescriptor(uuid="vm-1").load(conn)
        assert vm.ref == ref
        assert vm.name == "web"
        assert vm.power_state is VMPowerState.RUNNING
        assert vm.is_running

    def test_load_by_name(self, xapi, conn):
        ref = xapi.add_vm(name="db", uuid="vm-2")
        vm = VMDescriptor(name="db").load(conn)
        assert vm.ref == ref
        assert vm.uuid == "vm-2"
        assert not vm.is_running
        assert not vm.is_a_template

    def test_load_template_flag(self, xapi, conn):
        xapi.add_vm(name="golden", uuid="tpl-1", template=True)
        assert VMDescriptor(uuid="tpl-1").load(conn).is_a_template

    def test_ambiguous_name(self, xapi, conn):
        xapi.add_vm(name="twin")
        xapi.add_vm(name="twin")
        with pytest.raises(VMLookupError, match="found 2"):
            VMDescriptor(name="twin").load(conn)

    def test_needs_uuid_or_name(self, conn):
        with pytest.raises(VMLookupError):
            VMDescriptor().load(conn)

    def test_unknown_uuid(self, conn):
        with pytest.raises(XenAPI.Failure):
            VMDescriptor(uuid="nope").load(conn)


@pytest.mark.unit
class TestVDIDescriptor:
    def test_load_by_uuid(self, xapi, conn):
        ref = xapi.add_vdi(uuid="vdi-9", name="root")
        vdi = VDIDescriptor(uuid="vdi-9").load(conn)
        assert (vdi.ref, vdi.uuid, vdi.name_label) == (ref, "vdi-9", "root")


@pytest.mark.unit
class TestVBDDescriptor:
    def test_query_disk(self, xapi, conn):
        vm_ref = xapi.add_vm()
        vdi_ref = xapi.add_vdi(uuid="vdi-1")
        ref = xapi.add_vbd(vm_ref, userdevice="0", vdi_ref=vdi_ref, mode="RW", bootable=True, uuid="vbd-1")

        vbd = VBDDescriptor(ref=ref).query(conn)

        assert vbd.uuid == "vbd-1"
        assert vbd.type is VbdType.DISK
        assert vbd.mode is VbdMode.RW
        assert vbd.bootable is True
        assert vbd.user_device == "0"
        assert vbd.vdi.uuid == "vdi-1"
        assert vbd.vdi_uuid == "vdi-1"
        assert vbd.vm.ref == vm_ref
        assert vbd.is_template_device is False

    def test_query_empty_cd(self, xapi, conn):
        vm_ref = xapi.add_vm()
        ref = xapi.add_vbd(vm_ref, type="CD", userdevice="3", mode="RO")
        vbd = VBDDescriptor(ref=ref).query(conn)
        assert vbd.type is VbdType.CD
        assert vbd.vdi is None
        assert vbd.vdi_uuid == ""

    def test_query_keeps_unknown_type(self, xapi, conn):
        vm_ref = xapi.add_vm()
        ref = xapi.add_vbd(vm_ref, type="Tape")
        assert VBDDescriptor(ref=ref).query(conn).type == "Tape"

    def test_query_reads_template_marker(self, xapi, conn):
        vm_ref = xapi.add_vm()
        ref = xapi.add_vbd(vm_ref, template=True)
        assert VBDDescriptor(ref=ref).query(conn).is_template_device is True

    def test_query_keeps_given_vm(self, xapi, conn):
        vm_ref = xapi.add_vm(name="keep")
        vm = VMDescriptor(ref=vm_ref).query(conn)
        ref = xapi.add_vbd(vm_ref)
        assert VBDDescriptor(ref=ref, vm=vm).query(conn).vm is vm

    def test_query_bad_ref(self, conn):
        with pytest.raises(XenAPI.Failure):
            VBDDescriptor(ref="OpaqueRef:missing").query(conn)

    def test_commit_sets_and_clears_marker(self, xapi, conn):
        vm_ref = xapi.add_vm()
        ref = xapi.add_vbd(vm_ref)
        xapi.vbds[ref]["other_config"] = {"owner": "true"}

        vbd = VBDDescriptor(ref=ref).query(conn)
        vbd.is_template_device = True
        vbd.commit(conn)
        assert xapi.vbds[ref]["other_config"] == {"owner": "true", TEMPLATE_DEVICE_KEY: "true"}
        assert len(xapi.called("VBD.set_other_config")) == 1

        vbd.is_template_device = False
        vbd.commit(conn)
        assert xapi.vbds[ref]["other_config"] == {"owner": "true"}


@pytest.mark.unit
@pytest.mark.parametrize(
    "module",
    ["xenvbd.xen.descriptors", "xenvbd.xen.connection", "xenvbd.orchestrator.vbd"],
)
def test_module_docstring(module):
    assert importlib.import_module(module).__doc__
