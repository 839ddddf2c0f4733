# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/cli/commands.py
from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console

from ..config.models import XenServerConfig
from ..core.exceptions import Fatal, TemplateVMError
from ..core.logger import Log
from ..orchestrator.vbd import (
    create_vbds,
    destroy_template_vdis,
    mark_template_vbds,
    query_template_vbds,
    set_schema_vbds,
)
from ..schema.fields import CDROM, HARD_DRIVE, validate_declared
from ..schema.hashing import vbd_hash
from ..schema.records import VBDRecord, records_to_mappings
from ..xen.connection import Connection
from ..xen.descriptors import VMDescriptor
from ..xen.types import VbdType
from .render import print_state


def _connect(cfg: XenServerConfig) -> Connection:
    cfg.connection.validate()
    return Connection(cfg.connection.url, cfg.connection.username, cfg.connection.resolve_password())


def _load_vm(conn: Connection, cfg: XenServerConfig, *, modify: bool = False) -> VMDescriptor:
    cfg.vm.validate()
    vm = VMDescriptor(uuid=cfg.vm.uuid or "", name=cfg.vm.name or "").load(conn)
    if modify and vm.is_a_template:
        raise TemplateVMError(f"VM {vm.name} ({vm.uuid}) is a template; refusing to change its devices", vm_uuid=vm.uuid)
    return vm


def _declared(cfg: XenServerConfig) -> Dict[str, List[VBDRecord]]:
    out: Dict[str, List[VBDRecord]] = {}
    for section, items in ((HARD_DRIVE, cfg.hard_drive), (CDROM, cfg.cdrom)):
        for i, raw in enumerate(items):
            validate_declared(raw, section=section, index=i)
        out[section] = [VBDRecord.from_mapping(raw) for raw in items]
    return out


def cmd_read(args: argparse.Namespace, cfg: XenServerConfig, logger: logging.Logger, console: Console) -> int:
    state: Dict[str, Any] = {}
    with _connect(cfg) as conn:
        vm = _load_vm(conn, cfg)
        Log.step(logger, f"Reading VBDs of VM {vm.name}", vm=vm.uuid)
        set_schema_vbds(conn, vm, state)

    if getattr(args, "as_json", False):
        console.print_json(json.dumps(state))
    else:
        print_state(state, console)
    return 0


def cmd_apply(args: argparse.Namespace, cfg: XenServerConfig, logger: logging.Logger, console: Console) -> int:
    declared = _declared(cfg)
    with _connect(cfg) as conn:
        vm = _load_vm(conn, cfg, modify=True)
        Log.step(logger, f"Reconciling VBDs of VM {vm.name}", vm=vm.uuid, power_state=vm.power_state)
        create_vbds(conn, declared[HARD_DRIVE], VbdType.DISK, vm)
        create_vbds(conn, declared[CDROM], VbdType.CD, vm)

    state = {section: records_to_mappings(records) for section, records in declared.items()}
    Log.ok(logger, "VBDs reconciled", hard_drive=len(state[HARD_DRIVE]), cdrom=len(state[CDROM]))
    console.print_json(json.dumps(state))
    return 0


def cmd_mark_template(args: argparse.Namespace, cfg: XenServerConfig, logger: logging.Logger, console: Console) -> int:
    vbd_type: Optional[VbdType] = VbdType.parse(args.vbd_type) if getattr(args, "vbd_type", None) else None
    with _connect(cfg) as conn:
        vm = _load_vm(conn, cfg, modify=True)
        marked = mark_template_vbds(conn, vm, vbd_type)
    Log.ok(logger, f"Marked {len(marked)} VBDs as template devices", vm=vm.uuid)
    return 0


def cmd_destroy_vdis(args: argparse.Namespace, cfg: XenServerConfig, logger: logging.Logger, console: Console) -> int:
    if not getattr(args, "yes", False):
        raise Fatal(code=2, msg="destroy-vdis deletes disk images; pass --yes to confirm")
    with _connect(cfg) as conn:
        vm = _load_vm(conn, cfg, modify=True)
        vbds = query_template_vbds(conn, vm)
        Log.warn(logger, f"Destroying VDIs of {len(vbds)} template VBDs", vm=vm.uuid)
        destroy_template_vdis(conn, vbds)
    Log.ok(logger, "Template VDIs destroyed", vm=vm.uuid)
    return 0


def cmd_hash(args: argparse.Namespace, cfg: XenServerConfig, logger: logging.Logger, console: Console) -> int:
    for section, records in _declared(cfg).items():
        for i, record in enumerate(records):
            console.print(f"{section}.{i} {vbd_hash(record)}")
    return 0


COMMANDS: Dict[str, Callable[..., int]] = {
    "read": cmd_read,
    "apply": cmd_apply,
    "mark-template": cmd_mark_template,
    "destroy-vdis": cmd_destroy_vdis,
    "hash": cmd_hash,
}


def run(args: argparse.Namespace, conf: Dict[str, Any], logger: logging.Logger, console: Optional[Console] = None) -> int:
    cfg = XenServerConfig.from_mapping(conf)
    return COMMANDS[args.cmd](args, cfg, logger, console or Console())
