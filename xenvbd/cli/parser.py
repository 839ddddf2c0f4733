# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/cli/parser.py
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional, Sequence, Tuple

from ..config.loader import Config
from ..core.logger import Log, c
from ..core.utils import U

YAML_EXAMPLE = """\
  connection:
    url: https://xenserver.example.com
    username: root
    password_env: XENSERVER_PASSWORD
  vm:
    uuid: 9e4d3c6e-...
  hard_drive:
    - is_from_template: true
      user_device: "0"
    - vdi_uuid: 2a1f...
      mode: RW
      bootable: false
  cdrom:
    - vdi_uuid: 77c0...   # ISO
      mode: RO
"""


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Combines raw description formatting with default value display in help."""


def _add_global_flags(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group(c("Global", "cyan", ["bold"]))
    g.add_argument("--config", action="append", default=[], help="YAML config file or directory (repeatable, later wins).")
    g.add_argument("-v", "--verbose", action="count", default=0, help="-vv debug, -vvv trace.")
    g.add_argument("-q", "--quiet", action="count", default=0, help="-q warnings only, -qq errors only.")
    g.add_argument("--log-file", dest="log_file", default=None, help="Also write logs to this file.")
    g.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON logs.")
    g.add_argument("--dump-config", dest="dump_config", action="store_true", help="Print the merged config and exit.")

    x = p.add_argument_group(c("XenServer", "cyan", ["bold"]))
    x.add_argument("--url", default=None, help="XenAPI URL (overrides connection.url).")
    x.add_argument("--username", default=None, help="XenAPI user (overrides connection.username).")
    x.add_argument("--password-env", dest="password_env", default=None, help="Env var holding the password.")
    x.add_argument("--vm", dest="vm_uuid", default=None, help="VM UUID (overrides vm.uuid).")
    x.add_argument("--vm-name", dest="vm_name", default=None, help="VM name label (overrides vm.name).")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="xenvbd",
        description=c("xenvbd: reconcile VM disks and CD drives with XenServer", "green", ["bold"]),
        formatter_class=HelpFormatter,
        epilog=c("YAML example:\n", "cyan", ["bold"]) + c(YAML_EXAMPLE, "cyan"),
    )
    _add_global_flags(p)

    sub = p.add_subparsers(dest="cmd", metavar="COMMAND")
    sub.required = True

    r = sub.add_parser("read", help="Show the VM's disks and CD drives.", formatter_class=HelpFormatter)
    r.add_argument("--json", dest="as_json", action="store_true", help="Print JSON instead of tables.")

    sub.add_parser("apply", help="Bind template devices and create declared VBDs.", formatter_class=HelpFormatter)

    m = sub.add_parser("mark-template", help="Flag the VM's current VBDs as template devices.", formatter_class=HelpFormatter)
    m.add_argument("--type", dest="vbd_type", choices=["disk", "cd"], default=None, help="Only VBDs of this type.")

    d = sub.add_parser("destroy-vdis", help="Destroy the VDIs behind template disks.", formatter_class=HelpFormatter)
    d.add_argument("--yes", action="store_true", help="Required: confirm VDI destruction.")

    sub.add_parser("hash", help="Print the fingerprint of every declared record.", formatter_class=HelpFormatter)
    return p


def _build_preparser() -> argparse.ArgumentParser:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", action="append", default=[])
    pre.add_argument("-v", "--verbose", action="count", default=0)
    pre.add_argument("-q", "--quiet", action="count", default=0)
    pre.add_argument("--log-file", dest="log_file", default=None)
    pre.add_argument("--json-logs", dest="json_logs", action="store_true")
    pre.add_argument("--dump-config", dest="dump_config", action="store_true")
    return pre


def _apply_cli_overrides(args: argparse.Namespace, conf: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(conf)
    conn = dict(out.get("connection") or {})
    for key in ("url", "username", "password_env"):
        v = getattr(args, key, None)
        if v:
            conn[key] = v
    if getattr(args, "password_env", None):
        # the named variable replaces any password from config files
        conn.pop("password", None)
    out["connection"] = conn

    vm = out.get("vm") or {}
    vm = {"uuid": vm} if isinstance(vm, str) else dict(vm)
    if getattr(args, "vm_uuid", None):
        vm = {"uuid": args.vm_uuid}
    elif getattr(args, "vm_name", None):
        vm = {"name": args.vm_name}
    out["vm"] = vm
    return out


def parse_args_with_config(
    argv: Optional[Sequence[str]] = None,
    logger: Any = None,
) -> Tuple[argparse.Namespace, Dict[str, Any], Any]:
    """
    Phase 0: parse only the flags needed to locate config and set up logging
    Phase 1: load + merge config files, then environment
    Phase 2: full parse; CLI flags override config values
    """
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    args0, _rest = _build_preparser().parse_known_args(argv)

    if logger is None:
        logger = Log.setup(
            args0.verbose,
            args0.log_file,
            quiet=args0.quiet,
            json_logs=args0.json_logs,
        )

    conf: Dict[str, Any] = {}
    if args0.config:
        conf = Config.load_many(logger, Config.expand_configs(logger, args0.config))

    if args0.dump_config:
        print(U.json_dump(conf))
        raise SystemExit(0)

    args = build_parser().parse_args(argv)
    conf = Config.apply_env(_apply_cli_overrides(args, conf))
    return args, conf, logger
