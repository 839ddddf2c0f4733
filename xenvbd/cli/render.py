# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/cli/render.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from ..schema.fields import BOOTABLE, MODE, TEMPLATE_DEVICE, USER_DEVICE, VDI_UUID
from ..schema.hashing import vbd_hash

_COLUMNS = (USER_DEVICE, VDI_UUID, MODE, BOOTABLE, TEMPLATE_DEVICE)


def _cell(v: Any) -> str:
    if isinstance(v, bool):
        return "yes" if v else "no"
    if v in (None, ""):
        return "-"
    return str(v)


def records_table(title: str, rows: Sequence[Dict[str, Any]]) -> Table:
    t = Table(title=title, title_justify="left", show_lines=False)
    for col in _COLUMNS:
        t.add_column(col, no_wrap=(col != VDI_UUID))
    t.add_column("hash", justify="right", style="dim")
    for row in rows:
        t.add_row(*[_cell(row.get(col)) for col in _COLUMNS], str(vbd_hash(row)))
    return t


def print_state(state: Dict[str, List[Dict[str, Any]]], console: Optional[Console] = None) -> None:
    console = console or Console()
    for section, rows in state.items():
        if not rows:
            console.print(f"[dim]{section}: none[/dim]")
            continue
        console.print(records_table(section, rows))
