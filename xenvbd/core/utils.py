# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/core/utils.py
from __future__ import annotations

import json
from typing import Any


class U:
    @staticmethod
    def json_dump(obj: Any) -> str:
        try:
            return json.dumps(obj, indent=2, sort_keys=True, default=str)
        except Exception:
            return repr(obj)

    @staticmethod
    def to_bool(x: Any) -> bool:
        """Interpret YAML/env style truthy values ("true", "yes", "1", True)."""
        if isinstance(x, bool):
            return x
        if x is None:
            return False
        if isinstance(x, (int, float)):
            return x != 0
        return str(x).strip().lower() in ("1", "true", "yes", "y", "on")
