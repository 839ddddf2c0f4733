# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/config/loader.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from ..core.exceptions import ConfigError

# Environment names shared with the Terraform XenServer provider.
ENV_OVERRIDES = {
    "XENSERVER_URL": "url",
    "XENSERVER_USERNAME": "username",
    "XENSERVER_PASSWORD": "password",
}


def _deep_merge(base: Dict[str, Any], over: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


class Config:
    @staticmethod
    def expand_configs(logger: logging.Logger, paths: Sequence[str]) -> List[Path]:
        """Expand ``~``/env vars; a directory contributes its *.yaml/*.yml files in name order."""
        out: List[Path] = []
        for raw in paths:
            p = Path(os.path.expandvars(str(raw))).expanduser()
            if p.is_dir():
                found = sorted(list(p.glob("*.yaml")) + list(p.glob("*.yml")))
                logger.debug("Config dir %s: %d files", p, len(found))
                out.extend(found)
            else:
                out.append(p)
        return out

    @staticmethod
    def load_file(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(code=1, msg=f"Cannot read config {path}: {e}", cause=e)
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(code=1, msg=f"Invalid YAML in {path}: {e}", cause=e)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(code=1, msg=f"Config root must be a mapping: {path}")
        logger.debug("Loaded config %s (%d keys)", path, len(data))
        return data

    @staticmethod
    def load_many(logger: logging.Logger, paths: Sequence[Path]) -> Dict[str, Any]:
        """Load and deep-merge configs; later files win."""
        merged: Dict[str, Any] = {}
        for p in paths:
            merged = _deep_merge(merged, Config.load_file(logger, Path(p)))
        return merged

    @staticmethod
    def apply_env(conf: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """
        Environment values fill connection fields the config leaves empty.

        XENSERVER_PASSWORD is not used when ``password_env`` names another
        variable.
        """
        env = os.environ if environ is None else environ
        out = dict(conf)
        conn = dict(out.get("connection") or {})
        for var, key in ENV_OVERRIDES.items():
            if key == "password" and conn.get("password_env"):
                continue
            if not conn.get(key) and env.get(var):
                conn[key] = env[var]
        out["connection"] = conn
        return out
