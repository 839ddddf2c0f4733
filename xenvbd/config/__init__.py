# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""YAML config loading and typed connection settings."""

from __future__ import annotations

from .loader import Config
from .models import ConnectionConfig, VMSelector, XenServerConfig

__all__ = ["Config", "ConnectionConfig", "VMSelector", "XenServerConfig"]
