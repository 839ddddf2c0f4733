# SPDX-License-Identifier: LGPL-3.0-or-later
# xenvbd/orchestrator/__init__.py
from .vbd import (
    create_vbd,
    create_vbds,
    destroy_template_vdis,
    mark_template_vbds,
    query_template_vbds,
    read_template_vbds_to_schema,
    read_vbds,
    set_schema_vbds,
)

__all__ = [
    "create_vbd",
    "create_vbds",
    "destroy_template_vdis",
    "mark_template_vbds",
    "query_template_vbds",
    "read_template_vbds_to_schema",
    "read_vbds",
    "set_schema_vbds",
]
