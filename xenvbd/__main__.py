# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/__main__.py
from __future__ import annotations

import sys
import traceback
from typing import Any, Optional, Sequence

import XenAPI

from .cli.commands import run
from .cli.parser import parse_args_with_config
from .core.exceptions import XenVbdError, format_exception_for_cli

EXIT_XENAPI = 30
EXIT_INTERRUPTED = 130


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _safe_log(logger: Any, level: str, msg: str) -> None:
    if logger is None:
        _print_stderr(msg)
        return
    getattr(logger, level)(msg)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logger: Any = None
    verbose = 0

    try:
        args, conf, logger = parse_args_with_config(argv)
        verbose = args.verbose
        return run(args, conf, logger)
    except XenVbdError as e:
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=verbose))
        return e.code
    except XenAPI.Failure as e:
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=verbose))
        return EXIT_XENAPI
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        return EXIT_INTERRUPTED
    except Exception as e:
        _safe_log(logger, "error", f"💥 UNHANDLED {type(e).__name__}: {e}")
        _safe_log(logger, "debug", traceback.format_exc())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
