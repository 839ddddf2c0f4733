# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# xenvbd/core/logger.py
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from termcolor import colored as _colored

# TRACE sits below DEBUG and is used for record dumps and hash inputs.
TRACE = 5
if not hasattr(logging, "TRACE"):
    logging.TRACE = TRACE  # type: ignore[attr-defined]
    logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]

ROOT_LOGGER = "xenvbd"

# level -> (emoji, termcolor colour)
_LEVELS = {
    "TRACE": ("🧬", "cyan"),
    "DEBUG": ("🔍", "blue"),
    "INFO": ("✅", "green"),
    "WARNING": ("⚠️", "yellow"),
    "ERROR": ("💥", "red"),
    "CRITICAL": ("🧨", "red"),
}


def _stderr_is_tty() -> bool:
    try:
        return bool(sys.stderr.isatty())
    except (AttributeError, ValueError):
        return False


def _stderr_takes_emoji() -> bool:
    try:
        "✅".encode(getattr(sys.stderr, "encoding", None) or "utf-8")
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def c(text: str, color: Optional[str] = None, attrs: Optional[List[str]] = None, *, enable: bool = True) -> str:
    """termcolor wrapper; returns ``text`` untouched when disabled."""
    if not enable or not color:
        return text
    return _colored(text, color=color, attrs=attrs or [])


Ctx = Mapping[str, Any]


def _ctx_value(v: Any, limit: int = 240) -> str:
    s = str(v).replace("\n", "\\n").replace("\r", "\\r")
    return s if len(s) <= limit else s[: limit - 1] + "…"


def _ctx_suffix(ctx: Optional[Ctx]) -> str:
    if not ctx:
        return ""
    return " " + " ".join(f"{k}={_ctx_value(ctx[k])}" for k in sorted(ctx, key=str))


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Adds fixed key/value pairs (VM UUID, VBD type...) to every record.

    Per-call ``extra={"ctx": {...}}`` is merged over the bound pairs.
    """

    def __init__(self, logger: logging.Logger, ctx: Optional[Ctx] = None):
        super().__init__(logger, extra={"ctx": dict(ctx or {})})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["ctx"] = {**self.extra["ctx"], **dict(extra.get("ctx") or {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE):
            msg, kwargs = self.process(msg, kwargs)
            self.logger._log(TRACE, msg, args, **kwargs)


@dataclass(frozen=True)
class LogStyle:
    color: bool = True
    unicode: bool = True
    detailed: bool = False  # ms timestamps, pid, logger name and source line
    utc: bool = False


class EmojiFormatter(logging.Formatter):
    """One line per record: time, emoji, level, message, then ``key=value`` context."""

    def __init__(self, style: LogStyle):
        super().__init__()
        self._style = style

    def _time(self, created: float) -> str:
        tz = _dt.timezone.utc if self._style.utc else None
        t = _dt.datetime.fromtimestamp(created, tz=tz)
        return t.strftime("%H:%M:%S.%f")[:-3] if self._style.detailed else t.strftime("%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        emoji, colour = _LEVELS.get(record.levelname, ("•", None))
        if not self._style.unicode:
            emoji = "·"
        paint = self._style.color and _stderr_is_tty()

        msg = record.getMessage()
        if record.levelno >= logging.WARNING:
            msg = c(msg, colour, ["bold"], enable=paint)
        where = f" [pid={os.getpid()} {record.name} {record.module}:{record.lineno}]" if self._style.detailed else ""

        line = f"{self._time(record.created)} {emoji} {c(record.levelname, colour, enable=paint):<8}{where} {msg}"
        line += _ctx_suffix(getattr(record, "ctx", None))
        if record.exc_info:
            tb = "\n".join("  " + ln for ln in self.formatException(record.exc_info).splitlines())
            line += "\n" + c(tb, "red", enable=paint)
        return line


class JsonFormatter(logging.Formatter):
    """NDJSON output for `--json-logs`."""

    def __init__(self, *, utc: bool = True):
        super().__init__()
        self._tz = _dt.timezone.utc if utc else None

    def format(self, record: logging.LogRecord) -> str:
        obj: Dict[str, Any] = {
            "ts": _dt.datetime.fromtimestamp(record.created, tz=self._tz).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        ctx = getattr(record, "ctx", None)
        if ctx:
            obj["ctx"] = {str(k): _ctx_value(v) for k, v in ctx.items()}
        if record.exc_info:
            obj["traceback"] = self.formatException(record.exc_info)
        return json.dumps(obj, ensure_ascii=False, default=str)


def _extra(ctx: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return {"ctx": ctx} if ctx else None


class Log:
    @staticmethod
    def _level_from_flags(verbose: int, quiet: int) -> int:
        """-q WARNING, -qq ERROR, -vv DEBUG, -vvv TRACE; quiet wins."""
        if quiet:
            return logging.ERROR if quiet >= 2 else logging.WARNING
        if verbose >= 3:
            return TRACE
        return logging.DEBUG if verbose >= 2 else logging.INFO

    @staticmethod
    def bind(logger: logging.Logger, **ctx: Any) -> ContextLoggerAdapter:
        return ContextLoggerAdapter(logger, ctx)

    @staticmethod
    def step(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("➡️  %s", msg, extra=_extra(ctx))

    @staticmethod
    def ok(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("✅ %s", msg, extra=_extra(ctx))

    @staticmethod
    def warn(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.warning("⚠️  %s", msg, extra=_extra(ctx))

    @staticmethod
    def trace(logger: Any, msg: str, *args: Any, **ctx: Any) -> None:
        logger.trace(msg, *args, extra=_extra(ctx))

    @staticmethod
    def setup(
        verbose: int = 0,
        log_file: Optional[str] = None,
        *,
        quiet: int = 0,
        color: bool = True,
        utc: bool = False,
        logger_name: str = ROOT_LOGGER,
        json_logs: bool = False,
    ) -> logging.Logger:
        """
        Configure the ``xenvbd`` logger: stderr always, ``log_file`` when given.

        Module loggers (``logging.getLogger(__name__)``) inherit from it. The
        log file always gets the detailed layout without colour.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False
        level = Log._level_from_flags(verbose, quiet)
        logger.setLevel(level)

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        unicode = _stderr_takes_emoji()

        def formatter(**style: Any) -> logging.Formatter:
            if json_logs:
                return JsonFormatter(utc=utc)
            return EmojiFormatter(LogStyle(utc=utc, unicode=unicode, **style))

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        handlers[0].setFormatter(formatter(color=color, detailed=verbose >= 3))
        if log_file:
            fp = Path(log_file).expanduser().resolve()
            fp.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(fp, encoding="utf-8"))
            handlers[-1].setFormatter(formatter(color=False, detailed=True))

        for h in handlers:
            h.setLevel(level)
            logger.addHandler(h)

        logger.debug("Logger initialized (level=%s)", logging.getLevelName(level))
        return logger
