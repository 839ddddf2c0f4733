# SPDX-License-Identifier: LGPL-3.0-or-later
# xenvbd/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

REDACTED = "***REDACTED***"


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _clamp_exit_code(code: int) -> int:
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


_SECRET_KEY_PARTS = (
    "pass",
    "secret",
    "token",
    "apikey",
    "api_key",
    "auth",
    "cookie",
    "session",
    "private",
)


def _is_secret_key(k: str) -> bool:
    ks = (k or "").lower()
    return any(p in ks for p in _SECRET_KEY_PARTS)


def _redacted(ctx: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (REDACTED if _is_secret_key(str(k)) else v) for k, v in ctx.items()}


def _format_context_compact(ctx: Dict[str, Any]) -> str:
    safe = _redacted(ctx)
    return ", ".join(f"{k}={safe[k]!r}" for k in sorted(safe))


@dataclass(eq=False)
class XenVbdError(Exception):
    """
    Base project error with:
      - stable fields for reporting/JSON
      - readable __str__ (what users see)
      - safe code handling (never crashes on int())
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        if self.context is None:
            self.context = {}
        super().__init__(self.msg)
        self.args = (self.msg,)

    def with_context(self, **ctx: Any) -> "XenVbdError":
        if self.context is None:
            self.context = {}
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        parts = [self.msg or self.__class__.__name__]

        if include_context and self.context:
            parts.append(f"[{_one_line(_format_context_compact(self.context))}]")

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message()

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "code": self.code,
            "message": self.msg,
            "context": _redacted(self.context or {}),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(XenVbdError):
    """
    User-facing fatal error (exit code is honored by the CLI entry point).
    """
    pass


class ConfigError(XenVbdError):
    """Config file missing, unreadable or malformed."""
    pass


class ValidationError(XenVbdError):
    """
    Declared or observed data is not acceptable.

    Always fatal to the enclosing operation and surfaced verbatim.
    """

    def __init__(self, msg: str = "validation failed", **context: Any) -> None:
        super().__init__(code=2, msg=msg, context=context or None)


class InvalidModeError(ValidationError):
    pass


class UnsupportedVBDTypeError(ValidationError):
    pass


class TemplateBindingError(ValidationError):
    pass


class NoAvailableDeviceError(ValidationError):
    pass


class SchemaConflictError(ValidationError):
    pass


class VMLookupError(ValidationError):
    pass


class TemplateVMError(ValidationError):
    """The selected VM is a template; its devices are not changed in place."""
    pass


def wrap_fatal(msg: str, exc: Optional[BaseException] = None, code: int = 1, **context: Any) -> Fatal:
    return Fatal(code=code, msg=msg, cause=exc, context=context or None)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose=1: message + compact context (if any)
    verbose>=2: message + context + cause
    """
    if isinstance(e, XenVbdError):
        return e.user_message(include_context=(verbose >= 1), include_cause=(verbose >= 2))

    details = getattr(e, "details", None)
    if isinstance(details, (list, tuple)) and details:
        # XenAPI.Failure: first element is the error code, the rest are parameters
        return f"XenAPI failure: {' '.join(str(d) for d in details)}"

    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
