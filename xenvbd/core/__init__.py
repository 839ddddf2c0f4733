# xenvbd/core/__init__.py
from .exceptions import (
    ConfigError,
    Fatal,
    InvalidModeError,
    NoAvailableDeviceError,
    SchemaConflictError,
    TemplateBindingError,
    UnsupportedVBDTypeError,
    ValidationError,
    TemplateVMError,
    VMLookupError,
    XenVbdError,
)
from .logger import Log

__all__ = [
    "ConfigError",
    "Fatal",
    "InvalidModeError",
    "Log",
    "NoAvailableDeviceError",
    "SchemaConflictError",
    "TemplateBindingError",
    "UnsupportedVBDTypeError",
    "ValidationError",
    "TemplateVMError",
    "VMLookupError",
    "XenVbdError",
]
