from .config import (
    LoggingConfig,
    ReadabilityOptions,
    ReaderableOptions,
    Settings,
    find_config_file,
)

__all__ = [
    "LoggingConfig",
    "ReadabilityOptions",
    "ReaderableOptions",
    "Settings",
    "find_config_file",
]
