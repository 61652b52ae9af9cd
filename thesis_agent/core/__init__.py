"""Core infrastructure: settings, logging, errors and record stores."""

from .config import AgentSettings, get_settings
from .exceptions import AgentError, RefinementError, StoreError
from .logging_config import configure_logging, get_logger
from .store import InMemoryRecordStore, RecordStore, ScopedRecordStore

__all__ = [
    "AgentError",
    "AgentSettings",
    "InMemoryRecordStore",
    "RecordStore",
    "RefinementError",
    "ScopedRecordStore",
    "StoreError",
    "configure_logging",
    "get_logger",
    "get_settings",
]
