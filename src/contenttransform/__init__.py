"""Batch service that extracts plain text from record content sources."""

from .config import ServiceSettings, load_settings
from .runner import ContentRunner, FailurePolicy
from .runtime import BatchOrchestrator, BatchResult

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "ContentRunner",
    "FailurePolicy",
    "ServiceSettings",
    "load_settings",
]
