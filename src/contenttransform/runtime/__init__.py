"""Batch execution runtime."""

from .batch import (
    BatchAborted,
    BatchOrchestrator,
    BatchResult,
    Countdown,
    Job,
    JobFailed,
    JobOutcome,
    JobSkipped,
    JobSucceeded,
)

__all__ = [
    "BatchAborted",
    "BatchOrchestrator",
    "BatchResult",
    "Countdown",
    "Job",
    "JobFailed",
    "JobOutcome",
    "JobSkipped",
    "JobSucceeded",
]
