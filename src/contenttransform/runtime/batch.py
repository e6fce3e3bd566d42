"""Fail-fast fan-out of record extraction jobs over a shared worker pool."""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, List, MutableMapping, Optional, Sequence, Union

from contenttransform.config import ServiceSettings
from contenttransform.runner import ContentRunner

logger = logging.getLogger(__name__)

Record = MutableMapping[str, Any]


@dataclass(frozen=True)
class Job:
    index: int
    record: Record
    source_field: str
    target_field: str


@dataclass(frozen=True)
class JobSucceeded:
    text: str


@dataclass(frozen=True)
class JobSkipped:
    reason: str


@dataclass(frozen=True)
class JobFailed:
    error: BaseException


JobOutcome = Union[JobSucceeded, JobSkipped, JobFailed]


class BatchAborted(Exception):
    """Raised when records are requested from a batch that hit a fatal error."""


@dataclass
class BatchResult:
    """Either every record in input order, or the error that aborted the batch."""

    records: Optional[List[Record]] = None
    error: Optional[BaseException] = None
    outcomes: List[JobOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def require_records(self) -> List[Record]:
        if self.error is not None or self.records is None:
            raise BatchAborted("Non-recoverable error while extracting content.") from self.error
        return self.records


class Countdown:
    """Counter of outstanding jobs that a waiter can block on."""

    def __init__(self, count: int) -> None:
        self._count = count
        self._condition = threading.Condition()

    @property
    def count(self) -> int:
        with self._condition:
            return self._count

    def count_down(self) -> None:
        with self._condition:
            if self._count > 0:
                self._count -= 1
            if self._count == 0:
                self._condition.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the count reaches zero or ``timeout`` elapses."""
        with self._condition:
            return self._condition.wait_for(lambda: self._count == 0, timeout=timeout)


class BatchOrchestrator:
    """Runs one extraction job per record on a process-wide thread pool.

    The pool is shared by every batch, so ``max_workers`` bounds outbound
    concurrency for the whole process. A fatal error in any job stops further
    dispatch and turns the batch into a single failure; jobs already running
    finish, but their results are discarded.
    """

    def __init__(
        self,
        runner: ContentRunner,
        *,
        executor: Optional[ThreadPoolExecutor] = None,
        max_workers: int = 8,
        source_field: str = "url",
        target_field: str = "_content",
        poll_interval: float = 0.1,
    ) -> None:
        self.runner = runner
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="extract")
        self.source_field = source_field
        self.target_field = target_field
        self.poll_interval = max(0.001, float(poll_interval))

    @classmethod
    def from_settings(cls, settings: ServiceSettings, runner: Optional[ContentRunner] = None) -> "BatchOrchestrator":
        return cls(
            runner or ContentRunner.from_settings(settings),
            max_workers=settings.threads,
            source_field=settings.source_property,
            target_field=settings.target_property,
            poll_interval=settings.poll_interval,
        )

    def build_jobs(self, records: Sequence[Record]) -> List[Job]:
        return [Job(index, record, self.source_field, self.target_field) for index, record in enumerate(records)]

    def run(self, records: Sequence[Record]) -> BatchResult:
        jobs = self.build_jobs(records)
        if not jobs:
            return BatchResult(records=[], outcomes=[])

        started = time.monotonic()
        logger.info("Processing batch of %d record(s)", len(jobs))
        failed = threading.Event()
        countdown = Countdown(len(jobs))
        outcomes: List[Optional[JobOutcome]] = [None] * len(jobs)

        futures: List[Future] = []
        for job in jobs:
            # no new work once any job has failed
            if failed.is_set():
                break
            futures.append(self.executor.submit(self._run_job, job, failed, countdown, outcomes))

        while not failed.is_set():
            if countdown.wait(self.poll_interval):
                break

        elapsed_ms = (time.monotonic() - started) * 1000.0
        if failed.is_set():
            for future in futures:
                future.cancel()
            error = next((item.error for item in outcomes if isinstance(item, JobFailed)), None)
            logger.error(
                "Batch of %d record(s) aborted after %.1f ms; %d job(s) never dispatched",
                len(jobs),
                elapsed_ms,
                len(jobs) - len(futures),
            )
            return BatchResult(records=None, error=error, outcomes=_settle(outcomes))

        logger.info("Batch of %d record(s) completed in %.1f ms", len(jobs), elapsed_ms)
        return BatchResult(records=[job.record for job in jobs], outcomes=_settle(outcomes))

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=wait)

    def _run_job(
        self,
        job: Job,
        failed: threading.Event,
        countdown: Countdown,
        outcomes: List[Optional[JobOutcome]],
    ) -> None:
        try:
            if failed.is_set():
                outcomes[job.index] = JobSkipped("cancelled")
                return
            outcome = self._process(job)
            logger.debug("Job %d finished: %s", job.index, outcome.__class__.__name__)
            outcomes[job.index] = outcome
        except Exception as exc:
            job.record[job.target_field] = None
            logger.error(
                "Non-recoverable error while extracting content from %s",
                _dump(job.record),
                exc_info=True,
            )
            outcomes[job.index] = JobFailed(exc)
            failed.set()
        finally:
            countdown.count_down()

    def _process(self, job: Job) -> JobOutcome:
        if job.source_field not in job.record:
            return JobSkipped("source field missing")
        value = job.record[job.source_field]
        if value is None or isinstance(value, (dict, list)):
            return JobSkipped("source field is not a scalar")

        text = self.runner.extract(_as_string(value))
        job.record[job.target_field] = text
        if text is None:
            return JobSkipped("no content produced")
        return JobSucceeded(text)


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _dump(record: Record) -> str:
    try:
        return json.dumps(record, default=str)
    except (TypeError, ValueError):
        return repr(record)


def _settle(outcomes: List[Optional[JobOutcome]]) -> List[JobOutcome]:
    # Slots still empty belong to jobs that were never started or were abandoned mid-flight.
    return [item if item is not None else JobSkipped("aborted") for item in outcomes]


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
