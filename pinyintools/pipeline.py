"""Sequential job pipeline used to import dictionaries step by step.

Each job reports completion through its finished listeners. The pipeline
starts the next job when one succeeds. It stops at the first failure. Every
job is cleaned up once the whole run ends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

FinishedListener = Callable[[bool], None]
MessageListener = Callable[["MessageLevel", str], None]


class MessageLevel(Enum):
    """Severity of a message reported by a job."""

    INFORMATION = "information"
    WARNING = "warning"
    CRITICAL = "critical"


class PipelineJob(ABC):
    """A step of a pipeline that reports completion asynchronously or at once."""

    def __init__(self) -> None:
        self.finished_listeners: list[FinishedListener] = []
        self.message_listeners: list[MessageListener] = []

    @abstractmethod
    def start(self) -> None:
        """Begin the work; completion is reported to the finished listeners."""

    @abstractmethod
    def abort(self) -> None:
        """Stop work that is in progress."""

    @abstractmethod
    def clean_up(self) -> None:
        """Remove whatever the job left behind."""

    def _emit_finished(self, success: bool) -> None:
        for listener in list(self.finished_listeners):
            listener(success)

    def _emit_message(self, level: MessageLevel, text: str) -> None:
        for listener in list(self.message_listeners):
            listener(level, text)


class Pipeline:
    """Runs jobs one after another until one fails or all succeed."""

    def __init__(
        self,
        on_finished: Optional[FinishedListener] = None,
        on_message: Optional[MessageListener] = None,
    ) -> None:
        self.on_finished = on_finished
        self.on_message = on_message
        self._jobs: list[PipelineJob] = []
        self._handlers: list[tuple[PipelineJob, FinishedListener, MessageListener]] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._jobs)

    def add_job(self, job: PipelineJob) -> None:
        """Append a job to the end of the pipeline."""

        def on_job_finished(success: bool) -> None:
            if success:
                self._start_next()
            else:
                self._finish(False)

        def on_job_message(level: MessageLevel, text: str) -> None:
            if self.on_message is not None:
                self.on_message(level, text)

        job.finished_listeners.append(on_job_finished)
        job.message_listeners.append(on_job_message)
        self._jobs.append(job)
        self._handlers.append((job, on_job_finished, on_job_message))

    def start(self) -> None:
        """Run the jobs from the first one."""
        if not self._jobs:
            raise ValueError("pipeline has no jobs")
        self._index = -1
        self._start_next()

    def abort(self) -> None:
        """Abort the job that is currently running, if any."""
        if self._index < 0:
            return
        self._jobs[self._index].abort()
        self._index = -1

    def reset(self) -> None:
        """Abort and drop every job."""
        self.abort()
        for job, on_finished, on_message in self._handlers:
            if on_finished in job.finished_listeners:
                job.finished_listeners.remove(on_finished)
            if on_message in job.message_listeners:
                job.message_listeners.remove(on_message)
        self._handlers.clear()
        self._jobs.clear()

    def _start_next(self) -> None:
        if self._index + 1 == len(self._jobs):
            self._finish(True)
            return
        self._index += 1
        self._jobs[self._index].start()

    def _finish(self, result: bool) -> None:
        for job in self._jobs:
            job.clean_up()
        if self.on_finished is not None:
            self.on_finished(result)