from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass
import logging
import queue
import threading
from types import TracebackType

import numpy as np

from tonelab.adjust import AdjustmentVector
from tonelab.history import SnapshotHistory
from tonelab.process import ProcessingJob, ProcessingPipeline, ProcessingResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _QueuedJob:
    sequence: int
    job: ProcessingJob
    max_dimension: int | None = None


class ProcessingWorker:
    """Runs pipeline jobs one at a time on a dedicated thread.

    Every submission gets a monotonically increasing sequence number. With
    ``discard_stale`` enabled a finished result is dropped if a newer job was
    submitted while it ran, so consumers only ever see the latest edit.

    When a ``history`` is given, every published full-resolution success is
    pushed into it from the worker thread. Preview results are never recorded.
    """

    def __init__(
        self,
        pipeline: ProcessingPipeline | None = None,
        maxsize: int = 0,
        discard_stale: bool = True,
        history: SnapshotHistory | None = None,
    ) -> None:
        self.pipeline = pipeline or ProcessingPipeline()
        self.discard_stale = discard_stale
        self.history = history
        self._jobs: queue.Queue[_QueuedJob | None] = queue.Queue(maxsize=maxsize)
        self._results: queue.Queue[ProcessingResult] = queue.Queue()
        self._lock = threading.Lock()
        self._latest_sequence = 0
        self._thread: threading.Thread | None = None
        self._stop_sent = False

    @property
    def latest_sequence(self) -> int:
        with self._lock:
            return self._latest_sequence

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_sent = False
        self._thread = threading.Thread(target=self._run, name="tonelab-worker", daemon=True)
        self._thread.start()
        logger.info("processing worker started")

    def stop(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is None:
            return
        if not self._stop_sent:
            # One sentinel per consumer; a leftover one would end the next start().
            self._jobs.put(None)
            self._stop_sent = True
        thread.join(timeout)
        if thread.is_alive():
            # Still finishing a job; keep the handle so start() cannot spawn a second consumer.
            logger.warning("processing worker did not stop within %.1fs", timeout or 0.0)
            return
        self._thread = None
        logger.info("processing worker stopped")

    def __enter__(self) -> "ProcessingWorker":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def submit(self, image: np.ndarray, adjustments: AdjustmentVector, max_dimension: int | None = None) -> int:
        """Queue a copy of ``image``/``adjustments``; returns the job's sequence number."""
        owned = copy.deepcopy(adjustments)
        owned.validate()
        job = ProcessingJob(image=np.array(image, copy=True), adjustments=owned)

        with self._lock:
            self._latest_sequence += 1
            sequence = self._latest_sequence
        self._jobs.put(_QueuedJob(sequence=sequence, job=job, max_dimension=max_dimension))
        logger.debug("queued job seq=%d", sequence)
        return sequence

    def get_result(self, timeout: float | None = None) -> ProcessingResult | None:
        try:
            return self._results.get(timeout=timeout)
        except queue.Empty:
            return None

    def _execute(self, item: _QueuedJob) -> ProcessingResult:
        try:
            if item.max_dimension is not None:
                return self.pipeline.process_preview(item.job, item.max_dimension)
            return self.pipeline.process(item.job)
        except Exception as exc:
            logger.exception("job seq=%d failed", item.sequence)
            return ProcessingResult.failure(f"job failed: {exc}")

    def _record(self, item: _QueuedJob, result: ProcessingResult) -> None:
        if self.history is None or item.max_dimension is not None:
            return
        if result.ok and result.image is not None:
            self.history.push(result.image)

    def _run(self) -> None:
        while True:
            item = self._jobs.get()
            if item is None:
                break

            result = dataclasses.replace(self._execute(item), sequence=item.sequence)
            if self.discard_stale and item.sequence < self.latest_sequence:
                logger.debug("discarding stale result seq=%d (latest=%d)", item.sequence, self.latest_sequence)
                continue
            self._record(item, result)
            self._results.put(result)
