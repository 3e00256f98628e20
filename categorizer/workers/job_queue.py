"""WorkQueue: run jobs one at a time, in arrival order."""

import concurrent.futures
import threading
from collections import defaultdict
from collections.abc import Callable

from categorizer.core.exceptions import JobStateError
from categorizer.core.utils import get_logger
from categorizer.workers.job_registry import JobRegistry

logger = get_logger("firefly-categorizer.queue")

QUEUE_EVENTS = ("start", "success", "error", "timeout")


class WorkQueue:
    """Single-worker FIFO queue driving the job lifecycle.

    The timeout is advisory: when a task runs longer than ``timeout`` seconds a "timeout" event is emitted, but the
    task keeps running and nothing is rolled back.
    """

    def __init__(self, registry: JobRegistry, timeout: float = 30.0) -> None:
        """Initialize the queue with the registry recording job state and the advisory timeout in seconds."""
        self._registry = registry
        self._timeout = timeout
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="job-worker")
        self._listeners: dict[str, list[Callable[[str], None]]] = defaultdict(list)

    def add_listener(self, event: str, callback: Callable[[str], None]) -> None:
        """Call ``callback(job_id)`` whenever ``event`` (start, success, error or timeout) happens."""
        if event not in QUEUE_EVENTS:
            msg = f"Unknown queue event: {event}"
            raise ValueError(msg)
        self._listeners[event].append(callback)

    def _emit(self, event: str, job_id: str) -> None:
        for callback in self._listeners[event]:
            try:
                callback(job_id)
            except Exception:
                logger.exception(f"Queue listener failed on '{event}' for job {job_id}")

    def submit(self, job_id: str, task: Callable[[], None]) -> concurrent.futures.Future:
        """Schedule ``task`` for job ``job_id`` behind everything already queued."""
        logger.debug(f"Job {job_id} queued")
        return self._executor.submit(self._run, job_id, task)

    def _run(self, job_id: str, task: Callable[[], None]) -> None:
        timer = threading.Timer(self._timeout, self._on_timeout, args=(job_id,))
        timer.daemon = True
        try:
            self._registry.set_in_progress(job_id)
            logger.info(f"Job started: {job_id}")
            self._emit("start", job_id)
            timer.start()
            task()
            self._registry.set_finished(job_id)
        except Exception as exc:
            logger.exception(f"Job error: {job_id}")
            try:
                self._registry.set_errored(job_id, str(exc) or type(exc).__name__)
            except JobStateError:
                logger.exception(f"Could not record the failure of job {job_id}")
            self._emit("error", job_id)
        else:
            logger.info(f"Job success: {job_id}")
            self._emit("success", job_id)
        finally:
            timer.cancel()

    def _on_timeout(self, job_id: str) -> None:
        logger.warning(f"Job timeout: {job_id} still running after {self._timeout}s")
        self._emit("timeout", job_id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; with ``wait`` block until queued jobs are done."""
        self._executor.shutdown(wait=wait)
