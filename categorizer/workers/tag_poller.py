"""TagPoller: periodically reprocess transactions carrying a filter tag.

Each processed transaction has the filter tag removed once its job succeeds, so it is not picked up again by the
next cycle. When the job or the removal fails the tag stays and the transaction is retried next cycle;
reclassification is idempotent, so retries are safe.
"""

import threading

from categorizer.core.utils import get_logger
from categorizer.services.firefly_client import FireflyClient
from categorizer.workers.job_runner import JobRunner

logger = get_logger("firefly-categorizer.poller")


class TagPoller:
    """Feed tagged transactions into the job runner on a timer or on demand."""

    def __init__(
        self, ledger: FireflyClient, runner: JobRunner, tag: str, interval: float = 0, max_transactions: int = 20
    ) -> None:
        """Initialize the poller; an ``interval`` of 0 disables the timer, manual cycles still work."""
        self._ledger = ledger
        self._runner = runner
        self._tag = tag
        self._interval = interval
        self._max_transactions = max_transactions
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def enabled(self) -> bool:
        """Whether a tag filter is configured at all."""
        return bool(self._tag)

    def run_cycle(self) -> list[str]:
        """Enqueue every recent tagged transaction not already waiting; returns the ids of the enqueued groups."""
        if not self.enabled:
            msg = "No tag filter configured"
            raise ValueError(msg)
        groups = self._ledger.get_transactions_by_tag(self._tag, self._max_transactions)
        logger.info(f"Tag poll: {len(groups)} transaction(s) tagged '{self._tag}'")
        enqueued = []
        for group in groups:
            with self._lock:
                if group.id in self._in_flight:
                    logger.debug(f"Transaction {group.id} already queued, skipping")
                    continue
                self._in_flight.add(group.id)
            try:
                _, future = self._runner.enqueue(group, remove_tag=self._tag)
            except RuntimeError:
                self._release(group.id)
                raise
            future.add_done_callback(lambda _, group_id=group.id: self._release(group_id))
            enqueued.append(group.id)
        return enqueued

    def _release(self, group_id: str) -> None:
        with self._lock:
            self._in_flight.discard(group_id)

    def start(self) -> None:
        """Start the background timer if polling is enabled and an interval is set."""
        if not self.enabled or self._interval <= 0 or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="tag-poller", daemon=True)
        self._thread.start()
        logger.info(f"Tag polling every {self._interval}s for tag '{self._tag}'")

    def stop(self) -> None:
        """Stop the background timer."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.run_cycle()
            except Exception:
                logger.exception("Tag poll cycle failed")
