"""Background job orchestration for transaction classification.

A job runs classify -> resolve -> write for one transaction group. Webhook and tag-poll ingestion both go through
``JobRunner.enqueue`` and therefore share the single-worker queue.
"""

import concurrent.futures
from functools import partial

from categorizer.core.models import Job, JobData, TransactionGroup
from categorizer.core.settings import Settings
from categorizer.core.utils import get_logger
from categorizer.providers.base import ClassificationProvider
from categorizer.services.entity_resolver import EntityResolver
from categorizer.services.ledger_writer import LedgerWriter
from categorizer.workers.job_queue import WorkQueue
from categorizer.workers.job_registry import JobRegistry

logger = get_logger("firefly-categorizer.worker")


class JobRunner:
    """JobRunner creates jobs for incoming transactions and executes them on the work queue."""

    def __init__(
        self,
        settings: Settings,
        provider: ClassificationProvider,
        resolver: EntityResolver,
        writer: LedgerWriter,
        registry: JobRegistry,
        queue: WorkQueue,
    ) -> None:
        """Initialize JobRunner with its collaborators."""
        self._want_account = settings.auto_destination_account
        self._want_budget = settings.auto_budget
        self._provider = provider
        self._resolver = resolver
        self._writer = writer
        self._registry = registry
        self._queue = queue

    def enqueue(
        self, group: TransactionGroup, remove_tag: str | None = None
    ) -> tuple[Job, concurrent.futures.Future]:
        """Create a job for ``group`` and schedule it; ``remove_tag`` is dropped from the transaction on success."""
        split = group.primary
        job = self._registry.create_job(JobData(destination_name=split.destination_name, description=split.description))
        try:
            future = self._queue.submit(job.id, partial(self.run_job, job.id, group, remove_tag))
        except RuntimeError as exc:
            # The executor refuses work once shut down.
            self._registry.set_errored(job.id, f"Job could not be scheduled: {exc}")
            raise
        return job, future

    def run_job(self, job_id: str, group: TransactionGroup, remove_tag: str | None = None) -> None:
        """Classify one transaction group and write the outcome back to the ledger."""
        split = group.primary
        logger.info(f"Starting job: {job_id}, transaction: {group.id}")
        indexes = self._resolver.load_indexes()

        result = self._provider.classify(
            indexes.categories.names(),
            split.destination_name,
            split.description,
            split.type,
            indexes.accounts.names(),
            self._want_account,
            indexes.budgets.names(),
            self._want_budget,
        )
        data = JobData(
            destination_name=split.destination_name,
            description=split.description,
            prompt=result.prompt,
            response=result.response,
            **result.model_dump(exclude={"prompt", "response"}),
        )
        self._registry.update_data(job_id, data)

        resolution = self._resolver.resolve(result, indexes)
        if resolution.has_changes:
            self._writer.apply_classification(
                group.id, group.transactions, resolution.category_id, resolution.destination_account_id
            )
        else:
            logger.warning(
                f"No category found for transaction {group.id}: {split.destination_name} - {split.description}"
            )
        if resolution.budget:
            # Firefly offers no budget link through the transaction update used here; report only.
            logger.info(f"Budget '{resolution.budget}' suggested for transaction {group.id}, not applied")

        self._registry.update_data(
            job_id,
            data.model_copy(
                update={
                    "category": resolution.category or data.category,
                    "destination_account": resolution.destination_account or data.destination_account,
                }
            ),
        )

        if remove_tag:
            self._writer.remove_tag(group.id, remove_tag)
        logger.info(f"Job {job_id} done (category={resolution.category}, created={list(resolution.created)})")
