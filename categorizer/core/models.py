"""Pydantic models for the Firefly AI Categorizer.

This module defines the Firefly III transaction shapes consumed by the pipeline, the structured classification
result produced by providers, and the Job snapshots published by the job registry.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

UNKNOWN_DESTINATION = "(unknown destination account)"


class TransactionSplit(BaseModel):
    """One line of a Firefly III transaction group."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    transaction_journal_id: str
    type: str
    description: str = ""
    destination_name: str | None = None
    category_id: str | None = None
    destination_id: str | None = None
    tags: list[str] | None = None


class TransactionGroup(BaseModel):
    """A Firefly III transaction group: an id plus its splits."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    transactions: list[TransactionSplit]

    @property
    def primary(self) -> TransactionSplit:
        """The split whose facts are sent to the classifier."""
        return self.transactions[0]


class ClassificationResult(BaseModel):
    """Structured classification of one transaction.

    For each of the category, destination account and budget pairs at most one side is set: the plain field when
    the name is known to the ledger, the ``suggested_*`` field when it is not.
    """

    model_config = ConfigDict(frozen=True)

    category: str | None = None
    suggested_category: str | None = None
    destination_account: str | None = None
    suggested_destination_account: str | None = None
    budget: str | None = None
    suggested_budget: str | None = None
    prompt: str | None = None
    response: str | None = None


class JobState(StrEnum):
    """Lifecycle states of a job."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ERRORED = "errored"


TERMINAL_STATES = frozenset({JobState.FINISHED, JobState.ERRORED})


class JobData(BaseModel):
    """Payload carried by a job, filled in as the pipeline progresses."""

    destination_name: str | None = None
    description: str | None = None
    category: str | None = None
    suggested_category: str | None = None
    destination_account: str | None = None
    suggested_destination_account: str | None = None
    budget: str | None = None
    suggested_budget: str | None = None
    prompt: str | None = None
    response: str | None = None
    error: str | None = None


class Job(BaseModel):
    """Immutable snapshot of a job as stored by the registry."""

    model_config = ConfigDict(frozen=True)

    id: str
    state: JobState
    created_at: str
    updated_at: str
    data: JobData


class JobCreated(BaseModel):
    """Response returned when a job has been accepted."""

    job_id: str
