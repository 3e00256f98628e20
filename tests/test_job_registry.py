"""Tests for the job registry lifecycle and its event broadcasting."""

import pytest

from categorizer.core.exceptions import JobStateError
from categorizer.core.models import Job, JobData, JobState
from categorizer.workers.job_registry import JOB_CREATED, JOB_UPDATED, JobRegistry


def test_lifecycle_emits_snapshots(registry: JobRegistry) -> None:
    """Every transition is broadcast with an immutable snapshot."""
    events: list[tuple[str, Job]] = []
    registry.subscribe(lambda event, job: events.append((event, job)))
    job = registry.create_job(JobData(destination_name="Carrefour", description="CB CARREFOUR"))
    registry.set_in_progress(job.id)
    registry.update_data(job.id, JobData(description="CB CARREFOUR", category="Food"))
    registry.set_finished(job.id)

    kinds = [event for event, _ in events]
    states = [snapshot.state for _, snapshot in events]
    if kinds != [JOB_CREATED, JOB_UPDATED, JOB_UPDATED, JOB_UPDATED]:
        msg = f"Unexpected events {kinds}"
        raise AssertionError(msg)
    if states != [JobState.QUEUED, JobState.IN_PROGRESS, JobState.IN_PROGRESS, JobState.FINISHED]:
        msg = f"Unexpected states {states}"
        raise AssertionError(msg)
    if registry.get(job.id).data.category != "Food":
        msg = "Data update lost"
        raise AssertionError(msg)


def test_errored_keeps_message(registry: JobRegistry) -> None:
    """The failure message is stored on the job data."""
    job = registry.create_job(JobData(description="x"))
    registry.set_in_progress(job.id)
    errored = registry.set_errored(job.id, "Error while communicating with ollama: 500 - boom")
    if errored.state != JobState.ERRORED or "boom" not in errored.data.error:
        msg = f"Unexpected job {errored}"
        raise AssertionError(msg)


def test_terminal_jobs_are_immutable(registry: JobRegistry) -> None:
    """Finished jobs cannot be updated, restarted or failed."""
    job = registry.create_job(JobData(description="x"))
    registry.set_in_progress(job.id)
    registry.set_finished(job.id)
    for operation in (
        lambda: registry.update_data(job.id, JobData(description="y")),
        lambda: registry.set_in_progress(job.id),
        lambda: registry.set_errored(job.id, "late"),
    ):
        with pytest.raises(JobStateError):
            operation()
    if registry.get(job.id).state != JobState.FINISHED:
        msg = "Finished job changed state"
        raise AssertionError(msg)


def test_in_progress_only_once(registry: JobRegistry) -> None:
    """A job goes through in_progress exactly once."""
    job = registry.create_job(JobData(description="x"))
    registry.set_in_progress(job.id)
    with pytest.raises(JobStateError):
        registry.set_in_progress(job.id)


def test_unknown_job(registry: JobRegistry) -> None:
    """Unknown ids are rejected on update and absent on read."""
    with pytest.raises(JobStateError):
        registry.set_finished("nope")
    if registry.get("nope") is not None:
        msg = "Expected None for an unknown job"
        raise AssertionError(msg)


def test_failing_listener_does_not_break_registry(registry: JobRegistry) -> None:
    """Listener errors are logged, the mutation still happens."""

    def broken(event: str, job: Job) -> None:
        raise RuntimeError("ui gone")

    registry.subscribe(broken)
    job = registry.create_job(JobData(description="x"))
    if registry.get(job.id) is None:
        msg = "Job was not stored"
        raise AssertionError(msg)


def test_unsubscribe(registry: JobRegistry) -> None:
    """Unsubscribed listeners stop receiving events."""
    events: list[str] = []
    unsubscribe = registry.subscribe(lambda event, job: events.append(event))
    registry.create_job(JobData(description="x"))
    unsubscribe()
    registry.create_job(JobData(description="y"))
    if events != [JOB_CREATED]:
        msg = f"Unexpected events {events}"
        raise AssertionError(msg)
    if len(registry.list_jobs()) != 2:  # noqa: PLR2004
        msg = "Expected two jobs"
        raise AssertionError(msg)
