"""JobRegistry: lifecycle and payload of every classification job.

Jobs are stored in the ``jobs`` table through SQLAlchemy. Observers subscribe to "job created" / "job updated"
events and receive immutable Job snapshots; they never see the stored rows.
"""

import threading
import uuid
from collections.abc import Callable

from sqlalchemy.orm import Session, sessionmaker

from categorizer.core.db import JobRecord
from categorizer.core.exceptions import JobStateError
from categorizer.core.models import TERMINAL_STATES, Job, JobData, JobState
from categorizer.core.utils import get_logger, utcnow_iso

logger = get_logger("firefly-categorizer.jobs")

JOB_CREATED = "job created"
JOB_UPDATED = "job updated"

JobListener = Callable[[str, Job], None]


def _snapshot(record: JobRecord) -> Job:
    return Job(
        id=record.id,
        state=JobState(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
        data=JobData(**record.data),
    )


class JobRegistry:
    """Owns every job; mutations are serialized and broadcast to subscribers."""

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the registry on top of a session factory for the jobs table."""
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._listeners: list[JobListener] = []

    def subscribe(self, listener: JobListener) -> Callable[[], None]:
        """Register a listener for job events; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, job: Job) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, job)
            except Exception:
                logger.exception(f"Job listener failed on '{event}' for job {job.id}")

    def create_job(self, data: JobData) -> Job:
        """Store a new queued job and announce it."""
        now = utcnow_iso()
        record = JobRecord(
            id=str(uuid.uuid4()),
            status=JobState.QUEUED.value,
            created_at=now,
            updated_at=now,
            data=data.model_dump(),
        )
        with self._lock, self._session_factory() as session:
            session.add(record)
            session.commit()
            job = _snapshot(record)
        logger.info(f"Job created: {job.id} ({data.destination_name} - {data.description})")
        self._emit(JOB_CREATED, job)
        return job

    def get(self, job_id: str) -> Job | None:
        """Return a snapshot of a job, or None if it does not exist."""
        with self._lock, self._session_factory() as session:
            record = session.get(JobRecord, job_id)
            return _snapshot(record) if record else None

    def list_jobs(self) -> list[Job]:
        """Return snapshots of all jobs, oldest first."""
        with self._lock, self._session_factory() as session:
            records = session.query(JobRecord).order_by(JobRecord.created_at).all()
            return [_snapshot(record) for record in records]

    def set_in_progress(self, job_id: str) -> Job:
        """Mark a queued job as running."""
        return self._update(job_id, allowed={JobState.QUEUED}, status=JobState.IN_PROGRESS)

    def update_data(self, job_id: str, data: JobData) -> Job:
        """Replace the payload of a job that has not terminated yet."""
        return self._update(job_id, allowed={JobState.QUEUED, JobState.IN_PROGRESS}, data=data)

    def set_finished(self, job_id: str) -> Job:
        """Mark a running job as successfully finished."""
        return self._update(job_id, allowed={JobState.IN_PROGRESS}, status=JobState.FINISHED)

    def set_errored(self, job_id: str, message: str) -> Job:
        """Mark a job as failed and keep the error message."""
        return self._update(
            job_id, allowed={JobState.QUEUED, JobState.IN_PROGRESS}, status=JobState.ERRORED, error=message
        )

    def _update(
        self,
        job_id: str,
        allowed: set[JobState],
        status: JobState | None = None,
        data: JobData | None = None,
        error: str | None = None,
    ) -> Job:
        with self._lock, self._session_factory() as session:
            record = self._load(session, job_id)
            current = JobState(record.status)
            if current not in allowed:
                terminal = " (terminal)" if current in TERMINAL_STATES else ""
                msg = f"Job {job_id} is {current.value}{terminal}, cannot move to {status or 'new data'}"
                raise JobStateError(msg)
            payload = dict(data.model_dump() if data else record.data)
            if error is not None:
                payload["error"] = error
                record.error = error
            if status is not None:
                record.status = status.value
            record.data = payload
            record.updated_at = utcnow_iso()
            session.commit()
            job = _snapshot(record)
        self._emit(JOB_UPDATED, job)
        return job

    @staticmethod
    def _load(session: Session, job_id: str) -> JobRecord:
        record = session.get(JobRecord, job_id)
        if record is None:
            msg = f"Unknown job: {job_id}"
            raise JobStateError(msg)
        return record
