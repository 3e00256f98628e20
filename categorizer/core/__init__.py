"""Core package: provides models, exceptions, the job store, settings, and shared utilities."""

from .exceptions import JobStateError, LedgerError, ProviderError, WebhookValidationError  # noqa: F401
from .models import ClassificationResult, Job, JobState, TransactionGroup  # noqa: F401
from .settings import Settings  # noqa: F401
from .utils import get_logger  # noqa: F401
