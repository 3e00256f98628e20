"""Error types shared by the ingestion, provider, ledger and job layers."""


class WebhookValidationError(ValueError):
    """A webhook delivery that will not be processed."""


class JobStateError(ValueError):
    """An illegal job lifecycle transition, or an unknown job id."""


class _RemoteServiceError(RuntimeError):
    """Failure while talking to a remote service, with the status code and body it returned."""

    service = "remote service"

    def __init__(self, status_code: int | None, body: str) -> None:
        """Keep the status code (None for transport failures) and the response body."""
        super().__init__(f"Error while communicating with {self.service}: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class ProviderError(_RemoteServiceError):
    """The classification backend was unreachable or answered with a non-success status."""

    def __init__(self, provider: str, status_code: int | None, body: str) -> None:
        """Record which provider failed."""
        self.service = provider
        super().__init__(status_code, body)


class LedgerError(_RemoteServiceError):
    """A Firefly III API call failed."""

    service = "Firefly III"
