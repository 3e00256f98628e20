"""FastAPI dependencies for DI (settings, job registry, job runner, tag poller).

This module wires the components together once at startup into a ``Services`` container stored on the application
state, and exposes dependency helpers that hand them to the endpoints.
"""

from dataclasses import dataclass

from fastapi import Request

from categorizer.core.db import init_db
from categorizer.core.settings import Settings
from categorizer.providers import ProviderRegistry
from categorizer.providers.base import ClassificationProvider
from categorizer.services.entity_resolver import EntityResolver
from categorizer.services.firefly_client import FireflyClient
from categorizer.services.ledger_writer import LedgerWriter
from categorizer.workers.job_queue import WorkQueue
from categorizer.workers.job_registry import JobRegistry
from categorizer.workers.job_runner import JobRunner
from categorizer.workers.tag_poller import TagPoller


@dataclass
class Services:
    """Every long-lived component of the application."""

    settings: Settings
    ledger: FireflyClient
    registry: JobRegistry
    queue: WorkQueue
    runner: JobRunner
    poller: TagPoller


def build_services(
    settings: Settings, provider: ClassificationProvider | None = None, ledger: FireflyClient | None = None
) -> Services:
    """Build the component graph from settings; ``provider`` and ``ledger`` may be supplied instead of built."""
    ledger = ledger or FireflyClient.from_settings(settings)
    provider = provider or ProviderRegistry.get(settings.provider).from_settings(settings)
    registry = JobRegistry(init_db(settings.database_url))
    queue = WorkQueue(registry, timeout=settings.job_timeout)
    runner = JobRunner(
        settings,
        provider,
        EntityResolver(ledger, settings),
        LedgerWriter(ledger, settings.firefly_tag),
        registry,
        queue,
    )
    poller = TagPoller(
        ledger,
        runner,
        settings.firefly_tag_filter,
        interval=settings.tag_poll_interval,
        max_transactions=settings.tag_poll_max_transactions,
    )
    return Services(settings=settings, ledger=ledger, registry=registry, queue=queue, runner=runner, poller=poller)


def get_services(request: Request) -> Services:
    """Provide the application's Services container."""
    return request.app.state.services


def get_registry(request: Request) -> JobRegistry:
    """Provide the job registry."""
    return get_services(request).registry


def get_runner(request: Request) -> JobRunner:
    """Provide the job runner."""
    return get_services(request).runner


def get_poller(request: Request) -> TagPoller:
    """Provide the tag poller."""
    return get_services(request).poller
