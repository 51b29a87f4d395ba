"""Resolves referenced issue ids to live metadata within a time budget."""

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from ..exceptions import ResolutionFailure
from ..integrations.base import HostingIntegration, IntegrationService
from ..types import CANCELLED, NOT_FOUND, EnrichmentOutcome, GitRemote
from .engine import AutolinksEngine
from .models import Autolink

if TYPE_CHECKING:
    from ..remotes.registry import RemoteProviderRegistry

logger = logging.getLogger(__name__)


class EnrichmentCoordinator:
    """Fetches the issues and pull requests referenced in a piece of text.

    Fetches still running at the deadline are not aborted. They finish in the
    background and their results are dropped.
    """

    def __init__(
        self,
        engine: AutolinksEngine,
        integrations: IntegrationService,
        registry: "RemoteProviderRegistry | None" = None,
    ):
        self.engine = engine
        self.integrations = integrations
        self.registry = registry
        # Strong references to fetches that outlived their deadline
        self._background: set[asyncio.Task] = set()

    async def _fetch(
        self, integration: HostingIntegration, autolink: Autolink, remote: GitRemote
    ) -> EnrichmentOutcome:
        descriptor = autolink.descriptor or remote.provider.repo_descriptor
        try:
            issue = await integration.get_issue_or_pull_request(descriptor, autolink.id, autolink.category)
        except (httpx.HTTPError, ResolutionFailure) as e:
            logger.warning("Failed to resolve %s in %s: %s", autolink.key, descriptor, e)
            return NOT_FOUND
        if issue is None:
            return NOT_FOUND
        return EnrichmentOutcome.resolved(issue)

    def _finish_background(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Late lookup failed: %s", task.exception())

    async def resolve_referenced_ids(
        self, text: str, remote: GitRemote, timeout_ms: int | None = None
    ) -> dict[str, EnrichmentOutcome] | None:
        """Resolve every reference in ``text`` against the remote's integration.

        Args:
            text: Text containing references such as ``#42``
            remote: Remote whose provider and integration serve the lookups
            timeout_ms: Time budget; None or 0 waits for every fetch

        Returns:
            Outcomes keyed like ``AutolinksEngine.get_autolinks``, or None when the
            remote has no connected integration or nothing was found
        """
        provider = remote.provider
        if provider is None:
            return None
        integration = self.integrations.get(provider)
        if integration is None or not integration.is_connected:
            return None

        remote.connected = True
        if self.registry is not None:
            self.registry.mark_connected(provider)

        # Only references of this remote's own templates address its issues
        autolinks = {
            key: autolink
            for key, autolink in self.engine.get_autolinks(text, remote).items()
            if autolink.provider == provider
        }
        if not autolinks:
            return None

        tasks = {
            key: asyncio.create_task(self._fetch(integration, autolink, remote))
            for key, autolink in autolinks.items()
        }
        timeout = timeout_ms / 1000 if timeout_ms else None
        _, pending = await asyncio.wait(tasks.values(), timeout=timeout)

        for task in pending:
            self._background.add(task)
            task.add_done_callback(self._finish_background)
        if pending:
            logger.debug("%d of %d lookups timed out after %sms", len(pending), len(tasks), timeout_ms)

        outcomes = {
            key: CANCELLED if task in pending else task.result()
            for key, task in tasks.items()
        }
        if all(outcome is NOT_FOUND for outcome in outcomes.values()):
            return None
        return outcomes
