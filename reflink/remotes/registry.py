"""Provider registry for automatic remote provider detection."""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..config import IntegrationConfig, RemoteConfig
from ..exceptions import ConfigurationError
from ..types import GitRemote
from .azure import AzureDevOpsRemote
from .base import RemoteProvider
from .bitbucket import BitbucketRemote, BitbucketServerRemote
from .custom import CustomRemote
from .gerrit import GerritRemote
from .gitea import GiteaRemote
from .github import GitHubRemote
from .gitlab import GitLabRemote

logger = logging.getLogger(__name__)

# (domain, path, scheme) -> provider
ProviderCreator = Callable[[str, str, str | None], RemoteProvider]


@dataclass(frozen=True)
class ProviderEntry:
    """One matcher in the registry.

    A string matcher must equal the lower-cased domain. A regex matcher is tested
    against the domain and, for custom entries only, against the full url, in
    which case capture groups 1 and 2 become the domain and path.
    """
    matcher: str | re.Pattern
    creator: ProviderCreator
    custom: bool = False


def _protocol(scheme: str | None, default: str = "https") -> str:
    match = re.match(r"(\w+)\W*", scheme or "")
    return match.group(1) if match else default


def _web_protocol(scheme: str | None) -> str:
    # ssh/git remotes are still browsed over https
    protocol = _protocol(scheme)
    return protocol if protocol in ("http", "https") else "https"


# Ordered list of built-in providers - first match wins
BUILT_IN_PROVIDERS: tuple[ProviderEntry, ...] = (
    ProviderEntry("bitbucket.org", lambda domain, path, scheme: BitbucketRemote(domain, path)),
    ProviderEntry("github.com", lambda domain, path, scheme: GitHubRemote(domain, path)),
    ProviderEntry("gitlab.com", lambda domain, path, scheme: GitLabRemote(domain, path)),
    ProviderEntry(
        re.compile(r"\bdev\.azure\.com$", re.IGNORECASE),
        lambda domain, path, scheme: AzureDevOpsRemote.create(domain, path),
    ),
    ProviderEntry(
        re.compile(r"^(.+/(?:bitbucket|stash))/scm/(.+)$", re.IGNORECASE),
        lambda domain, path, scheme: BitbucketServerRemote(domain, path, _web_protocol(scheme)),
        custom=True,
    ),
    ProviderEntry(re.compile(r"\bgitlab\b", re.IGNORECASE), lambda domain, path, scheme: GitLabRemote(domain, path)),
    ProviderEntry(
        re.compile(r"\bvisualstudio\.com$", re.IGNORECASE),
        lambda domain, path, scheme: AzureDevOpsRemote.create(domain, path, legacy=True),
    ),
    ProviderEntry(re.compile(r"\bgitea\b", re.IGNORECASE), lambda domain, path, scheme: GiteaRemote(domain, path)),
    ProviderEntry(
        re.compile(r"\bgerrithub\.io$", re.IGNORECASE),
        lambda domain, path, scheme: GerritRemote(domain, path),
    ),
    ProviderEntry(
        re.compile(r"\bgooglesource\.com$", re.IGNORECASE),
        lambda domain, path, scheme: GerritRemote(domain, path, google_source=True),
    ),
)

_SELF_MANAGED_CREATORS: dict[str, ProviderCreator] = {
    "GitHubEnterprise": lambda domain, path, scheme: GitHubRemote(domain, path),
    "GitLabSelfHosted": lambda domain, path, scheme: GitLabRemote(domain, path),
    "BitbucketServer": lambda domain, path, scheme: BitbucketServerRemote(domain, path, _web_protocol(scheme)),
    "AzureDevOpsServer": lambda domain, path, scheme: AzureDevOpsRemote.create(domain, path),
}


def _get_custom_provider_creator(cfg: RemoteConfig) -> ProviderCreator:
    """Return a creator for a user-configured remote entry.

    Raises:
        ConfigurationError: If the type is unknown or a Custom entry has no urls
    """
    protocol = cfg.protocol or "https"
    name = cfg.name

    if cfg.type == "AzureDevOps":
        return lambda domain, path, scheme: AzureDevOpsRemote.create(domain, path, protocol, name, True, legacy=True)
    if cfg.type == "Bitbucket":
        return lambda domain, path, scheme: BitbucketRemote(domain, path, protocol, name, True)
    if cfg.type == "BitbucketServer":
        return lambda domain, path, scheme: BitbucketServerRemote(domain, path, protocol, name, True)
    if cfg.type == "Custom":
        if cfg.urls is None:
            raise ConfigurationError("Custom remotes require 'urls'")
        urls = cfg.urls
        return lambda domain, path, scheme: CustomRemote(domain, path, protocol, name, True, urls=urls)
    if cfg.type == "Gerrit":
        return lambda domain, path, scheme: GerritRemote(domain, path, protocol, name, True)
    if cfg.type == "GoogleSource":
        return lambda domain, path, scheme: GerritRemote(domain, path, protocol, name, True, google_source=True)
    if cfg.type == "Gitea":
        return lambda domain, path, scheme: GiteaRemote(domain, path, protocol, name, True)
    if cfg.type == "GitHub":
        return lambda domain, path, scheme: GitHubRemote(domain, path, protocol, name, True)
    if cfg.type == "GitLab":
        return lambda domain, path, scheme: GitLabRemote(domain, path, protocol, name, True)
    raise ConfigurationError(f"Unknown remote type '{cfg.type}'")


def _get_matcher(cfg: RemoteConfig) -> str | re.Pattern:
    if cfg.regex:
        try:
            return re.compile(cfg.regex, re.IGNORECASE)
        except re.error as e:
            raise ConfigurationError(f"Invalid regex '{cfg.regex}': {e}") from e
    if cfg.domain:
        return cfg.domain.lower()
    raise ConfigurationError("No matcher found: set 'domain' or 'regex'")


def load_remote_providers(
    remotes: Sequence[RemoteConfig] | None = None,
    integrations: Sequence[IntegrationConfig] | None = None,
) -> tuple[ProviderEntry, ...]:
    """Build the ordered matcher list: user entries, self-managed integrations, built-ins.

    A malformed user entry is logged and skipped.

    Args:
        remotes: User-configured remote entries
        integrations: Connected self-managed hosting integrations

    Returns:
        The ordered entries
    """
    entries: list[ProviderEntry] = []

    for cfg in remotes or ():
        try:
            creator = _get_custom_provider_creator(cfg)
            matcher = _get_matcher(cfg)
        except ConfigurationError as e:
            logger.error("Loading remote provider '%s' failed: %s", cfg.name or cfg.domain or cfg.regex or "", e)
            continue
        entries.append(ProviderEntry(matcher, creator, custom=True))

    for integration in integrations or ():
        creator = _SELF_MANAGED_CREATORS.get(integration.type)
        if creator is None:
            logger.error("Unknown self-managed integration type '%s'", integration.type)
            continue

        matcher = integration.domain.lower()
        entry = ProviderEntry(matcher, creator)
        # A connected integration supersedes a user entry for the same domain
        for i, existing in enumerate(entries):
            if existing.matcher == matcher:
                entries[i] = entry
                break
        else:
            entries.append(entry)

    entries.extend(BUILT_IN_PROVIDERS)
    return tuple(entries)


def parse_remote_url(url: str) -> tuple[str | None, str, str]:
    """Split a git remote URL into (scheme, domain, path).

    Handles ``https://host/owner/repo.git``, ``ssh://git@host:22/owner/repo`` and
    scp-style ``git@host:owner/repo.git``.

    Args:
        url: A git remote URL

    Returns:
        Tuple of (scheme or None for scp-style, domain, path without ".git")

    Raises:
        ValueError: If the URL has no host
    """
    url = url.strip()
    if "://" in url:
        parts = urlsplit(url)
        scheme, domain, path = parts.scheme, parts.hostname or "", parts.path
        # ssh ports are not part of the web address
        if parts.port and scheme in ("http", "https"):
            domain = f"{domain}:{parts.port}"
    else:
        match = re.match(r"^(?:[^@/]+@)?([^:/]+):(.+)$", url)
        if match is None:
            raise ValueError(f"Invalid git remote URL: {url}")
        scheme, domain, path = None, match.group(1), match.group(2)

    if not domain:
        raise ValueError(f"Invalid git remote URL: {url}")

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    return scheme, domain, path


class RemoteProviderRegistry:
    """Resolves remotes to providers.

    The entry tuple is swapped wholesale by ``reload`` so a lookup running
    against the previous entries stays consistent.
    """

    def __init__(self, entries: Sequence[ProviderEntry] | None = None):
        self._entries: tuple[ProviderEntry, ...] = tuple(entries) if entries is not None else BUILT_IN_PROVIDERS
        # Providers reported as connected, so the first connection is announced once
        self._connected: set[str] = set()

    @classmethod
    def from_config(
        cls,
        remotes: Sequence[RemoteConfig] | None = None,
        integrations: Sequence[IntegrationConfig] | None = None,
    ) -> "RemoteProviderRegistry":
        return cls(load_remote_providers(remotes, integrations))

    @property
    def entries(self) -> tuple[ProviderEntry, ...]:
        return self._entries

    def reload(
        self,
        remotes: Sequence[RemoteConfig] | None = None,
        integrations: Sequence[IntegrationConfig] | None = None,
    ) -> None:
        self._entries = load_remote_providers(remotes, integrations)

    def resolve_provider(
        self, url: str, domain: str, path: str, scheme: str | None = None
    ) -> RemoteProvider | None:
        """Return the provider for a remote, or None if no entry matches.

        Args:
            url: The remote location as ``domain/path``
            domain: Remote host (may include a mount path for on-prem servers)
            path: Repository path on the host
            scheme: Remote URL scheme, if any

        Returns:
            A provider from the first matching entry
        """
        entries = self._entries
        key = domain.lower()
        for entry in entries:
            try:
                if isinstance(entry.matcher, str):
                    if entry.matcher == key:
                        return entry.creator(domain, path, scheme)
                    continue

                if entry.matcher.search(key):
                    return entry.creator(domain, path, scheme)
                if not entry.custom:
                    continue

                match = entry.matcher.search(url)
                if match is not None:
                    return entry.creator(match.group(1), match.group(2), scheme)
            except (ConfigurationError, IndexError) as e:
                logger.error("Creating remote provider for %s failed: %s", url, e)
                return None
        return None

    def resolve_url(self, remote_url: str) -> RemoteProvider | None:
        """Parse a git remote URL and resolve its provider."""
        scheme, domain, path = parse_remote_url(remote_url)
        return self.resolve_provider(f"{domain}/{path}", domain, path, scheme)

    def mark_connected(self, provider: RemoteProvider) -> bool:
        """Record that a provider's integration connected.

        Returns:
            True the first time a given provider key is seen
        """
        key = f"{provider.id}:{provider.domain}" if provider.custom else provider.id
        if key in self._connected:
            return False
        self._connected.add(key)
        logger.info("Connected to %s", provider.name)
        return True

    def create_remote(self, name: str, url: str) -> GitRemote:
        """Build a GitRemote, with its provider if one matches.

        Raises:
            ValueError: If ``url`` is not a git remote URL
        """
        scheme, domain, path = parse_remote_url(url)
        return GitRemote(
            name=name,
            url=url,
            domain=domain,
            path=path,
            protocol=scheme or "ssh",
            provider=self.resolve_provider(f"{domain}/{path}", domain, path, scheme),
        )
