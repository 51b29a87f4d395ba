"""Remote providers: URL building and reverse mapping per hosting service."""

from .azure import AzureDevOpsRemote
from .base import RemoteProvider, is_sha, resolve_revision_path
from .bitbucket import BitbucketRemote, BitbucketServerRemote
from .custom import CustomRemote
from .gerrit import GerritRemote
from .gitea import GiteaRemote
from .github import GitHubRemote
from .gitlab import GitLabRemote
from .registry import (
    BUILT_IN_PROVIDERS,
    ProviderEntry,
    RemoteProviderRegistry,
    load_remote_providers,
    parse_remote_url,
)

__all__ = [
    "RemoteProvider",
    "is_sha",
    "resolve_revision_path",
    "AzureDevOpsRemote",
    "BitbucketRemote",
    "BitbucketServerRemote",
    "CustomRemote",
    "GerritRemote",
    "GiteaRemote",
    "GitHubRemote",
    "GitLabRemote",
    "BUILT_IN_PROVIDERS",
    "ProviderEntry",
    "RemoteProviderRegistry",
    "load_remote_providers",
    "parse_remote_url",
]
