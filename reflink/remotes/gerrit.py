"""Gerrit remote provider, including Google Source (``*.googlesource.com``) hosts.

Code is browsed through Gitiles while commits open in the Gerrit review UI.
"""

import re
from dataclasses import dataclass
from functools import cached_property
from urllib.parse import SplitResult

from ..autolinks.models import AnyAutolinkTemplate, AutolinkTemplate
from ..types import LineRange
from .base import RemoteProvider

GOOGLE_SOURCE_SUFFIX = ".googlesource.com"


@dataclass(frozen=True)
class GerritRemote(RemoteProvider):
    """Gerrit provider.

    Supports:
    - https://review.gerrithub.io/plugins/gitiles/owner/repo/+/<sha>/src/main.c#10
    - https://chromium.googlesource.com/chromium/src/+/refs/heads/main/README.md#3
    """

    google_source: bool = False

    revision_path_pattern = re.compile(r"^/.+?/\+(/.+)$")
    line_fragment_pattern = re.compile(r"^(\d+)$")

    @property
    def id(self) -> str:
        return "google-source" if self.google_source else "gerrit"

    @property
    def service_name(self) -> str:
        return "Google Source" if self.google_source else "Gerrit"

    @property
    def icon(self) -> str:
        return "gerrit"

    @property
    def base_url(self) -> str:
        if self.google_source:
            return f"{self.protocol}://{self.domain}/{self.path}"
        return f"{self.protocol}://{self.domain}/plugins/gitiles/{self.path}"

    @property
    def review_domain(self) -> str:
        if self.google_source and self.domain.lower().endswith(GOOGLE_SOURCE_SUFFIX):
            host = self.domain[: -len(GOOGLE_SOURCE_SUFFIX)]
            return f"{host}-review{GOOGLE_SOURCE_SUFFIX}"
        return self.domain

    @property
    def base_review_url(self) -> str:
        return f"{self.protocol}://{self.review_domain}"

    @cached_property
    def autolinks(self) -> tuple[AnyAutolinkTemplate, ...]:
        return (
            AutolinkTemplate(
                prefix="Change-Id: ",
                url=f"{self.base_review_url}/q/<num>",
                alphanumeric=True,
                title=f"Open Change <num> on {self.name}",
                category="pullrequest",
                description=f"{self.name} Change <num>",
            ),
        )

    def get_url_for_branches(self) -> str:
        return f"{self.base_url}/+refs"

    def get_url_for_branch(self, branch: str) -> str:
        return f"{self.base_url}/+/refs/heads/{branch}"

    def get_url_for_commit(self, sha: str) -> str:
        return f"{self.base_review_url}/q/{sha}"

    def get_url_for_file(
        self,
        path: str,
        branch: str | None = None,
        sha: str | None = None,
        range: LineRange | None = None,
    ) -> str:
        # Gitiles anchors a single line only
        line = f"#{range.start}" if range is not None else ""

        if sha:
            return f"{self.base_url}/+/{sha}/{path}{line}"
        if branch:
            return f"{self.base_url}/+/refs/heads/{branch}/{path}{line}"
        return f"{self.base_url}/+/HEAD/{path}{line}"

    def extract_revision_path(self, url: SplitResult) -> str | None:
        revision_path = super().extract_revision_path(url)
        if revision_path is not None and revision_path.startswith("/refs/heads/"):
            return revision_path[len("/refs/heads"):]
        return revision_path
