"""Tests for provider URL building and reverse URL mapping."""

from unittest.mock import AsyncMock

import pytest

from reflink.config import CustomRemoteUrls
from reflink.exceptions import ConfigurationError
from reflink.remotes import (
    AzureDevOpsRemote,
    BitbucketRemote,
    BitbucketServerRemote,
    CustomRemote,
    GerritRemote,
    GiteaRemote,
    GitHubRemote,
    GitLabRemote,
    is_sha,
    resolve_revision_path,
)
from reflink.remotes.resources import (
    BranchesResource,
    BranchResource,
    CommitResource,
    ComparisonResource,
    CreatePullRequestResource,
    FileResource,
    PullRequestRef,
    RepoResource,
    RevisionResource,
)
from reflink.types import LineRange, LocalInfo

SHA = "0123456789abcdef0123456789abcdef01234567"


class FakeRepository:
    """Repository double answering branch lookups from a fixed set."""

    def __init__(self, *branches: str):
        self.branches = set(branches)
        self.queries: list[set[str]] = []

    async def get_branch_names(self, candidates):
        candidates = set(candidates)
        self.queries.append(candidates)
        return candidates & self.branches


class TestIsSha:
    """Tests for commit hash detection."""

    def test_full(self):
        assert is_sha(SHA)
        assert is_sha("a" * 64)

    def test_short(self):
        assert not is_sha("0123abc")
        assert is_sha("0123abc", allow_short=True)

    def test_branch_name(self):
        assert not is_sha("feature", allow_short=True)


class TestGitHubUrls:
    """Tests for GitHub URL building."""

    @pytest.fixture
    def provider(self):
        return GitHubRemote("github.com", "owner/repo")

    def test_repository(self, provider):
        assert provider.url(RepoResource()) == "https://github.com/owner/repo"

    def test_branch(self, provider):
        assert provider.url(BranchResource("feature/x")) == "https://github.com/owner/repo/tree/feature/x"

    def test_branches(self, provider):
        assert provider.url(BranchesResource()) == "https://github.com/owner/repo/branches"

    def test_commit(self, provider):
        assert provider.url(CommitResource(SHA)) == f"https://github.com/owner/repo/commit/{SHA}"

    def test_comparison(self, provider):
        assert provider.url(ComparisonResource("main", "dev")) == "https://github.com/owner/repo/compare/main...dev"
        assert provider.url(ComparisonResource("main", "dev", "..")) == "https://github.com/owner/repo/compare/main..dev"

    def test_create_pull_request(self, provider):
        """Pull requests from a fork name the fork owner."""
        base = PullRequestRef("main", "owner/repo")
        assert (
            provider.url(CreatePullRequestResource(base, PullRequestRef("feat", "owner/repo")))
            == "https://github.com/owner/repo/pull/new/main...feat"
        )
        assert (
            provider.url(CreatePullRequestResource(base, PullRequestRef("feat", "fork/repo")))
            == "https://github.com/owner/repo/pull/new/main...fork:feat"
        )

    def test_revision_with_range(self, provider):
        url = provider.url(RevisionResource("src/app.ts", sha=SHA, range=LineRange(10, 20)))
        assert url == f"https://github.com/owner/repo/blob/{SHA}/src/app.ts#L10-L20"

    def test_file_single_line(self, provider):
        url = provider.url(FileResource("src/app.ts", branch_or_tag="main", range=LineRange(5)))
        assert url == "https://github.com/owner/repo/blob/main/src/app.ts#L5"

    def test_file_without_revision(self, provider):
        assert provider.url(FileResource("src/app.ts")) == "https://github.com/owner/repo?path=src/app.ts"

    def test_url_is_encoded(self, provider):
        url = provider.url(FileResource("docs/my file.md", branch_or_tag="main"))
        assert url == "https://github.com/owner/repo/blob/main/docs/my%20file.md"

    def test_enterprise(self):
        """Non-github.com domains are GitHub Enterprise."""
        provider = GitHubRemote("github.example.com", "o/r")
        assert provider.id == "github-enterprise"
        assert provider.name == "GitHub Enterprise"
        assert provider.api_base_url == "https://github.example.com/api/v3"

    def test_names(self):
        assert GitHubRemote("github.com", "o/r").name == "GitHub"
        assert GitHubRemote("github.com", "o/r", custom=True).name == "GitHub (github.com)"
        assert GitHubRemote("github.com", "o/r", display_name="Mirror").name == "Mirror"

    def test_descriptors(self, provider):
        assert str(provider.repo_descriptor) == "owner/repo"
        assert provider.descriptor.domain == "github.com"


class TestGitLabUrls:
    """Tests for GitLab URL building."""

    @pytest.fixture
    def provider(self):
        return GitLabRemote("gitlab.com", "group/sub/project")

    def test_branch(self, provider):
        assert provider.url(BranchResource("main")) == "https://gitlab.com/group/sub/project/-/tree/main"

    def test_commit(self, provider):
        assert provider.url(CommitResource(SHA)) == f"https://gitlab.com/group/sub/project/-/commit/{SHA}"

    def test_file_range(self, provider):
        url = provider.url(RevisionResource("src/app.py", sha=SHA, range=LineRange(10, 20)))
        assert url == f"https://gitlab.com/group/sub/project/-/blob/{SHA}/src/app.py#L10-20"

    def test_create_merge_request(self, provider):
        url = provider.url(
            CreatePullRequestResource(PullRequestRef("main", "group/sub/project"), PullRequestRef("feat", "group/sub/project"))
        )
        assert url == (
            "https://gitlab.com/group/sub/project/-/merge_requests/new"
            "?merge_request%5Bsource_branch%5D=feat&merge_request%5Btarget_branch%5D=main"
        )

    def test_self_hosted(self):
        provider = GitLabRemote("git.corp.com", "team/repo")
        assert provider.id == "gitlab-self-hosted"
        assert provider.api_base_url == "https://git.corp.com/api/v4"


class TestBitbucketUrls:
    """Tests for Bitbucket Cloud and Server URL building."""

    def test_cloud(self):
        provider = BitbucketRemote("bitbucket.org", "owner/repo")
        assert provider.url(BranchResource("main")) == "https://bitbucket.org/owner/repo/branch/main"
        assert provider.url(CommitResource(SHA)) == f"https://bitbucket.org/owner/repo/commits/{SHA}"
        assert (
            provider.url(ComparisonResource("main", "dev"))
            == "https://bitbucket.org/owner/repo/branches/compare/dev%0Dmain"
        )
        assert (
            provider.url(RevisionResource("src/app.ts", sha=SHA, range=LineRange(10, 20)))
            == f"https://bitbucket.org/owner/repo/src/{SHA}/src/app.ts#app.ts-10:20"
        )

    def test_cloud_create_pull_request(self):
        provider = BitbucketRemote("bitbucket.org", "owner/repo")
        url = provider.url(
            CreatePullRequestResource(PullRequestRef("main", "owner/repo"), PullRequestRef("feat", "owner/repo"))
        )
        assert url == "https://bitbucket.org/owner/repo/pull-requests/new?source=feat&dest=main"

    def test_server_trims_scm_prefix(self):
        """scm/PROJ/repo clone paths map to projects/PROJ/repos/repo."""
        provider = BitbucketServerRemote("git.example.com", "scm/PROJ/repo")
        assert provider.base_url == "https://git.example.com/projects/PROJ/repos/repo"
        assert provider.project_and_repo == ("PROJ", "repo")

    def test_server_urls(self):
        provider = BitbucketServerRemote("git.example.com", "scm/PROJ/repo")
        base = "https://git.example.com/projects/PROJ/repos/repo"
        assert provider.url(BranchResource("main")) == f"{base}/commits?until=main"
        assert (
            provider.url(RevisionResource("src/app.ts", branch_or_tag="main", range=LineRange(10, 20)))
            == f"{base}/browse/src/app.ts?at=main#10-20"
        )


class TestOtherProviderUrls:
    """Tests for Gitea, Gerrit, Azure DevOps and custom URL building."""

    def test_gitea(self):
        provider = GiteaRemote("gitea.example.com", "o/r")
        assert provider.url(BranchResource("main")) == "https://gitea.example.com/o/r/src/branch/main"
        assert (
            provider.url(RevisionResource("app.go", sha=SHA, range=LineRange(1, 2)))
            == f"https://gitea.example.com/o/r/src/commit/{SHA}/app.go#L1-L2"
        )

    def test_gerrit(self):
        provider = GerritRemote("review.gerrithub.io", "owner/repo")
        base = "https://review.gerrithub.io/plugins/gitiles/owner/repo"
        assert provider.url(BranchResource("main")) == f"{base}/+/refs/heads/main"
        assert provider.url(CommitResource("abc1234")) == "https://review.gerrithub.io/q/abc1234"
        assert (
            provider.url(RevisionResource("src/main.c", sha=SHA, range=LineRange(7)))
            == f"{base}/+/{SHA}/src/main.c#7"
        )

    def test_google_source(self):
        provider = GerritRemote("chromium.googlesource.com", "chromium/src", google_source=True)
        assert provider.base_url == "https://chromium.googlesource.com/chromium/src"
        assert provider.url(CommitResource("abc1234")) == "https://chromium-review.googlesource.com/q/abc1234"

    def test_azure(self):
        provider = AzureDevOpsRemote("dev.azure.com", "org/project/_git/repo")
        base = "https://dev.azure.com/org/project/_git/repo"
        assert provider.url(BranchResource("main")) == f"{base}?version=GBmain"
        assert provider.url(CommitResource(SHA)) == f"{base}/commit/{SHA}"
        assert provider.url(RevisionResource("src/app.cs", branch_or_tag="main", range=LineRange(10, 20))) == (
            f"{base}?path=/src/app.cs&version=GBmain&line=10&lineEnd=21&lineStartColumn=1&lineEndColumn=1"
        )
        assert provider.project_url == "https://dev.azure.com/org/project"

    def test_azure_legacy_ssh(self):
        """Legacy SSH remotes move the organization into the domain."""
        provider = AzureDevOpsRemote.create("vs-ssh.visualstudio.com", "v3/myorg/project/repo", legacy=True)
        assert provider.domain == "myorg.visualstudio.com"
        assert provider.path == "project/_git/repo"

    @pytest.fixture
    def custom_urls(self):
        return CustomRemoteUrls(
            repository="https://git.example.com/${repo}",
            branches="https://git.example.com/${repo}/branches",
            branch="https://git.example.com/${repo}/tree/${branch}",
            commit="https://git.example.com/${repo}/commit/${id}",
            file="https://git.example.com/${repo}/blob/HEAD/${file}${line}",
            fileInBranch="https://git.example.com/${repo}/blob/${branch}/${file}${line}",
            fileInCommit="https://git.example.com/${repo}/blob/${id}/${file}${line}",
            fileLine="#L${line}",
            fileRange="#L${start}-L${end}",
        )

    def test_custom(self, custom_urls):
        provider = CustomRemote("git.example.com", "team/repo", urls=custom_urls)
        assert provider.url(RepoResource()) == "https://git.example.com/team/repo"
        assert provider.url(CommitResource("abc")) == "https://git.example.com/team/repo/commit/abc"
        assert (
            provider.url(RevisionResource("a.py", sha="abc", range=LineRange(3, 4)))
            == "https://git.example.com/team/repo/blob/abc/a.py#L3-L4"
        )
        assert provider.url(FileResource("a.py", range=LineRange(3))) == "https://git.example.com/team/repo/blob/HEAD/a.py#L3"

    def test_custom_without_template_has_no_url(self, custom_urls):
        """Optional pages without a template produce no URL."""
        provider = CustomRemote("git.example.com", "team/repo", urls=custom_urls)
        assert provider.url(ComparisonResource("main", "dev")) is None

    def test_custom_requires_urls(self):
        with pytest.raises(ConfigurationError):
            CustomRemote("git.example.com", "team/repo")

    @pytest.mark.asyncio
    async def test_custom_has_no_reverse_mapping(self, custom_urls):
        provider = CustomRemote("git.example.com", "team/repo", urls=custom_urls)
        url = "https://git.example.com/team/repo/blob/main/a.py#L3"
        assert await provider.get_local_info(url, FakeRepository("main")) is None


class TestResolveRevisionPath:
    """Tests for splitting branch names that contain slashes."""

    @pytest.mark.asyncio
    async def test_full_sha_skips_lookup(self):
        """A full commit hash is a permalink and needs no branch lookup."""
        repository = AsyncMock()
        info = await resolve_revision_path(f"/{SHA}/src/app.ts", repository, 1, 2)
        assert info == LocalInfo(path="src/app.ts", start_line=1, end_line=2)
        repository.get_branch_names.assert_not_called()

    @pytest.mark.asyncio
    async def test_slashed_branch(self):
        """feature/login is preferred over feature."""
        repository = FakeRepository("feature/login")
        info = await resolve_revision_path("/feature/login/src/app.ts", repository)
        assert info.path == "src/app.ts"

    @pytest.mark.asyncio
    async def test_single_batched_lookup(self):
        """Every candidate is checked in one query."""
        repository = FakeRepository("main")
        await resolve_revision_path("/main/a/b/c.txt", repository)
        assert repository.queries == [{"main/a/b", "main/a", "main"}]

    @pytest.mark.asyncio
    async def test_nested_branches_prefer_longest(self):
        """When both a and a/b exist, the longer branch name wins."""
        repository = FakeRepository("a", "a/b")
        info = await resolve_revision_path("/a/b/c.txt", repository)
        assert info.path == "c.txt"

    @pytest.mark.asyncio
    async def test_short_sha_fallback(self):
        """An abbreviated hash is used only when no branch matches."""
        info = await resolve_revision_path("/0123abc/src/x.py", FakeRepository())
        assert info.path == "src/x.py"

    @pytest.mark.asyncio
    async def test_unknown_revision(self):
        assert await resolve_revision_path("/nope/src/x.py", FakeRepository()) is None


class TestGetLocalInfo:
    """Tests for mapping pasted URLs back to local files."""

    @pytest.mark.asyncio
    async def test_github_branch_with_slash(self):
        """The feature/login scenario resolves to src/app.ts lines 10-20."""
        provider = GitHubRemote("github.com", "owner/repo")
        repository = FakeRepository("feature", "feature/login")
        info = await provider.get_local_info(
            "https://github.com/owner/repo/blob/feature/login/src/app.ts#L10-L20", repository
        )
        assert info == LocalInfo(path="src/app.ts", start_line=10, end_line=20)

    @pytest.mark.asyncio
    async def test_github_round_trip(self):
        """A permalink built by the provider maps back to the same file and lines."""
        provider = GitHubRemote("github.com", "owner/repo")
        url = provider.url(RevisionResource("src/app.ts", sha=SHA, range=LineRange(10, 20)))
        info = await provider.get_local_info(url, FakeRepository())
        assert info == LocalInfo(path="src/app.ts", start_line=10, end_line=20)

    @pytest.mark.asyncio
    async def test_other_domain(self):
        provider = GitHubRemote("github.com", "owner/repo")
        assert await provider.get_local_info("https://gitlab.com/owner/repo/blob/main/x", FakeRepository("main")) is None

    @pytest.mark.asyncio
    async def test_other_repository(self):
        """URLs of another repository are rejected unless validation is off."""
        provider = GitHubRemote("github.com", "owner/repo")
        url = "https://github.com/other/repo/blob/main/x.py"
        assert await provider.get_local_info(url, FakeRepository("main")) is None
        info = await provider.get_local_info(url, FakeRepository("main"), validate=False)
        assert info.path == "x.py"

    @pytest.mark.asyncio
    async def test_not_a_file_url(self):
        provider = GitHubRemote("github.com", "owner/repo")
        assert await provider.get_local_info("https://github.com/owner/repo/pull/1", FakeRepository()) is None

    @pytest.mark.asyncio
    async def test_gitlab(self):
        provider = GitLabRemote("gitlab.com", "group/sub/project")
        info = await provider.get_local_info(
            "https://gitlab.com/group/sub/project/-/blob/main/src/app.py#L10-20", FakeRepository("main")
        )
        assert info == LocalInfo(path="src/app.py", start_line=10, end_line=20)

    @pytest.mark.asyncio
    async def test_bitbucket(self):
        provider = BitbucketRemote("bitbucket.org", "owner/repo")
        info = await provider.get_local_info(
            "https://bitbucket.org/owner/repo/src/main/src/app.ts#app.ts-10:20", FakeRepository("main")
        )
        assert info == LocalInfo(path="src/app.ts", start_line=10, end_line=20)

    @pytest.mark.asyncio
    async def test_bitbucket_server_with_mount(self):
        """The browse path is exact, so no branch lookup is needed."""
        provider = BitbucketServerRemote("git.example.com/bitbucket", "PROJ/repo")
        repository = AsyncMock()
        info = await provider.get_local_info(
            "https://git.example.com/bitbucket/projects/PROJ/repos/repo/browse/src/app.ts?at=refs%2Fheads%2Fmain#10-20",
            repository,
        )
        assert info == LocalInfo(path="src/app.ts", start_line=10, end_line=20)
        repository.get_branch_names.assert_not_called()

    @pytest.mark.asyncio
    async def test_bitbucket_server_other_repository(self):
        provider = BitbucketServerRemote("git.example.com", "scm/PROJ/repo")
        url = "https://git.example.com/projects/PROJ/repos/other/browse/a.txt"
        assert await provider.get_local_info(url, FakeRepository()) is None

    @pytest.mark.asyncio
    async def test_gitea(self):
        provider = GiteaRemote("gitea.example.com", "o/r")
        info = await provider.get_local_info(
            "https://gitea.example.com/o/r/src/branch/main/app.go#L3", FakeRepository("main")
        )
        assert info == LocalInfo(path="app.go", start_line=3)

    @pytest.mark.asyncio
    async def test_gerrit(self):
        provider = GerritRemote("review.gerrithub.io", "owner/repo")
        info = await provider.get_local_info(
            "https://review.gerrithub.io/plugins/gitiles/owner/repo/+/refs/heads/main/src/main.c#7",
            FakeRepository("main"),
        )
        assert info == LocalInfo(path="src/main.c", start_line=7)

    @pytest.mark.asyncio
    async def test_azure_round_trip(self):
        """Azure DevOps query-string file URLs map back with an inclusive end line."""
        provider = AzureDevOpsRemote("dev.azure.com", "org/project/_git/repo")
        url = provider.url(RevisionResource("src/app.cs", branch_or_tag="main", range=LineRange(10, 20)))
        info = await provider.get_local_info(url, FakeRepository())
        assert info == LocalInfo(path="src/app.cs", start_line=10, end_line=20)
