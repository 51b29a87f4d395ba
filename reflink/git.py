"""Read-only access to the local repository's branches.

Reverse URL mapping needs exactly one query: which of a set of candidate names
exist as branches.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 10.0


class Repository(Protocol):
    """The slice of a repository the remote providers depend on."""

    async def get_branch_names(self, candidates: Iterable[str]) -> set[str]:
        """Return the subset of ``candidates`` that name an existing branch."""
        ...


def strip_remote_name(ref: str) -> str:
    """Drop the leading remote name from a remote-tracking branch (``origin/a/b`` -> ``a/b``)."""
    _, _, name = ref.partition("/")
    return name or ref


class GitRepository:
    """A local git working tree, queried through the ``git`` executable."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    async def _list_refs(self) -> list[tuple[str, str]]:
        """List (namespace, short name) for local and remote-tracking branches."""
        proc = await asyncio.create_subprocess_exec(
            "git", "for-each-ref", "--format=%(refname)", "refs/heads", "refs/remotes",
            cwd=self.root,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=GIT_TIMEOUT)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning("git for-each-ref timed out after %ss in %s", GIT_TIMEOUT, self.root)
            return []
        if proc.returncode != 0:
            logger.warning(
                "git for-each-ref failed in %s: %s", self.root, stderr.decode(errors="replace").strip()
            )
            return []

        refs = []
        for line in stdout.decode(errors="replace").splitlines():
            for namespace in ("refs/heads/", "refs/remotes/"):
                if line.startswith(namespace):
                    refs.append((namespace, line[len(namespace):]))
                    break
        return refs

    async def get_branch_names(self, candidates: Iterable[str]) -> set[str]:
        wanted = set(candidates)
        if not wanted:
            return set()

        found = set()
        for namespace, name in await self._list_refs():
            if namespace == "refs/remotes/":
                if name.endswith("/HEAD"):
                    continue
                name = strip_remote_name(name)
            if name in wanted:
                found.add(name)
        return found
