#!/usr/bin/env python3
"""CLI for the reflink reference resolution engine."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .autolinks.engine import AutolinksEngine
from .autolinks.enrichment import EnrichmentCoordinator
from .config import ENRICHMENT_TIMEOUT_MS, LOG_LEVEL, ReflinkConfig, load_config
from .git import GitRepository
from .integrations.base import IntegrationService
from .remotes.registry import RemoteProviderRegistry
from .remotes.resources import (
    BranchesResource,
    BranchResource,
    CommitResource,
    ComparisonResource,
    CreatePullRequestResource,
    FileResource,
    PullRequestRef,
    RemoteResource,
    RepoResource,
    RevisionResource,
    get_name_from_remote_resource,
)
from .render import (
    print_autolinks,
    print_entries,
    print_error,
    print_info,
    print_linkified,
    print_local_info,
    print_provider,
    print_url,
)
from .types import GitRemote, LineRange

RESOURCE_KINDS = ("repo", "branches", "branch", "commit", "compare", "create-pr", "file", "revision")


def parse_line_range(value: str | None) -> LineRange | None:
    """Parse ``10`` or ``10-20`` into a LineRange.

    Raises:
        ValueError: If the value is not a line or line range
    """
    if not value:
        return None
    start, _, end = value.partition("-")
    return LineRange(int(start), int(end) if end else None)


def build_resource(args: argparse.Namespace, remote: GitRemote) -> RemoteResource:
    """Build the resource requested on the command line.

    Raises:
        ValueError: If a required option for the resource kind is missing
    """
    kind = args.kind
    if kind == "repo":
        return RepoResource()
    if kind == "branches":
        return BranchesResource()
    if kind == "branch":
        if not args.branch:
            raise ValueError("--branch is required")
        return BranchResource(args.branch)
    if kind == "commit":
        if not args.sha:
            raise ValueError("--sha is required")
        return CommitResource(args.sha)
    if kind == "compare":
        if not args.base or not args.compare:
            raise ValueError("--base and --compare are required")
        return ComparisonResource(args.base, args.compare, args.notation)
    if kind == "create-pr":
        if not args.base or not args.compare:
            raise ValueError("--base and --compare are required")
        return CreatePullRequestResource(
            base=PullRequestRef(args.base, remote.path, remote.url),
            compare=PullRequestRef(args.compare, remote.path, remote.url),
        )
    if not args.path:
        raise ValueError("--path is required")
    lines = parse_line_range(args.lines)
    if kind == "file":
        return FileResource(args.path, branch_or_tag=args.branch, range=lines)
    return RevisionResource(args.path, sha=args.sha, branch_or_tag=args.branch, range=lines)


def _load(args: argparse.Namespace) -> tuple[ReflinkConfig, RemoteProviderRegistry]:
    config = load_config(Path(args.config) if args.config else None)
    return config, RemoteProviderRegistry.from_config(config.remotes, config.integrations)


def _remote(registry: RemoteProviderRegistry, url: str) -> GitRemote:
    remote = registry.create_remote("origin", url)
    if remote.provider is None:
        print_error(f"No provider found for remote: {url}")
        sys.exit(1)
    return remote


async def run_linkify(args: argparse.Namespace) -> str:
    """Detect, optionally enrich, and render the references in the given text."""
    config, registry = _load(args)
    text = sys.stdin.read() if args.text == "-" else args.text

    engine = AutolinksEngine(config.autolinks)
    remotes = [_remote(registry, args.remote)] if args.remote else []

    resolved = None
    if remotes and not args.no_enrich:
        coordinator = EnrichmentCoordinator(engine, IntegrationService.default(), registry)
        resolved = await coordinator.resolve_referenced_ids(text, remotes[0], args.timeout)
        if resolved is None:
            print_info("No enrichment available")

    return engine.linkify(
        text,
        args.markdown,
        remotes=remotes,
        resolved=resolved,
        include_footnotes=not args.no_footnotes,
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Turn issue references and hosting URLs into links, and back",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to config file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # linkify command
    linkify_parser = subparsers.add_parser("linkify", help="Render references in text as links")
    linkify_parser.add_argument("text", type=str, help="Text to linkify ('-' reads stdin)")
    linkify_parser.add_argument("--remote", "-r", type=str, default=None, help="Git remote URL")
    linkify_parser.add_argument("--markdown", "-m", action="store_true", help="Render markdown links")
    linkify_parser.add_argument(
        "--timeout", type=int, default=ENRICHMENT_TIMEOUT_MS, help="Enrichment budget in ms (0 waits for all)"
    )
    linkify_parser.add_argument("--no-enrich", action="store_true", help="Skip fetching issue metadata")
    linkify_parser.add_argument("--no-footnotes", action="store_true", help="Do not append footnotes")

    # branch command
    branch_parser = subparsers.add_parser("branch", help="Find issue keys in a branch name")
    branch_parser.add_argument("branch", type=str, help="Branch name")
    branch_parser.add_argument("--remote", "-r", type=str, default=None, help="Git remote URL")

    # build-url command
    build_parser = subparsers.add_parser("build-url", help="Build a hosting URL for a resource")
    build_parser.add_argument("kind", choices=RESOURCE_KINDS, help="Resource kind")
    build_parser.add_argument("--remote", "-r", type=str, required=True, help="Git remote URL")
    build_parser.add_argument("--branch", "-b", type=str, default=None, help="Branch or tag")
    build_parser.add_argument("--sha", type=str, default=None, help="Commit sha")
    build_parser.add_argument("--path", "-p", type=str, default=None, help="Repository-relative file path")
    build_parser.add_argument("--lines", "-l", type=str, default=None, help="Line or range, e.g. 10-20")
    build_parser.add_argument("--base", type=str, default=None, help="Base ref for comparisons")
    build_parser.add_argument("--compare", type=str, default=None, help="Compared ref for comparisons")
    build_parser.add_argument("--notation", choices=("..", "..."), default="...", help="Comparison notation")

    # resolve-url command
    resolve_parser = subparsers.add_parser("resolve-url", help="Map a hosting URL to a local file")
    resolve_parser.add_argument("url", type=str, help="File URL on the hosting service")
    resolve_parser.add_argument("--remote", "-r", type=str, required=True, help="Git remote URL")
    resolve_parser.add_argument("--repo", type=str, default=".", help="Path to repository (default: .)")
    resolve_parser.add_argument("--no-validate", action="store_true", help="Accept URLs of other repositories")

    # providers command
    providers_parser = subparsers.add_parser("providers", help="List provider matchers or resolve a remote")
    providers_parser.add_argument("--remote", "-r", type=str, default=None, help="Git remote URL to resolve")

    args = parser.parse_args()
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "linkify":
            print_linkified(asyncio.run(run_linkify(args)), args.markdown)
        elif args.command == "branch":
            config, registry = _load(args)
            engine = AutolinksEngine(config.autolinks)
            remote = _remote(registry, args.remote) if args.remote else None
            print_autolinks(engine.get_branch_autolinks(args.branch, remote))
        elif args.command == "build-url":
            _, registry = _load(args)
            remote = _remote(registry, args.remote)
            resource = build_resource(args, remote)
            url = remote.provider.url(resource)
            if url is None:
                print_error(f"{remote.provider.name} cannot link to {get_name_from_remote_resource(resource)}")
                sys.exit(1)
            print_url(url)
        elif args.command == "resolve-url":
            _, registry = _load(args)
            remote = _remote(registry, args.remote)
            repository = GitRepository(Path(args.repo).resolve())
            info = asyncio.run(remote.provider.get_local_info(args.url, repository, not args.no_validate))
            if info is None:
                print_error(f"Not a file URL of {remote.provider.name}: {args.url}")
                sys.exit(1)
            print_local_info(info)
        elif args.command == "providers":
            _, registry = _load(args)
            if args.remote:
                print_provider(_remote(registry, args.remote).provider)
            else:
                print_entries(registry.entries)
        else:
            parser.print_help()
            sys.exit(1)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
