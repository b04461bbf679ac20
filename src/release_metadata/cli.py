"""Command-line entry point.

Usage:
    release-metadata artifact-urls --input dependencies.json
    cat dependencies.json | release-metadata artifact-urls
    release-metadata release-urls --repo-url https://github.com/o/p --from 1.0.0 --to 1.1.0
    release-metadata branch-refs --owner me --repo proj --branch update/foo

Results are printed as JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from pydantic import TypeAdapter, ValidationError

from release_metadata.config import Settings, load_settings
from release_metadata.logging_config import setup_logging
from release_metadata.resolver import ArtifactResolver
from release_metadata.schemas import Branch, Dependency, Repo, Update, VcsType
from release_metadata.vcs import VcsUrlBuilder, render_release_links


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="release-metadata",
        description="Project URLs and release links for dependency updates",
    )
    parser.add_argument("--config", "-c", help="Path to a YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    artifacts = sub.add_parser("artifact-urls", help="Resolve project URLs of dependencies")
    artifacts.add_argument(
        "--input", "-i",
        help="JSON file with a list of dependencies (reads stdin if omitted)",
    )

    release = sub.add_parser("release-urls", help="Candidate release links for an update")
    release.add_argument("--repo-url", required=True)
    release.add_argument("--from", dest="current_version", required=True)
    release.add_argument("--to", dest="next_version", required=True)
    release.add_argument("--vcs-type", choices=[t.value for t in VcsType])
    release.add_argument("--vcs-uri")
    release.add_argument(
        "--markdown", action="store_true", help="Print markdown links instead of JSON"
    )

    refs = sub.add_parser("branch-refs", help="Pull-request refs for an update branch")
    refs.add_argument("--owner", required=True)
    refs.add_argument("--repo", required=True)
    refs.add_argument("--branch", required=True)
    refs.add_argument("--vcs-type", choices=[t.value for t in VcsType])

    return parser


def _builder(settings: Settings, args: argparse.Namespace) -> VcsUrlBuilder:
    vcs_type = VcsType(args.vcs_type) if args.vcs_type else settings.vcs.type
    vcs_uri = getattr(args, "vcs_uri", None) or settings.vcs.site_uri
    return VcsUrlBuilder(vcs_type, vcs_uri)


def _read_dependencies(path: str | None) -> list[Dependency]:
    if path:
        with open(path) as f:
            data = json.load(f)
    else:
        data = json.load(sys.stdin)
    return TypeAdapter(list[Dependency]).validate_python(data)


async def _resolve(settings: Settings, dependencies: list[Dependency]) -> dict[str, str]:
    async with settings.metadata.client() as client:
        return await ArtifactResolver(client=client).resolve_urls(dependencies)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    setup_logging(environment=settings.environment, log_level=settings.log_level)

    if args.command == "artifact-urls":
        try:
            dependencies = _read_dependencies(args.input)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            print(f"error: invalid dependencies input: {e}", file=sys.stderr)
            return 2
        mapping = asyncio.run(_resolve(settings, dependencies))
        print(json.dumps(mapping, indent=2, sort_keys=True))

    elif args.command == "release-urls":
        update = Update(current_version=args.current_version, next_version=args.next_version)
        urls = _builder(settings, args).release_related_urls(args.repo_url, update)
        if args.markdown:
            print(render_release_links(urls))
        else:
            print(json.dumps([u.model_dump() for u in urls], indent=2))

    elif args.command == "branch-refs":
        builder = _builder(settings, args)
        fork = Repo(owner=args.owner, repo=args.repo)
        branch = Branch(name=args.branch)
        refs = {"head": builder.head_ref(fork, branch), "create": builder.create_ref(fork, branch)}
        print(json.dumps(refs, indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
