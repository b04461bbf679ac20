"""Provider-specific URL grammar for pull requests and release links.

Every function here is pure: it looks only at its arguments, performs no
I/O and is safe to call concurrently. Candidate URLs are fabricated from
each provider's web UI conventions rather than looked up, so some of them
will 404. Checking reachability is left to the caller.

Provider dispatch is an exhaustive match over VcsType. A repository whose
host is neither the configured provider's host nor a known public host
yields no candidates at all.
"""

from __future__ import annotations

from itertools import product
from typing import assert_never

import httpx

from release_metadata.schemas import (
    Branch,
    CustomChangelog,
    CustomReleaseNotes,
    GitHubReleaseNotes,
    ReleaseRelatedUrl,
    Repo,
    Update,
    VcsType,
    VersionDiff,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PUBLIC_WEB_HOSTS: dict[str, VcsType] = {
    "github.com": VcsType.GITHUB,
    "gitlab.com": VcsType.GITLAB,
    "bitbucket.org": VcsType.BITBUCKET,
    "dev.azure.com": VcsType.AZURE_REPOS,
}


# ---------------------------------------------------------------------------
# Tags and File Names
# ---------------------------------------------------------------------------

CHANGELOG_BASE_NAMES: list[str] = ["CHANGELOG", "Changelog", "changelog", "CHANGES"]
RELEASE_NOTES_BASE_NAMES: list[str] = ["ReleaseNotes", "RELEASES", "Releases", "releases"]
FILE_EXTENSIONS: list[str] = ["md", "markdown", "rst"]


def candidate_filenames(base_names: list[str], extensions: list[str]) -> list[str]:
    """Combine every base name with every extension, base-major."""
    return [f"{base}.{ext}" for base, ext in product(base_names, extensions)]


CHANGELOG_FILENAMES: list[str] = candidate_filenames(CHANGELOG_BASE_NAMES, FILE_EXTENSIONS)
RELEASE_NOTES_FILENAMES: list[str] = candidate_filenames(
    RELEASE_NOTES_BASE_NAMES, FILE_EXTENSIONS
)


def candidate_tags(version: str) -> list[str]:
    """Plausible tag names for a release, most likely first.

    Callers pair old and new candidates by position, so the order is fixed.
    """
    return [f"v{version}", version, f"release-{version}"]


# ---------------------------------------------------------------------------
# Pull Request Branch References
# ---------------------------------------------------------------------------


def pull_request_head_ref(vcs_type: VcsType, fork: Repo, branch: Branch) -> str:
    """Branch parameter used when searching for an existing pull request.

    GitHub's `head` filter wants "owner/repo:branch". The other providers
    scope `source_branch` to the fork on their own.
    """
    match vcs_type:
        case VcsType.GITHUB:
            return f"{fork.owner}/{fork.repo}:{branch.name}"
        case (
            VcsType.GITLAB
            | VcsType.BITBUCKET
            | VcsType.BITBUCKET_SERVER
            | VcsType.AZURE_REPOS
        ):
            return branch.name
        case _:
            assert_never(vcs_type)


def pull_request_create_ref(vcs_type: VcsType, fork: Repo, branch: Branch) -> str:
    """Branch parameter used in the body of a create-pull-request call.

    GitHub's `head` field here is "owner:branch", without the repo name.
    """
    match vcs_type:
        case VcsType.GITHUB:
            return f"{fork.owner}:{branch.name}"
        case (
            VcsType.GITLAB
            | VcsType.BITBUCKET
            | VcsType.BITBUCKET_SERVER
            | VcsType.AZURE_REPOS
        ):
            return branch.name
        case _:
            assert_never(vcs_type)


# ---------------------------------------------------------------------------
# Host Inference
# ---------------------------------------------------------------------------


def vcs_type_from_public_web_host(host: str) -> VcsType | None:
    return PUBLIC_WEB_HOSTS.get(host.lower())


def repo_vcs_type(vcs_type: VcsType, vcs_uri: str, repo_url: str) -> VcsType | None:
    """Determine which provider hosts `repo_url`.

    A repository on the configured provider's own host uses the configured
    type. Anything else is looked up in the public host table, so a
    self-hosted instance on another host is not recognized.
    """
    repo_host = httpx.URL(repo_url).host
    if not repo_host:
        return None
    if httpx.URL(vcs_uri).host == repo_host:
        return vcs_type
    return vcs_type_from_public_web_host(repo_host)


def _join(repo_url: str, *segments: str) -> str:
    return "/".join([repo_url.rstrip("/"), *segments])


def _with_params(url: str, params: dict[str, str]) -> str:
    return str(httpx.URL(url).copy_merge_params(params))


# ---------------------------------------------------------------------------
# Version Diffs
# ---------------------------------------------------------------------------


def candidate_compare_urls(
    vcs_type: VcsType,
    vcs_uri: str,
    repo_url: str,
    update: Update,
) -> list[VersionDiff]:
    """Comparison URLs for every positional pair of old/new candidate tags."""
    repo_type = repo_vcs_type(vcs_type, vcs_uri, repo_url)
    if repo_type is None:
        return []

    pairs = list(zip(candidate_tags(update.current_version), candidate_tags(update.next_version)))

    match repo_type:
        case VcsType.GITHUB | VcsType.GITLAB:
            return [
                VersionDiff(url=_join(repo_url, "compare", f"{old}...{new}"))
                for old, new in pairs
            ]
        case VcsType.BITBUCKET | VcsType.BITBUCKET_SERVER:
            return [
                VersionDiff(url=_join(repo_url, "compare", f"{new}..{old}") + "#diff")
                for old, new in pairs
            ]
        case VcsType.AZURE_REPOS:
            return [
                VersionDiff(
                    url=_with_params(
                        _join(repo_url, "branchCompare"),
                        {"baseVersion": old, "targetVersion": new},
                    )
                )
                for old, new in pairs
            ]
        case _:
            assert_never(repo_type)


# ---------------------------------------------------------------------------
# Release Notes and Changelogs
# ---------------------------------------------------------------------------


def candidate_file_urls(vcs_type: VcsType, repo_url: str, filenames: list[str]) -> list[str]:
    """Map file names onto the provider's file-browsing URL.

    Paths assume the default branch is `master`.
    """
    match vcs_type:
        case VcsType.GITHUB | VcsType.GITLAB:
            return [_join(repo_url, "blob", "master", name) for name in filenames]
        case VcsType.BITBUCKET:
            return [_join(repo_url, "master", name) for name in filenames]
        case VcsType.BITBUCKET_SERVER:
            return [_join(repo_url, "browse", name) for name in filenames]
        case VcsType.AZURE_REPOS:
            return [_with_params(repo_url.rstrip("/"), {"path": name}) for name in filenames]
        case _:
            assert_never(vcs_type)


def candidate_release_related_urls(
    vcs_type: VcsType,
    vcs_uri: str,
    repo_url: str,
    update: Update,
) -> list[ReleaseRelatedUrl]:
    """All candidate links for reviewing an update, in display order.

    GitHub release pages come first, then release-notes files, then
    changelog files, then version diffs. Renderers take the first match
    of each kind, so this order must not change.
    """
    repo_type = repo_vcs_type(vcs_type, vcs_uri, repo_url)
    if repo_type is None:
        return []

    github: list[ReleaseRelatedUrl] = []
    if repo_type == VcsType.GITHUB:
        github = [
            GitHubReleaseNotes(url=_join(repo_url, "releases", "tag", tag))
            for tag in candidate_tags(update.next_version)
        ]

    release_notes = [
        CustomReleaseNotes(url=url)
        for url in candidate_file_urls(repo_type, repo_url, RELEASE_NOTES_FILENAMES)
    ]
    changelog = [
        CustomChangelog(url=url)
        for url in candidate_file_urls(repo_type, repo_url, CHANGELOG_FILENAMES)
    ]
    diffs = candidate_compare_urls(vcs_type, vcs_uri, repo_url, update)

    return [*github, *release_notes, *changelog, *diffs]


def render_release_links(urls: list[ReleaseRelatedUrl]) -> str:
    """Render links as markdown for a pull-request body, e.g.

    "[GitHub Release Notes](...) - [Version Diff](...)"
    """
    return " - ".join(url.to_markdown() for url in urls)


# ---------------------------------------------------------------------------
# Bound Builder
# ---------------------------------------------------------------------------


class VcsUrlBuilder:
    """The functions above bound to one configured provider.

    Usage:
        builder = VcsUrlBuilder(VcsType.GITHUB, "https://github.com")
        urls = builder.release_related_urls("https://github.com/o/p", update)
    """

    def __init__(self, vcs_type: VcsType, vcs_uri: str) -> None:
        self.vcs_type = vcs_type
        self.vcs_uri = vcs_uri

    def head_ref(self, fork: Repo, branch: Branch) -> str:
        return pull_request_head_ref(self.vcs_type, fork, branch)

    def create_ref(self, fork: Repo, branch: Branch) -> str:
        return pull_request_create_ref(self.vcs_type, fork, branch)

    def compare_urls(self, repo_url: str, update: Update) -> list[VersionDiff]:
        return candidate_compare_urls(self.vcs_type, self.vcs_uri, repo_url, update)

    def release_related_urls(self, repo_url: str, update: Update) -> list[ReleaseRelatedUrl]:
        return candidate_release_related_urls(self.vcs_type, self.vcs_uri, repo_url, update)
