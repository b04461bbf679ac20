"""Pydantic models shared by the artifact resolver and the VCS URL builder.

These schemas are the contract between this library and its callers:
- Dependency coordinates and updates come in from the update pipeline
- Release-related URLs go out to pull-request rendering
- ResolutionRequest/ProjectDescriptor form the boundary with the
  package-metadata service

All models are frozen. They are created by the caller and only read here.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class VcsType(StrEnum):
    """Supported VCS hosting providers.

    The set is closed: every function that dispatches on a provider matches
    all members exhaustively, so adding one here means revisiting them all.
    """

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    BITBUCKET_SERVER = "bitbucket-server"
    AZURE_REPOS = "azure-repos"


# ---------------------------------------------------------------------------
# Update Inputs
# ---------------------------------------------------------------------------


class Dependency(BaseModel, frozen=True):
    """A library coordinate as declared by a build.

    Attributes:
        group_id: Organization of the artifact (e.g., "org.typelevel")
        artifact_id: Plain artifact name (e.g., "cats-core")
        artifact_id_cross: Cross-version qualified name (e.g., "cats-core_2.13")
        version: Resolved version of the artifact
        sbt_version: sbt binary version, set for sbt plugins
        scala_version: Scala binary version, set for sbt plugins
    """

    group_id: str = Field(..., min_length=1, description="Group identifier")
    artifact_id: str = Field(..., min_length=1, description="Artifact identifier")
    artifact_id_cross: str | None = Field(
        None, description="Cross-version qualified artifact identifier"
    )
    version: str = Field(..., min_length=1, description="Resolved version")
    sbt_version: str | None = Field(None, description="sbt binary version qualifier")
    scala_version: str | None = Field(None, description="Scala binary version qualifier")

    @property
    def cross_name(self) -> str:
        """Module name used for resolution; falls back to the plain artifact id."""
        return self.artifact_id_cross or self.artifact_id

    @property
    def attributes(self) -> dict[str, str]:
        attrs: dict[str, str] = {}
        if self.sbt_version:
            attrs["sbtVersion"] = self.sbt_version
        if self.scala_version:
            attrs["scalaVersion"] = self.scala_version
        return attrs


class Update(BaseModel, frozen=True):
    """A version bump of one dependency."""

    current_version: str = Field(..., min_length=1, description="Version in use")
    next_version: str = Field(..., min_length=1, description="Version to update to")
    group_id: str | None = Field(None, description="Group of the updated dependency")
    artifact_id: str | None = Field(None, description="Artifact of the updated dependency")


class Repo(BaseModel, frozen=True):
    """A repository on a VCS host, identified by owner and name."""

    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)


class Branch(BaseModel, frozen=True):
    name: str = Field(..., min_length=1)


# Artifact id -> project URL, built per update batch
ArtifactUrlMapping = dict[str, str]


# ---------------------------------------------------------------------------
# Release-Related URLs
# ---------------------------------------------------------------------------


class _ReleaseRelatedUrlBase(BaseModel, frozen=True):
    url: str = Field(..., description="Candidate URL; reachability is not checked")

    label: ClassVar[str] = ""

    def to_markdown(self) -> str:
        return f"[{self.label}]({self.url})"


class VersionDiff(_ReleaseRelatedUrlBase, frozen=True):
    """Comparison view between the old and the new release tag."""

    kind: Literal["version_diff"] = "version_diff"
    label: ClassVar[str] = "Version Diff"


class GitHubReleaseNotes(_ReleaseRelatedUrlBase, frozen=True):
    """A GitHub release page for a tag."""

    kind: Literal["github_release_notes"] = "github_release_notes"
    label: ClassVar[str] = "GitHub Release Notes"


class CustomChangelog(_ReleaseRelatedUrlBase, frozen=True):
    """A changelog file in the repository (e.g., CHANGELOG.md)."""

    kind: Literal["custom_changelog"] = "custom_changelog"
    label: ClassVar[str] = "Changelog"


class CustomReleaseNotes(_ReleaseRelatedUrlBase, frozen=True):
    """A release-notes file in the repository (e.g., ReleaseNotes.md)."""

    kind: Literal["custom_release_notes"] = "custom_release_notes"
    label: ClassVar[str] = "Release Notes"


ReleaseRelatedUrl = Annotated[
    Union[VersionDiff, GitHubReleaseNotes, CustomChangelog, CustomReleaseNotes],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Package-Metadata Boundary
# ---------------------------------------------------------------------------


class ResolutionRequest(BaseModel, frozen=True):
    """What the resolver asks the package-metadata service for.

    Only the artifact's own descriptor is needed, so transitive resolution
    is off and the artifact types are restricted to the POM.
    """

    group_id: str
    module_name: str
    version: str
    attributes: dict[str, str] = Field(default_factory=dict)
    transitive: bool = False
    artifact_types: tuple[str, ...] = ("pom",)


class ScmInfo(BaseModel, frozen=True):
    """The <scm> section of a project descriptor."""

    url: str | None = None
    connection: str | None = None
    developer_connection: str | None = None


class ProjectDescriptor(BaseModel, frozen=True):
    """Project facts declared in a published POM."""

    homepage: str = ""
    scm: ScmInfo | None = None


# ---------------------------------------------------------------------------
# API Schemas
# ---------------------------------------------------------------------------


class BranchRefsRequest(BaseModel):
    """Fork and update branch to derive pull-request refs for."""

    fork: Repo
    branch: Branch
    vcs_type: VcsType | None = Field(None, description="Overrides the configured provider")


class BranchRefsResponse(BaseModel):
    head: str = Field(..., description="Ref for finding an existing pull request")
    create: str = Field(..., description="Ref for creating a pull request")


class ReleaseUrlsRequest(BaseModel):
    """A repository and the update whose release links are wanted."""

    repo_url: str = Field(..., min_length=1, description="Web URL of the repository")
    update: Update
    vcs_type: VcsType | None = Field(None, description="Overrides the configured provider")
    vcs_uri: str | None = Field(None, description="Overrides the configured site URI")


class ArtifactUrlResponse(BaseModel):
    artifact_id: str
    url: str | None = None
