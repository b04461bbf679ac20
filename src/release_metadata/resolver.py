"""Project URL resolution for dependencies.

Given a dependency's coordinates, the resolver fetches its POM through an
injected metadata client and picks the URL a reviewer would want to open:
the declared SCM URL when it is browsable, otherwise the homepage.

Resolution is best-effort. Whatever goes wrong in the metadata client
(network failure, missing artifact, malformed POM) is logged at debug
level and the dependency simply has no URL. Nothing is raised to callers.
"""

from __future__ import annotations

import asyncio

from release_metadata.logging_config import get_logger
from release_metadata.metadata.maven import MetadataClientProtocol
from release_metadata.schemas import (
    ArtifactUrlMapping,
    Dependency,
    ProjectDescriptor,
    ResolutionRequest,
)

logger = get_logger(__name__)


def to_resolution_request(dependency: Dependency) -> ResolutionRequest:
    """Coordinates for fetching only the dependency's own POM."""
    return ResolutionRequest(
        group_id=dependency.group_id,
        module_name=dependency.cross_name,
        version=dependency.version,
        attributes=dependency.attributes,
        transitive=False,
        artifact_types=("pom",),
    )


def select_project_url(project: ProjectDescriptor) -> str | None:
    """Pick the SCM URL if it is browsable, else the homepage.

    SSH addresses such as "git@github.com:org/repo.git" cannot be opened in
    a browser and are skipped.
    """
    scm_url = project.scm.url if project.scm else None
    if scm_url and not scm_url.startswith("git@"):
        return scm_url
    if project.homepage:
        return project.homepage
    return None


class ArtifactResolver:
    """Resolves project URLs for dependencies.

    Usage:
        resolver = ArtifactResolver(client=MavenMetadataClient())
        url = await resolver.resolve_url(dependency)
        mapping = await resolver.resolve_urls(dependencies)
    """

    def __init__(self, client: MetadataClientProtocol) -> None:
        """Initialize the resolver.

        Args:
            client: Package-metadata service used to fetch POMs. Rate
                    limiting and caching are its concern.
        """
        self.client = client

    async def resolve_url(self, dependency: Dependency) -> str | None:
        """Resolve the project URL of a single dependency.

        Args:
            dependency: The dependency to look up

        Returns:
            The SCM URL or homepage, or None if neither is available or
            the POM could not be fetched
        """
        request = to_resolution_request(dependency)
        try:
            project = await self.client.fetch_project(request)
        except Exception as e:
            logger.debug(
                "pom_fetch_failed",
                dependency=f"{request.group_id}:{request.module_name}:{request.version}",
                error=str(e),
                exc_info=True,
            )
            return None
        return select_project_url(project)

    async def resolve_urls(self, dependencies: list[Dependency]) -> ArtifactUrlMapping:
        """Resolve a batch of dependencies concurrently.

        Dependencies without a URL are left out of the mapping. When two
        dependencies share an artifact id, the one later in the input wins.

        Args:
            dependencies: Dependencies to resolve

        Returns:
            Mapping of artifact id to project URL
        """
        urls = await asyncio.gather(*(self.resolve_url(dep) for dep in dependencies))

        mapping: ArtifactUrlMapping = {}
        for dep, url in zip(dependencies, urls):
            if url is not None:
                mapping[dep.artifact_id] = url

        logger.debug(
            "artifact_urls_resolved",
            requested=len(dependencies),
            resolved=len(mapping),
        )
        return mapping
