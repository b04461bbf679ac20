"""Maven repository client for fetching project descriptors.

The resolver only needs an artifact's own POM: its <url> and its <scm>
section. This client fetches exactly that file, never the artifact's
dependency graph or binaries.

Design notes:
- Uses a single httpx.AsyncClient per instance; close it with aclose()
  or use the client as an async context manager
- An asyncio.Semaphore caps concurrent requests so a large batch does
  not trip the repository's rate limits
- Transient failures (transport errors, 5xx, 429) are retried with
  tenacity's exponential backoff
- Repositories are tried in order; a 404 falls through to the next one
- Parsed descriptors are cached in memory, keyed by POM URL. The cache
  belongs to this client and lives as long as it does

Layout docs: https://maven.apache.org/repository/layout.html
"""

from __future__ import annotations

import asyncio
import xml.etree.ElementTree as ET
from types import TracebackType
from typing import Protocol

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from release_metadata.errors import (
    ArtifactNotFoundError,
    MetadataServiceError,
    PomParseError,
    TransientMetadataError,
)
from release_metadata.logging_config import get_logger
from release_metadata.schemas import ProjectDescriptor, ResolutionRequest, ScmInfo

logger = get_logger(__name__)

MAVEN_CENTRAL = "https://repo1.maven.org/maven2"
USER_AGENT = "release-metadata/0.1"

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class MetadataClientProtocol(Protocol):
    """Protocol for package-metadata services.

    The resolver is coded against this protocol, so tests and other
    package ecosystems can plug in their own implementation.
    """

    async def fetch_project(self, request: ResolutionRequest) -> ProjectDescriptor:
        """Fetch the project descriptor for a set of coordinates.

        Args:
            request: Coordinates plus resolution options

        Returns:
            The parsed project descriptor

        Raises:
            MetadataError: If the descriptor cannot be fetched or read
        """
        ...


# ---------------------------------------------------------------------------
# POM Layout and Parsing
# ---------------------------------------------------------------------------


def module_dir_name(request: ResolutionRequest) -> str:
    """Directory name of a module in a Maven layout.

    sbt plugins published to Maven repositories carry their Scala and sbt
    binary versions in the name, e.g. "sbt-scalafmt_2.12_1.0".
    """
    scala_version = request.attributes.get("scalaVersion")
    sbt_version = request.attributes.get("sbtVersion")
    if scala_version and sbt_version:
        return f"{request.module_name}_{scala_version}_{sbt_version}"
    return request.module_name


def pom_path(request: ResolutionRequest) -> str:
    module = module_dir_name(request)
    group_path = request.group_id.replace(".", "/")
    return f"{group_path}/{module}/{request.version}/{module}-{request.version}.pom"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return None


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def parse_pom(text: str) -> ProjectDescriptor:
    """Extract the homepage and SCM section from a POM document.

    Only direct children of <project> are read, so URLs nested in
    <organization> or <licenses> are ignored. Namespaced and
    namespace-free POMs are both accepted.

    Raises:
        PomParseError: If the document is not well-formed XML
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise PomParseError(f"Malformed POM: {exc}") from exc

    scm_element = _child(root, "scm")
    scm = None
    if scm_element is not None:
        scm = ScmInfo(
            url=_child_text(scm_element, "url"),
            connection=_child_text(scm_element, "connection"),
            developer_connection=_child_text(scm_element, "developerConnection"),
        )

    return ProjectDescriptor(homepage=_child_text(root, "url") or "", scm=scm)


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class MavenMetadataClient:
    """Fetches POMs from Maven repositories over HTTP.

    Usage:
        async with MavenMetadataClient() as client:
            project = await client.fetch_project(request)
    """

    def __init__(
        self,
        repositories: list[str] | None = None,
        *,
        timeout: float = 30.0,
        max_concurrency: int = 8,
        max_attempts: int = 3,
        backoff: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            repositories: Repository base URLs, tried in order.
                          Defaults to Maven Central.
            timeout: Per-request timeout in seconds
            max_concurrency: Maximum number of requests in flight
            max_attempts: Attempts per POM before giving up on transient errors
            backoff: Multiplier for the exponential wait between attempts
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._repositories = [r.rstrip("/") for r in (repositories or [MAVEN_CENTRAL])]
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_attempts = max_attempts
        self._backoff = backoff
        self._cache: dict[str, ProjectDescriptor] = {}
        self._client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> MavenMetadataClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_project(self, request: ResolutionRequest) -> ProjectDescriptor:
        """Fetch and parse the POM for the requested coordinates.

        Raises:
            ArtifactNotFoundError: If every repository answers 404
            PomParseError: If the POM is not well-formed XML
            MetadataServiceError: On unexpected statuses, or transient
                                  failures that outlast the retries
            httpx.TransportError: On network failures that outlast the retries
        """
        path = pom_path(request)

        for repository in self._repositories:
            url = f"{repository}/{path}"
            if url in self._cache:
                logger.debug("pom_cache_hit", url=url)
                return self._cache[url]

            text = await self._fetch(url)
            if text is None:
                continue

            project = parse_pom(text)
            self._cache[url] = project
            logger.debug("pom_fetched", url=url)
            return project

        raise ArtifactNotFoundError(f"{request.group_id}:{request.module_name}:{request.version}")

    async def _fetch(self, url: str) -> str | None:
        """GET a POM with retries. Returns None on 404."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff, max=30),
            retry=retry_if_exception_type((httpx.TransportError, TransientMetadataError)),
            reraise=True,
        )
        return await retrying(self._get_once, url)

    async def _get_once(self, url: str) -> str | None:
        # Backoff sleeps happen outside the semaphore
        async with self._semaphore:
            resp = await self._client.get(url)
        if resp.status_code == 404:
            return None
        if resp.status_code == 429 or resp.status_code >= 500:
            raise TransientMetadataError(url, resp.status_code)
        if not resp.is_success:
            raise MetadataServiceError(url, resp.status_code)
        return resp.text


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockMetadataClient:
    """Mock metadata client that returns predefined descriptors.

    Usage:
        client = MockMetadataClient(projects={
            ("org.typelevel", "cats-core_2.13", "2.9.0"): ProjectDescriptor(...),
        })
    """

    def __init__(
        self,
        projects: dict[tuple[str, str, str], ProjectDescriptor] | None = None,
    ) -> None:
        self._projects = projects or {}
        self.requests: list[ResolutionRequest] = []

    async def fetch_project(self, request: ResolutionRequest) -> ProjectDescriptor:
        """Return the descriptor registered for the request's coordinates.

        Raises:
            ArtifactNotFoundError: If nothing is registered for them
        """
        self.requests.append(request)
        key = (request.group_id, request.module_name, request.version)
        if key not in self._projects:
            raise ArtifactNotFoundError(":".join(key))
        return self._projects[key]
