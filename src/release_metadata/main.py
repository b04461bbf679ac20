"""FastAPI application exposing the resolver and the URL builder.

Endpoints:
- GET /health - Health check for load balancers and monitoring
- POST /artifacts/url - Project URL of one dependency
- POST /artifacts/urls - Artifact id -> project URL mapping for a batch
- POST /vcs/branch-refs - Pull-request head refs for a fork branch
- POST /vcs/compare-urls - Candidate version-diff URLs for an update
- POST /vcs/release-urls - All candidate release-related URLs for an update

To run locally (uvicorn comes with the "serve" extra):
    uvicorn release_metadata.main:app --reload --port 8000
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from release_metadata import __version__
from release_metadata.config import load_settings
from release_metadata.logging_config import setup_logging
from release_metadata.resolver import ArtifactResolver
from release_metadata.schemas import (
    ArtifactUrlMapping,
    ArtifactUrlResponse,
    BranchRefsRequest,
    BranchRefsResponse,
    Dependency,
    ReleaseRelatedUrl,
    ReleaseUrlsRequest,
    VersionDiff,
)
from release_metadata.vcs import VcsUrlBuilder

# ---------------------------------------------------------------------------
# Application Lifespan (startup/shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the components once at startup and close the HTTP client on shutdown."""
    settings = load_settings()
    setup_logging(environment=settings.environment, log_level=settings.log_level)

    client = settings.metadata.client()
    app.state.resolver = ArtifactResolver(client=client)
    app.state.vcs = settings.vcs.builder()
    yield
    await client.aclose()


app = FastAPI(
    title="Release Metadata",
    description="Project URLs and release links for dependency updates",
    version=__version__,
    lifespan=lifespan,
)


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        response.headers["X-Process-Time"] = f"{duration:.2f}s"
        return response


app.add_middleware(TimingMiddleware)


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": str(exc)},
    )


def _builder(request: Request, override: BranchRefsRequest | ReleaseUrlsRequest) -> VcsUrlBuilder:
    """The configured builder, with per-request provider overrides applied."""
    configured: VcsUrlBuilder = request.app.state.vcs
    vcs_type = override.vcs_type or configured.vcs_type
    vcs_uri = getattr(override, "vcs_uri", None) or configured.vcs_uri
    return VcsUrlBuilder(vcs_type, vcs_uri)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@app.post("/artifacts/url", response_model=ArtifactUrlResponse)
async def artifact_url(dependency: Dependency, request: Request) -> ArtifactUrlResponse:
    """Resolve the project URL of one dependency; `url` is null if unknown."""
    resolver: ArtifactResolver = request.app.state.resolver
    url = await resolver.resolve_url(dependency)
    return ArtifactUrlResponse(artifact_id=dependency.artifact_id, url=url)


@app.post("/artifacts/urls")
async def artifact_urls(dependencies: list[Dependency], request: Request) -> ArtifactUrlMapping:
    """Resolve a batch; dependencies without a URL are omitted."""
    resolver: ArtifactResolver = request.app.state.resolver
    return await resolver.resolve_urls(dependencies)


@app.post("/vcs/branch-refs", response_model=BranchRefsResponse)
async def branch_refs(body: BranchRefsRequest, request: Request) -> BranchRefsResponse:
    builder = _builder(request, body)
    return BranchRefsResponse(
        head=builder.head_ref(body.fork, body.branch),
        create=builder.create_ref(body.fork, body.branch),
    )


@app.post("/vcs/compare-urls", response_model=list[VersionDiff])
async def compare_urls(body: ReleaseUrlsRequest, request: Request) -> list[VersionDiff]:
    return _builder(request, body).compare_urls(body.repo_url, body.update)


@app.post("/vcs/release-urls", response_model=list[ReleaseRelatedUrl])
async def release_urls(body: ReleaseUrlsRequest, request: Request) -> list[ReleaseRelatedUrl]:
    """Candidate release links in display order; empty for unknown hosts."""
    return _builder(request, body).release_related_urls(body.repo_url, body.update)
