"""Tests for the HTTP API.

The TestClient is used without entering the lifespan, so the components
on app.state are set up here with a mock metadata client.

Run with: pytest tests/test_api.py -v
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from release_metadata.main import app
from release_metadata.metadata.maven import MockMetadataClient
from release_metadata.resolver import ArtifactResolver
from release_metadata.schemas import ProjectDescriptor, ScmInfo, VcsType
from release_metadata.vcs import VcsUrlBuilder

client = TestClient(app)

UPDATE = {"current_version": "1.0.0", "next_version": "1.1.0"}


@pytest.fixture(autouse=True)
def components() -> None:
    app.state.resolver = ArtifactResolver(client=MockMetadataClient(projects={
        ("org.typelevel", "cats-core_2.13", "2.9.0"): ProjectDescriptor(
            homepage="https://typelevel.org/cats",
            scm=ScmInfo(url="https://github.com/typelevel/cats"),
        ),
    }))
    app.state.vcs = VcsUrlBuilder(VcsType.GITHUB, "https://github.com")


def test_health_check() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_artifact_url() -> None:
    response = client.post("/artifacts/url", json={
        "group_id": "org.typelevel",
        "artifact_id": "cats-core",
        "artifact_id_cross": "cats-core_2.13",
        "version": "2.9.0",
    })
    assert response.status_code == 200
    assert response.json() == {
        "artifact_id": "cats-core",
        "url": "https://github.com/typelevel/cats",
    }


def test_artifact_url_unknown_is_null() -> None:
    response = client.post("/artifacts/url", json={
        "group_id": "g", "artifact_id": "a", "version": "1",
    })
    assert response.status_code == 200
    assert response.json()["url"] is None


def test_artifact_urls_omits_unresolved() -> None:
    response = client.post("/artifacts/urls", json=[
        {"group_id": "org.typelevel", "artifact_id": "cats-core",
         "artifact_id_cross": "cats-core_2.13", "version": "2.9.0"},
        {"group_id": "g", "artifact_id": "a", "version": "1"},
    ])
    assert response.status_code == 200
    assert response.json() == {"cats-core": "https://github.com/typelevel/cats"}


def test_artifact_urls_uses_resolver() -> None:
    with patch.object(app.state, "resolver") as mock_resolver:
        mock_resolver.resolve_urls = AsyncMock(return_value={"x": "https://x.example.com"})
        response = client.post("/artifacts/urls", json=[])
    assert response.json() == {"x": "https://x.example.com"}


def test_invalid_dependency() -> None:
    response = client.post("/artifacts/url", json={"bad": "data"})
    assert response.status_code == 422


def test_branch_refs() -> None:
    response = client.post("/vcs/branch-refs", json={
        "fork": {"owner": "me", "repo": "proj"},
        "branch": {"name": "update/foo"},
    })
    assert response.status_code == 200
    assert response.json() == {"head": "me/proj:update/foo", "create": "me:update/foo"}


def test_branch_refs_provider_override() -> None:
    response = client.post("/vcs/branch-refs", json={
        "fork": {"owner": "me", "repo": "proj"},
        "branch": {"name": "update/foo"},
        "vcs_type": "gitlab",
    })
    assert response.json() == {"head": "update/foo", "create": "update/foo"}


def test_compare_urls() -> None:
    response = client.post("/vcs/compare-urls", json={
        "repo_url": "https://github.com/o/p",
        "update": UPDATE,
    })
    assert response.status_code == 200
    body = response.json()
    assert len(body) == 3
    assert body[0] == {
        "kind": "version_diff",
        "url": "https://github.com/o/p/compare/v1.0.0...v1.1.0",
    }


def test_release_urls_order() -> None:
    response = client.post("/vcs/release-urls", json={
        "repo_url": "https://github.com/o/p",
        "update": UPDATE,
    })
    kinds = [item["kind"] for item in response.json()]
    assert kinds[0] == "github_release_notes"
    assert kinds.index("custom_release_notes") < kinds.index("custom_changelog")
    assert kinds[-1] == "version_diff"


def test_release_urls_self_hosted_override() -> None:
    response = client.post("/vcs/release-urls", json={
        "repo_url": "https://git.example.com/o/p",
        "update": UPDATE,
        "vcs_type": "gitlab",
        "vcs_uri": "https://git.example.com",
    })
    body = response.json()
    assert body[0]["url"] == "https://git.example.com/o/p/blob/master/ReleaseNotes.md"


def test_release_urls_unknown_host_is_empty() -> None:
    response = client.post("/vcs/release-urls", json={
        "repo_url": "https://code.example.org/o/p",
        "update": UPDATE,
    })
    assert response.status_code == 200
    assert response.json() == []
