"""Errors raised by package-metadata clients.

The resolver never lets these reach its callers; they end up in the debug
log and the dependency is treated as having no project URL.
"""

from __future__ import annotations


class MetadataError(Exception):
    """Base class for failures fetching or reading a project descriptor."""


class ArtifactNotFoundError(MetadataError):
    """Raised when no configured repository has the requested POM."""

    def __init__(self, coordinates: str, message: str | None = None) -> None:
        self.coordinates = coordinates
        if message is None:
            message = f"POM not found: {coordinates}"
        super().__init__(message)


class PomParseError(MetadataError):
    """Raised when a POM is not well-formed XML."""


class MetadataServiceError(MetadataError):
    """Raised when a repository answers with an unexpected status."""

    def __init__(self, url: str, status_code: int) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"Unexpected status {status_code} for {url}")


class TransientMetadataError(MetadataServiceError):
    """A 5xx or 429 answer that is worth retrying."""
