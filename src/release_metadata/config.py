"""Configuration for the resolver, the metadata client and the VCS builder.

Settings come from an optional YAML file, with a few environment variables
layered on top:

    vcs:
      type: gitlab
      site_uri: https://gitlab.example.com
    metadata:
      repositories:
        - https://repo1.maven.org/maven2
        - https://oss.sonatype.org/content/repositories/releases
      max_concurrency: 4
    log_level: DEBUG

Environment overrides:
    RELEASE_METADATA_CONFIG  path of the YAML file
    VCS_TYPE, VCS_SITE_URI   provider and its web site
    ENVIRONMENT, LOG_LEVEL   logging setup
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from release_metadata.metadata.maven import MAVEN_CENTRAL, MavenMetadataClient
from release_metadata.schemas import VcsType
from release_metadata.vcs import VcsUrlBuilder

DEFAULT_CONFIG_PATH = "release-metadata.yaml"


class VcsConfig(BaseModel):
    """The VCS provider pull requests are opened on.

    Attributes:
        type: Provider flavor
        site_uri: Web site of the provider; repositories on this host are
                  assumed to be hosted by it
    """

    type: VcsType = VcsType.GITHUB
    site_uri: str = "https://github.com"

    def builder(self) -> VcsUrlBuilder:
        return VcsUrlBuilder(self.type, self.site_uri)


class MetadataConfig(BaseModel):
    """Settings for the Maven metadata client."""

    repositories: list[str] = Field(default_factory=lambda: [MAVEN_CENTRAL], min_length=1)
    timeout: float = Field(30.0, gt=0)
    max_concurrency: int = Field(8, ge=1)
    max_attempts: int = Field(3, ge=1)
    backoff: float = Field(0.5, ge=0)

    def client(self) -> MavenMetadataClient:
        return MavenMetadataClient(
            self.repositories,
            timeout=self.timeout,
            max_concurrency=self.max_concurrency,
            max_attempts=self.max_attempts,
            backoff=self.backoff,
        )


class Settings(BaseModel):
    """Top-level configuration."""

    vcs: VcsConfig = Field(default_factory=VcsConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    environment: str = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML and apply environment overrides.

    Args:
        path: YAML file to read. Falls back to RELEASE_METADATA_CONFIG, then
              to ./release-metadata.yaml.

    Returns:
        Validated settings. A missing file yields the defaults.

    Raises:
        ValueError: If the YAML is invalid or fails validation.
    """
    config_path = Path(path or os.environ.get("RELEASE_METADATA_CONFIG", DEFAULT_CONFIG_PATH))

    raw: dict = {}
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {config_path}: expected a mapping")

    vcs = dict(raw.get("vcs") or {})
    if "VCS_TYPE" in os.environ:
        vcs["type"] = os.environ["VCS_TYPE"]
    if "VCS_SITE_URI" in os.environ:
        vcs["site_uri"] = os.environ["VCS_SITE_URI"]
    raw["vcs"] = vcs
    for key, env_var in (("environment", "ENVIRONMENT"), ("log_level", "LOG_LEVEL")):
        if env_var in os.environ:
            raw[key] = os.environ[env_var]

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid config in {config_path}: {exc}") from exc
