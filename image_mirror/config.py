# /*
# Copyright 2026 The Image Mirror Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Configuration model and config display."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from image_mirror import console
from image_mirror.constants import (
    AWS_REGION_PATTERN,
    DEFAULT_AWS_REGION,
    DEFAULT_DESTINATIONS,
    DEFAULT_DOCKER_READY_RETRIES,
    DEFAULT_FAILURE_LOG,
    DEFAULT_PLATFORM,
    DEFAULT_REPOSITORY_MAX_WORKERS,
    DEFAULT_SOURCE_REGISTRY,
    DEFAULT_TAG_MAX_WORKERS,
    MAX_WORKERS_LIMIT,
)


# ============================================================================
# Configuration classes
# ============================================================================

class MirrorConfig(BaseSettings):
    """Mirroring configuration, auto-loaded from MIRROR_* env vars.

    Attributes:
        source_registry: ECR Public registry prefix images are pulled from.
        aws_region: Region passed to ``aws ecr-public`` calls.
        destinations: Registry prefixes every image is pushed to.
        platform: Platform requested when pulling.
        failure_log: Append-only file receiving one line per failure.
        sequential: Mirror the tags of one repository one at a time.
        max_repository_workers: Repositories mirrored at the same time.
        max_tag_workers: Tags of one repository mirrored at the same time.
        docker_config: Docker CLI config.json, or None for the default location.
        docker_ready_retries: Attempts to reach the Docker daemon at startup.
    """

    model_config = SettingsConfigDict(env_prefix="MIRROR_", extra="ignore")

    source_registry: str = Field(default=DEFAULT_SOURCE_REGISTRY, min_length=1)
    aws_region: str = Field(default=DEFAULT_AWS_REGION, pattern=AWS_REGION_PATTERN)
    destinations: list[str] = Field(default_factory=lambda: list(DEFAULT_DESTINATIONS), min_length=1)
    platform: str = Field(default=DEFAULT_PLATFORM, min_length=1)
    failure_log: Path = Path(DEFAULT_FAILURE_LOG)
    sequential: bool = False
    max_repository_workers: int = Field(default=DEFAULT_REPOSITORY_MAX_WORKERS, ge=1, le=MAX_WORKERS_LIMIT)
    max_tag_workers: int = Field(default=DEFAULT_TAG_MAX_WORKERS, ge=1, le=MAX_WORKERS_LIMIT)
    docker_config: Path | None = None
    docker_ready_retries: int = Field(default=DEFAULT_DOCKER_READY_RETRIES, ge=1, le=60)

    @field_validator("source_registry")
    @classmethod
    def _strip_registry(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("destinations")
    @classmethod
    def _strip_destinations(cls, value: list[str]) -> list[str]:
        stripped = [dest.strip().rstrip("/") for dest in value if dest.strip()]
        if not stripped:
            raise ValueError("at least one destination registry is required")
        return stripped


def resolve_config(
    destinations: list[str] | None = None,
    failure_log: Path | None = None,
    sequential: bool | None = None,
    repo_workers: int | None = None,
    tag_workers: int | None = None,
    platform: str | None = None,
) -> MirrorConfig:
    """Merge CLI overrides, environment variables, and defaults into a config.

    Resolution priority: CLI arguments > MIRROR_* environment variables > registries.yaml.

    Args:
        destinations: CLI override for destination registries, or None.
        failure_log: CLI override for the failure log path, or None.
        sequential: CLI override for sequential tag mirroring, or None.
        repo_workers: CLI override for repository pool size, or None.
        tag_workers: CLI override for tag pool size, or None.
        platform: CLI override for the pull platform, or None.

    Returns:
        Validated mirroring configuration.
    """
    overrides: dict = {
        "destinations": destinations or None,
        "failure_log": failure_log,
        "sequential": sequential,
        "max_repository_workers": repo_workers,
        "max_tag_workers": tag_workers,
        "platform": platform,
    }
    return MirrorConfig(**{key: value for key, value in overrides.items() if value is not None})


# ============================================================================
# Display
# ============================================================================

def display_config(cfg: MirrorConfig) -> None:
    """Print the resolved configuration.

    Args:
        cfg: Resolved mirroring configuration.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print(f"  source_registry : {cfg.source_registry} ({cfg.aws_region})")
    console.print(f"  destinations    : {', '.join(cfg.destinations)}")
    console.print(f"  platform        : {cfg.platform}")
    console.print(f"  failure_log     : {cfg.failure_log}")
    console.print(f"  workers         : {cfg.max_repository_workers} repositories x "
                  f"{'1 (sequential)' if cfg.sequential else cfg.max_tag_workers} tags")
