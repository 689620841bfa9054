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

"""Startup checks: required tools, Docker daemon, and registry logins."""

from __future__ import annotations

import json
import os
from pathlib import Path

import docker
from rich.panel import Panel
from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from image_mirror import console, logger
from image_mirror.config import MirrorConfig
from image_mirror.constants import (
    DOCKER_CONFIG_ENV,
    DOCKER_CONFIG_FILENAME,
    DOCKER_READY_POLL_INTERVAL_SECONDS,
    ECR_PUBLIC_LOGIN_HOST,
    ECR_PUBLIC_LOGIN_USERNAME,
    REQUIRED_COMMANDS,
)
from image_mirror.errors import MirrorError, PreconditionError
from image_mirror.registry import EcrPublicRegistry
from image_mirror.utils import login_host, require_command


def docker_config_path(override: Path | None = None) -> Path:
    """Locate the Docker CLI config.json, honouring ``DOCKER_CONFIG``.

    Args:
        override: Explicit path, or None for the Docker CLI default.

    Returns:
        Path to config.json (it may not exist).
    """
    if override is not None:
        return override
    config_dir = os.environ.get(DOCKER_CONFIG_ENV)
    if config_dir:
        return Path(config_dir) / DOCKER_CONFIG_FILENAME
    return Path.home() / ".docker" / DOCKER_CONFIG_FILENAME


def require_registry_login(host: str, config_path: Path) -> None:
    """Check that the Docker CLI holds credentials for *host*.

    A host counts as logged in when it appears under ``auths`` or
    ``credHelpers`` in config.json, with or without an ``https://`` scheme.

    Args:
        host: Registry host (e.g. ``quay.io``).
        config_path: Docker CLI config.json.

    Raises:
        PreconditionError: If the config is unreadable or has no entry for *host*.
    """
    try:
        with open(config_path) as f:
            config = json.load(f)
    except FileNotFoundError as err:
        raise PreconditionError(f"Please log in to {host} first ({config_path} not found). Aborting.") from err
    except (OSError, json.JSONDecodeError) as err:
        raise PreconditionError(f"Cannot read Docker config {config_path}: {err}") from err

    known: set[str] = set()
    for section in ("auths", "credHelpers"):
        for key in config.get(section) or {}:
            known.add(key.removeprefix("https://").removeprefix("http://").rstrip("/"))
    if host not in known:
        raise PreconditionError(f"Please log in to {host} first. Aborting.")


def connect_docker(retries: int) -> docker.DockerClient:
    """Connect to the Docker daemon, polling until it answers.

    Args:
        retries: Maximum connection attempts.

    Returns:
        Connected Docker client.

    Raises:
        PreconditionError: If the daemon never answers.
    """
    @retry(
        stop=stop_after_attempt(retries),
        wait=wait_fixed(DOCKER_READY_POLL_INTERVAL_SECONDS),
        retry=retry_if_exception_type(docker.errors.DockerException),
    )
    def _attempt() -> docker.DockerClient:
        client = docker.from_env()
        try:
            client.ping()
        except docker.errors.DockerException:
            client.close()
            raise
        return client

    try:
        return _attempt()
    except RetryError as err:
        cause = err.last_attempt.exception()
        raise PreconditionError(f"Docker daemon is not reachable: {cause}") from err


def login_source(client: docker.DockerClient, registry: EcrPublicRegistry) -> None:
    """Log the Docker client into ECR Public with a password from the aws CLI.

    Raises:
        PreconditionError: If the password cannot be issued or the login is rejected.
    """
    console.print("[white]ℹ️  Logging in to AWS ECR Public...[/white]")
    try:
        password = registry.login_password()
        client.login(username=ECR_PUBLIC_LOGIN_USERNAME, password=password, registry=ECR_PUBLIC_LOGIN_HOST)
    except (MirrorError, docker.errors.APIError) as err:
        raise PreconditionError(f"Failed to log in to AWS ECR Public: {err}. Aborting.") from err
    console.print("[green]✅ Logged in to AWS ECR Public[/green]")


def check_prerequisites(cfg: MirrorConfig, *, need_aws: bool = True) -> None:
    """Check CLI tools and destination registry logins.

    Args:
        cfg: Mirroring configuration with destinations and Docker config path.
        need_aws: Whether the aws CLI is required (not for image-list runs).

    Raises:
        PreconditionError: If any check fails.
    """
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    if need_aws:
        for cmd in REQUIRED_COMMANDS:
            require_command(cmd)
        console.print("[green]✅ All required tools are available[/green]")

    config_path = docker_config_path(cfg.docker_config)
    hosts = sorted({login_host(dest) for dest in cfg.destinations})
    logger.debug("checking logins for %s in %s", hosts, config_path)
    for host in hosts:
        require_registry_login(host, config_path)
    console.print(f"[green]✅ Logged in to {', '.join(hosts)}[/green]")
