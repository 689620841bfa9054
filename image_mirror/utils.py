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

"""Utility functions for aws CLI calls, image reference parsing, and command checks."""

from __future__ import annotations

import json
from pathlib import Path

import sh

from image_mirror.errors import EnumerationError, PreconditionError
from image_mirror.models import ImageRef


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        PreconditionError: If the command is not found.
    """
    try:
        sh.which(cmd)
    except (sh.ErrorReturnCode, sh.CommandNotFound) as err:
        raise PreconditionError(f"Required command '{cmd}' not found. Please install it first.") from err


def run_aws(args: list[str]) -> dict:
    """Run an aws CLI command that prints JSON and return the parsed document.

    Args:
        args: aws arguments (e.g. ``["ecr-public", "describe-repositories"]``).

    Returns:
        Parsed JSON output.

    Raises:
        EnumerationError: If the command exits non-zero or prints invalid JSON.
    """
    try:
        output = sh.aws(*args, "--output", "json")
    except sh.ErrorReturnCode as err:
        stderr = err.stderr.decode(errors="replace").strip()
        raise EnumerationError(f"aws {' '.join(args)} failed: {stderr}") from err
    except sh.CommandNotFound as err:
        raise EnumerationError("aws CLI is not installed") from err
    try:
        return json.loads(str(output))
    except json.JSONDecodeError as err:
        raise EnumerationError(f"aws {' '.join(args)} printed invalid JSON: {err}") from err


def login_host(registry: str) -> str:
    """Return the host part of a registry prefix (``quay.io/vessl-ai`` -> ``quay.io``)."""
    return registry.split("/", 1)[0]


def parse_image_ref(image: str) -> ImageRef:
    """Split a fully qualified image reference into registry, repository, and tag.

    The repository is the last path component; everything before it is the
    registry prefix. A missing tag means ``latest``.

    Args:
        image: Reference such as ``nvcr.io/nvidia/k8s-device-plugin:v0.14.1``.

    Returns:
        Parsed image reference.

    Raises:
        ValueError: If the reference has no registry prefix or is pinned by digest.
    """
    if "@" in image:
        raise ValueError(f"Digest references are not supported: {image}")
    prefix, sep, last = image.rpartition("/")
    if not sep or not prefix or not last:
        raise ValueError(f"Image reference needs a registry prefix: {image}")
    repository, _, tag = last.partition(":")
    if not repository:
        raise ValueError(f"Image reference has no repository: {image}")
    return ImageRef(registry=prefix, repository=repository, tag=tag or "latest")


def read_image_list(path: Path) -> list[ImageRef]:
    """Read image references from a file, one per line.

    Blank lines and lines starting with ``#`` are skipped. Repeated references
    are kept once, at their first position.

    Args:
        path: Image list file.

    Returns:
        Parsed references in file order, without duplicates.
    """
    refs: list[ImageRef] = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        refs.append(parse_image_ref(line))
    return list(dict.fromkeys(refs))
