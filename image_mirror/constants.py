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

"""Constants, bundled registry defaults, and the registry_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_registries() -> dict:
    """Load default source and destination registries from registries.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    registries_file = Path(__file__).resolve().parent / "registries.yaml"
    with open(registries_file) as f:
        return yaml.safe_load(f)


REGISTRIES = load_registries()


def registry_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the REGISTRIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = REGISTRIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Registry defaults --
DEFAULT_SOURCE_REGISTRY = registry_value("source", "registry", default="public.ecr.aws/vessl")
DEFAULT_AWS_REGION = registry_value("source", "region", default="us-east-1")
DEFAULT_PLATFORM = registry_value("source", "platform", default="linux/amd64")
DEFAULT_DESTINATIONS: list[str] = list(registry_value("destinations", default=[]))
DEFAULT_FAILURE_LOG = registry_value("failure_log", default="failed.log")

# -- Parallelism & limits --
DEFAULT_REPOSITORY_MAX_WORKERS = registry_value("workers", "repositories", default=4)
DEFAULT_TAG_MAX_WORKERS = registry_value("workers", "tags", default=4)
MAX_WORKERS_LIMIT = 64

# -- Docker daemon readiness --
DEFAULT_DOCKER_READY_RETRIES = 10
DOCKER_READY_POLL_INTERVAL_SECONDS = 3

# -- ECR Public --
ECR_PUBLIC_LOGIN_HOST = "public.ecr.aws"
ECR_PUBLIC_LOGIN_USERNAME = "AWS"
AWS_REGION_PATTERN = r"^[a-z]{2}(-[a-z]+)+-\d$"

# -- Docker CLI config --
DOCKER_CONFIG_ENV = "DOCKER_CONFIG"
DOCKER_CONFIG_FILENAME = "config.json"

# -- Failure record prefixes --
PULL_FAILED = "Pull failed"
PUSH_FAILED = "Push failed"
TAG_LISTING_FAILED = "Tag listing failed"

# -- Required CLI tools --
REQUIRED_COMMANDS = ("aws",)
