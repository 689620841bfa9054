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

"""ECR Public enumeration: repositories, tags, and login password."""

from __future__ import annotations

import sh

from image_mirror.errors import EnumerationError, MirrorError
from image_mirror.utils import run_aws


class EcrPublicRegistry:
    """Read-only view of the repositories published in one ECR Public registry.

    Attributes:
        region: Region passed to every ``aws ecr-public`` call.
    """

    def __init__(self, region: str) -> None:
        self.region = region

    def list_repositories(self) -> list[str]:
        """Return every repository name in the registry.

        Raises:
            EnumerationError: If the listing call fails or returns an unexpected document.
        """
        doc = run_aws(["ecr-public", "describe-repositories", "--region", self.region])
        try:
            return [repo["repositoryName"] for repo in doc.get("repositories", [])]
        except (KeyError, TypeError) as err:
            raise EnumerationError(f"Unexpected describe-repositories output: {err}") from err

    def list_tags(self, repository: str) -> list[str]:
        """Return every tag currently published for *repository*.

        Untagged image entries are skipped.

        Raises:
            EnumerationError: If the listing call fails or returns an unexpected document.
        """
        doc = run_aws([
            "ecr-public", "describe-image-tags",
            "--repository-name", repository,
            "--region", self.region,
        ])
        try:
            return [detail["imageTag"] for detail in doc.get("imageTagDetails", []) if detail.get("imageTag")]
        except (KeyError, TypeError, AttributeError) as err:
            raise EnumerationError(f"Unexpected describe-image-tags output for {repository}: {err}") from err

    def login_password(self) -> str:
        """Return a Docker login password for ECR Public.

        Raises:
            MirrorError: If the aws CLI cannot issue a password.
        """
        try:
            return str(sh.aws("ecr-public", "get-login-password", "--region", self.region)).strip()
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace").strip()
            raise MirrorError(f"aws ecr-public get-login-password failed: {stderr}") from err
        except sh.CommandNotFound as err:
            raise MirrorError("aws CLI is not installed") from err
