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

"""Image references and per-job results."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImageRef:
    """One pullable image: registry prefix, repository name, and tag.

    Attributes:
        registry: Registry host plus optional namespace (e.g. ``quay.io/vessl-ai``).
        repository: Repository name within the registry namespace.
        tag: Image tag.
    """

    registry: str
    repository: str
    tag: str

    @property
    def name(self) -> str:
        """Reference without the tag, as the Docker API expects for push and tag."""
        return f"{self.registry}/{self.repository}"

    def retarget(self, registry: str) -> ImageRef:
        """Return the same repository and tag under another registry prefix."""
        return ImageRef(registry=registry.rstrip("/"), repository=self.repository, tag=self.tag)

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}"


@dataclass(frozen=True)
class JobResult:
    """Outcome of mirroring one image reference.

    Attributes:
        source: Reference that was pulled.
        pulled: Whether the pull succeeded.
        pushed: Destination references that were pushed.
        failed: Destination references whose push failed.
    """

    source: ImageRef
    pulled: bool
    pushed: tuple[ImageRef, ...] = ()
    failed: tuple[ImageRef, ...] = ()

    @property
    def ok(self) -> bool:
        return self.pulled and not self.failed


@dataclass
class MirrorSummary:
    """Aggregated outcome of a mirroring run."""

    results: list[JobResult] = field(default_factory=list)
    failure_records: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def extend(self, results: list[JobResult]) -> None:
        self.results.extend(results)
