"""Shared fakes for the Docker client, the enumerator, and the failure log."""

from __future__ import annotations

import threading
from pathlib import Path

import docker
import pytest
import requests

from image_mirror.errors import EnumerationError
from image_mirror.failures import FailureLog
from image_mirror.mirror import TagMirror

DESTINATIONS = ["quay.io/vessl-ai", "harbor.vessl.ai/public"]
SOURCE = "public.ecr.aws/vessl"


class FakeImage:
    """Stand-in for ``docker.models.images.Image``."""

    def __init__(self, images: FakeImages, ref: str) -> None:
        self._images = images
        self.ref = ref

    def tag(self, repository: str, tag: str | None = None) -> bool:
        ref = f"{repository}:{tag}"
        if ref in self._images.fail_tag:
            raise docker.errors.APIError(f"cannot tag {ref}")
        with self._images.lock:
            self._images.local.add(ref)
            self._images.tagged.append(ref)
        return True


class FakeImages:
    """In-memory image store recording every call the worker makes."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.local: set[str] = set()
        self.pulled: list[str] = []
        self.tagged: list[str] = []
        self.pushed: list[str] = []
        self.removed: list[str] = []
        self.platforms: list[str | None] = []
        self.fail_pull: set[str] = set()
        self.fail_push: set[str] = set()
        self.raise_push: set[str] = set()
        self.fail_tag: set[str] = set()
        self.fail_remove: set[str] = set()
        self.drop_pull: set[str] = set()
        self.drop_push: set[str] = set()

    def pull(self, repository: str, tag: str | None = None, **kwargs) -> FakeImage:
        ref = f"{repository}:{tag}"
        with self.lock:
            self.platforms.append(kwargs.get("platform"))
        if ref in self.fail_pull:
            raise docker.errors.NotFound(f"manifest for {ref} not found")
        if ref in self.drop_pull:
            raise requests.exceptions.ReadTimeout(f"read timed out pulling {ref}")
        with self.lock:
            self.pulled.append(ref)
            self.local.add(ref)
        return FakeImage(self, ref)

    def get(self, name: str) -> FakeImage:
        if name not in self.local:
            raise docker.errors.ImageNotFound(name)
        return FakeImage(self, name)

    def push(self, repository: str, tag: str | None = None, stream: bool = False, decode: bool = False):
        ref = f"{repository}:{tag}"
        if ref in self.raise_push:
            raise docker.errors.APIError(f"connection reset pushing {ref}")
        with self.lock:
            self.pushed.append(ref)
        if ref in self.fail_push:
            return iter([{"status": "Preparing"}, {"errorDetail": {"message": "denied"}, "error": "denied"}])
        if ref in self.drop_push:
            return _dropped_stream(ref)
        return iter([{"status": "Pushed"}, {"status": f"{tag}: digest: sha256:abc size: 1"}])

    def remove(self, image: str, force: bool = False, noprune: bool = False) -> None:
        with self.lock:
            self.removed.append(image)
            if image in self.fail_remove:
                raise docker.errors.APIError(f"conflict removing {image}")
            if image not in self.local:
                raise docker.errors.ImageNotFound(image)
            self.local.discard(image)


def _dropped_stream(ref: str):
    """Push stream that breaks off after the first progress chunk."""
    yield {"status": "Preparing"}
    raise requests.exceptions.ConnectionError(f"connection reset by peer pushing {ref}")


class FakeDockerClient:
    """Stand-in for ``docker.DockerClient`` exposing only ``images``."""

    def __init__(self) -> None:
        self.images = FakeImages()
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeRegistry:
    """Enumerator serving repositories and tags from a dict."""

    def __init__(self, repos: dict[str, list[str]], broken: set[str] | None = None) -> None:
        self.repos = repos
        self.broken = broken or set()
        self.tag_calls: list[str] = []

    def list_repositories(self) -> list[str]:
        return list(self.repos)

    def list_tags(self, repository: str) -> list[str]:
        self.tag_calls.append(repository)
        if repository in self.broken:
            raise EnumerationError(f"AccessDenied listing {repository}")
        return list(self.repos[repository])


@pytest.fixture
def docker_client() -> FakeDockerClient:
    return FakeDockerClient()


@pytest.fixture
def failure_log(tmp_path: Path) -> FailureLog:
    return FailureLog(tmp_path / "failed.log")


@pytest.fixture
def worker(docker_client: FakeDockerClient, failure_log: FailureLog) -> TagMirror:
    return TagMirror(docker_client, DESTINATIONS, failure_log, "linux/amd64")


def read_records(log: FailureLog) -> list[str]:
    """Return the lines of the failure log, or an empty list if nothing was written."""
    if not log.path.exists():
        return []
    return log.path.read_text().splitlines()
