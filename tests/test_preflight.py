"""Tests for startup checks."""

from __future__ import annotations

import json
from pathlib import Path

import docker
import pytest

from image_mirror import preflight
from image_mirror.config import MirrorConfig
from image_mirror.errors import MirrorError, PreconditionError
from image_mirror.preflight import (
    check_prerequisites,
    connect_docker,
    docker_config_path,
    login_source,
    require_registry_login,
)


def _write_config(path: Path, doc: dict) -> Path:
    path.write_text(json.dumps(doc))
    return path


def test_docker_config_path_honours_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DOCKER_CONFIG", str(tmp_path))

    assert docker_config_path() == tmp_path / "config.json"
    assert docker_config_path(Path("/x/config.json")) == Path("/x/config.json")


def test_docker_config_path_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DOCKER_CONFIG", raising=False)

    assert docker_config_path() == Path.home() / ".docker" / "config.json"


def test_login_found_in_auths_or_cred_helpers(tmp_path: Path) -> None:
    config = _write_config(tmp_path / "config.json", {
        "auths": {"https://quay.io": {"auth": "eA=="}},
        "credHelpers": {"harbor.vessl.ai": "pass"},
    })

    require_registry_login("quay.io", config)
    require_registry_login("harbor.vessl.ai", config)


def test_missing_login_raises(tmp_path: Path) -> None:
    config = _write_config(tmp_path / "config.json", {"auths": {"quay.io": {}}})

    with pytest.raises(PreconditionError, match="harbor.vessl.ai"):
        require_registry_login("harbor.vessl.ai", config)


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(PreconditionError, match="not found"):
        require_registry_login("quay.io", tmp_path / "absent.json")


def test_check_prerequisites_checks_each_host_once(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    commands, hosts = [], []
    monkeypatch.setattr(preflight, "require_command", commands.append)
    monkeypatch.setattr(preflight, "require_registry_login", lambda host, path: hosts.append((host, path)))
    cfg = MirrorConfig(
        destinations=["quay.io/a", "quay.io/b", "harbor.vessl.ai/public"],
        docker_config=tmp_path / "config.json",
    )

    check_prerequisites(cfg)

    assert commands == ["aws"]
    assert hosts == [("harbor.vessl.ai", tmp_path / "config.json"), ("quay.io", tmp_path / "config.json")]


def test_check_prerequisites_without_aws(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    commands = []
    monkeypatch.setattr(preflight, "require_command", commands.append)
    monkeypatch.setattr(preflight, "require_registry_login", lambda host, path: None)

    check_prerequisites(MirrorConfig(docker_config=tmp_path / "c.json"), need_aws=False)

    assert commands == []


class _FakeClient:
    def __init__(self, healthy: bool) -> None:
        self.healthy = healthy
        self.closed = False
        self.logins = []

    def ping(self) -> bool:
        if not self.healthy:
            raise docker.errors.APIError("daemon starting")
        return True

    def close(self) -> None:
        self.closed = True

    def login(self, username, password, registry):
        self.logins.append((username, password, registry))


def test_connect_docker_polls_until_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    clients = [_FakeClient(False), _FakeClient(True)]
    attempts = iter(clients)
    monkeypatch.setattr(preflight, "DOCKER_READY_POLL_INTERVAL_SECONDS", 0)
    monkeypatch.setattr(preflight.docker, "from_env", lambda: next(attempts))

    client = connect_docker(3)

    assert client is clients[1]
    assert clients[0].closed


def test_connect_docker_gives_up(monkeypatch: pytest.MonkeyPatch) -> None:
    def unreachable():
        raise docker.errors.DockerException("Error while fetching server API version")

    monkeypatch.setattr(preflight, "DOCKER_READY_POLL_INTERVAL_SECONDS", 0)
    monkeypatch.setattr(preflight.docker, "from_env", unreachable)

    with pytest.raises(PreconditionError, match="not reachable"):
        connect_docker(2)


def test_login_source_uses_aws_password() -> None:
    class Registry:
        def login_password(self) -> str:
            return "pw"

    client = _FakeClient(True)

    login_source(client, Registry())

    assert client.logins == [("AWS", "pw", "public.ecr.aws")]


def test_login_source_failure_is_precondition_error() -> None:
    class Registry:
        def login_password(self) -> str:
            raise MirrorError("Unable to locate credentials")

    with pytest.raises(PreconditionError, match="ECR Public"):
        login_source(_FakeClient(True), Registry())
