"""Tests for image reference parsing and image lists."""

from __future__ import annotations

from pathlib import Path

import pytest

from image_mirror.models import ImageRef
from image_mirror.utils import login_host, parse_image_ref, read_image_list


@pytest.mark.parametrize("image, expected", [
    ("nvcr.io/nvidia/k8s-device-plugin:v0.14.1", ImageRef("nvcr.io/nvidia", "k8s-device-plugin", "v0.14.1")),
    ("docker.io/library/nginx", ImageRef("docker.io/library", "nginx", "latest")),
    ("localhost:5000/app:dev", ImageRef("localhost:5000", "app", "dev")),
])
def test_parse_image_ref(image: str, expected: ImageRef) -> None:
    assert parse_image_ref(image) == expected


@pytest.mark.parametrize("image", ["nginx:latest", "quay.io/app@sha256:abc", "quay.io/:v1"])
def test_parse_image_ref_rejects(image: str) -> None:
    with pytest.raises(ValueError):
        parse_image_ref(image)


def test_read_image_list_skips_comments(tmp_path: Path) -> None:
    path = tmp_path / "image-list.txt"
    path.write_text("# gpu\nnvcr.io/nvidia/k8s-device-plugin:v0.14.1\n\n  docker.io/library/nginx:1.25  \n")

    refs = read_image_list(path)

    assert [str(ref) for ref in refs] == [
        "nvcr.io/nvidia/k8s-device-plugin:v0.14.1",
        "docker.io/library/nginx:1.25",
    ]


def test_login_host() -> None:
    assert login_host("harbor.vessl.ai/public") == "harbor.vessl.ai"
    assert login_host("quay.io") == "quay.io"


def test_read_image_list_drops_repeated_lines(tmp_path: Path) -> None:
    path = tmp_path / "image-list.txt"
    path.write_text("quay.io/a/app:1\ndocker.io/library/nginx:1.25\nquay.io/a/app:1\n")

    refs = read_image_list(path)

    assert [str(ref) for ref in refs] == ["quay.io/a/app:1", "docker.io/library/nginx:1.25"]
