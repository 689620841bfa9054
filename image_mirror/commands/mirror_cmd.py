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

"""Mirror subcommands (all, repo, images)."""

from __future__ import annotations

from pathlib import Path

import typer

from image_mirror.config import display_config, resolve_config
from image_mirror.orchestrator import display_summary, run_mirror, run_mirror_images
from image_mirror.utils import read_image_list

app = typer.Typer(help="Mirror images to the destination registries.")

DestinationOption = typer.Option(
    None, "--destination", "-d", help="Destination registry prefix (repeatable, overrides MIRROR_DESTINATIONS)")
FailureLogOption = typer.Option(None, "--failure-log", help="Append-only failure log (default: failed.log)")
PlatformOption = typer.Option(None, "--platform", help="Platform to pull (default: linux/amd64)")


@app.command("all")
def mirror_all(
    sequential: bool = typer.Option(
        False, "--sequential", help="Mirror the tags of each repository one at a time"),
    destination: list[str] | None = DestinationOption,
    failure_log: Path | None = FailureLogOption,
    platform: str | None = PlatformOption,
    repo_workers: int | None = typer.Option(
        None, "--repo-workers", help="Repositories mirrored at the same time"),
    tag_workers: int | None = typer.Option(
        None, "--tag-workers", help="Tags per repository mirrored at the same time"),
) -> None:
    """Mirror every tag of every repository in the source registry."""
    cfg = resolve_config(
        destinations=destination,
        failure_log=failure_log,
        sequential=sequential or None,
        repo_workers=repo_workers,
        tag_workers=tag_workers,
        platform=platform,
    )
    display_config(cfg)
    display_summary(run_mirror(cfg), cfg)


@app.command("repo")
def mirror_repo(
    names: list[str] = typer.Argument(..., help="Repository names in the source registry"),
    sequential: bool = typer.Option(
        False, "--sequential", help="Mirror the tags of each repository one at a time"),
    destination: list[str] | None = DestinationOption,
    failure_log: Path | None = FailureLogOption,
    platform: str | None = PlatformOption,
    tag_workers: int | None = typer.Option(
        None, "--tag-workers", help="Tags per repository mirrored at the same time"),
) -> None:
    """Mirror every tag of the named repositories."""
    cfg = resolve_config(
        destinations=destination,
        failure_log=failure_log,
        sequential=sequential or None,
        tag_workers=tag_workers,
        platform=platform,
    )
    display_config(cfg)
    display_summary(run_mirror(cfg, repositories=list(dict.fromkeys(names))), cfg)


@app.command("images")
def mirror_image_list(
    image_list: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="File with one image reference per line"),
    destination: list[str] | None = DestinationOption,
    failure_log: Path | None = FailureLogOption,
    platform: str | None = PlatformOption,
    workers: int | None = typer.Option(None, "--workers", help="Images mirrored at the same time"),
) -> None:
    """Mirror an explicit list of image references to the destinations."""
    try:
        images = read_image_list(image_list)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="IMAGE_LIST") from e
    cfg = resolve_config(
        destinations=destination,
        failure_log=failure_log,
        tag_workers=workers,
        platform=platform,
    )
    display_config(cfg)
    display_summary(run_mirror_images(cfg, images), cfg)
