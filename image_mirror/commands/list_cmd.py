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

"""List subcommands (repos, tags)."""

from __future__ import annotations

import typer

from image_mirror.config import MirrorConfig
from image_mirror.registry import EcrPublicRegistry

app = typer.Typer(help="List repositories and tags in the source registry.")


@app.command("repos")
def repos() -> None:
    """Print every repository name, one per line."""
    registry = EcrPublicRegistry(MirrorConfig().aws_region)
    for name in registry.list_repositories():
        typer.echo(name)


@app.command("tags")
def tags(
    repository: str = typer.Argument(..., help="Repository name in the source registry"),
) -> None:
    """Print every tag of a repository, one per line."""
    registry = EcrPublicRegistry(MirrorConfig().aws_region)
    for tag in registry.list_tags(repository):
        typer.echo(tag)
