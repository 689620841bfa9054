#!/usr/bin/env python3
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

"""
cli.py - Mirror container images from ECR Public to other registries.

Subcommands:
    mirror all      Mirror every tag of every repository in the source registry
    mirror repo     Mirror every tag of the named repositories
    mirror images   Mirror an explicit list of image references
    list repos      List repositories in the source registry
    list tags       List tags of one repository
    check           Run startup checks only

Environment Variables:
    Configuration can be overridden via MIRROR_* environment variables:
    - MIRROR_SOURCE_REGISTRY (default: public.ecr.aws/vessl)
    - MIRROR_AWS_REGION (default: us-east-1)
    - MIRROR_DESTINATIONS (JSON list, default: quay.io/vessl-ai, harbor.vessl.ai/public)
    - MIRROR_FAILURE_LOG (default: failed.log)
    - MIRROR_SEQUENTIAL, MIRROR_MAX_REPOSITORY_WORKERS, MIRROR_MAX_TAG_WORKERS

Examples:
    # Mirror everything (default destinations)
    ./cli.py mirror all

    # Avoid overwhelming the host: one tag at a time per repository
    ./cli.py mirror all --sequential

    # Mirror two repositories to quay.io only
    ./cli.py mirror repo workspace-base kernel-gateway -d quay.io/vessl-ai

    # Mirror a hand-written image list
    ./cli.py mirror images image-list.txt -d quay.io/vessl-ai

Per-image failures do not change the exit status; inspect the failure log
after the run. The exit status is 1 only when a startup check fails.
"""

from __future__ import annotations

import logging
import sys

import typer

from image_mirror import console
from image_mirror.commands import check_cmd, list_cmd, mirror_cmd

app = typer.Typer(
    help="Mirror container images from ECR Public to other registries.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(mirror_cmd.app, name="mirror")
app.add_typer(list_cmd.app, name="list")
app.command("check")(check_cmd.check)


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
