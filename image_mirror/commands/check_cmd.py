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

"""Check subcommand: run the startup preconditions only."""

from __future__ import annotations

import typer

from image_mirror import console
from image_mirror.config import MirrorConfig
from image_mirror.preflight import check_prerequisites, connect_docker


def check(
    skip_aws: bool = typer.Option(False, "--skip-aws", help="Do not require the aws CLI"),
) -> None:
    """Check tools, Docker daemon, and destination registry logins."""
    cfg = MirrorConfig()
    check_prerequisites(cfg, need_aws=not skip_aws)
    connect_docker(cfg.docker_ready_retries).close()
    console.print("[green]✅ Docker daemon is reachable[/green]")
