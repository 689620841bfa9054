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

"""Orchestration: repository fan-out, the top-level driver, and image-list runs."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed

from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from image_mirror import console, logger
from image_mirror.config import MirrorConfig
from image_mirror.constants import TAG_LISTING_FAILED
from image_mirror.errors import EnumerationError
from image_mirror.failures import FailureLog
from image_mirror.mirror import TagMirror
from image_mirror.models import ImageRef, JobResult, MirrorSummary
from image_mirror.preflight import check_prerequisites, connect_docker, login_source
from image_mirror.registry import EcrPublicRegistry


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
        BarColumn(), TaskProgressColumn(), console=console,
    )


# ============================================================================
# Repository fan-out
# ============================================================================

def mirror_repository(
    repository: str,
    *,
    registry: EcrPublicRegistry,
    worker: TagMirror,
    source_registry: str,
    sequential: bool = False,
    max_workers: int = 1,
) -> list[JobResult]:
    """Mirror every tag of one repository and wait for all of them.

    A failed tag never stops the remaining tags. If the tag listing itself
    fails, a failure record is written and no job is started.

    Args:
        repository: Repository name in the source registry.
        registry: Enumerator used to list the repository's tags.
        worker: Tag mirror worker shared by the run.
        source_registry: Registry prefix images are pulled from.
        sequential: Run the tags one after another instead of in a pool.
        max_workers: Pool size when not sequential.

    Returns:
        One result per tag, in completion order.
    """
    try:
        tags = registry.list_tags(repository)
    except EnumerationError as e:
        logger.debug("tag listing for %s failed: %s", repository, e)
        worker.failure_log.record(f"{TAG_LISTING_FAILED}: {repository}")
        return []

    refs = [ImageRef(registry=source_registry, repository=repository, tag=tag) for tag in tags]
    logger.info("%s: %d tags", repository, len(refs))
    if sequential:
        return [worker.run(ref) for ref in refs]

    results: list[JobResult] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(worker.run, ref) for ref in refs]
        for future in as_completed(futures):
            results.append(future.result())
    return results


# ============================================================================
# Top-level driver
# ============================================================================

def mirror_repositories(
    cfg: MirrorConfig,
    registry: EcrPublicRegistry,
    worker: TagMirror,
    repositories: list[str] | None = None,
) -> MirrorSummary:
    """Run one repository fan-out per repository through a bounded pool.

    Args:
        cfg: Mirroring configuration with pool sizes and the source registry.
        registry: Enumerator for repositories and tags.
        worker: Tag mirror worker shared by every repository.
        repositories: Repositories to mirror, or None to mirror all of them. Repeated names
            are mirrored once.

    Returns:
        Summary of every job that ran.

    Raises:
        EnumerationError: If the repository list cannot be fetched.
    """
    if repositories is None:
        repositories = registry.list_repositories()
    # Each repository gets exactly one fan-out.
    repositories = list(dict.fromkeys(repositories))
    console.print(Panel.fit(f"Mirroring {len(repositories)} repositories", style="bold blue"))

    summary = MirrorSummary()
    with _progress() as progress:
        task = progress.add_task("[cyan]Mirroring repositories...", total=len(repositories))
        with ThreadPoolExecutor(max_workers=cfg.max_repository_workers) as executor:
            futures = {
                executor.submit(
                    mirror_repository, repo,
                    registry=registry,
                    worker=worker,
                    source_registry=cfg.source_registry,
                    sequential=cfg.sequential,
                    max_workers=cfg.max_tag_workers,
                ): repo
                for repo in repositories
            }
            for future in as_completed(futures):
                repo = futures[future]
                results = future.result()
                summary.extend(results)
                progress.advance(task)
                failed = sum(1 for result in results if not result.ok)
                if failed:
                    console.print(f"[yellow]⚠️  {escape(repo)}: {failed}/{len(results)} tags had failures[/yellow]")
                else:
                    console.print(f"[green]✓ {escape(repo)}: {len(results)} tags mirrored[/green]")
    summary.failure_records = worker.failure_log.count()
    return summary


def mirror_images(worker: TagMirror, images: list[ImageRef], max_workers: int) -> list[JobResult]:
    """Mirror an explicit list of image references through a bounded pool.

    Args:
        worker: Tag mirror worker.
        images: Fully qualified source references.
        max_workers: Pool size.

    Returns:
        One result per reference, in completion order.
    """
    images = list(dict.fromkeys(images))
    results: list[JobResult] = []
    with _progress() as progress:
        task = progress.add_task("[cyan]Mirroring images...", total=len(images))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(worker.run, ref) for ref in images]
            for future in as_completed(futures):
                results.append(future.result())
                progress.advance(task)
    return results


# ============================================================================
# Entry points
# ============================================================================

def run_mirror(cfg: MirrorConfig, repositories: list[str] | None = None) -> MirrorSummary:
    """Check preconditions, log in to ECR Public, and mirror repositories.

    Only precondition failures and a failed repository listing raise; every
    per-job failure ends up in the failure log instead.

    Args:
        cfg: Resolved mirroring configuration.
        repositories: Repositories to mirror, or None for all of them.

    Returns:
        Summary of the run.

    Raises:
        PreconditionError: If a startup check fails.
        EnumerationError: If the repository list cannot be fetched.
    """
    check_prerequisites(cfg)
    registry = EcrPublicRegistry(cfg.aws_region)
    docker_client = connect_docker(cfg.docker_ready_retries)
    try:
        login_source(docker_client, registry)
        worker = TagMirror(docker_client, cfg.destinations, FailureLog(cfg.failure_log), cfg.platform)
        return mirror_repositories(cfg, registry, worker, repositories)
    finally:
        docker_client.close()


def run_mirror_images(cfg: MirrorConfig, images: list[ImageRef]) -> MirrorSummary:
    """Check destination logins and mirror an explicit image list.

    Args:
        cfg: Resolved mirroring configuration.
        images: Fully qualified source references.

    Returns:
        Summary of the run.

    Raises:
        PreconditionError: If a startup check fails.
    """
    check_prerequisites(cfg, need_aws=False)
    docker_client = connect_docker(cfg.docker_ready_retries)
    try:
        worker = TagMirror(docker_client, cfg.destinations, FailureLog(cfg.failure_log), cfg.platform)
        console.print(Panel.fit(f"Mirroring {len(images)} images", style="bold blue"))
        summary = MirrorSummary(results=mirror_images(worker, images, cfg.max_tag_workers))
        summary.failure_records = worker.failure_log.count()
        return summary
    finally:
        docker_client.close()


def display_summary(summary: MirrorSummary, cfg: MirrorConfig) -> None:
    """Print a table with job totals and point at the failure log."""
    table = Table(title="Mirror summary")
    table.add_column("jobs", justify="right")
    table.add_column("succeeded", justify="right", style="green")
    table.add_column("failed", justify="right", style="red")
    table.add_column("failure records", justify="right")
    table.add_row(str(summary.total), str(summary.succeeded), str(summary.failed), str(summary.failure_records))
    console.print(table)
    if summary.failure_records:
        console.print(f"[yellow]⚠️  {summary.failure_records} failures appended to {cfg.failure_log}[/yellow]")
    else:
        console.print(f"[green]✅ Successfully mirrored all {summary.total} images[/green]")
