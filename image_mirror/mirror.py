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

"""Tag mirror worker: pull one image, retag it per destination, push, clean up."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import docker
from rich.markup import escape

from image_mirror import console, logger
from image_mirror.constants import PULL_FAILED, PUSH_FAILED
from image_mirror.failures import FailureLog
from image_mirror.models import ImageRef, JobResult


class TagMirror:
    """Mirror single image references to a fixed list of destination registries.

    One instance is shared by every job of a run; it holds no per-job state,
    so ``run`` may be called from many threads at once.
    """

    def __init__(
        self,
        docker_client: docker.DockerClient,
        destinations: list[str],
        failure_log: FailureLog,
        platform: str,
    ) -> None:
        self.docker_client = docker_client
        self.destinations = list(destinations)
        self.failure_log = failure_log
        self.platform = platform

    def run(self, source: ImageRef) -> JobResult:
        """Mirror *source* to every destination.

        Steps run strictly in order: pull, tag, concurrent push, cleanup.
        Cleanup of the pulled and retagged references happens on every path.

        Args:
            source: Reference to pull.

        Returns:
            Outcome of the job.
        """
        targets = [source.retarget(dest) for dest in self.destinations]
        created: list[ImageRef] = []
        try:
            console.print(f"[white]ℹ️  Pulling {escape(str(source))}...[/white]")
            if not self._pull(source):
                self.failure_log.record(f"{PULL_FAILED}: {source}")
                return JobResult(source=source, pulled=False)
            created.append(source)
            console.print(f"[green]✓ Pulled {escape(str(source))}[/green]")

            tagged = self._tag(source, targets, created)
            pushed, failed = self._push_all(tagged)
            failed.extend(target for target in targets if target not in tagged)
            return JobResult(source=source, pulled=True, pushed=tuple(pushed), failed=tuple(failed))
        finally:
            self._cleanup(source, created)

    def _pull(self, source: ImageRef) -> bool:
        try:
            self.docker_client.images.pull(source.name, tag=source.tag, platform=self.platform)
        except docker.errors.DockerException as e:
            logger.debug("pull %s failed: %s", source, e)
            return False
        except Exception as e:
            logger.debug("pull %s failed with a transport error: %s", source, e)
            return False
        return True

    def _tag(self, source: ImageRef, targets: list[ImageRef], created: list[ImageRef]) -> list[ImageRef]:
        """Tag the pulled image under every target; a failed tag counts as a failed push."""
        tagged: list[ImageRef] = []
        try:
            image = self.docker_client.images.get(str(source))
        except Exception as e:
            logger.debug("lookup of pulled image %s failed: %s", source, e)
            for target in targets:
                self.failure_log.record(f"{PUSH_FAILED}: {target}")
            return tagged
        for target in targets:
            try:
                image.tag(target.name, tag=target.tag)
            except Exception as e:
                logger.debug("tag %s as %s failed: %s", source, target, e)
                self.failure_log.record(f"{PUSH_FAILED}: {target}")
                continue
            created.append(target)
            tagged.append(target)
        if tagged:
            aliases = ", ".join(str(target) for target in tagged)
            console.print(f"[white]ℹ️  {escape(str(source))} is also tagged as {escape(aliases)}[/white]")
        return tagged

    def _push_all(self, targets: list[ImageRef]) -> tuple[list[ImageRef], list[ImageRef]]:
        """Push every target concurrently and wait for all of them."""
        pushed: list[ImageRef] = []
        failed: list[ImageRef] = []
        if not targets:
            return pushed, failed
        with ThreadPoolExecutor(max_workers=len(targets)) as executor:
            outcomes = list(executor.map(self._push, targets))
        for target, success in zip(targets, outcomes):
            if success:
                pushed.append(target)
            else:
                self.failure_log.record(f"{PUSH_FAILED}: {target}")
                failed.append(target)
        return pushed, failed

    def _push(self, target: ImageRef) -> bool:
        """Push one reference; the engine reports push errors inside the progress stream."""
        console.print(f"[white]ℹ️  Pushing {escape(str(target))}...[/white]")
        try:
            for chunk in self.docker_client.images.push(target.name, tag=target.tag, stream=True, decode=True):
                if "error" in chunk or "errorDetail" in chunk:
                    logger.debug("push %s failed: %s", target, chunk.get("error") or chunk.get("errorDetail"))
                    return False
        except docker.errors.DockerException as e:
            logger.debug("push %s failed: %s", target, e)
            return False
        except Exception as e:
            logger.debug("push %s failed with a transport error: %s", target, e)
            return False
        console.print(f"[green]✓ Pushed {escape(str(target))}[/green]")
        return True

    def _cleanup(self, source: ImageRef, created: list[ImageRef]) -> None:
        """Remove every local reference this job created; errors are ignored."""
        if not created:
            return
        console.print(f"[white]ℹ️  Cleaning up regardless of push success ({escape(str(source))})...[/white]")
        for ref in reversed(created):
            try:
                self.docker_client.images.remove(str(ref))
            except Exception as e:
                logger.debug("remove %s failed: %s", ref, e)
