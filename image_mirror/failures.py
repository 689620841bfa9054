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

"""Append-only failure log shared by every mirror job."""

from __future__ import annotations

import threading
from pathlib import Path

from rich.markup import escape

from image_mirror import console, logger


class FailureLog:
    """Thread-safe sink that appends one plain-text line per failure.

    The file is opened in append mode for every record and never truncated,
    so consecutive runs accumulate in the same file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._count = 0

    def record(self, message: str) -> None:
        """Append *message* as one line and echo it as a failure status line."""
        console.print(f"[red]✗ {escape(message)}[/red]")
        logger.debug("failure record: %s", message)
        with self._lock:
            with open(self.path, "a") as f:
                f.write(f"{message}\n")
            self._count += 1

    def count(self) -> int:
        """Number of records written through this instance."""
        with self._lock:
            return self._count
