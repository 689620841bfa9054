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

"""Exception types raised across the mirroring pipeline."""

from __future__ import annotations


class MirrorError(RuntimeError):
    """Base class for image-mirror errors."""


class PreconditionError(MirrorError):
    """A startup check failed: missing tool, no daemon, or no registry login."""


class EnumerationError(MirrorError):
    """Repositories or tags could not be listed from the source registry."""
