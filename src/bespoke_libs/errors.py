# Copyright 2025 TIER IV, INC. All rights reserved.
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
"""Exceptions raised when building or reading bespoke binaries.

None of these errors are retried internally, the operation that raised is
    aborted and no partially built image should be used.
"""

from __future__ import annotations


class BespokeError(Exception):
    """Base class for all recoverable bespoke errors."""


#
# ------ build side ------ #
#


class ExecutableTooLarge(BespokeError):
    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"executable exceeds maximum size: {size=} > {limit=}")


class EntryWriteFailure(BespokeError):
    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        super().__init__(f"could not add {name!r} to archive: {reason}")


class CorruptArchive(BespokeError):
    """The produced archive violates the ZIP layout the relocation expects."""


#
# ------ read side ------ #
#


class NotBespokeBinary(BespokeError):
    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        super().__init__(f"{path} is not a bespoke binary: {reason}")


class EntryNotFound(BespokeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name!r} not found in archive")


class MalformedMap(BespokeError):
    """The map payload is not a well-formed string to string mapping."""


#
# ------ usage errors ------ #
#


class BuilderStateError(RuntimeError):
    """Builder is used out of order, this is a bug at the caller side."""
