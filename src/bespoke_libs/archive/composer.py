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
"""Compose bespoke binaries from an executable and the payload.

The executable is fully buffered first, its size is required by the relocation
    that runs when the archive is finalized. The archive is built in a separated
    in-memory buffer, so the executable bytes are emitted verbatim.
"""

from __future__ import annotations

import contextlib
import logging
import time
import warnings
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import IO, Mapping
from zipfile import ZIP_STORED, ZipFile, ZipInfo

from typing_extensions import Self

from bespoke_libs.archive.relocate import EOCD_SIGNATURE, relocate_offsets
from bespoke_libs.codec import encode_map
from bespoke_libs.common import StrOrPath, read_stream_with_limit
from bespoke_libs.consts import ENTRY_PERMISSION, MAP_ENTRY_FNAME, MAX_EXECUTABLE_SIZE
from bespoke_libs.errors import (
    BuilderStateError,
    CorruptArchive,
    EntryWriteFailure,
    ExecutableTooLarge,
)

logger = logging.getLogger(__name__)


class CompositeImage:
    """The finalized bespoke binary, the executable followed by the relocated archive.

    Exposed as a sequential bytes source via `read`.
    """

    def __init__(self, executable: bytes, archive: bytes) -> None:
        self._exe = executable
        self._archive = archive
        self._pos = 0

    def __len__(self) -> int:
        return len(self._exe) + len(self._archive)

    @property
    def exe_size(self) -> int:
        return len(self._exe)

    @property
    def archive(self) -> bytes:
        return self._archive

    def read(self, size: int | None = -1) -> bytes:
        _exe_size, _total = len(self._exe), len(self)
        if size is None or size < 0:
            _end = _total
        else:
            _end = min(self._pos + size, _total)

        _res = (
            self._exe[self._pos : _end]
            + self._archive[max(self._pos - _exe_size, 0) : max(_end - _exe_size, 0)]
        )
        self._pos = max(self._pos, _end)
        return _res

    def getvalue(self) -> bytes:
        return self._exe + self._archive

    def write_to(self, dst: IO[bytes]) -> int:
        dst.write(self._exe)
        dst.write(self._archive)
        return len(self)


class BuilderState(str, Enum):
    OPEN = "open"
    FINALIZED = "finalized"
    ABANDONED = "abandoned"


class BespokeBuilder:
    """Builder for one bespoke binary.

    Entries can only be added before `finalize` is called, and the output
        can only be read after `finalize` succeeded. Using the builder out of
        this order is a bug at the caller side and raises BuilderStateError.
    Once any operation failed, the builder is abandoned and cannot be used anymore.

    This class is NOT thread-safe.
    """

    def __init__(
        self,
        executable: IO[bytes],
        *,
        max_executable_size: int = MAX_EXECUTABLE_SIZE,
        comment: bytes = b"",
    ) -> None:
        if EOCD_SIGNATURE in comment:
            # NOTE: the EOCD is located by scanning backward for its signature,
            #   a signature inside the comment would be taken as the real one.
            raise ValueError("archive comment must not contain the EOCD signature")

        self._exe = read_stream_with_limit(executable, max_executable_size)
        if (_exe_size := len(self._exe)) > max_executable_size:
            # NOTE: the stream is only read up to limit + 1 bytes
            raise ExecutableTooLarge(_exe_size, max_executable_size)
        logger.debug(f"executable loaded: {_exe_size=}")

        self._archive_buf = BytesIO()
        self._zipf = ZipFile(self._archive_buf, mode="w", compression=ZIP_STORED)
        if comment:
            self._zipf.comment = comment

        self._state = BuilderState.OPEN
        self._names: set[str] = set()
        self._composite: CompositeImage | None = None

    @property
    def exe_size(self) -> int:
        return len(self._exe)

    @property
    def state(self) -> BuilderState:
        return self._state

    def _ensure_state(self, expected: BuilderState, op: str) -> None:
        if self._state != expected:
            raise BuilderStateError(
                f"{op} is not allowed when builder is {self._state.value}"
            )

    def _abandon(self) -> None:
        self._state = BuilderState.ABANDONED
        with contextlib.suppress(Exception):
            self._zipf.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Abandon the builder if it is not finalized yet."""
        if self._state == BuilderState.OPEN:
            self._abandon()

    def add_entry(self, name: str, content: bytes) -> None:
        """Add one stored entry with current datetime and fixed permission."""
        self._ensure_state(BuilderState.OPEN, "add entry")
        if name in self._names:
            logger.warning(
                f"duplicated entry {name!r}, only the first one will be read"
            )
        self._names.add(name)

        _zipinfo = ZipInfo(filename=name, date_time=time.localtime()[:6])
        _zipinfo.compress_type = ZIP_STORED
        _zipinfo.external_attr |= ENTRY_PERMISSION << 16  # rw_r_r_

        try:
            with warnings.catch_warnings():
                # NOTE: duplicated entry is logged above
                warnings.filterwarnings("ignore", message="Duplicate name")
                with self._zipf.open(_zipinfo, "w") as dst:
                    _written = dst.write(content)
        except (OSError, RuntimeError, ValueError) as e:
            self._abandon()
            raise EntryWriteFailure(name, repr(e)) from e

        if _written != len(content):
            self._abandon()
            raise EntryWriteFailure(name, f"short write: {_written=}, {len(content)=}")
        logger.debug(f"entry added: {name=}, size={len(content)}")

    def add_file(self, fpath: StrOrPath) -> None:
        """Add the file at <fpath> as an entry named after its final path segment.

        Only flat entry is supported, directory components are stripped.
        """
        fpath = Path(fpath)
        try:
            content = fpath.read_bytes()
        except OSError as e:
            self._abandon()
            raise EntryWriteFailure(str(fpath), repr(e)) from e
        self.add_entry(fpath.name, content)

    def finalize(self) -> CompositeImage:
        """Close the archive and relocate its offsets behind the executable."""
        self._ensure_state(BuilderState.OPEN, "finalize")
        try:
            try:
                self._zipf.close()
            except (OSError, ValueError) as e:
                raise CorruptArchive(f"failed to close archive: {e!r}") from e

            _archive = bytearray(self._archive_buf.getvalue())
            relocate_offsets(_archive, len(self._exe))
        except Exception:
            self._abandon()
            raise

        self._composite = CompositeImage(self._exe, bytes(_archive))
        self._state = BuilderState.FINALIZED
        logger.debug(
            f"bespoke binary finalized: exe_size={len(self._exe)}, archive_size={len(_archive)}"
        )
        return self._composite

    @property
    def composite(self) -> CompositeImage:
        if self._state != BuilderState.FINALIZED or self._composite is None:
            raise BuilderStateError("read attempted without calling finalize")
        return self._composite

    def read(self, size: int | None = -1) -> bytes:
        return self.composite.read(size)


#
# ------ build time API ------ #
#


def with_map(
    executable: IO[bytes], _map: Mapping[str, str], **kwargs
) -> BespokeBuilder:
    """Build a bespoke binary carrying <_map> as the map payload."""
    content = encode_map(_map)

    with BespokeBuilder(executable, **kwargs) as builder:
        builder.add_entry(MAP_ENTRY_FNAME, content)
        builder.finalize()
    return builder


def with_file(executable: IO[bytes], fpath: StrOrPath, **kwargs) -> BespokeBuilder:
    """Build a bespoke binary carrying the file at <fpath>."""
    with BespokeBuilder(executable, **kwargs) as builder:
        builder.add_file(fpath)
        builder.finalize()
    return builder


def with_dir(executable: IO[bytes], dir_path: StrOrPath, **kwargs) -> BespokeBuilder:
    """Packaging a directory tree is declared but not supported."""
    raise NotImplementedError(
        f"packaging directory tree is not supported: {dir_path}"
    )
