# Copyright 2022 TIER IV, INC. All rights reserved.
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
"""Common shared helper functions for IO."""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path
from typing import IO

from bespoke_libs.consts import DEFAULT_READ_SIZE


def read_stream_with_limit(
    _in: IO[bytes], limit: int, *, chunk_size: int = DEFAULT_READ_SIZE
) -> bytes:
    """Read <_in> until EOF, but never more than <limit> + 1 bytes.

    The caller can tell the stream exceeds <limit> by checking
        whether the returned bytes is longer than <limit>.
    """
    _buffer = bytearray()
    while len(_buffer) <= limit:
        _chunk = _in.read(min(chunk_size, limit + 1 - len(_buffer)))
        if not _chunk:
            break
        _buffer += _chunk
    return bytes(_buffer)


def file_sha256(
    fpath: str | Path, *, chunk_size: int = DEFAULT_READ_SIZE
) -> hashlib._Hash:
    """Generate file digest with sha256 and returns Hash object."""
    _hash = hashlib.sha256()
    with open(fpath, "rb") as f:
        while _chunk := f.read(chunk_size):
            _hash.update(_chunk)
    return _hash


def remove_file(_fpath: Path, *, ignore_error: bool = True) -> None:
    """Use proper way to remove <_fpath>."""
    try:
        _fpath.unlink(missing_ok=True)
    except IsADirectoryError:
        return shutil.rmtree(_fpath, ignore_errors=ignore_error)
    except Exception:
        if not ignore_error:
            raise
