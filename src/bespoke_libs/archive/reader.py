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
"""Read the payload of a bespoke binary, typically from within the running binary itself.

A ZIP reader locates the end of central directory record by scanning backward
    from the end of file, so the executable bytes in front of the archive are
    simply ignored, no special handling is needed at the read side.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO, Callable
from zipfile import BadZipFile, ZipFile, ZipInfo

from typing_extensions import Self

from bespoke_libs.codec import StringMap, decode_map
from bespoke_libs.common import StrOrPath
from bespoke_libs.consts import MAP_ENTRY_FNAME
from bespoke_libs.errors import EntryNotFound, NotBespokeBinary

logger = logging.getLogger(__name__)


def locate_self() -> Path:
    """Get the path of the currently running binary.

    For frozen application(i.e., pyinstaller), this is the application itself,
        otherwise the script being run.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


class BespokeReader:
    """Helper class for reading a bespoke binary.

    This class is NOT safe for multi-thread, create separated instance
        for each worker thread if used in multi-threaded environment.
    """

    def __init__(self, _f: ZipFile | StrOrPath, *, close_on_exit: bool = True) -> None:
        if isinstance(_f, ZipFile):
            self._f = _f
            self._path = str(_f.filename)
        else:
            self._path = str(_f)
            try:
                self._f = ZipFile(_f, mode="r")
            except BadZipFile as e:
                raise NotBespokeBinary(self._path, str(e)) from e
        self._close_on_exit = close_on_exit

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._close_on_exit:
            self.close()
        return False

    def close(self) -> None:
        self._f.close()

    def is_bespoke_binary(self) -> bool:
        """Check if this binary carries the map payload.

        NOTE that this method works by only checking the present of
            the map entry! Binaries built with a file payload don't have it.
        """
        return self._find_entry(MAP_ENTRY_FNAME) is not None

    def list_entries(self) -> list[tuple[str, int]]:
        return [(_info.filename, _info.file_size) for _info in self._f.infolist()]

    def _find_entry(self, name: str) -> ZipInfo | None:
        # NOTE: ZipFile.getinfo returns the last entry for duplicated names,
        #   we want the first one.
        for _info in self._f.infolist():
            if _info.filename == name:
                return _info

    def open_entry(self, name: str) -> IO[bytes]:
        if (_info := self._find_entry(name)) is None:
            raise EntryNotFound(name)
        try:
            return self._f.open(_info)
        except BadZipFile as e:
            raise NotBespokeBinary(self._path, f"failed to open {name!r}: {e}") from e

    def read_entry(self, name: str) -> bytes:
        with self.open_entry(name) as _entry:
            try:
                return _entry.read()
            except BadZipFile as e:
                raise NotBespokeBinary(
                    self._path, f"failed to read {name!r}: {e}"
                ) from e

    def read_map(self) -> StringMap:
        return decode_map(self.read_entry(MAP_ENTRY_FNAME))


#
# ------ run time API ------ #
#


def read_map(*, locate: Callable[[], StrOrPath] = locate_self) -> StringMap:
    """Read the map payload carried by the running binary."""
    _self_path = locate()
    logger.debug(f"read map payload from {_self_path}")
    with BespokeReader(_self_path) as reader:
        return reader.read_map()


def read_named_file(
    name: str, *, locate: Callable[[], StrOrPath] = locate_self
) -> bytes:
    """Read the file entry <name> carried by the running binary."""
    _self_path = locate()
    logger.debug(f"read {name!r} from {_self_path}")
    with BespokeReader(_self_path) as reader:
        return reader.read_entry(name)
