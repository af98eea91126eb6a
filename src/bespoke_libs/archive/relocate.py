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
"""Relocate the offsets of a ZIP archive that will be prefixed by other data.

When a ZIP archive is appended to an executable, the offsets recorded in the
    archive metadata still point into the bare archive. This module rewrites them
    in place so that they become absolute within the concatenated file, the same
    adjustment `zip -A` does for self-extracting archives.

The fields touched are:
1. the central directory start offset in the end of central directory record(EOCD).
2. the local file header offset in each central directory record.

The local file headers themselves don't carry offsets, so the entry records
    before the central directory are left untouched.

See https://pkware.cachefly.net/webdocs/casestudies/APPNOTE.TXT chapter 4.3.12
    and 4.3.16 for the record layouts.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Iterator

from bespoke_libs.consts import ZIP_MAX_OFFSET
from bespoke_libs.errors import CorruptArchive

logger = logging.getLogger(__name__)

#
# ------ end of central directory record ------ #
#
EOCD_SIGNATURE = b"PK\x05\x06"
EOCD_SIZE = 22  # + comment
EOCD_ENTRIES_TOTAL_OFFSET = 10
EOCD_CD_SIZE_OFFSET = 12
EOCD_CD_OFFSET_OFFSET = 16
EOCD_COMMENT_LEN_OFFSET = 20
EOCD_MAX_COMMENT_LEN = 0xFFFF

#
# ------ central directory file header ------ #
#
CD_SIGNATURE = b"PK\x01\x02"
CD_HEADER_SIZE = 46  # + filename + extra + comment
CD_COMPRESSED_SIZE_OFFSET = 20
CD_UNCOMPRESSED_SIZE_OFFSET = 24
CD_FILENAME_LEN_OFFSET = 28
CD_EXTRA_LEN_OFFSET = 30
CD_COMMENT_LEN_OFFSET = 32
CD_LOCAL_HEADER_OFFSET_OFFSET = 42

ZIP64_COUNT_MARKER = 0xFFFF
ZIP64_OFFSET_MARKER = 0xFFFFFFFF


@dataclass
class EndOfCentralDir:
    offset: int
    """Offset of the EOCD record within the buffer."""
    entries: int
    cd_size: int
    cd_offset: int
    comment_len: int


@dataclass
class CentralDirRecord:
    offset: int
    """Offset of this record within the buffer."""
    filename: str
    compressed_size: int
    uncompressed_size: int
    local_header_offset: int
    record_size: int


def _u16(buf: bytes | bytearray, pos: int) -> int:
    return struct.unpack_from("<H", buf, pos)[0]


def _u32(buf: bytes | bytearray, pos: int) -> int:
    return struct.unpack_from("<I", buf, pos)[0]


def find_end_of_central_dir(buf: bytes | bytearray) -> EndOfCentralDir:
    """Locate the EOCD record by scanning backward for its signature.

    The EOCD has a variable length comment at its end, so a signature hit is only
        accepted when the comment it declares reaches exactly the end of <buf>.
        A signature that happens to appear inside the comment is skipped.

    Raises:
        CorruptArchive if no EOCD record can be found.
    """
    _buf_len = len(buf)
    _lower_bound = max(0, _buf_len - EOCD_SIZE - EOCD_MAX_COMMENT_LEN)

    _pos = _buf_len - EOCD_SIZE
    while _pos >= _lower_bound:
        _pos = buf.rfind(EOCD_SIGNATURE, _lower_bound, _pos + len(EOCD_SIGNATURE))
        if _pos < 0:
            break

        _comment_len = _u16(buf, _pos + EOCD_COMMENT_LEN_OFFSET)
        if _pos + EOCD_SIZE + _comment_len == _buf_len:
            return EndOfCentralDir(
                offset=_pos,
                entries=_u16(buf, _pos + EOCD_ENTRIES_TOTAL_OFFSET),
                cd_size=_u32(buf, _pos + EOCD_CD_SIZE_OFFSET),
                cd_offset=_u32(buf, _pos + EOCD_CD_OFFSET_OFFSET),
                comment_len=_comment_len,
            )
        _pos -= 1
    raise CorruptArchive(
        f"end of central directory signature not found in {_buf_len} bytes archive"
    )


def iter_central_dir(
    buf: bytes | bytearray, eocd: EndOfCentralDir, *, cd_offset: int | None = None
) -> Iterator[CentralDirRecord]:
    """Walk through the <eocd.entries> central directory records.

    <cd_offset> overrides where the walk starts, used when the offset recorded
        in the EOCD has already been relocated.
    """
    _cursor = eocd.cd_offset if cd_offset is None else cd_offset
    for _idx in range(eocd.entries):
        if _cursor + CD_HEADER_SIZE > eocd.offset:
            raise CorruptArchive(
                f"central directory record#{_idx} at {_cursor} overruns the EOCD at {eocd.offset}"
            )
        if buf[_cursor : _cursor + len(CD_SIGNATURE)] != CD_SIGNATURE:
            raise CorruptArchive(
                f"invalid central directory record#{_idx} signature at {_cursor}"
            )

        _fname_len = _u16(buf, _cursor + CD_FILENAME_LEN_OFFSET)
        _extra_len = _u16(buf, _cursor + CD_EXTRA_LEN_OFFSET)
        _comment_len = _u16(buf, _cursor + CD_COMMENT_LEN_OFFSET)
        _record_size = CD_HEADER_SIZE + _fname_len + _extra_len + _comment_len

        _fname_start = _cursor + CD_HEADER_SIZE
        yield CentralDirRecord(
            offset=_cursor,
            filename=bytes(buf[_fname_start : _fname_start + _fname_len]).decode(
                "utf-8", errors="replace"
            ),
            compressed_size=_u32(buf, _cursor + CD_COMPRESSED_SIZE_OFFSET),
            uncompressed_size=_u32(buf, _cursor + CD_UNCOMPRESSED_SIZE_OFFSET),
            local_header_offset=_u32(buf, _cursor + CD_LOCAL_HEADER_OFFSET_OFFSET),
            record_size=_record_size,
        )
        _cursor += _record_size


def _add_to_u32(buf: bytearray, pos: int, delta: int) -> int:
    _new = _u32(buf, pos) + delta
    if _new > ZIP_MAX_OFFSET:
        raise CorruptArchive(f"relocated offset at {pos} exceeds 32bit range: {_new}")
    struct.pack_into("<I", buf, pos, _new)
    return _new


def relocate_offsets(buf: bytearray, delta: int) -> None:
    """Add <delta> to every offset recorded in the ZIP archive metadata in <buf>.

    After this, <buf> is a valid archive only when it is prefixed by exactly
        <delta> bytes of other data. The physical layout of <buf> is unchanged.

    Raises:
        CorruptArchive if the EOCD or a central directory record is invalid,
            or if the archive is a ZIP64 archive(not supported).
    """
    eocd = find_end_of_central_dir(buf)
    if eocd.entries == ZIP64_COUNT_MARKER or eocd.cd_offset == ZIP64_OFFSET_MARKER:
        raise CorruptArchive("ZIP64 archive is not supported")

    _orig_cd_offset = eocd.cd_offset
    _new_cd_offset = _add_to_u32(buf, eocd.offset + EOCD_CD_OFFSET_OFFSET, delta)
    logger.debug(
        f"relocate central directory: {_orig_cd_offset} -> {_new_cd_offset}, {eocd.entries=}"
    )

    # NOTE: the central directory doesn't move physically, walk from the original offset.
    for _record in iter_central_dir(buf, eocd, cd_offset=_orig_cd_offset):
        if _record.local_header_offset == ZIP64_OFFSET_MARKER:
            raise CorruptArchive(
                f"ZIP64 entry {_record.filename!r} is not supported"
            )
        _add_to_u32(buf, _record.offset + CD_LOCAL_HEADER_OFFSET_OFFSET, delta)
