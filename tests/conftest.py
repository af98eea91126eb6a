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
"""Shared test fixtures for bespoke-libs tests."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest

from bespoke_libs.archive.composer import with_file, with_map

TEST_EXE = b"EXE_BYTES!"
TEST_MAP = {"k1": "v1", "k2": "v2"}
TEST_PAYLOAD = b"payload\x00\x01\x02" * 128


@pytest.fixture
def exe_bytes() -> bytes:
    return TEST_EXE


@pytest.fixture
def test_map() -> dict[str, str]:
    return dict(TEST_MAP)


@pytest.fixture
def test_payload() -> bytes:
    return TEST_PAYLOAD


@pytest.fixture
def exe_file(tmp_path: Path) -> Path:
    """An executable-ish file to build bespoke binaries from."""
    _exe = tmp_path / "hello"
    _exe.write_bytes(TEST_EXE)
    return _exe


@pytest.fixture
def payload_file(tmp_path: Path) -> Path:
    _src_dir = tmp_path / "payload_src"
    _src_dir.mkdir()
    _payload = _src_dir / "payload.bin"
    _payload.write_bytes(TEST_PAYLOAD)
    return _payload


@pytest.fixture
def map_image(tmp_path: Path) -> Path:
    """A bespoke binary carrying TEST_MAP, saved as file."""
    _image = tmp_path / "map_image"
    with open(_image, "wb") as f:
        with_map(BytesIO(TEST_EXE), TEST_MAP).composite.write_to(f)
    return _image


@pytest.fixture
def file_image(tmp_path: Path, payload_file: Path) -> Path:
    """A bespoke binary carrying the payload file, saved as file."""
    _image = tmp_path / "file_image"
    with open(_image, "wb") as f:
        with_file(BytesIO(TEST_EXE), payload_file).composite.write_to(f)
    return _image
