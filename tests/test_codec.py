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
"""Test the map payload codec."""

import json

import pytest

from bespoke_libs.codec import decode_map, encode_map
from bespoke_libs.errors import MalformedMap


class TestEncodeMap:
    def test_encode_deterministic(self):
        """Test the same mapping always encodes to the same bytes."""
        assert encode_map({"b": "2", "a": "1"}) == encode_map({"a": "1", "b": "2"})
        assert encode_map({"b": "2", "a": "1"}) == b'{"a":"1","b":"2"}'

    def test_encode_empty(self):
        """Test encoding an empty mapping."""
        assert encode_map({}) == b"{}"

    def test_encode_non_ascii(self):
        """Test non-ascii strings are stored as utf-8."""
        encoded = encode_map({"name": "世界"})
        assert encoded == '{"name":"世界"}'.encode("utf-8")
        assert json.loads(encoded) == {"name": "世界"}

    @pytest.mark.parametrize(
        "_in",
        (
            {"key": 1},
            {1: "value"},
            {"key": None},
            {"key": b"bytes"},
        ),
    )
    def test_encode_not_string_map(self, _in):
        """Test encoding non string-to-string mapping fails."""
        with pytest.raises(MalformedMap):
            encode_map(_in)


class TestDecodeMap:
    def test_decode(self, test_map):
        """Test decoding is the inverse of encoding."""
        assert decode_map(encode_map(test_map)) == test_map

    def test_decode_json_written_elsewhere(self):
        """Test decoding JSON object that is not produced by encode_map."""
        _in = json.dumps({"name": "world", "token": "abc"}, indent=4).encode()
        assert decode_map(_in) == {"name": "world", "token": "abc"}

    @pytest.mark.parametrize(
        "_in",
        (
            b"",
            b"not json",
            b'{"name": "world"',
            b'["name", "world"]',
            b'"name"',
            b"null",
            b'{"name": 1}',
            b'{"name": {"nested": "value"}}',
            b'{"name": "\xff\xfe"}',
        ),
    )
    def test_decode_malformed(self, _in: bytes):
        """Test decoding malformed payload raises MalformedMap."""
        with pytest.raises(MalformedMap):
            decode_map(_in)
