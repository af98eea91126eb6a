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

import pytest

from bespoke_libs.common._common import parse_key_value, tmp_fname


class TestTmpFname:
    def test_tmp_fname_all_parameters(self):
        """Test tmp_fname with all parameters."""
        result = tmp_fname(
            hint="test", prefix="pre", suffix=".log", sep="-", random_bytes=6
        )

        assert result.startswith("pre-")
        assert "test" in result
        assert result.endswith(".log")
        # 6 bytes = 12 hex characters
        parts = result.replace(".log", "").split("-")
        assert len(parts[-1]) == 12

    def test_tmp_fname_unique(self):
        assert tmp_fname(hint="out") != tmp_fname(hint="out")


class TestParseKeyValue:
    @pytest.mark.parametrize(
        "_in, expected",
        (
            ("name=world", ("name", "world")),
            ("name=", ("name", "")),
            ("url=http://host/?a=b", ("url", "http://host/?a=b")),
        ),
    )
    def test_parse(self, _in: str, expected: tuple[str, str]):
        assert parse_key_value(_in) == expected

    @pytest.mark.parametrize("_in", ("name", "=world", ""))
    def test_parse_invalid(self, _in: str):
        with pytest.raises(ValueError):
            parse_key_value(_in)
