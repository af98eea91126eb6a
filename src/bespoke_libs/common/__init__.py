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
"""Common shared utils for building and reading bespoke binaries."""

from ._common import StrOrPath, parse_key_value, tmp_fname
from .io import file_sha256, read_stream_with_limit, remove_file

__all__ = [
    "StrOrPath",
    "parse_key_value",
    "tmp_fname",
    "file_sha256",
    "read_stream_with_limit",
    "remove_file",
]
