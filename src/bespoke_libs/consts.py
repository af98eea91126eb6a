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
"""Consts related to bespoke binaries."""

MAP_ENTRY_FNAME = ".bespoke.json"

# ZIP offset fields are 32bit, only half of the range is allowed for the executable
#   to leave room for the archive segment that follows it.
ZIP_MAX_OFFSET = 0xFFFFFFFF
MAX_EXECUTABLE_SIZE = ZIP_MAX_OFFSET // 2

ENTRY_PERMISSION = 0o644
OUTPUT_PERMISSION = 0o755

DEFAULT_READ_SIZE = 1024**2  # 1MiB
