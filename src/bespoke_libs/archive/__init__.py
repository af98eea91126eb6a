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
"""Libraries for composing and reading the archive segment of bespoke binaries.

The archive segment is a strict subset of ZIP archive:

1. all entries are stored without compression.
2. all entries are flat files, named after the final path segment of their source.
3. all entries have fixed permission bit, with datetime set at build time.
4. all offsets are 32bit and absolute within the whole bespoke binary, ZIP64 is not used.
"""

from .composer import BespokeBuilder, CompositeImage, with_dir, with_file, with_map
from .reader import BespokeReader, locate_self, read_map, read_named_file

__all__ = [
    "BespokeBuilder",
    "CompositeImage",
    "with_dir",
    "with_file",
    "with_map",
    "BespokeReader",
    "locate_self",
    "read_map",
    "read_named_file",
]
