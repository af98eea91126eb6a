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
"""Libraries for building and reading bespoke binaries.

A bespoke binary is an ordinary executable with a ZIP archive appended to it.
The resulting file is still runnable, and at the same time it is a valid ZIP
archive whose internal offsets are absolute within the whole file, so the
running program can open itself as an archive and read the appended data back.
"""

version = "0.1.0"
