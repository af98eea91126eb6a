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
"""Print a greeting with the name carried by this binary.

Freeze this script into a standalone executable `dist/hello` first,
    then turn it into a bespoke binary:

    $ bespoke build --set name=world dist/hello hello_world
    $ ./hello_world
    hello world

Run by itself, it prints out why no map payload can be read.
"""

from bespoke_libs.archive import read_map
from bespoke_libs.errors import BespokeError


def main():
    try:
        _map = read_map()
    except BespokeError as e:
        print(e)
        return
    print(f"hello {_map.get('name', '')}")


if __name__ == "__main__":
    main()
