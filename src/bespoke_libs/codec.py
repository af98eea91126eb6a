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
"""Encoding of the string to string map payload.

The map is stored as a compact JSON object with sorted keys, so the same
    mapping always encodes to the same bytes.
"""

from __future__ import annotations

import json
from typing import Dict, Mapping

from pydantic import TypeAdapter, ValidationError

from bespoke_libs.errors import MalformedMap

StringMap = Dict[str, str]

_string_map_adapter = TypeAdapter(StringMap)


def encode_map(_in: Mapping[str, str]) -> bytes:
    try:
        _validated = _string_map_adapter.validate_python(dict(_in), strict=True)
    except (ValidationError, TypeError, ValueError) as e:
        raise MalformedMap(f"not a string to string mapping: {e}") from e

    return json.dumps(
        _validated, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def decode_map(_in: bytes) -> StringMap:
    try:
        _raw = _in.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedMap(f"map payload is not valid utf-8: {e}") from e

    try:
        return _string_map_adapter.validate_json(_raw, strict=True)
    except ValidationError as e:
        raise MalformedMap(f"invalid map payload: {_summary(e)}") from e


def _summary(e: ValidationError) -> str:
    return ", ".join(f"{_err['type']}@{_err['loc']}" for _err in e.errors())
