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

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from bespoke_libs.archive.composer import BespokeBuilder, with_file, with_map
from bespoke_libs.common import file_sha256, parse_key_value, remove_file, tmp_fname
from bespoke_libs.consts import OUTPUT_PERMISSION
from bespoke_libs.errors import BespokeError
from bespoke_tools._utils import exit_with_err_msg

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace, _SubParsersAction

logger = logging.getLogger(__name__)


def build_cmd_args(
    sub_arg_parser: _SubParsersAction[ArgumentParser], *parent_parser: ArgumentParser
) -> None:
    build_arg_parser = sub_arg_parser.add_parser(
        name="build",
        help=(_help_txt := "Build a bespoke binary from an executable and the payload."),
        description=_help_txt,
        parents=parent_parser,
    )
    _payload_group = build_arg_parser.add_mutually_exclusive_group(required=True)
    _payload_group.add_argument(
        "--set",
        dest="map_items",
        metavar="KEY=VALUE",
        action="append",
        help="Add one key/value pair to the map payload, can be specified multiple times.",
    )
    _payload_group.add_argument(
        "--file",
        help="Carry the file as payload, the entry is named after the file name.",
    )
    build_arg_parser.add_argument(
        "executable",
        help="The executable to build the bespoke binary from.",
    )
    build_arg_parser.add_argument(
        "output",
        help="Where to save the bespoke binary.",
    )
    build_arg_parser.set_defaults(handler=build_cmd)


def _build(
    exe: Path, output: Path, *, payload_map: dict[str, str] | None, fpath: str | None
) -> None:
    _tmp_output = output.parent / tmp_fname(hint=output.name)
    try:
        with open(exe, "rb") as _exe_f:
            if payload_map is not None:
                builder: BespokeBuilder = with_map(_exe_f, payload_map)
            else:
                assert fpath is not None
                builder = with_file(_exe_f, fpath)

        with open(_tmp_output, "wb") as _dst:
            builder.composite.write_to(_dst)
        os.chmod(_tmp_output, OUTPUT_PERMISSION)
        os.replace(_tmp_output, output)
    finally:
        remove_file(_tmp_output)


def build_cmd(args: Namespace) -> None:
    logger.debug(f"calling {build_cmd.__name__} with {args}")
    exe, output = Path(args.executable), Path(args.output)
    if not exe.is_file():
        exit_with_err_msg(f"{exe} is not a regular file.")

    payload_map = None
    if args.map_items is not None:
        try:
            payload_map = dict(parse_key_value(_item) for _item in args.map_items)
        except ValueError as e:
            exit_with_err_msg(f"invalid map item: {e}")

    try:
        _build(exe, output, payload_map=payload_map, fpath=args.file)
    except (BespokeError, OSError) as e:
        exit_with_err_msg(f"failed to build {output}: {e}")

    print(f"Bespoke binary saved to {output}, sha256={file_sha256(output).hexdigest()}")
