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
import shutil
import sys
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING

from bespoke_libs.archive.reader import BespokeReader
from bespoke_libs.consts import DEFAULT_READ_SIZE, MAP_ENTRY_FNAME
from bespoke_libs.errors import BespokeError
from bespoke_tools._utils import exit_with_err_msg

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace, _SubParsersAction

logger = logging.getLogger(__name__)


def inspect_image_cmd_args(
    sub_arg_parser: _SubParsersAction[ArgumentParser], *parent_parser: ArgumentParser
) -> None:
    inspect_image_arg_parser = sub_arg_parser.add_parser(
        name="inspect",
        help=(
            _help_txt
            := "List the payload of a bespoke binary, or print out/save one entry of it."
        ),
        description=_help_txt,
        parents=parent_parser,
    )
    inspect_image_arg_parser.add_argument(
        "--entry",
        help="If specified, print out the content of this entry.",
    )
    inspect_image_arg_parser.add_argument(
        "--output",
        "-o",
        help="If specified together with --entry, save the entry to a file.",
    )
    inspect_image_arg_parser.add_argument(
        "image",
        help="The bespoke binary to inspect.",
    )
    inspect_image_arg_parser.set_defaults(handler=inspect_image_cmd)


_DIV = "-" * 18


def _render_output(reader: BespokeReader) -> str:
    _buffer = StringIO()

    _title = f"{_DIV} bespoke binary payload {_DIV}\n"
    _buffer.write(_title)
    for idx, (_name, _size) in enumerate(reader.list_entries()):
        _buffer.write(f"{idx=}\t{_name=}\t{_size=}\n")

    if reader.is_bespoke_binary():
        _buffer.write(f"{_DIV} map payload {_DIV}\n")
        for _key, _value in sorted(reader.read_map().items()):
            _buffer.write(f"{_key}={_value}\n")
    _buffer.write("-" * len(_title))
    return _buffer.getvalue()


def _inspect_entry(reader: BespokeReader, name: str, save_dst: str | None) -> None:
    with reader.open_entry(name) as _src:
        if save_dst:
            print(f"Save {name!r} to {save_dst} ...")
            with open(save_dst, "wb") as _dst:
                shutil.copyfileobj(_src, _dst, DEFAULT_READ_SIZE)
            return

        while data := _src.read(DEFAULT_READ_SIZE):
            sys.stdout.buffer.write(data)
        sys.stdout.flush()


def inspect_image_cmd(args: Namespace) -> None:
    logger.debug(f"calling {inspect_image_cmd.__name__} with {args}")
    image = Path(args.image)
    if not image.is_file():
        exit_with_err_msg(f"{image} is not a regular file.")
    if args.output and not args.entry:
        exit_with_err_msg("--output can only be used together with --entry.")

    try:
        with BespokeReader(image) as reader:
            if args.entry:
                _inspect_entry(reader, args.entry, args.output)
                return

            print(f"Bespoke binary: {image}")
            if not reader.is_bespoke_binary():
                logger.info(f"{image} doesn't carry {MAP_ENTRY_FNAME}")
            print(_render_output(reader))
    except BespokeError as e:
        exit_with_err_msg(str(e))
