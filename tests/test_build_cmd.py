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
"""Tests for build command module."""

from __future__ import annotations

import argparse
import os
from pathlib import Path

import pytest

from bespoke_libs.archive.reader import read_map, read_named_file
from bespoke_libs.consts import OUTPUT_PERMISSION
from bespoke_tools.cmds.build import build_cmd, build_cmd_args


def _parse(*argv: str) -> argparse.Namespace:
    arg_parser = argparse.ArgumentParser()
    sub_parser = arg_parser.add_subparsers()
    build_cmd_args(sub_parser)
    return arg_parser.parse_args(["build", *argv])


class TestBuildCmdArgs:
    """Tests for argument parser configuration."""

    def test_args_with_map_items(self):
        args = _parse("--set", "name=world", "--set", "token=abc", "exe", "out")
        assert args.map_items == ["name=world", "token=abc"]
        assert args.file is None
        assert args.executable == "exe"
        assert args.output == "out"
        assert hasattr(args, "handler")

    def test_args_with_file(self):
        args = _parse("--file", "payload.bin", "exe", "out")
        assert args.file == "payload.bin"
        assert args.map_items is None

    def test_args_payload_required(self):
        """Test that one of the payload options is required."""
        with pytest.raises(SystemExit):
            _parse("exe", "out")

    def test_args_payload_mutually_exclusive(self):
        with pytest.raises(SystemExit):
            _parse("--set", "a=b", "--file", "payload.bin", "exe", "out")


class TestBuildCmd:
    def test_build_with_map(self, exe_file: Path, tmp_path: Path, capsys):
        """Test building a bespoke binary carrying a map."""
        output = tmp_path / "hello_world"
        build_cmd(
            _parse(
                "--set", "name=world", "--set", "eq=a=b", str(exe_file), str(output)
            )
        )

        assert output.read_bytes().startswith(exe_file.read_bytes())
        assert read_map(locate=lambda: output) == {"name": "world", "eq": "a=b"}
        assert os.stat(output).st_mode & 0o777 == OUTPUT_PERMISSION
        assert "sha256=" in capsys.readouterr().out
        # no temp file is left
        assert sorted(_p.name for _p in tmp_path.iterdir()) == ["hello", "hello_world"]

    def test_build_with_file(
        self, exe_file: Path, payload_file: Path, tmp_path: Path, test_payload: bytes
    ):
        """Test building a bespoke binary carrying a file."""
        output = tmp_path / "hello_file"
        build_cmd(_parse("--file", str(payload_file), str(exe_file), str(output)))

        assert read_named_file("payload.bin", locate=lambda: output) == test_payload

    def test_build_invalid_map_item(self, exe_file: Path, tmp_path: Path, capsys):
        output = tmp_path / "out"
        with pytest.raises(SystemExit):
            build_cmd(_parse("--set", "no_separator", str(exe_file), str(output)))
        assert "invalid map item" in capsys.readouterr().out
        assert not output.exists()

    def test_build_exe_not_found(self, tmp_path: Path):
        with pytest.raises(SystemExit):
            build_cmd(
                _parse(
                    "--set", "a=b", str(tmp_path / "not_exist"), str(tmp_path / "out")
                )
            )

    def test_build_payload_not_found(self, exe_file: Path, tmp_path: Path, capsys):
        """Test no partial output is left when build fails."""
        output = tmp_path / "out"
        with pytest.raises(SystemExit):
            build_cmd(
                _parse(
                    "--file", str(tmp_path / "not_exist"), str(exe_file), str(output)
                )
            )

        assert "failed to build" in capsys.readouterr().out
        assert sorted(_p.name for _p in tmp_path.iterdir()) == ["hello"]
