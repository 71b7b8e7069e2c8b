# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Decode a binlog file with the ``mysqlbinlog`` shipped in the MySQL image."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Sequence

from .config import DEFAULT_BINLOG_IMAGE
from .process import ProcessRunner
from .readiness import InvalidInput

BINLOG_MOUNT = "/mnt/binlog"
DECODE_FLAGS = ("--base64-output=decode-rows", "--verbose")


def build_decode_command(
    binlog_path: Path,
    image: str = DEFAULT_BINLOG_IMAGE,
    docker_command: Sequence[str] = ("docker",),
) -> List[str]:
    path = Path(binlog_path).resolve()
    return list(docker_command) + [
        "run",
        "--rm",
        "--entrypoint=mysqlbinlog",
        "-v",
        f"{path}:{BINLOG_MOUNT}",
        image,
        *DECODE_FLAGS,
        BINLOG_MOUNT,
    ]


def decode_binlog(
    binlog_path: Path,
    runner: ProcessRunner,
    image: str = DEFAULT_BINLOG_IMAGE,
    docker_command: Sequence[str] = ("docker",),
) -> int:
    path = Path(binlog_path)
    if not path.is_file():
        raise InvalidInput(f"binlog file not found: {binlog_path}")
    print(f"[binlog] decoding {path.resolve()} with {image}", file=sys.stderr)
    return runner.run(build_decode_command(path, image, docker_command))
