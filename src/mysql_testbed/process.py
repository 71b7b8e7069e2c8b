# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Run external commands and report their exit status."""

from __future__ import annotations

import shlex
import subprocess
import sys
from typing import Optional, Protocol, Sequence

COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


class ProcessRunner(Protocol):
    def run(self, command: Sequence[str]) -> int:
        ...


class SubprocessRunner:
    """Launch commands with inherited stdio and return their exit code."""

    def __init__(self, cwd: Optional[str] = None, echo: bool = False):
        self.cwd = cwd
        self.echo = echo

    def run(self, command: Sequence[str]) -> int:
        cmd = list(command)
        if self.echo:
            print(f"[run] {shlex.join(cmd)}", file=sys.stderr)
        try:
            result = subprocess.run(cmd, cwd=self.cwd, check=False)
        except FileNotFoundError:
            print(f"[run] command not found: {cmd[0]}", file=sys.stderr)
            return COMMAND_NOT_FOUND
        except PermissionError:
            print(f"[run] command not executable: {cmd[0]}", file=sys.stderr)
            return COMMAND_NOT_EXECUTABLE
        return result.returncode
