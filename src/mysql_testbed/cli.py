# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Command entry points for starting, probing and inspecting test servers.

Every command takes ``argv`` including the program name, mirroring
``sys.argv``, and returns the process exit status.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from . import binlog, containers
from .config import Settings
from .process import SubprocessRunner
from .readiness import InvalidInput, ReadinessTimeout, WaitCancelled, validate_port, wait_until_ready

USAGE_EXIT = 4
TIMEOUT_EXIT = 3
CANCELLED_EXIT = 130


def _usage(prog: str, args: str) -> int:
    print(f"Usage: {prog} {args}", file=sys.stderr)
    return USAGE_EXIT


def _prog(argv: List[str]) -> str:
    return Path(argv[0]).name if argv else "mysql-testbed"


def _guarded(tag: str, prog: str, usage: str, action: Callable[[], int]) -> int:
    try:
        return action()
    except InvalidInput as exc:
        print(f"[{tag}] {exc}", file=sys.stderr)
        return _usage(prog, usage)
    except ReadinessTimeout as exc:
        print(
            f"[{tag}] failed to reach localhost:{exc.port} within {exc.attempts} attempts, check local port setting",
            file=sys.stderr,
        )
        return TIMEOUT_EXIT
    except (WaitCancelled, KeyboardInterrupt):
        print(f"[{tag}] cancelled", file=sys.stderr)
        return CANCELLED_EXIT


def wait_port(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    prog = _prog(argv)
    if len(argv) != 3:
        return _usage(prog, "name port")

    def action() -> int:
        cfg = settings or Settings.from_env()
        name, port = argv[1], validate_port(argv[2])
        wait_until_ready(port, cfg.max_attempts, cfg.interval)
        print(f"[wait-port] {name} ready on localhost:{port}", file=sys.stderr)
        return 0

    return _guarded("wait-port", prog, "name port", action)


def _start_profile(profile_name: str, argv: Optional[List[str]], settings: Optional[Settings], wait: bool) -> int:
    argv = list(sys.argv if argv is None else argv)
    prog = _prog(argv)
    if len(argv) != 3:
        return _usage(prog, "name port")

    def action() -> int:
        cfg = settings or Settings.from_env()
        request = containers.ContainerRequest(
            profile=containers.get_profile(profile_name),
            container_name=argv[1],
            published_port=argv[2],
            config_dir=cfg.config_dir,
            root_password=cfg.root_password,
        )
        runner = SubprocessRunner()
        if not wait:
            return containers.start_container(request, runner, cfg.docker_command)
        status = containers.start_and_wait(
            request,
            runner,
            cfg.docker_command,
            max_attempts=cfg.max_attempts,
            interval=cfg.interval,
        )
        if status == 0:
            print(f"[mysql-start] {request.container_name} ready on localhost:{request.published_port}", file=sys.stderr)
        return status

    return _guarded("mysql-start", prog, "name port", action)


def start_mysql_55(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    return _start_profile("mysql-5.5", argv, settings, wait=False)


def start_mysql_57_stmt(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    return _start_profile("mysql-5.7-stmt", argv, settings, wait=False)


def prepare_binlog(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    return _start_profile("mysql-5.7-binlog", argv, settings, wait=True)


def stop(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    prog = _prog(argv)
    if len(argv) != 2:
        return _usage(prog, "name")

    def action() -> int:
        cfg = settings or Settings.from_env()
        return containers.stop_container(argv[1], SubprocessRunner(), cfg.docker_command)

    return _guarded("mysql-stop", prog, "name", action)


def decode_binlog(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    prog = _prog(argv)
    if len(argv) != 2:
        return _usage(prog, "filename")

    def action() -> int:
        cfg = settings or Settings.from_env()
        return binlog.decode_binlog(Path(argv[1]), SubprocessRunner(), cfg.binlog_image, cfg.docker_command)

    return _guarded("binlog", prog, "filename", action)


COMMANDS: Dict[str, Callable[..., int]] = {
    "wait-port": wait_port,
    "start-5.5": start_mysql_55,
    "start-5.7-stmt": start_mysql_57_stmt,
    "prepare-binlog": prepare_binlog,
    "stop": stop,
    "decode-binlog": decode_binlog,
}


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    prog = _prog(argv)
    if len(argv) < 2 or argv[1] not in COMMANDS:
        return _usage(prog, "{" + ",".join(COMMANDS) + "} ...")
    command = argv[1]
    return COMMANDS[command]([f"{prog} {command}", *argv[2:]])


if __name__ == "__main__":  # pragma: no cover - exercised via console scripts
    sys.exit(main())
