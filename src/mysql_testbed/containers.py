# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""MySQL container launch profiles and the ``docker run`` lines they produce."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from packaging.version import InvalidVersion, Version

from .config import DEFAULT_ROOT_PASSWORD, PACKAGE_CONF_DIR
from .process import ProcessRunner
from .readiness import (
    DEFAULT_INTERVAL,
    DEFAULT_MAX_ATTEMPTS,
    InvalidInput,
    check_wait_args,
    validate_port,
    wait_until_ready,
)

MYSQL_PORT = 3306
DATA_MOUNT = "/mnt/data"
LEGACY_CONFIG_TARGET = "/etc/mysql/my.cnf"
CONFIG_TARGET = "/etc/mysql/mysql.conf.d/mysqld.cnf"
# mysql images before 5.7 have no mysql.conf.d include directory
CONFIG_D_SINCE = Version("5.7")


def image_version(image: str) -> Optional[Version]:
    _, _, tag = image.rpartition(":")
    if not tag or "/" in tag:
        return None
    match = re.match(r"v?(\d+(?:\.\d+)*)", tag)
    if not match:
        return None
    try:
        return Version(match.group(1))
    except InvalidVersion:
        return None


def default_config_target(image: str) -> str:
    version = image_version(image)
    if version is not None and version < CONFIG_D_SINCE:
        return LEGACY_CONFIG_TARGET
    return CONFIG_TARGET


@dataclass(frozen=True)
class ContainerProfile:
    name: str
    image: str
    config_name: str
    config_target: Optional[str] = None
    container_port: int = MYSQL_PORT
    mount_data_dir: bool = False

    @property
    def resolved_config_target(self) -> str:
        return self.config_target or default_config_target(self.image)


PROFILES: Dict[str, ContainerProfile] = {
    "mysql-5.5": ContainerProfile(name="mysql-5.5", image="mysql:5.5.50", config_name="mysqld-5.5.cnf"),
    "mysql-5.7-stmt": ContainerProfile(name="mysql-5.7-stmt", image="mysql:5.7.30", config_name="mysqld-stmt.cnf"),
    "mysql-5.7-binlog": ContainerProfile(
        name="mysql-5.7-binlog",
        image="mysql:5.7.30",
        config_name="mysqld.cnf",
        mount_data_dir=True,
    ),
}


def get_profile(name: str) -> ContainerProfile:
    try:
        return PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        raise InvalidInput(f"unknown profile {name!r} (known: {known})") from None


@dataclass(frozen=True)
class ContainerRequest:
    profile: ContainerProfile
    container_name: str
    published_port: int
    config_dir: Path = PACKAGE_CONF_DIR
    root_password: str = DEFAULT_ROOT_PASSWORD
    env: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.container_name:
            raise InvalidInput("container name must not be empty")
        object.__setattr__(self, "published_port", validate_port(self.published_port))

    @property
    def config_file(self) -> Path:
        return Path(self.config_dir).resolve() / self.profile.config_name


def build_run_command(request: ContainerRequest, docker_command: Sequence[str] = ("docker",)) -> List[str]:
    profile = request.profile
    cmd = list(docker_command) + [
        "run",
        "-d",
        "--rm",
        "--name",
        request.container_name,
        "-p",
        f"{request.published_port}:{profile.container_port}",
        "-v",
        f"{request.config_file}:{profile.resolved_config_target}",
    ]
    if profile.mount_data_dir:
        cmd += ["-v", f"{request.config_file.parent}:{DATA_MOUNT}"]
    env = {"MYSQL_ROOT_PASSWORD": request.root_password}
    env.update(request.env)
    for key, value in env.items():
        cmd += ["-e", f"{key}={value}"]
    cmd.append(profile.image)
    return cmd


def start_container(
    request: ContainerRequest,
    runner: ProcessRunner,
    docker_command: Sequence[str] = ("docker",),
) -> int:
    if not request.config_file.exists():
        raise InvalidInput(f"config file not found: {request.config_file}")
    print(
        f"[mysql-start] {request.container_name}: {request.profile.image} on port {request.published_port}",
        file=sys.stderr,
    )
    return runner.run(build_run_command(request, docker_command))


def stop_container(name: str, runner: ProcessRunner, docker_command: Sequence[str] = ("docker",)) -> int:
    if not name:
        raise InvalidInput("container name must not be empty")
    return runner.run(list(docker_command) + ["stop", name])


def start_and_wait(
    request: ContainerRequest,
    runner: ProcessRunner,
    docker_command: Sequence[str] = ("docker",),
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    **wait_kwargs,
) -> int:
    """Start the container and block until its published port answers.

    Returns the runtime's exit status without waiting when ``docker run``
    fails. :class:`~mysql_testbed.readiness.ReadinessTimeout` propagates.
    """
    check_wait_args(request.published_port, max_attempts, interval)
    status = start_container(request, runner, docker_command)
    if status != 0:
        print(f"[mysql-start] docker run exited with {status}", file=sys.stderr)
        return status
    wait_until_ready(request.published_port, max_attempts, interval, **wait_kwargs)
    return 0
