# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Harness settings read from an env file and the process environment."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .readiness import DEFAULT_INTERVAL, DEFAULT_MAX_ATTEMPTS, InvalidInput

PACKAGE_CONF_DIR = Path(__file__).resolve().parent / "conf"
DEFAULT_ENV_FILE = Path(".env")
DEFAULT_BINLOG_IMAGE = "mysql:5.7.30"
DEFAULT_ROOT_PASSWORD = "password"  # pragma: allowlist secret


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def load_env(path: Path) -> Dict[str, str]:
    """Read ``KEY=value`` lines, accepting ``export`` prefixes and quoted values.

    Later assignments of the same key win, as they do when the file is
    sourced by a shell.
    """
    env: Dict[str, str] = {}
    if not path.exists():
        return env
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        env[key] = _unquote(value.strip())
    return env


def _int_setting(values: Mapping[str, str], key: str, default: int) -> int:
    raw = values.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{key} must be an integer, got {raw!r}") from None


def _float_setting(values: Mapping[str, str], key: str, default: float) -> float:
    raw = values.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInput(f"{key} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise InvalidInput(f"{key} must be a finite number, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    docker_bin: str = "docker"
    root_password: str = DEFAULT_ROOT_PASSWORD
    config_dir: Path = PACKAGE_CONF_DIR
    binlog_image: str = DEFAULT_BINLOG_IMAGE
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    interval: float = DEFAULT_INTERVAL

    @property
    def docker_command(self) -> List[str]:
        return self.docker_bin.split()

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ) -> "Settings":
        """Merge ``env_file`` (or ``$ENV_FILE``) with ``environ``; ``environ`` wins."""
        environ = os.environ if environ is None else environ
        if env_file is None:
            env_file = Path(environ.get("ENV_FILE") or DEFAULT_ENV_FILE)
        values = load_env(env_file)
        values.update({key: value for key, value in environ.items()})

        config_dir = values.get("MYSQL_CONFIG_DIR")
        return cls(
            docker_bin=values.get("DOCKER_BIN") or "docker",
            root_password=values.get("MYSQL_ROOT_PASSWORD") or DEFAULT_ROOT_PASSWORD,
            config_dir=Path(config_dir).resolve() if config_dir else PACKAGE_CONF_DIR,
            binlog_image=values.get("MYSQL_BINLOG_IMAGE") or DEFAULT_BINLOG_IMAGE,
            max_attempts=_int_setting(values, "READY_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            interval=_float_setting(values, "READY_INTERVAL", DEFAULT_INTERVAL),
        )
