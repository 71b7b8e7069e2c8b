# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

import os
import socket
import stat

import pytest


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class RecordingRunner:
    def __init__(self, status=0):
        self.status = status
        self.commands = []

    def run(self, command):
        self.commands.append(list(command))
        return self.status


class FakeClock:
    """Counts probes and sleeps; the service starts listening at ``ready_at``."""

    def __init__(self, ready_at=None):
        self.now = 0.0
        self.ready_at = ready_at
        self.probes = []
        self.sleeps = []

    def probe(self, host, port, timeout):
        self.probes.append((host, port))
        return self.ready_at is not None and self.now >= self.ready_at

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def free_port():
    return find_free_port()


@pytest.fixture
def listener():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    sock.listen(16)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def fake_docker(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    log = tmp_path / "docker.log"
    fake_bin = bin_dir / "docker"
    fake_bin.write_text(
        "#!/usr/bin/env bash\n"
        'printf \'%s\\n\' "$@" >> "$FAKE_DOCKER_LOG"\n'
        'exit "${FAKE_DOCKER_EXIT:-0}"\n'
    )
    fake_bin.chmod(stat.S_IRWXU)
    monkeypatch.setenv("PATH", f"{bin_dir}:{os.environ['PATH']}")
    monkeypatch.setenv("FAKE_DOCKER_LOG", str(log))
    monkeypatch.delenv("FAKE_DOCKER_EXIT", raising=False)

    def calls():
        if not log.exists():
            return []
        return log.read_text().splitlines()

    return calls


@pytest.fixture
def make_clock():
    return FakeClock


@pytest.fixture
def make_runner():
    return RecordingRunner
