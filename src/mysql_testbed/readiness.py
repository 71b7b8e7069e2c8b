# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Block until a local TCP port accepts connections.

The waiter makes at most ``max_attempts`` connect probes against
``host:port``, pausing a constant ``interval`` between failed probes. A
successful first probe returns without sleeping; ``N`` failed probes
sleep exactly ``N - 1`` times before :class:`ReadinessTimeout` is raised.
"""

from __future__ import annotations

import asyncio
import math
import socket
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

DEFAULT_HOST = "localhost"
DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_INTERVAL = 1.0
DEFAULT_PROBE_TIMEOUT = 1.0

Probe = Callable[[str, int, float], bool]


class InvalidInput(ValueError):
    """Raised for malformed arguments before any probe or process launch."""


class ReadinessTimeout(TimeoutError):
    """Attempt budget spent without a successful probe.

    ``TimeoutError`` is an ``OSError`` subclass, so catch this before any
    ``except OSError`` that wraps a wait.
    """

    def __init__(self, attempts: int, port: int, host: str = DEFAULT_HOST):
        super().__init__(f"{host}:{port} not reachable after {attempts} attempt(s)")
        self.attempts = attempts
        self.port = port
        self.host = host

    def __reduce__(self):
        return type(self), (self.attempts, self.port, self.host)


class WaitCancelled(RuntimeError):
    def __init__(self, attempts: int, port: int):
        super().__init__(f"wait for port {port} cancelled after {attempts} attempt(s)")
        self.attempts = attempts
        self.port = port

    def __reduce__(self):
        return type(self), (self.attempts, self.port)


@dataclass
class ProbeAttempt:
    target_port: int
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    interval: float = DEFAULT_INTERVAL
    attempt_count: int = 0

    def record_failure(self) -> None:
        if self.attempt_count >= self.max_attempts:
            raise RuntimeError("attempt budget already exhausted")
        self.attempt_count += 1

    @property
    def exhausted(self) -> bool:
        return self.attempt_count >= self.max_attempts


def validate_port(port) -> int:
    """Coerce ``port`` to an int in 1..65535 or raise :class:`InvalidInput`."""
    if isinstance(port, bool):
        raise InvalidInput(f"invalid port: {port!r}")
    try:
        value = int(port)
    except (TypeError, ValueError):
        raise InvalidInput(f"invalid port: {port!r}") from None
    if isinstance(port, float) and value != port:
        raise InvalidInput(f"invalid port: {port!r}")
    if not 1 <= value <= 65535:
        raise InvalidInput(f"port out of range: {value}")
    return value


def check_wait_args(port, max_attempts: int, interval: float) -> ProbeAttempt:
    target = validate_port(port)
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts <= 0:
        raise InvalidInput(f"max_attempts must be a positive integer, got {max_attempts!r}")
    try:
        seconds = float(interval)
    except (TypeError, ValueError):
        raise InvalidInput(f"invalid interval: {interval!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidInput(f"interval must be a positive finite number, got {interval!r}")
    return ProbeAttempt(target_port=target, max_attempts=max_attempts, interval=seconds)


def tcp_probe(host: str, port: int, timeout: float = DEFAULT_PROBE_TIMEOUT) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def wait_until_ready(
    port,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    *,
    host: str = DEFAULT_HOST,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    probe: Optional[Probe] = None,
    sleep: Optional[Callable[[float], None]] = None,
    cancel: Optional[threading.Event] = None,
) -> None:
    """Return once ``host:port`` accepts a connection.

    Raises :class:`InvalidInput` before probing when the arguments are
    malformed, :class:`ReadinessTimeout` once the attempt budget is spent,
    and :class:`WaitCancelled` when ``cancel`` is set during a pause.
    ``sleep`` is ignored when ``cancel`` is given; the pause then waits on
    the event instead.
    """
    state = check_wait_args(port, max_attempts, interval)
    probe = probe or tcp_probe
    sleep = sleep or time.sleep

    while True:
        if probe(host, state.target_port, probe_timeout):
            return
        state.record_failure()
        if state.exhausted:
            raise ReadinessTimeout(state.attempt_count, state.target_port, host)
        if cancel is not None:
            if cancel.wait(state.interval):
                raise WaitCancelled(state.attempt_count, state.target_port)
        else:
            sleep(state.interval)


async def async_tcp_probe(host: str, port: int, timeout: float = DEFAULT_PROBE_TIMEOUT) -> bool:
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def async_wait_until_ready(
    port,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    *,
    host: str = DEFAULT_HOST,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> None:
    """Event-loop flavour of :func:`wait_until_ready`.

    Task cancellation during a pause surfaces as ``asyncio.CancelledError``.
    """
    state = check_wait_args(port, max_attempts, interval)
    while True:
        if await async_tcp_probe(host, state.target_port, probe_timeout):
            return
        state.record_failure()
        if state.exhausted:
            raise ReadinessTimeout(state.attempt_count, state.target_port, host)
        await asyncio.sleep(state.interval)


async def wait_until_all_ready(
    ports: Iterable[int],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    *,
    host: str = DEFAULT_HOST,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> None:
    """Wait on several ports at once.

    The first failure cancels the remaining waiters, which are awaited
    before the failure is re-raised.
    """
    targets: List[int] = [validate_port(port) for port in ports]
    check_wait_args(targets[0] if targets else 1, max_attempts, interval)
    tasks = [
        asyncio.ensure_future(
            async_wait_until_ready(
                target,
                max_attempts,
                interval,
                host=host,
                probe_timeout=probe_timeout,
            )
        )
        for target in targets
    ]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
