"""
Connectivity Oracle.

Answers one question synchronously before every sync attempt: is the remote
service reachable right now? The answer is a hint, not a guarantee; callers
still treat a failed remote call as offline.
"""

from __future__ import annotations

import socket
from typing import Protocol

from loguru import logger

from learnsync.config import Settings


class ConnectivityOracle(Protocol):
    """Anything that can report current network reachability."""

    def is_online(self) -> bool: ...


class SocketConnectivityOracle:
    """Reachability check via a TCP connect to the API host."""

    def __init__(self, host: str, port: int, timeout_seconds: float = 2.0):
        self.host = host
        self.port = port
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> SocketConnectivityOracle:
        host, port = settings.connectivity_target
        return cls(
            host=host,
            port=port,
            timeout_seconds=settings.connectivity_timeout_seconds,
        )

    def is_online(self) -> bool:
        try:
            with socket.create_connection(
                (self.host, self.port), timeout=self.timeout_seconds
            ):
                return True
        except (socket.timeout, OSError) as exc:
            logger.debug("Connectivity probe to {}:{} failed: {}", self.host, self.port, exc)
            return False


class StaticConnectivity:
    """Fixed answer, for offline-only builds and tests."""

    def __init__(self, online: bool):
        self.online = online

    def is_online(self) -> bool:
        return self.online
