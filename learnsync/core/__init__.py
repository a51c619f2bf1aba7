"""
Core Module - Network-facing collaborators.

Components:
- connectivity: Connectivity oracle (is the remote reachable right now?)
- learn_client: HTTP client for the learning platform API
"""

from learnsync.core.connectivity import (
    ConnectivityOracle,
    SocketConnectivityOracle,
    StaticConnectivity,
)
from learnsync.core.learn_client import (
    LearnApiClient,
    RemoteError,
    RemoteRejectedError,
    RemoteUnavailableError,
)

__all__ = [
    # Connectivity
    "ConnectivityOracle",
    "SocketConnectivityOracle",
    "StaticConnectivity",
    # Platform client
    "LearnApiClient",
    "RemoteError",
    "RemoteRejectedError",
    "RemoteUnavailableError",
]
