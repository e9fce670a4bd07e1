"""
Session state for the single connected MCP client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .schemas import ClientInfo


class SessionState(Enum):
    """Protocol lifecycle states."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


@dataclass
class ServerSession:
    """
    Process-wide handshake state.

    ``initialized`` starts False, becomes True on the first successful
    ``initialize`` and is never reset. Client details are kept for logging
    only; they do not alter server behavior.
    """

    initialized: bool = False
    client_info: Optional[ClientInfo] = None
    client_capabilities: Dict[str, Any] = field(default_factory=dict)
    client_protocol_version: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return SessionState.READY if self.initialized else SessionState.UNINITIALIZED

    def mark_initialized(
        self,
        client_info: Optional[ClientInfo] = None,
        client_capabilities: Optional[Dict[str, Any]] = None,
        client_protocol_version: Optional[str] = None,
    ) -> None:
        """Record the handshake and enter the ready state."""
        self.client_info = client_info
        self.client_capabilities = client_capabilities or {}
        self.client_protocol_version = client_protocol_version
        self.initialized = True
