"""
Capability negotiation for the initialize handshake.
"""

from typing import Any, Dict, Optional

import structlog

from .schemas import InitializeParams, ServerInfo

logger = structlog.get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = ["2024-11-05", "2025-03-26", "2025-06-18"]


class CapabilityNegotiator:
    """
    Builds the ``initialize`` result.

    The answer is fixed: the client's declared version and capabilities are
    accepted and logged but never change what the server advertises.
    """

    def __init__(self, server_info: Optional[ServerInfo] = None):
        self.server_info = server_info or ServerInfo()

    @property
    def capabilities(self) -> Dict[str, Any]:
        return {
            "tools": {"listChanged": False},
            "resources": {"subscribe": False, "listChanged": True},
            "prompts": {"listChanged": False},
        }

    def negotiate(self, params: InitializeParams) -> Dict[str, Any]:
        """
        Produce the initialize result for a client.

        Args:
            params: Decoded initialize parameters

        Returns:
            ``protocolVersion``, ``capabilities`` and ``serverInfo``
        """
        requested = params.protocolVersion
        if requested and requested not in SUPPORTED_PROTOCOL_VERSIONS:
            # Answered with our own version regardless
            logger.warning(
                "Unsupported protocol version requested",
                requested=requested,
                supported=SUPPORTED_PROTOCOL_VERSIONS,
                answering_with=PROTOCOL_VERSION,
            )

        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info.model_dump(),
        }
