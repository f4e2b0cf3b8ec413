from __future__ import annotations

import logging
from typing import Any, Optional

from starlette.websockets import WebSocketState

from .errors import SendFailure

logger = logging.getLogger(__name__)


class Client:
    """A connected peer: caller-supplied *identity* plus the transport's *connection*.

    The connection is owned by the transport; the client only references it for
    sending and closing.
    """

    __slots__ = ("identity", "connection")

    def __init__(self, identity: str, connection: Any):
        self.identity = identity
        self.connection = connection

    def __repr__(self) -> str:
        return f"Client({self.identity!r})"

    @property
    def is_open(self) -> bool:
        app_state = getattr(self.connection, "application_state", WebSocketState.CONNECTED)
        client_state = getattr(self.connection, "client_state", WebSocketState.CONNECTED)
        return app_state == WebSocketState.CONNECTED and client_state == WebSocketState.CONNECTED

    async def send(self, data: str) -> None:
        """Send one text frame. Any transport error surfaces as :class:`SendFailure`."""
        try:
            await self.connection.send_text(data)
        except Exception as exc:
            raise SendFailure(self.identity, exc) from exc

    async def close(self, code: int = 1000, reason: Optional[str] = None) -> None:
        if not self.is_open:
            return
        try:
            await self.connection.close(code=code, reason=reason)
        except Exception as exc:
            # Already torn down by the peer
            logger.debug("Close of %r failed: %r", self.identity, exc)


__all__ = ["Client"]
