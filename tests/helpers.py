"""Fake transport objects shared by the test suite."""

import json
from typing import Any, Iterable, List, Optional

from starlette.websockets import WebSocketState


class FakeConnection:
    """Records outbound frames; optionally fails every send."""

    def __init__(self, fail: bool = False):
        self.sent: List[str] = []
        self.closed: Optional[tuple] = None
        self.fail = fail
        self.application_state = WebSocketState.CONNECTED
        self.client_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("connection reset by peer")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: Optional[str] = None) -> None:
        self.closed = (code, reason)
        self.application_state = WebSocketState.DISCONNECTED

    @property
    def messages(self) -> List[Any]:
        return [json.loads(data) for data in self.sent]


class FakeWebSocket(FakeConnection):
    """Minimal stand-in for ``fastapi.WebSocket`` fed from a list of frames.

    A frame that is an exception instance is raised from ``receive`` instead.
    Once the frames run out the peer disconnects.
    """

    def __init__(self, frames: Iterable[Any] = (), fail: bool = False):
        super().__init__(fail=fail)
        self.accepted = False
        self._inbound = list(frames)

    async def accept(self) -> None:
        self.accepted = True

    async def receive(self) -> dict:
        if not self._inbound:
            self.client_state = WebSocketState.DISCONNECTED
            return {"type": "websocket.disconnect", "code": 1000}
        frame = self._inbound.pop(0)
        if isinstance(frame, BaseException):
            raise frame
        key = "bytes" if isinstance(frame, bytes) else "text"
        return {"type": "websocket.receive", key: frame}
