"""Registry of live direct-relay clients keyed by identity."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from .client import Client

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Lock-guarded ``identity -> Client`` map.

    Identities are unique: registering an identity that is already present
    replaces the earlier client, which is handed back to the caller to close.
    """

    def __init__(self) -> None:
        self._clients: Dict[str, Client] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, identity: object) -> bool:
        return identity in self._clients

    async def register(self, client: Client) -> Optional[Client]:
        """Add *client*; return the client it replaced, if any."""
        async with self._lock:
            prior = self._clients.get(client.identity)
            self._clients[client.identity] = client
        if prior is not None and prior is not client:
            logger.info("Identity %r reconnected; replacing prior connection", client.identity)
            return prior
        return None

    async def unregister(self, identity: str, client: Optional[Client] = None) -> Optional[Client]:
        """Remove *identity*. A no-op when it is not registered.

        If *client* is given, the entry is removed only when it still refers to
        that client, so a replaced connection closing late leaves its successor
        in place.
        """
        async with self._lock:
            current = self._clients.get(identity)
            if current is None or (client is not None and current is not client):
                return None
            del self._clients[identity]
        return current

    async def lookup(self, identity: str) -> Optional[Client]:
        async with self._lock:
            return self._clients.get(identity)

    async def resolve(self, identities: Iterable[str]) -> List[Client]:
        """Look up several identities at once, skipping unknown and repeated ones."""
        async with self._lock:
            return [self._clients[i] for i in dict.fromkeys(identities) if i in self._clients]

    async def identities(self) -> List[str]:
        async with self._lock:
            return sorted(self._clients)

    async def clear(self) -> List[Client]:
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        return clients


__all__ = ["ClientRegistry"]
