"""Addressed delivery for the direct-relay variant."""
from __future__ import annotations

import logging
from typing import List

from .constants import CLOSE_SEND_FAILED, SEND_FAILED_REASON
from .errors import SendFailure
from .registry import ClientRegistry
from .schemas import Envelope

logger = logging.getLogger(__name__)


class MessageRouter:
    """Deliver envelopes to the live clients named in ``to``.

    Delivery is best effort and at most once: unknown or closed recipients are
    skipped, nothing is queued, and the sender is never told.
    """

    def __init__(self, registry: ClientRegistry):
        self.registry = registry

    async def deliver(self, envelope: Envelope) -> List[str]:
        """Send *envelope* to each distinct recipient; return who was sent to."""
        data = envelope.dumps()
        recipients = envelope.recipients()
        clients = await self.registry.resolve(recipients)
        if len(clients) < len(recipients):
            found = {c.identity for c in clients}
            logger.debug(
                "Dropping message from %r for offline recipients %s",
                envelope.sender,
                [r for r in recipients if r not in found],
            )

        delivered: List[str] = []
        for client in clients:
            if not client.is_open:
                continue
            try:
                await client.send(data)
            except SendFailure as exc:
                logger.warning("%s; unregistering", exc)
                await self.registry.unregister(client.identity, client)
                await client.close(code=CLOSE_SEND_FAILED, reason=SEND_FAILED_REASON)
                continue
            delivered.append(client.identity)
        return delivered


__all__ = ["MessageRouter"]
