from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class MatchWebSocketHub:
    """In-process WebSocket fan-out keyed by match_id.

    A new connection can be greeted with the match's current snapshot so late
    joiners don't wait for the next turn. Payloads must be JSON-serializable.
    Sends run on the event loop that owns the hub; the turn loop thread reaches
    it through `asyncio.run_coroutine_threadsafe`.
    """

    def __init__(self) -> None:
        self._by_match: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, match_id: str, websocket: WebSocket, *, greeting: dict[str, Any] | None = None) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_match[match_id].add(websocket)
        if greeting is not None:
            await self._send(match_id, websocket, greeting)

    async def disconnect(self, match_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_match.get(match_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_match.pop(match_id, None)

    def connection_count(self, match_id: str) -> int:
        return len(self._by_match.get(match_id, ()))

    async def broadcast(self, match_id: str, payload: dict[str, Any]) -> None:
        async with self._lock:
            conns = list(self._by_match.get(match_id, ()))

        for ws in conns:
            await self._send(match_id, ws, payload)

    async def close_match(self, match_id: str) -> int:
        """Close and forget every connection of a cancelled match. Returns how many."""

        async with self._lock:
            conns = self._by_match.pop(match_id, set())

        for ws in conns:
            try:
                await ws.close()
            except RuntimeError:
                # Already closed by the client.
                logger.debug("socket for match %s was already closed", match_id)
        return len(conns)

    async def _send(self, match_id: str, ws: WebSocket, payload: dict[str, Any]) -> None:
        try:
            await ws.send_json(payload)
        except Exception:
            logger.debug("dropping dead socket for match %s", match_id, exc_info=True)
            await self.disconnect(match_id, ws)
