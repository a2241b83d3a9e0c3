"""
Server-Sent Events broadcast channel

Each connected client owns a bounded asyncio.Queue. Publishing never
blocks: a client that falls a full queue behind is dropped and its
stream ends.
"""
import asyncio
import json
import logging
import itertools
from typing import Any, AsyncIterator, Callable, Optional, Set

from buzzhub.utils import now_ms


logger = logging.getLogger(__name__)

_client_ids = itertools.count(1)


def format_event(event: Optional[str], data: Any) -> str:
    """
    Encode one SSE frame

    Example:
        >>> format_event("ping", {"ts": 1})
        'event: ping\\ndata: {"ts":1}\\n\\n'
    """
    payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    head = f"event: {event}\n" if event else ""
    return f"{head}data: {payload}\n\n"


class SSEClient:
    """One open /events connection"""

    def __init__(self, queue_size: int):
        self.id = next(_client_ids)
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.closed = False

    def send(self, event: str, data: Any) -> bool:
        """Queue a frame; False if the client is closed or too far behind"""
        if self.closed:
            return False
        try:
            self.queue.put_nowait(format_event(event, data))
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        self.closed = True
        # Wake the stream so it notices the close
        try:
            self.queue.put_nowait(None)
        except asyncio.QueueFull:
            pass


class Broadcaster:
    """Set of connected clients with fan-out publish"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self.clients: Set[SSEClient] = set()

    def __len__(self) -> int:
        return len(self.clients)

    def connect(self) -> SSEClient:
        client = SSEClient(self.queue_size)
        self.clients.add(client)
        logger.info(f"🔌 Client {client.id} connected ({len(self.clients)} total)")
        return client

    def disconnect(self, client: SSEClient) -> None:
        if client in self.clients:
            self.clients.discard(client)
            logger.info(f"🔌 Client {client.id} disconnected ({len(self.clients)} total)")
        client.closed = True

    def publish(self, event: str, data: Any) -> int:
        """
        Send an event to every connected client

        Returns:
            Number of clients the event was queued for
        """
        delivered = 0
        for client in list(self.clients):
            if client.send(event, data):
                delivered += 1
            else:
                logger.warning(f"⚠️ Dropping slow client {client.id}")
                self.clients.discard(client)
                client.close()
        return delivered

    def clear(self) -> None:
        for client in list(self.clients):
            client.close()
        self.clients.clear()

    async def stream(
        self,
        client: SSEClient,
        initial_state: Callable[[], Any],
        ping_interval: float = 30.0,
        is_disconnected: Optional[Callable[[], Any]] = None,
    ) -> AsyncIterator[str]:
        """
        Yield SSE frames for one client until it goes away

        Order: a ": connected" comment, a hello event, the current
        quiz_state, then published events. A ping is sent after
        ping_interval seconds without traffic.
        """
        try:
            yield ": connected\n\n"
            yield format_event("hello", {"ts": now_ms()})
            yield format_event("quiz_state", initial_state())
            while not client.closed:
                try:
                    frame = await asyncio.wait_for(client.queue.get(), timeout=ping_interval)
                except asyncio.TimeoutError:
                    if is_disconnected is not None and await is_disconnected():
                        break
                    frame = format_event("ping", {"ts": now_ms()})
                if frame is None:
                    break
                yield frame
        finally:
            self.disconnect(client)
