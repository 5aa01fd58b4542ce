import asyncio
import logging
from typing import Dict, Optional

from fastapi import WebSocket

SUBSCRIBER_QUEUE_SIZE = 64


class ConnectionManager:
    """Fan-out of crash events to every connected subscriber.

    Each subscriber owns a bounded queue. ``broadcast`` never awaits, so a slow
    socket can not hold up the tick loop; when a queue is full its oldest event
    is dropped to make room for the newest one. Personal replies never enter the
    queue and are never dropped.
    """

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE):
        self.queue_size = queue_size
        # subscriber queue -> lock serializing writes to that subscriber's socket
        self.active_connections: Dict[asyncio.Queue, asyncio.Lock] = {}

    def subscribe(self, snapshot: Optional[dict] = None) -> asyncio.Queue:
        """Register a subscriber

        Args:
            snapshot (Optional[dict]): Event delivered to this subscriber before any broadcast

        Returns:
            asyncio.Queue: queue the subscriber reads events from
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        if snapshot is not None:
            queue.put_nowait(snapshot)
        self.active_connections[queue] = asyncio.Lock()
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        self.active_connections.pop(queue, None)

    def broadcast(self, message: dict):
        for queue in list(self.active_connections):
            self._offer(queue, message)

    @staticmethod
    def _offer(queue: asyncio.Queue, message: dict):
        if queue.full():
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            logging.debug("Subscriber queue full, dropped oldest event")
        queue.put_nowait(message)

    def _send_lock(self, queue: asyncio.Queue) -> asyncio.Lock:
        lock = self.active_connections.get(queue)
        if lock is None:
            # already unsubscribed, the socket is going away
            lock = asyncio.Lock()
        return lock

    async def send_personal_message(self, message: dict, queue: asyncio.Queue, websocket: WebSocket):
        """Write a reply straight to one subscriber's socket, bypassing its event queue."""
        async with self._send_lock(queue):
            await websocket.send_json(message)

    async def pump(self, queue: asyncio.Queue, websocket: WebSocket):
        """Forward queued events to one websocket until it goes away."""
        while True:
            message = await queue.get()
            async with self._send_lock(queue):
                await websocket.send_json(message)
