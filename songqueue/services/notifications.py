"""
Queue Event Hub
Pushes typed queue change events to subscribers of a reviewer's queue
"""
import asyncio
import logging
import threading
from typing import Dict, List, Optional, Tuple

from songqueue.schemas.queue import QueueEvent

logger = logging.getLogger(__name__)


class QueueEventHub:
    """
    In-process fan-out of queue change events.

    Every event carries a per-reviewer sequence number. A subscriber that sees
    a gap in the sequence (for example because its buffer overflowed and
    events were dropped) is expected to re-read the full queue.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: Dict[str, List[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]]] = {}
        self._sequences: Dict[str, int] = {}
        self._lock = threading.Lock()

    def subscribe(self, reviewer_id: str) -> asyncio.Queue:
        """Register a subscriber; must be called from a running event loop"""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        with self._lock:
            self._subscribers.setdefault(reviewer_id, []).append((loop, queue))
        logger.info(f"Queue subscriber added for reviewer: {reviewer_id}")
        return queue

    def unsubscribe(self, reviewer_id: str, queue: asyncio.Queue) -> None:
        with self._lock:
            subscribers = self._subscribers.get(reviewer_id, [])
            self._subscribers[reviewer_id] = [(loop, q) for loop, q in subscribers if q is not queue]
            if not self._subscribers[reviewer_id]:
                del self._subscribers[reviewer_id]
        logger.info(f"Queue subscriber removed for reviewer: {reviewer_id}")

    def subscriber_count(self, reviewer_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(reviewer_id, []))

    def current_sequence(self, reviewer_id: str) -> int:
        with self._lock:
            return self._sequences.get(reviewer_id, 0)

    def publish(
        self,
        event_type: str,
        reviewer_id: str,
        submission_id: Optional[str] = None,
        status: Optional[str] = None,
        queue_position: Optional[int] = None
    ) -> QueueEvent:
        """
        Publish an event to every subscriber of a reviewer

        Args:
            event_type: Event name, e.g. 'submission_enqueued'
            reviewer_id: Queue owner
            submission_id: Affected submission
            status: Submission status after the change
            queue_position: Submission position after the change

        Returns:
            QueueEvent: The event as delivered, including its sequence number
        """
        with self._lock:
            sequence = self._sequences.get(reviewer_id, 0) + 1
            self._sequences[reviewer_id] = sequence
            subscribers = list(self._subscribers.get(reviewer_id, []))

        event = QueueEvent(
            type=event_type,
            reviewer_id=reviewer_id,
            submission_id=submission_id,
            status=status,
            queue_position=queue_position,
            sequence=sequence
        )
        payload = event.model_dump()

        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(self._deliver, queue, payload)
            except RuntimeError:
                # Loop already closed; the socket handler will unsubscribe
                logger.debug(f"Dropping event for closed loop (reviewer {reviewer_id})")

        return event

    @staticmethod
    def _deliver(queue: asyncio.Queue, payload: dict) -> None:
        try:
            queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning(
                f"Subscriber buffer full, dropped event {payload['sequence']} "
                f"for reviewer {payload['reviewer_id']}"
            )


# Singleton instance
_event_hub = None


def get_event_hub() -> QueueEventHub:
    """Get singleton instance of QueueEventHub"""
    global _event_hub
    if _event_hub is None:
        _event_hub = QueueEventHub()
    return _event_hub
