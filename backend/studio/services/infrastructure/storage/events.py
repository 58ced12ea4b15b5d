"""
Job change notifications.

The job store publishes one ``JobEvent`` per successful mutation. Observers
either register a callback or consume ``listen()`` as an async iterator; an
event is the only signal that a job changed.
"""

import asyncio
from dataclasses import asdict, dataclass, field
from threading import Lock
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from studio.core import get_logger
from studio.models import utc_now_iso

logger = get_logger(__name__, component="job_events")

JobEventCallback = Callable[["JobEvent"], None]


@dataclass(frozen=True)
class JobEvent:
    job_id: str
    action: str  # "created" | "updated" | "deleted"
    status: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class JobEventBus:
    """In-process publish/subscribe channel owned by the job store."""

    def __init__(self):
        self._subscribers: List[JobEventCallback] = []
        self._lock = Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, callback: JobEventCallback) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: JobEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception as exc:
                logger.error(
                    "Job event subscriber failed",
                    extra={"event_job_id": event.job_id, "action": event.action, "error": str(exc)},
                    exc_info=True,
                )

    async def listen(self, max_queue: int = 256) -> AsyncIterator[JobEvent]:
        """
        Yield events as they are published, from any thread.

        When the consumer falls behind by more than ``max_queue`` events the
        oldest pending event is dropped.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)

        def _put(event: JobEvent) -> None:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(event)

        def _enqueue(event: JobEvent) -> None:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(_put, event)

        unsubscribe = self.subscribe(_enqueue)
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()
