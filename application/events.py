import logging
from typing import Awaitable, Callable, List

logger = logging.getLogger(__name__)

Subscriber = Callable[[], Awaitable[None]]


class TaskEvents:
    """The "tasks-changed" signal.

    Emitted after a successful remote write; subscribers re-read the collection.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def emit(self) -> None:
        for callback in list(self._subscribers):
            try:
                await callback()
            except Exception:
                logger.exception("tasks-changed subscriber failed")
