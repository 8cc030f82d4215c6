from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class Notifier:
    """Transient notifications (toasts) waiting to be shown."""

    def __init__(self):
        self._pending: List[Notification] = []

    def success(self, message: str) -> None:
        self._pending.append(Notification("success", message))

    def error(self, message: str) -> None:
        self._pending.append(Notification("error", message))

    def drain(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending
