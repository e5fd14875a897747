"""
In-process notification channel.

One channel per application instance, handed to route handlers through a
FastAPI dependency. Publishers never need to know who is listening;
subscribers register a callback and get back a function that removes it.
"""
import itertools
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, List

from .utils.logger import setup_logger

logger = setup_logger(__name__)

NOTICE_KINDS = ("success", "error", "info", "warning")


@dataclass(frozen=True)
class Notice:
    id: int
    kind: str
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict:
        return {"id": self.id, "kind": self.kind, "message": self.message,
                "created_at": self.created_at.isoformat()}


Subscriber = Callable[[Notice], None]


class NotificationChannel:
    def __init__(self, history: int = 50):
        self._subscribers: List[Subscriber] = []
        self._recent: Deque[Notice] = deque(maxlen=history)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, kind: str, message: str) -> Notice:
        if kind not in NOTICE_KINDS:
            raise ValueError(f"unknown notice kind: {kind}")
        with self._lock:
            notice = Notice(id=next(self._ids), kind=kind, message=message)
            self._recent.append(notice)
            subscribers = list(self._subscribers)
        for cb in subscribers:
            try:
                cb(notice)
            except Exception:
                # one broken subscriber must not block the others
                logger.exception(f"notification subscriber failed for notice {notice.id}")
        return notice

    def recent(self, limit: int | None = None) -> List[Notice]:
        with self._lock:
            items = list(self._recent)
        return items[-limit:] if limit else items


def log_subscriber(notice: Notice) -> None:
    level = "warning" if notice.kind in ("error", "warning") else "info"
    getattr(logger, level)(f"[{notice.kind}] {notice.message}")
