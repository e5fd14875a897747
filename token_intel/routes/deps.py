from fastapi import Request

from ..notifications import NotificationChannel
from ..storage.db import get_db  # noqa: F401  re-exported for routers


def get_channel(request: Request) -> NotificationChannel:
    return request.app.state.notifications
