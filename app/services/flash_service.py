"""Session-backed notifications shown on the next rendered page."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from fastapi import Request

from app.core.constants import NotificationVariant

SESSION_NOTIFICATIONS_KEY = "notifications"


@dataclass(frozen=True)
class Notification:
    """A transient message for the user."""

    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT

    @classmethod
    def success(cls, description: str) -> Notification:
        return cls(title="Success", description=description)

    @classmethod
    def error(cls, description: str) -> Notification:
        return cls(title="Error", description=description, variant=NotificationVariant.DESTRUCTIVE)

    @property
    def is_destructive(self) -> bool:
        return self.variant == NotificationVariant.DESTRUCTIVE


def push_notifications(request: Request, notifications: list[Notification]) -> None:
    """Queue notifications in the session for the next page render."""

    if not notifications:
        return
    queued = list(request.session.get(SESSION_NOTIFICATIONS_KEY) or [])
    queued.extend(
        {**asdict(notification), "variant": str(notification.variant)}
        for notification in notifications
    )
    request.session[SESSION_NOTIFICATIONS_KEY] = queued


def pop_notifications(request: Request) -> list[Notification]:
    """Return and clear the queued notifications."""

    raw_items = request.session.pop(SESSION_NOTIFICATIONS_KEY, None) or []
    notifications = []
    for item in raw_items:
        if not isinstance(item, dict):
            continue
        try:
            notifications.append(
                Notification(
                    title=str(item["title"]),
                    description=str(item["description"]),
                    variant=NotificationVariant(item.get("variant", "default")),
                )
            )
        except (KeyError, ValueError):
            continue
    return notifications
