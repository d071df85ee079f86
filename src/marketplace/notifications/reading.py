"""Listing and acknowledging a user's notifications."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.access import Caller, Role, ensure
from marketplace.notifications.notification import Notification
from marketplace.shared.lookup import load
from marketplace.shared.pagination import Page, paginate


def list_notifications(caller: Caller, unread_only: bool = False, page: int | None = 1, per_page: int | None = 20) -> Page:
    """The caller's own notifications, newest first."""
    criteria = {"recipient_id": caller.user_id}
    if unread_only:
        criteria["is_read"] = False
    queryset = current_domain.repository_for(Notification)._dao.query.filter(**criteria)
    return paginate(queryset, page, per_page)


@marketplace.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=Notification)
class NotificationHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        caller = Caller.from_command(command)
        notification = load(Notification, command.notification_id, "Notification")
        ensure(str(notification.recipient_id) == caller.user_id, "You may only read your own notifications")
        notification.mark_read()
        current_domain.repository_for(Notification).add(notification)
        return str(notification.id)
