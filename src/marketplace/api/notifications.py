"""FastAPI routes for the caller's notifications."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.caller import command_caller, current_caller
from marketplace.api.errors import ok
from marketplace.api.params import query_of
from marketplace.api.schemas import NotificationQuery, NotificationResponse, PageResponse
from marketplace.identity.access import Caller
from marketplace.notifications.notification import Notification
from marketplace.notifications.reading import MarkNotificationRead, list_notifications

notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.get("")
async def read_notifications(
    caller: Caller = Depends(current_caller),
    query: NotificationQuery = Depends(query_of(NotificationQuery)),
) -> dict:
    result = list_notifications(caller, **query.model_dump())
    return ok(PageResponse.of(result, NotificationResponse))


@notification_router.patch("/{notification_id}/read")
async def mark_read(notification_id: str, caller: Caller = Depends(current_caller)) -> dict:
    current_domain.process(
        MarkNotificationRead(notification_id=notification_id, **command_caller(caller)), asynchronous=False
    )
    return ok(NotificationResponse.model_validate(current_domain.repository_for(Notification).get(notification_id)))
