"""
Drains the outbound events returned by write operations.

Services never publish while their transaction is open; they return the
events next to their result and the route hands them to `dispatch_events`
as a background task, which runs after the commit and the response.
"""
import logging
from typing import Iterable, List, Union
from app.schemas.event_schema import NotificationPayload, RealtimeEvent
from app.services import notification_service, realtime_service

logger = logging.getLogger(__name__)

OutboundEvent = Union[NotificationPayload, RealtimeEvent]
OutboundEvents = List[OutboundEvent]


def dispatch_events(events: Iterable[OutboundEvent]) -> int:
    """
    Publish every event, best-effort.

    Failures are logged and never raised: a missing broker must not fail
    a write that already committed.

    Returns:
        int: Number of events published
    """
    published = 0
    for event in events:
        try:
            if isinstance(event, NotificationPayload):
                ok = notification_service.dispatch_notification(event)
            else:
                ok = realtime_service.broadcast(event)
        except Exception as e:
            logger.error(f"Failed to dispatch {type(event).__name__}: {e}")
            continue

        if ok:
            published += 1
        else:
            logger.warning(f"{type(event).__name__} was not published")

    return published
