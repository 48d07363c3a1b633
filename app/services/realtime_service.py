import logging
from app.models.expenses import Expense
from app.models.groups import Group
from app.models.settlements import Settlement
from app.models.users import User
from app.rabbitmq.config import rabbitmq_config
from app.rabbitmq.producer import get_rabbitmq_producer
from app.schemas.event_schema import RealtimeEvent, RealtimeEventType

logger = logging.getLogger(__name__)


def expense_added_event(expense: Expense, payer: User) -> RealtimeEvent:
    return RealtimeEvent(
        event=RealtimeEventType.expense_added,
        group_id=expense.group_id,
        payload={
            "id": expense.id,
            "groupId": expense.group_id,
            "description": expense.description,
            "amount": str(expense.amount),
            "paidBy": payer.display_name,
        },
    )


def expense_deleted_event(expense: Expense) -> RealtimeEvent:
    return RealtimeEvent(
        event=RealtimeEventType.expense_deleted,
        group_id=expense.group_id,
        payload={"id": expense.id},
    )


def debt_settled_event(settlement: Settlement) -> RealtimeEvent:
    return RealtimeEvent(
        event=RealtimeEventType.debt_settled,
        group_id=settlement.group_id,
        payload={
            "id": settlement.id,
            "groupId": settlement.group_id,
            "fromUserId": settlement.from_user_id,
            "toUserId": settlement.to_user_id,
            "amount": str(settlement.amount),
        },
    )


def member_joined_event(group: Group, user: User) -> RealtimeEvent:
    return RealtimeEvent(
        event=RealtimeEventType.member_joined,
        group_id=group.id,
        payload={"groupId": group.id, "userId": user.id, "name": user.display_name},
    )


def broadcast(event: RealtimeEvent) -> bool:
    """Emit an event on the group's realtime channel. Returns False if it was not published."""
    if not rabbitmq_config.enabled:
        logger.info(f"RabbitMQ disabled, dropping realtime event {event.event.value} for group {event.group_id}")
        return False

    return get_rabbitmq_producer().publish_group_event(event.group_id, event.event.value, event.payload)
