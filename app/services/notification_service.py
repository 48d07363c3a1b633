import logging
from typing import List
from app.models.expenses import Expense
from app.models.groups import Group
from app.models.users import User
from app.rabbitmq.config import rabbitmq_config
from app.rabbitmq.producer import get_rabbitmq_producer
from app.schemas.event_schema import NotificationPayload, NotificationType

logger = logging.getLogger(__name__)


def member_joined_notifications(group: Group, new_user: User, recipients: List[User], by_code: bool = False) -> List[NotificationPayload]:
    """Tell existing members that someone joined the group"""
    if by_code:
        body = f'{new_user.display_name} joined "{group.name}" with the invite code.'
    else:
        body = f'{new_user.display_name} was added to "{group.name}".'

    return [
        NotificationPayload(
            user_id=recipient.id,
            email=recipient.email,
            type=NotificationType.group_join,
            title=f"{new_user.display_name} joined the group",
            body=body,
            data={"groupId": group.id, "groupName": group.name},
        )
        for recipient in recipients
        if recipient.id != new_user.id
    ]


def expense_added_notifications(group: Group, expense: Expense, payer: User, recipients: List[User]) -> List[NotificationPayload]:
    """Tell every member except the payer about a new expense"""
    return [
        NotificationPayload(
            user_id=recipient.id,
            email=recipient.email,
            type=NotificationType.group_transaction,
            title=f'New expense in "{group.name}"',
            body=f'{payer.display_name} added "{expense.description}" - {expense.amount}',
            data={
                "groupId": group.id,
                "groupName": group.name,
                "expenseId": expense.id,
                "expenseDescription": expense.description,
                "expenseAmount": str(expense.amount),
                "paidBy": payer.display_name,
            },
        )
        for recipient in recipients
        if recipient.id != payer.id
    ]


def dispatch_notification(notification: NotificationPayload) -> bool:
    """Hand a notification to the dispatcher queue. Returns False if it was not published."""
    if not rabbitmq_config.enabled:
        logger.info(f"RabbitMQ disabled, dropping {notification.type.value} notification for user {notification.user_id}")
        return False

    return get_rabbitmq_producer().publish_notification({
        "userId": notification.user_id,
        "email": notification.email,
        "type": notification.type.value,
        "title": notification.title,
        "body": notification.body,
        "data": notification.data,
    })
