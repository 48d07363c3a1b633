import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from app.db.database import utcnow
from app.models.expenses import Expense, ExpenseSplit, SplitType
from app.models.groups import Group
from app.schemas.expense_schema import ExpenseCreate
from app.services.event_dispatcher import OutboundEvents
from app.services.group_service import get_group_for_member, is_member, member_users
from app.services.notification_service import expense_added_notifications
from app.services.realtime_service import expense_added_event, expense_deleted_event
from app.utils.exceptions import ForbiddenError, InvalidError, NotFoundError
from app.utils.min_cash_flow import TOLERANCE, equal_split

logger = logging.getLogger(__name__)


def resolve_splits(group: Group, expense_data: ExpenseCreate) -> List[Tuple[str, Decimal]]:
    """
    Turn the requested split policy into concrete (user_id, owed amount) pairs.

    - Explicit splits are used verbatim, in the order given
    - `equal` without splits divides the amount across all current members
    - `exact` without splits is rejected
    """
    if expense_data.splits:
        splits = [(split.user_id, split.amount) for split in expense_data.splits]

        user_ids = [user_id for user_id, _ in splits]
        if len(set(user_ids)) != len(user_ids):
            raise InvalidError("Each member may appear only once in splits")

        for user_id in user_ids:
            if not is_member(group, user_id):
                raise InvalidError(f"User {user_id} is not a member of this group")

        # Each share may carry up to a cent of rounding
        total = sum((amount for _, amount in splits), Decimal('0'))
        if abs(total - expense_data.amount) > TOLERANCE * len(splits):
            raise InvalidError(f"Split amounts add up to {total}, expected {expense_data.amount}")

        return splits

    if expense_data.split_type == SplitType.exact:
        raise InvalidError("Exact split requires specific amounts for each member")

    try:
        return equal_split(expense_data.amount, [member.user_id for member in group.members])
    except ValueError as e:
        raise InvalidError(str(e))


def add_expense(db: Session, actor_id: str, group_id: str, expense_data: ExpenseCreate) -> Tuple[Expense, OutboundEvents]:
    """Record a group expense with resolved splits"""
    group = get_group_for_member(db, group_id, actor_id, for_update=True)

    payer_id = expense_data.paid_by or actor_id
    if not is_member(group, payer_id):
        raise InvalidError("Payer must be a member of the group")

    splits = resolve_splits(group, expense_data)

    expense = Expense(
        group_id=group.id,
        paid_by=payer_id,
        amount=expense_data.amount,
        description=expense_data.description,
        date=expense_data.date or utcnow(),
        split_type=expense_data.split_type,
        splits=[
            ExpenseSplit(user_id=user_id, amount=amount, position=position)
            for position, (user_id, amount) in enumerate(splits)
        ],
    )
    recipients = member_users(group)
    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info(f"Expense {expense.id} of {expense.amount} added to group {group.id} by {actor_id}")
    payer = expense.payer
    events: OutboundEvents = expense_added_notifications(group, expense, payer, recipients)
    events.append(expense_added_event(expense, payer))
    return expense, events


def _active_expenses(db: Session, group_id: str):
    return db.query(Expense).filter(Expense.group_id == group_id, Expense.deleted_at.is_(None))


def get_group_expenses(db: Session, actor_id: str, group_id: str) -> List[Expense]:
    """Get all expenses for a group, newest date first"""
    get_group_for_member(db, group_id, actor_id)
    return _active_expenses(db, group_id).order_by(Expense.date.desc(), Expense.created_at.desc()).all()


def get_expenses_in_window(db: Session, group_id: str, start_date: Optional[datetime] = None,
                           end_date: Optional[datetime] = None) -> List[Expense]:
    """Expenses inside an inclusive date window, oldest first (no membership check)"""
    query = _active_expenses(db, group_id)
    if start_date:
        query = query.filter(Expense.date >= start_date)
    if end_date:
        query = query.filter(Expense.date <= end_date)
    return query.order_by(Expense.date.asc(), Expense.created_at.asc()).all()


def delete_expense(db: Session, actor_id: str, group_id: str, expense_id: str) -> OutboundEvents:
    """Soft-delete an expense (payer or group creator only)"""
    group = get_group_for_member(db, group_id, actor_id, for_update=True)

    expense = _active_expenses(db, group.id).filter(Expense.id == expense_id).first()
    if not expense:
        raise NotFoundError("Expense not found")

    if actor_id not in (expense.paid_by, group.created_by):
        raise ForbiddenError("Only the payer or the group creator can delete an expense")

    expense.deleted_at = utcnow()
    db.commit()

    logger.info(f"Expense {expense.id} deleted from group {group.id} by {actor_id}")
    return [expense_deleted_event(expense)]
