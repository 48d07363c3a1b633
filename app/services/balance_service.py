import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from app.models.expenses import Expense
from app.models.settlements import Settlement
from app.schemas.settlement_schema import DebtOut, MemberBalanceOut
from app.schemas.user_schema import UserOut
from app.services.expense_service import get_expenses_in_window
from app.services.group_service import get_group_for_member
from app.services.settlement_service import get_settlements_in_window
from app.services.user_service import get_users_by_ids
from app.utils.min_cash_flow import calculate_balances, min_cash_flow, validate_balance_sum

logger = logging.getLogger(__name__)


def ledger_balances(expenses: List[Expense], settlements: List[Settlement]) -> Dict[str, Decimal]:
    """Net balances for a snapshot of expense and settlement rows"""
    return calculate_balances(
        (
            {
                "payer": expense.paid_by,
                "amount": expense.amount,
                "splits": [(split.user_id, split.amount) for split in expense.splits],
            }
            for expense in expenses
        ),
        (
            {"from": settlement.from_user_id, "to": settlement.to_user_id, "amount": settlement.amount}
            for settlement in settlements
        ),
    )


def _group_balances(db: Session, group_id: str, start_date: Optional[datetime],
                    end_date: Optional[datetime]) -> Dict[str, Decimal]:
    expenses = get_expenses_in_window(db, group_id, start_date, end_date)
    settlements = get_settlements_in_window(db, group_id, start_date, end_date)
    balances = ledger_balances(expenses, settlements)

    try:
        validate_balance_sum(balances)
    except ValueError as e:
        # Equal-split rounding residuals accumulate; report, don't fail the read
        logger.warning(f"Group {group_id}: {e}")

    return balances


def get_group_balances(db: Session, actor_id: str, group_id: str, start_date: Optional[datetime] = None,
                       end_date: Optional[datetime] = None) -> List[MemberBalanceOut]:
    """Net balance per member; current members without ledger activity show 0.00"""
    group = get_group_for_member(db, group_id, actor_id)
    balances = _group_balances(db, group.id, start_date, end_date)

    for member in group.members:
        balances.setdefault(member.user_id, Decimal('0.00'))

    users = get_users_by_ids(db, balances.keys())
    return [
        MemberBalanceOut(user=UserOut.model_validate(users[user_id]), balance=balance)
        for user_id, balance in balances.items()
        if user_id in users
    ]


def get_group_debts(db: Session, actor_id: str, group_id: str, start_date: Optional[datetime] = None,
                    end_date: Optional[datetime] = None) -> List[DebtOut]:
    """Suggested settle-up plan for the group, with full user identities"""
    get_group_for_member(db, group_id, actor_id)
    balances = _group_balances(db, group_id, start_date, end_date)
    transfers = min_cash_flow(balances)

    users = get_users_by_ids(db, [t["from"] for t in transfers] + [t["to"] for t in transfers])
    return [
        DebtOut(
            debtor=UserOut.model_validate(users[transfer["from"]]),
            creditor=UserOut.model_validate(users[transfer["to"]]),
            amount=transfer["amount"],
        )
        for transfer in transfers
    ]
