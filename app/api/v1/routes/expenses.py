from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from typing import List
from app.api.v1.deps import get_current_user_id
from app.db.database import get_db
from app.services.event_dispatcher import dispatch_events
from app.services.expense_service import add_expense, get_group_expenses, delete_expense
from app.schemas.expense_schema import ExpenseCreate, ExpenseOut

router = APIRouter(prefix="/groups", tags=["expenses"])


@router.post("/{group_id}/expenses", response_model=ExpenseOut, status_code=201)
def create_new_expense(
    group_id: str,
    expense_data: ExpenseCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new expense

    Request body:
    {
        "amount": 90,
        "description": "Dinner",
        "date": "2026-10-16T19:00:00Z",          (optional, defaults to now)
        "splitType": "equal" | "exact",
        "splits": [{"userId": "...", "amount": 30}],  (optional for equal)
        "paidBy": "..."                          (optional, defaults to caller)
    }
    """
    expense, events = add_expense(db, user_id, group_id, expense_data)
    background_tasks.add_task(dispatch_events, events)
    return expense


@router.get("/{group_id}/expenses", response_model=List[ExpenseOut])
def get_group_expenses_list(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all expenses for a group, newest first"""
    return get_group_expenses(db, user_id, group_id)


@router.delete("/{group_id}/expenses/{expense_id}", status_code=204)
def delete_existing_expense(
    group_id: str,
    expense_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete an expense (payer or group creator only)"""
    events = delete_expense(db, user_id, group_id, expense_id)
    background_tasks.add_task(dispatch_events, events)
