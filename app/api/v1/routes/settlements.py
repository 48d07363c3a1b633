from datetime import datetime
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.api.v1.deps import get_current_user_id
from app.db.database import get_db
from app.services.balance_service import get_group_balances, get_group_debts
from app.services.event_dispatcher import dispatch_events
from app.services.settlement_service import settle_up, get_group_settlements
from app.schemas.settlement_schema import DebtOut, MemberBalanceOut, SettlementCreate, SettlementOut

router = APIRouter(prefix="/groups", tags=["settlements"])


@router.post("/{group_id}/settle-up", response_model=SettlementOut, status_code=201)
def create_new_settlement(
    group_id: str,
    settlement_data: SettlementCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Record that one member paid another"""
    settlement, events = settle_up(db, user_id, group_id, settlement_data)
    background_tasks.add_task(dispatch_events, events)
    return settlement


@router.get("/{group_id}/settlements", response_model=List[SettlementOut])
def get_group_settlements_list(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all settlements for a group, newest first"""
    return get_group_settlements(db, user_id, group_id)


@router.get("/{group_id}/balances", response_model=List[MemberBalanceOut])
def get_group_balance_list(
    group_id: str,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Net balance per member (positive: owed money, negative: owes money)"""
    return get_group_balances(db, user_id, group_id, start_date, end_date)


@router.get("/{group_id}/debts", response_model=List[DebtOut])
def get_group_debt_list(
    group_id: str,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Suggested transfers that settle every balance in the group"""
    return get_group_debts(db, user_id, group_id, start_date, end_date)
