import logging
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from app.models.settlements import Settlement
from app.schemas.settlement_schema import SettlementCreate
from app.services.event_dispatcher import OutboundEvents
from app.services.group_service import get_group_for_member, is_member
from app.services.realtime_service import debt_settled_event
from app.utils.exceptions import InvalidError

logger = logging.getLogger(__name__)


def settle_up(db: Session, actor_id: str, group_id: str, settlement_data: SettlementCreate) -> Tuple[Settlement, OutboundEvents]:
    """
    Record that one member paid another.

    Any member may record a settlement for any pair of members. The amount is
    taken as entered and is not checked against the computed debts.
    """
    group = get_group_for_member(db, group_id, actor_id, for_update=True)

    if settlement_data.from_user_id == settlement_data.to_user_id:
        raise InvalidError("A settlement needs two different members")

    if not is_member(group, settlement_data.from_user_id):
        raise InvalidError("From user is not a member of this group")

    if not is_member(group, settlement_data.to_user_id):
        raise InvalidError("To user is not a member of this group")

    settlement = Settlement(
        group_id=group.id,
        from_user_id=settlement_data.from_user_id,
        to_user_id=settlement_data.to_user_id,
        amount=settlement_data.amount
    )
    db.add(settlement)
    db.commit()
    db.refresh(settlement)

    logger.info(f"Settlement {settlement.id}: {settlement.from_user_id} paid {settlement.to_user_id} {settlement.amount} in group {group.id}")
    return settlement, [debt_settled_event(settlement)]


def _active_settlements(db: Session, group_id: str):
    return db.query(Settlement).filter(Settlement.group_id == group_id, Settlement.deleted_at.is_(None))


def get_group_settlements(db: Session, actor_id: str, group_id: str) -> List[Settlement]:
    """Get all settlements for a group, newest first"""
    get_group_for_member(db, group_id, actor_id)
    return _active_settlements(db, group_id).order_by(Settlement.settled_at.desc()).all()


def get_settlements_in_window(db: Session, group_id: str, start_date: Optional[datetime] = None,
                              end_date: Optional[datetime] = None) -> List[Settlement]:
    """Settlements inside an inclusive date window, oldest first (no membership check)"""
    query = _active_settlements(db, group_id)
    if start_date:
        query = query.filter(Settlement.settled_at >= start_date)
    if end_date:
        query = query.filter(Settlement.settled_at <= end_date)
    return query.order_by(Settlement.settled_at.asc()).all()
