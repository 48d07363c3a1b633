from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    group_join = "group_join"
    group_transaction = "group_transaction"


class RealtimeEventType(str, Enum):
    expense_added = "expense-added"
    expense_deleted = "expense-deleted"
    debt_settled = "debt-settled"
    member_joined = "member-joined"


class NotificationPayload(BaseModel):
    """Pre-formatted notification handed to the notification dispatcher"""
    user_id: str
    email: Optional[str] = None
    type: NotificationType
    title: str
    body: str
    data: Dict[str, Any] = Field(default_factory=dict)


class RealtimeEvent(BaseModel):
    """Event broadcast on a group-scoped realtime channel"""
    event: RealtimeEventType
    group_id: str
    payload: Dict[str, Any] = Field(default_factory=dict)
