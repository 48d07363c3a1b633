from pydantic import Field
from typing import List
from datetime import datetime
from app.config import JOIN_CODE_MAX_LENGTH
from app.schemas.user_schema import CamelModel, UserOut


class GroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)


class GroupJoin(CamelModel):
    code: str = Field(..., min_length=1, max_length=JOIN_CODE_MAX_LENGTH)


class GroupMemberAdd(CamelModel):
    username_or_email: str = Field(..., min_length=1, max_length=255)


class GroupMemberHiddenUpdate(CamelModel):
    hidden: bool


class GroupOut(CamelModel):
    id: str
    name: str
    code: str
    created_by: str
    created_at: datetime


class GroupMemberOut(CamelModel):
    id: str
    group_id: str
    user_id: str
    is_hidden: bool
    joined_at: datetime
    user: UserOut


class GroupWithMembers(GroupOut):
    members: List[GroupMemberOut] = []
