from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from typing import List
from app.api.v1.deps import get_current_user_id
from app.db.database import get_db
from app.services.event_dispatcher import dispatch_events
from app.services.group_service import (
    create_group, get_user_groups, get_group_for_member, add_member, join_by_code, set_member_hidden
)
from app.schemas.group_schema import (
    GroupCreate, GroupJoin, GroupMemberAdd, GroupMemberHiddenUpdate, GroupMemberOut, GroupWithMembers
)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupWithMembers, status_code=201)
def create_new_group(
    group_data: GroupCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new group; the caller becomes its first member"""
    return create_group(db, user_id, group_data)


@router.get("", response_model=List[GroupWithMembers])
def get_my_groups(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all groups for current user, newest first"""
    return get_user_groups(db, user_id)


@router.post("/join", response_model=GroupWithMembers)
def join_group(
    join_data: GroupJoin,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Join a group by invite code (no-op if already a member)"""
    group, events = join_by_code(db, user_id, join_data.code)
    background_tasks.add_task(dispatch_events, events)
    return group


@router.get("/{group_id}", response_model=GroupWithMembers)
def get_group_details(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get group details with members (404 for non-members)"""
    return get_group_for_member(db, group_id, user_id)


@router.post("/{group_id}/members", response_model=GroupMemberOut, status_code=201)
def add_group_member(
    group_id: str,
    member_data: GroupMemberAdd,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Add a member by username or email

    Request body:
    {
        "usernameOrEmail": "alice or alice@example.com"
    }
    """
    member, events = add_member(db, user_id, group_id, member_data.username_or_email)
    background_tasks.add_task(dispatch_events, events)
    return member


@router.patch("/{group_id}/members/me", response_model=GroupMemberOut)
def update_my_membership(
    group_id: str,
    update_data: GroupMemberHiddenUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Hide or unhide the group for the caller"""
    return set_member_hidden(db, user_id, group_id, update_data.hidden)
