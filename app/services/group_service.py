import logging
from typing import List, Tuple
from sqlalchemy import and_, exists
from sqlalchemy.orm import Session, selectinload
from app.models.groups import Group, GroupMember
from app.models.users import User
from app.schemas.group_schema import GroupCreate
from app.services.event_dispatcher import OutboundEvents
from app.services.notification_service import member_joined_notifications
from app.services.realtime_service import member_joined_event
from app.services.user_service import find_by_username_or_email, get_user
from app.utils.exceptions import AlreadyExistsError, NotFoundError
from app.utils.join_code import create_unique_join_code, normalize_join_code

logger = logging.getLogger(__name__)


def _active_groups(db: Session):
    """Groups query with members and their users hydrated in one round-trip each"""
    return db.query(Group).options(
        selectinload(Group.members).joinedload(GroupMember.user)
    ).filter(Group.deleted_at.is_(None))


def is_member(group: Group, user_id: str) -> bool:
    """Check membership against an already-hydrated group"""
    return any(member.user_id == user_id for member in group.members)


def member_users(group: Group) -> List[User]:
    return [member.user for member in group.members]


def create_group(db: Session, owner_id: str, group_data: GroupCreate) -> Group:
    """Create a new group with a unique join code; the owner becomes its first member"""
    if not get_user(db, owner_id):
        raise NotFoundError("User not found")

    group = Group(
        name=group_data.name,
        code=create_unique_join_code(db),
        created_by=owner_id,
    )
    db.add(group)
    db.flush()

    db.add(GroupMember(group_id=group.id, user_id=owner_id))
    db.commit()

    logger.info(f"User {owner_id} created group {group.id} ({group.code})")
    return get_group_for_member(db, group.id, owner_id)


def get_user_groups(db: Session, user_id: str) -> List[Group]:
    """
    Get all groups the user belongs to, newest first.

    Filters with EXISTS on memberships rather than joining on them, so every
    member of a matched group is loaded, not only the requesting user.
    """
    membership = exists().where(and_(
        GroupMember.group_id == Group.id,
        GroupMember.user_id == user_id,
        GroupMember.deleted_at.is_(None),
    ))
    return _active_groups(db).filter(membership).order_by(Group.created_at.desc()).all()


def get_group_for_member(db: Session, group_id: str, user_id: str, for_update: bool = False) -> Group:
    """
    Load a group with its members and fail unless `user_id` is one of them.

    Non-members get the same NotFound as a missing group, so group existence
    is not revealed. With for_update the group row stays locked until the
    caller's transaction ends, keeping the membership snapshot stable for writes.
    """
    query = _active_groups(db).filter(Group.id == group_id)
    if for_update:
        query = query.with_for_update(of=Group)

    group = query.first()
    if not group:
        raise NotFoundError("Group not found")

    if not is_member(group, user_id):
        raise NotFoundError("Group not found or you are not a member")

    return group


def _get_membership(db: Session, group_id: str, user_id: str) -> GroupMember:
    return db.query(GroupMember).filter(
        and_(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
        )
    ).first()


def add_member(db: Session, requester_id: str, group_id: str, username_or_email: str) -> Tuple[GroupMember, OutboundEvents]:
    """Add a user (by username or email) to a group the requester belongs to"""
    group = get_group_for_member(db, group_id, requester_id, for_update=True)

    user_to_add = find_by_username_or_email(db, username_or_email)
    if not user_to_add:
        raise NotFoundError("User not found")

    if _get_membership(db, group.id, user_to_add.id):
        raise AlreadyExistsError("User is already a member")

    recipients = member_users(group)
    member = GroupMember(group_id=group.id, user_id=user_to_add.id)
    db.add(member)
    db.commit()
    db.refresh(member)

    logger.info(f"User {requester_id} added {user_to_add.id} to group {group.id}")
    events: OutboundEvents = member_joined_notifications(group, user_to_add, recipients)
    events.append(member_joined_event(group, user_to_add))
    return member, events


def join_by_code(db: Session, user_id: str, code: str) -> Tuple[Group, OutboundEvents]:
    """Join a group by its invite code. Joining twice returns the group unchanged."""
    group = _active_groups(db).filter(Group.code == normalize_join_code(code)).with_for_update(of=Group).first()
    if not group:
        raise NotFoundError("Invalid group code")

    if is_member(group, user_id):
        return group, []

    joining_user = get_user(db, user_id)
    if not joining_user:
        raise NotFoundError("User not found")

    recipients = member_users(group)
    db.add(GroupMember(group_id=group.id, user_id=user_id))
    db.commit()

    logger.info(f"User {user_id} joined group {group.id} by code")
    events: OutboundEvents = member_joined_notifications(group, joining_user, recipients, by_code=True)
    events.append(member_joined_event(group, joining_user))
    return get_group_for_member(db, group.id, user_id), events


def set_member_hidden(db: Session, user_id: str, group_id: str, hidden: bool) -> GroupMember:
    """Toggle the requester's own cosmetic hidden flag"""
    get_group_for_member(db, group_id, user_id)

    member = _get_membership(db, group_id, user_id)
    member.is_hidden = hidden
    db.commit()
    db.refresh(member)
    return member
