"""
Tests for the group directory: creation, join codes, membership gate and roster changes.
"""
import re
import pytest
from app.config import JOIN_CODE_MAX_LENGTH, Settings
from app.models.groups import Group, GroupMember
from app.schemas.event_schema import NotificationPayload, NotificationType, RealtimeEvent, RealtimeEventType
from app.schemas.group_schema import GroupCreate
from app.services import group_service
from app.services.group_service import (
    add_member, create_group, get_group_for_member, get_user_groups, join_by_code, set_member_hidden
)
from app.utils import join_code
from app.utils.exceptions import AlreadyExistsError, NotFoundError, SystemFailureError


@pytest.fixture
def trip(db, users):
    """Group created by alice; bob and carol joined by code."""
    group = create_group(db, users["alice"].id, GroupCreate(name="Trip"))
    join_by_code(db, users["bob"].id, group.code)
    join_by_code(db, users["carol"].id, group.code)
    return group


class TestCreateGroup:

    def test_creator_is_first_member(self, db, users):
        group = create_group(db, users["alice"].id, GroupCreate(name="Flat"))

        assert group.name == "Flat"
        assert group.created_by == users["alice"].id
        assert [m.user_id for m in group.members] == [users["alice"].id]
        assert group.members[0].user.email == "alice@example.com"

    def test_join_code_format(self, db, users):
        group = create_group(db, users["alice"].id, GroupCreate(name="Flat"))
        assert re.fullmatch(r"[A-Z0-9]{6}", group.code)

    def test_join_code_collision_is_retried(self, db, users, monkeypatch):
        first = create_group(db, users["alice"].id, GroupCreate(name="First"))
        codes = iter([first.code, first.code, "ZZZ999"])
        monkeypatch.setattr(join_code, "generate_join_code", lambda length=None: next(codes))

        second = create_group(db, users["alice"].id, GroupCreate(name="Second"))
        assert second.code == "ZZZ999"

    def test_join_code_attempts_exhausted(self, db, users, monkeypatch):
        first = create_group(db, users["alice"].id, GroupCreate(name="First"))
        monkeypatch.setattr(join_code, "generate_join_code", lambda length=None: first.code)

        with pytest.raises(SystemFailureError):
            create_group(db, users["alice"].id, GroupCreate(name="Second"))


class TestUserGroups:

    def test_returns_every_member_of_matched_groups(self, db, users, trip):
        groups = get_user_groups(db, users["bob"].id)

        assert [g.id for g in groups] == [trip.id]
        member_ids = {m.user_id for m in groups[0].members}
        assert member_ids == {users["alice"].id, users["bob"].id, users["carol"].id}

    def test_newest_first(self, db, users):
        older = create_group(db, users["alice"].id, GroupCreate(name="Older"))
        newer = create_group(db, users["alice"].id, GroupCreate(name="Newer"))

        assert [g.id for g in get_user_groups(db, users["alice"].id)] == [newer.id, older.id]

    def test_no_groups_for_outsider(self, db, users, trip):
        assert get_user_groups(db, users["dave"].id) == []


class TestMembershipGate:

    def test_member_gets_hydrated_group(self, db, users, trip):
        group = get_group_for_member(db, trip.id, users["carol"].id)
        assert len(group.members) == 3

    def test_non_member_gets_not_found(self, db, users, trip):
        with pytest.raises(NotFoundError) as exc_info:
            get_group_for_member(db, trip.id, users["dave"].id)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail["kind"] == "not_found"

    def test_unknown_group(self, db, users):
        with pytest.raises(NotFoundError):
            get_group_for_member(db, "missing", users["alice"].id)

    def test_soft_deleted_group_is_hidden(self, db, users, trip):
        trip.deleted_at = trip.created_at
        db.commit()
        with pytest.raises(NotFoundError):
            get_group_for_member(db, trip.id, users["alice"].id)


class TestAddMember:

    def test_add_by_username(self, db, users, trip):
        member, events = add_member(db, users["alice"].id, trip.id, "dave")

        assert member.user_id == users["dave"].id
        notifications = [e for e in events if isinstance(e, NotificationPayload)]
        assert {n.user_id for n in notifications} == {users["alice"].id, users["bob"].id, users["carol"].id}
        assert all(n.type == NotificationType.group_join for n in notifications)
        assert notifications[0].email is not None
        realtime = [e for e in events if isinstance(e, RealtimeEvent)]
        assert len(realtime) == 1
        assert realtime[0].event == RealtimeEventType.member_joined
        assert realtime[0].group_id == trip.id

    def test_add_by_email(self, db, users, trip):
        member, _ = add_member(db, users["bob"].id, trip.id, "Dave@Example.com")
        assert member.user_id == users["dave"].id

    def test_unknown_user(self, db, users, trip):
        with pytest.raises(NotFoundError, match="User not found"):
            add_member(db, users["alice"].id, trip.id, "nobody")

    def test_already_member(self, db, users, trip):
        with pytest.raises(AlreadyExistsError) as exc_info:
            add_member(db, users["alice"].id, trip.id, "bob")
        assert exc_info.value.detail["kind"] == "already_exists"

    def test_requester_must_be_member(self, db, users, trip):
        with pytest.raises(NotFoundError):
            add_member(db, users["dave"].id, trip.id, "dave")


class TestJoinByCode:

    def test_join_is_idempotent(self, db, users, trip):
        group, events = join_by_code(db, users["bob"].id, trip.code)

        assert events == []
        assert group.id == trip.id
        rows = db.query(GroupMember).filter(
            GroupMember.group_id == trip.id, GroupMember.user_id == users["bob"].id
        ).count()
        assert rows == 1

    def test_join_notifies_existing_members(self, db, users, trip):
        group, events = join_by_code(db, users["dave"].id, trip.code.lower())

        assert users["dave"].id in {m.user_id for m in group.members}
        notified = {e.user_id for e in events if isinstance(e, NotificationPayload)}
        assert notified == {users["alice"].id, users["bob"].id, users["carol"].id}
        # Dave has no name, so his email is shown instead
        assert any("dave@example.com" in e.title for e in events if isinstance(e, NotificationPayload))

    def test_invalid_code(self, db, users, trip):
        with pytest.raises(NotFoundError, match="Invalid group code"):
            join_by_code(db, users["dave"].id, "NOPE00")


class TestHiddenFlag:

    def test_toggle_own_flag(self, db, users, trip):
        member = set_member_hidden(db, users["bob"].id, trip.id, True)
        assert member.is_hidden is True
        assert member.user_id == users["bob"].id

        # Hidden members still count as members
        assert group_service.is_member(get_group_for_member(db, trip.id, users["bob"].id), users["bob"].id)

    def test_non_member_cannot_toggle(self, db, users, trip):
        with pytest.raises(NotFoundError):
            set_member_hidden(db, users["dave"].id, trip.id, True)


class TestUnknownOwner:

    def test_unregistered_owner_writes_nothing(self, db, users):
        with pytest.raises(NotFoundError, match="User not found"):
            create_group(db, "ghost", GroupCreate(name="Ghost town"))

        db.rollback()
        assert db.query(Group).count() == 0
        assert db.query(GroupMember).count() == 0


class TestJoinCodeSettings:

    @pytest.mark.parametrize("length", ["0", "13", "40"])
    def test_length_outside_column_width(self, monkeypatch, length):
        monkeypatch.setenv("JOIN_CODE_LENGTH", length)
        with pytest.raises(ValueError, match="JOIN_CODE_LENGTH"):
            Settings()

    def test_longest_code_fits(self, monkeypatch):
        monkeypatch.setenv("JOIN_CODE_LENGTH", str(JOIN_CODE_MAX_LENGTH))
        assert Settings().join_code_length == JOIN_CODE_MAX_LENGTH
