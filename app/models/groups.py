import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Index
from sqlalchemy.orm import relationship
from app.config import JOIN_CODE_MAX_LENGTH
from app.db.database import Base, utcnow


class Group(Base):
    __tablename__ = "groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    name = Column(String(100), nullable=False, index=True)
    code = Column(String(JOIN_CODE_MAX_LENGTH), nullable=False, unique=True, index=True)  # Join code, immutable
    created_by = Column(String, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Only active memberships; rows are written through GroupMember directly
    members = relationship(
        "GroupMember",
        primaryjoin="and_(Group.id == GroupMember.group_id, GroupMember.deleted_at.is_(None))",
        order_by="GroupMember.joined_at",
        viewonly=True,
    )


class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        Index("ix_group_members_group_user", "group_id", "user_id"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)  # Cosmetic, ignored by balances
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", lazy="joined")
