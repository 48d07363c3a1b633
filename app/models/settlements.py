import uuid
from sqlalchemy import Column, String, DateTime, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from app.db.database import Base, utcnow


class Settlement(Base):
    __tablename__ = "settlements"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(DECIMAL(18, 2), nullable=False)
    settled_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    from_user = relationship("User", foreign_keys=[from_user_id], lazy="joined")
    to_user = relationship("User", foreign_keys=[to_user_id], lazy="joined")
