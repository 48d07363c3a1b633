import uuid
from sqlalchemy import Column, String, DateTime
from app.db.database import Base, utcnow


class User(Base):
    """Local mirror of identities issued by the auth service"""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    name = Column(String(100), nullable=True)
    username = Column(String(50), nullable=True, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def display_name(self) -> str:
        return self.name or self.email
