import logging
from typing import Dict, Iterable, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.models.users import User

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def find_by_username_or_email(db: Session, username_or_email: str) -> Optional[User]:
    """Look a user up by username or email (email compared case-insensitively)"""
    identifier = username_or_email.strip()
    return db.query(User).filter(
        or_(User.username == identifier, User.email == identifier.lower())
    ).first()


def get_users_by_ids(db: Session, user_ids: Iterable[str]) -> Dict[str, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    return {user.id: user for user in db.query(User).filter(User.id.in_(ids)).all()}


def sync_user_from_claims(db: Session, user_id: str, claims: dict) -> Optional[User]:
    """
    Upsert the local user row from verified token claims.

    Tokens without an email carry nothing to mirror and are left alone.
    """
    email = claims.get("email")
    if not email:
        return None

    user = get_user(db, user_id)
    if user is None:
        user = User(id=user_id, email=email.lower())
        db.add(user)
        logger.info(f"Registered user {user_id} from token claims")
    else:
        user.email = email.lower()

    if claims.get("name"):
        user.name = claims["name"]
    if claims.get("username"):
        user.username = claims["username"]

    if user in db.new or db.is_modified(user):
        db.commit()
    return user
