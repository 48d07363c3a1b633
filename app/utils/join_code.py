import secrets
import string
from typing import Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.models.groups import Group
from app.utils.exceptions import SystemFailureError

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_join_code(length: Optional[int] = None) -> str:
    """
    Draw a random human-readable join code, e.g. "K7Q2ZD".
    Uppercase letters and digits only.
    """
    length = length or settings.join_code_length
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_join_code(code: str) -> str:
    return code.strip().upper()


def create_unique_join_code(db: Session, max_attempts: Optional[int] = None) -> str:
    """
    Draw join codes until one is not taken by any group, soft-deleted ones included
    (codes are immutable and the column is unique).
    """
    max_attempts = max_attempts or settings.join_code_max_attempts

    for _ in range(max_attempts):
        code = generate_join_code()
        existing_group = db.query(Group.id).filter(Group.code == code).first()
        if not existing_group:
            return code

    raise SystemFailureError(f"Could not allocate a unique join code after {max_attempts} attempts")
