import jwt
from typing import Optional
from app.config import settings


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_user_id(payload: dict) -> Optional[str]:
    """Tokens from the auth service carry the id in `sub`; older ones in `user_id`"""
    return payload.get("user_id") or payload.get("sub")
