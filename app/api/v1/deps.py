from typing import Optional
from fastapi import Depends, HTTPException, Header
from sqlalchemy.orm import Session
from app.db.database import get_db
from app.services.auth.jwt_handler import decode_access_token, get_user_id
from app.services.user_service import get_user, sync_user_from_claims


def get_current_user_id(
    access_token: Optional[str] = Header(None, description="Access token (with or without Bearer)"),
    db: Session = Depends(get_db),
) -> str:
    """Extract current user ID from JWT token and mirror the user's identity claims"""
    if access_token and access_token.startswith("Bearer "):
        access_token = access_token[len("Bearer "):]

    payload = decode_access_token(access_token) if access_token else None
    user_id = get_user_id(payload) if payload else None
    if not user_id:
        raise HTTPException(status_code=401, detail={"kind": "unauthorized", "message": "Invalid token"})

    # Tokens without an email can only refer to users registered earlier
    user = sync_user_from_claims(db, user_id, payload) or get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=401, detail={"kind": "unauthorized", "message": "Unknown user"})

    return user_id
