"""Auth routes: login, logout."""
import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session as DBSession

from household.auth import (
    SESSION_COOKIE_NAME,
    SESSION_TTL_HOURS,
    create_session,
    get_session_token,
    verify_password,
)
from household.database import get_db
from household.models import Session, User
from household.schemas import GroupMetadata, LoginRequest, LoginResponse, MemberInfo

logger = logging.getLogger(__name__)

SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "").lower() in ("1", "true", "yes")

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, response: Response, db: DBSession = Depends(get_db)):
    user = db.query(User).filter(User.username == data.username).first()
    if not user or not verify_password(data.password, user.hashed_password):
        logger.info("Failed login for %s", data.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    session = create_session(db, user)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session.token,
        max_age=SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    group = user.group
    return LoginResponse(
        token=session.token,
        username=user.username,
        user_id=user.id,
        group_id=group.id,
        budgets=group.budgets or [],
        members=[MemberInfo.model_validate(m) for m in group.members],
        member_ids=group.member_ids,
        metadata=GroupMetadata.model_validate(group.group_metadata or {}),
    )


@router.post("/logout", status_code=204)
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    db: DBSession = Depends(get_db),
):
    if token:
        db.query(Session).filter(Session.token == token).delete()
        db.commit()
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
