"""Auth: password hashing, session tokens and session resolution."""
import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session as DBSession

from household.database import get_db
from household.errors import AuthorizationError
from household.models import Group, Session, User

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "sessionid"
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))

# Use pbkdf2_sha256 to avoid local bcrypt backend issues and 72‑byte limits.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
security = HTTPBearer(auto_error=False)
session_cookie = APIKeyCookie(name=SESSION_COOKIE_NAME, auto_error=False)


@dataclass(frozen=True)
class SessionContext:
    """The acting member, their group and the group's roster (id -> display name)."""

    user: User
    group: Group
    members: dict[int, str]

    @property
    def member_ids(self) -> set[int]:
        return set(self.members)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def generate_id(nbytes: int = 16) -> str:
    """URL-safe random id, used for session tokens and transaction ids."""
    return secrets.token_urlsafe(nbytes)


def create_session(db: DBSession, user: User, ttl: Optional[timedelta] = None) -> Session:
    session = Session(
        token=generate_id(),
        user_id=user.id,
        expires_at=datetime.utcnow() + (ttl or timedelta(hours=SESSION_TTL_HOURS)),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def resolve_session(db: DBSession, token: Optional[str]) -> SessionContext:
    if not token:
        raise AuthorizationError("Not authenticated")
    session = db.query(Session).filter(Session.token == token).first()
    if session is None:
        logger.info("Rejected unknown session token")
        raise AuthorizationError("Invalid session")
    if session.expires_at < datetime.utcnow():
        logger.info("Rejected expired session for user %s", session.user_id)
        raise AuthorizationError("Session expired")
    user = session.user
    group = user.group
    return SessionContext(
        user=user,
        group=group,
        members={m.id: m.first_name for m in group.members},
    )


def get_session_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    cookie: Optional[str] = Depends(session_cookie),
) -> Optional[str]:
    if credentials:
        return credentials.credentials
    return cookie


def get_session_context(
    token: Optional[str] = Depends(get_session_token),
    db: DBSession = Depends(get_db),
) -> SessionContext:
    return resolve_session(db, token)
