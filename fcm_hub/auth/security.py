import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings


http_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Identity of whoever issued the request. Both fields may be None."""

    user_id: Optional[str] = None
    username: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return not self.user_id

    def display_name(self, default: Optional[str] = None) -> str:
        return self.username or self.user_id or default or settings.default_editor_name

    def user_uuid(self) -> Optional[uuid.UUID]:
        """Caller id as UUID, or None when absent. Malformed ids are a 400."""
        if not self.user_id:
            return None
        try:
            return uuid.UUID(str(self.user_id))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid user id")


def create_access_token(user_id: str, username: Optional[str] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.jwt_ttl_seconds)).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_caller(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> Caller:
    # A bearer token, when sent, wins over the identity headers
    if creds is not None:
        payload = decode_token(creds.credentials)
        return Caller(user_id=payload.get("sub"), username=payload.get("username"))
    if not settings.trust_identity_header:
        return Caller()
    user_id = (request.headers.get("x-user-id") or "").strip() or None
    username = (request.headers.get("x-username") or "").strip() or None
    return Caller(user_id=user_id, username=username)
