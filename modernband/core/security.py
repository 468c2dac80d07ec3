import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt

from modernband.core.config import settings

ALGO = "HS256"


def create_session_token(subject: str, claims: dict, expires_minutes: int | None = None) -> tuple[str, str, datetime]:
    """Return (token, token_id, expires_at)."""
    if expires_minutes is None:
        expires_minutes = settings.ADMIN_SESSION_EXPIRE_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    jti = uuid.uuid4().hex
    payload = {**claims, "sub": subject, "type": "admin_session", "jti": jti, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO), jti, exp


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])
