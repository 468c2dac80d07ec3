import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from jose import JWTError

from modernband.core.security import create_session_token, decode_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminProfile:
    username: str
    name: str = ""
    email: str = ""
    id: str = ""


@dataclass(frozen=True)
class AdminSession:
    token_id: str
    profile: AdminProfile
    expires_at: datetime


class SessionStore:
    """Admin console sessions as signed, expiring tokens.

    `clear` revokes a token by id; revocations only need to outlive the
    token itself, so expired ids are pruned on write.
    """

    def __init__(self, expire_minutes: int | None = None):
        self.expire_minutes = expire_minutes
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def set(self, profile: AdminProfile) -> tuple[str, AdminSession]:
        claims = {"username": profile.username, "name": profile.name, "email": profile.email, "isAdmin": True}
        token, jti, exp = create_session_token(profile.id or profile.username, claims, self.expire_minutes)
        return token, AdminSession(token_id=jti, profile=profile, expires_at=exp)

    def get(self, token: str | None) -> AdminSession | None:
        if not token:
            return None
        try:
            payload = decode_token(token)
        except JWTError:
            return None
        if payload.get("type") != "admin_session" or not payload.get("isAdmin"):
            return None
        jti = payload.get("jti", "")
        with self._lock:
            if jti in self._revoked:
                return None
        profile = AdminProfile(
            username=payload.get("username", ""),
            name=payload.get("name", ""),
            email=payload.get("email", ""),
            id=payload.get("sub", ""),
        )
        exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        return AdminSession(token_id=jti, profile=profile, expires_at=exp)

    def validate(self, token: str | None) -> bool:
        return self.get(token) is not None

    def clear(self, token: str | None) -> bool:
        session = self.get(token)
        if not session:
            return False
        now = datetime.now(timezone.utc)
        with self._lock:
            self._revoked = {k: v for k, v in self._revoked.items() if v > now}
            self._revoked[session.token_id] = session.expires_at
        logger.info("admin session cleared", extra={"username": session.profile.username})
        return True
