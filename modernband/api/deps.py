from functools import lru_cache

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from modernband.core.config import settings
from modernband.services.backend_client import BackendClient, BackendError, client_from_settings
from modernband.services.session_store import AdminSession, SessionStore
from modernband.services.wizard import WizardStore

bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_backend() -> BackendClient:
    return client_from_settings()


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore(expire_minutes=settings.ADMIN_SESSION_EXPIRE_MINUTES)


@lru_cache
def get_wizard_store() -> WizardStore:
    return WizardStore(ttl_seconds=settings.WIZARD_TTL_MINUTES * 60)


def get_admin(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    sessions: SessionStore = Depends(get_session_store),
) -> AdminSession:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    session = sessions.get(creds.credentials)
    if not session:
        raise HTTPException(status_code=401, detail="Session expired or invalid")
    return session


def backend_http_error(e: BackendError) -> HTTPException:
    """Pass backend 4xx through; anything else is a bad gateway."""
    if e.status_code and 400 <= e.status_code < 500:
        return HTTPException(status_code=e.status_code, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))
