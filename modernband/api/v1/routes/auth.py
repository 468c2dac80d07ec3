import logging

from fastapi import APIRouter, Depends, HTTPException

from modernband.api.deps import backend_http_error, bearer, get_admin, get_backend, get_session_store
from modernband.schemas.admin import AdminOut, LoginOut, LoginRequest
from modernband.services.backend_client import BackendClient, BackendError
from modernband.services.session_store import AdminProfile, AdminSession, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth/login", response_model=LoginOut)
def login(body: LoginRequest, backend: BackendClient = Depends(get_backend),
          sessions: SessionStore = Depends(get_session_store)):
    """Check credentials against the backend and open an admin console session."""
    try:
        result = backend.admin_login(body.username, body.password)
    except BackendError as e:
        if e.status_code in (400, 401, 403, 404):
            raise HTTPException(status_code=401, detail=str(e) or "Invalid credentials")
        raise backend_http_error(e)

    admin = result.get("admin") if isinstance(result, dict) else None
    if not isinstance(admin, dict) or not admin.get("username"):
        raise HTTPException(status_code=502, detail="Invalid response from server")

    profile = AdminProfile(
        username=str(admin["username"]),
        name=str(admin.get("name") or ""),
        email=str(admin.get("email") or ""),
        id=str(admin.get("id") or ""),
    )
    token, session = sessions.set(profile)
    logger.info("admin signed in", extra={"username": profile.username})
    return LoginOut(
        access_token=token,
        expiresAt=session.expires_at.isoformat(),
        admin=AdminOut(**profile.__dict__),
    )


@router.post("/auth/logout")
def logout(creds=Depends(bearer), sessions: SessionStore = Depends(get_session_store)):
    cleared = sessions.clear(creds.credentials if creds else None)
    return {"ok": True, "cleared": cleared}


@router.get("/auth/me")
def me(session: AdminSession = Depends(get_admin)):
    return {
        **AdminOut(**session.profile.__dict__).model_dump(),
        "isAdmin": True,
        "expiresAt": session.expires_at.isoformat(),
    }
