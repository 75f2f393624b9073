"""
Security module — Firebase JWT verification + Mock auth + Role guard.

Auth Flow:
1. User logs in via Firebase → gets JWT
2. Frontend sends JWT to FastAPI
3. FastAPI verifies JWT using Firebase Admin SDK
4. Backend fetches user profile from Supabase (by firebase_uid)
5. Backend checks: is user.is_active?
6. Backend injects: user_id, role

The grading engine only sees the resulting Actor (id + role); how the
identity was established stays here.
"""

import logging
import os
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from gradeflow.core.config import settings
from gradeflow.core.database import get_supabase
from gradeflow.schemas.auth import Actor, Role

logger = logging.getLogger(__name__)

security_scheme = HTTPBearer()

# ---------------------------------------------------------------------------
# Firebase initialization (lazy)
# ---------------------------------------------------------------------------
_firebase_app = None


def _init_firebase():
    global _firebase_app
    if _firebase_app is not None:
        return
    import firebase_admin
    from firebase_admin import credentials as fb_credentials

    cred_path = settings.FIREBASE_CREDENTIALS_PATH
    if os.path.exists(cred_path):
        cred = fb_credentials.Certificate(cred_path)
        _firebase_app = firebase_admin.initialize_app(cred)
    else:
        # Try default credentials
        _firebase_app = firebase_admin.initialize_app()


# ---------------------------------------------------------------------------
# Mock users (local development without Firebase)
# ---------------------------------------------------------------------------
MOCK_USERS = {
    "admin-token": {
        "uid": "admin-firebase-uid",
        "email": "admin@gradeflow.dev",
        "role": "admin",
        "name": "Admin",
        "user_id": "a0000000-0000-0000-0000-000000000001",
    },
}


def _profile(user_data: dict, uid: str) -> dict:
    return {
        "uid": uid,
        "email": user_data.get("email", ""),
        "role": user_data["role"],
        "name": user_data.get("name", ""),
        "user_id": user_data["id"],
    }


# ---------------------------------------------------------------------------
# Token verification — the core auth function
# ---------------------------------------------------------------------------
async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
) -> dict:
    """
    Validate the Bearer token and return user dict.
    Only users already registered in Supabase can authenticate.
    """
    token = credentials.credentials

    if settings.AUTH_MODE == "mock":
        return await _mock_auth(token)

    return await _firebase_auth(token)


async def _mock_auth(token: str) -> dict:
    """Mock mode: look up token in MOCK_USERS dict or try DB lookup."""
    user = MOCK_USERS.get(token)
    if user:
        return user

    # Email-based token: "mock-email@example.com"
    if token.startswith("mock-"):
        email = token[5:]
        try:
            db = get_supabase()
            result = (
                db.table("users")
                .select("*")
                .eq("email", email)
                .eq("is_active", True)
                .maybe_single()
                .execute()
            )
            if result is not None and result.data:
                return _profile(result.data, result.data.get("firebase_uid") or result.data["id"])
        except Exception as exc:
            logger.warning("Mock user lookup failed for %s: %s", email, exc)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token. Only registered users can login.",
    )


async def _firebase_auth(token: str) -> dict:
    """Firebase mode: verify JWT, fetch profile from Supabase, enforce is_active."""
    _init_firebase()
    from firebase_admin import auth as fb_auth

    try:
        decoded = fb_auth.verify_id_token(token)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired Firebase token",
        )

    uid = decoded["uid"]

    db = get_supabase()
    result = (
        db.table("users")
        .select("*")
        .eq("firebase_uid", uid)
        .maybe_single()
        .execute()
    )

    if result is None or not result.data:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not registered. Contact your administrator.",
        )

    user_data = result.data
    if not user_data.get("is_active", True):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been deactivated. Contact your administrator.",
        )

    user_data.setdefault("email", decoded.get("email", ""))
    return _profile(user_data, uid)


# ---------------------------------------------------------------------------
# Role guard dependency
# ---------------------------------------------------------------------------
def require_role(allowed_roles: list[str]):
    """
    Usage:
        @router.get("/staff-only")
        async def endpoint(user=Depends(require_role(["teacher", "admin"]))):
    """

    async def role_checker(
        user: dict = Depends(get_current_user),
    ) -> dict:
        if user["role"] not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user['role']}' not authorized. Required: {allowed_roles}",
            )
        return user

    return role_checker


def actor_from_user(user: dict) -> Actor:
    return Actor(id=user.get("user_id", user.get("uid")), role=Role(user["role"]))
