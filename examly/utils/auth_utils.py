from fastapi import HTTPException, Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from examly.database import Database, get_db
from typing import Optional
from urllib.parse import unquote
import json
import logging
import re

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cookie names Supabase helpers have used for the session
TOKEN_COOKIES = ["sb-access-token", "supabase-auth-token", "sb:token", "sb-session", "sb-token"]

BEARER_RE = re.compile(r"Bearer\s+(.+)", re.IGNORECASE)

def _token_from_cookie(value: str) -> Optional[str]:
    decoded = unquote(value)

    if decoded.startswith("{"):
        try:
            parsed = json.loads(decoded)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            for candidate in (
                parsed.get("access_token"),
                parsed.get("token"),
                (parsed.get("currentSession") or {}).get("access_token"),
                (parsed.get("persistedSession") or {}).get("access_token"),
            ):
                if candidate:
                    return candidate

    bearer = BEARER_RE.match(decoded)
    if bearer:
        return bearer.group(1)

    # Looks like a JWT
    if len(decoded.split(".")) == 3:
        return decoded

    return None

def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the Supabase session cookies"""
    if credentials and credentials.credentials:
        return credentials.credentials

    for name in TOKEN_COOKIES:
        value = request.cookies.get(name)
        if not value:
            continue
        token = _token_from_cookie(value)
        if token:
            return token

    return None

def verify_supabase_token(db: Database, token: str):
    """Verify Supabase JWT token"""
    try:
        user = db.client.auth.get_user(token)
        if user and user.user:
            return user.user
        return None
    except Exception as e:
        logger.error(f"Supabase token verification failed: {e}")
        return None

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
):
    """Get current user from the Supabase session token"""
    token = extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization token required"
        )

    user = verify_supabase_token(db, token)
    if user:
        return {
            "id": user.id,
            "email": user.email,
            "metadata": user.user_metadata
        }

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials"
    )

def get_user_role(db: Database, user_id: str) -> Optional[str]:
    profile = db.select_one("profiles", "role", {"id": user_id})
    return profile.get("role") if profile else None

async def require_admin(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Require the admin role on the caller's profile"""
    if get_user_role(db, current_user["id"]) != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user
