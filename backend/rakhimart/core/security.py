"""
# `rakhimart/core/security.py` - Authentication dependencies

- **Authentication:** `Authorization: Bearer <Firebase ID token>`; verified with the Firebase Admin SDK
  (`check_revoked=True`, so tokens of signed-out sessions are rejected).
- **Principal:** anonymous sign-in → `guest`, custom claim `admin: true` → `admin`, everyone else → `user`.
- **Admin gate:** `get_current_admin` answers 403 for authenticated non-admins. Every catalog / settings
  mutation depends on it; reads are public.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth

from rakhimart.config import get_firebase_app
from rakhimart.schemas.principal import Principal

# HTTPBearer is a FastAPI provided security scheme for "Authorization: Bearer <token>" header
oauth2_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_id_token(id_token: str) -> dict:
    try:
        return firebase_auth.verify_id_token(id_token, app=get_firebase_app(), check_revoked=True)
    except firebase_auth.ExpiredIdTokenError:
        raise _unauthorized("Token expired")
    except firebase_auth.RevokedIdTokenError:
        raise _unauthorized("Session revoked")
    except (ValueError, firebase_auth.InvalidIdTokenError):
        raise _unauthorized("Invalid authentication token")


def _token_to_principal(decoded: dict) -> Principal:
    uid = decoded.get("uid") or decoded.get("user_id")
    if not uid:
        raise _unauthorized("Invalid token payload")

    provider = (decoded.get("firebase") or {}).get("sign_in_provider")
    if provider == "anonymous":
        role = "guest"
    elif decoded.get("admin") is True:
        role = "admin"
    else:
        role = "user"

    return Principal(
        uid=uid,
        role=role,
        email=decoded.get("email"),
    )


# --------- FastAPI Dependencies --------- #

def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
) -> Principal:
    """Token required: verifies it and returns the Principal (guest/user/admin)."""
    if not credentials or not credentials.scheme or not credentials.credentials:
        raise _unauthorized("Authentication credentials were not provided")
    return _token_to_principal(_decode_id_token(credentials.credentials))


def get_current_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Only admins pass; authenticated non-admins get 403."""
    if principal.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return principal
