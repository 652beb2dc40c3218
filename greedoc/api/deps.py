"""
API dependencies (session token verification and role checks).

Provides FastAPI dependencies that resolve the bearer token to the
stored user document.
"""

from typing import Callable, List, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError

from greedoc.core.security import decode_token
from greedoc.services import user_service

# auto_error=False so a missing header gets our 401 message instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Verify the access token from the Authorization header.

    Expects:
        Authorization: Bearer <token>
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    try:
        payload = decode_token(credentials.credentials)
    except ExpiredSignatureError as exc:
        raise HTTPException(status_code=401, detail="Token expired") from exc
    except JWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    # Refresh tokens only work against /auth/refresh
    if payload.get("type") == "refresh":
        raise HTTPException(status_code=401, detail="Invalid token")

    user = user_service.get_user(payload.get("id"))
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.get("isActive", True):
        raise HTTPException(status_code=401, detail="Account is deactivated")

    return user


def require_role(allowed: List[str]) -> Callable:
    """
    Return a FastAPI dependency that enforces a user's role.

    Example:
        user=Depends(require_role(["doctor", "admin"]))
    """

    def _checker(user=Depends(get_current_user)):
        if user.get("role") not in allowed:
            raise HTTPException(
                status_code=403,
                detail="Insufficient permissions",
            )

        return user

    return _checker


def load_patient(patient_id: str, user: dict) -> dict:
    """
    Fetch a patient account the caller may manage.

    404 when missing, 400 when the account is not a patient, 403 when a
    doctor asks for someone else's patient. Admins pass every check.
    """
    patient = user_service.get_user(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    if patient.get("role") != "patient":
        raise HTTPException(status_code=400, detail="User is not a patient")
    if user.get("role") != "admin" and patient.get("doctorId") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to access this patient")
    return patient
