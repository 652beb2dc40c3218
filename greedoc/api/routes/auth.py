"""Authentication routes.

Doctors self-register; patients are created by their doctor and log in
with email or CNIC. Sessions are a short-lived access token plus a
refresh token.
"""
import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from jose import JWTError

from greedoc.api.deps import get_current_user
from greedoc.core.security import create_token_pair, decode_token, verify_password
from greedoc.models.user import ChangePasswordRequest, DoctorRegister, LoginRequest, ProfileUpdate, RefreshRequest
from greedoc.services import user_service
from greedoc.services.logger import log_debug
from greedoc.services.time_utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register_doctor(payload: DoctorRegister = Body(...)):
    if user_service.find_by_email(payload.email):
        raise HTTPException(status_code=400, detail="Doctor with this email already exists")

    data = payload.to_document(exclude={"password"}, exclude_none=True)
    doctor = user_service.create_user({**data, "role": "doctor"}, payload.password)

    return {
        "status": "success",
        "message": "Doctor registered successfully",
        "data": {"doctor": user_service.to_public(doctor), **create_token_pair(doctor["id"])},
    }


@router.post("/login")
async def login(payload: LoginRequest = Body(...)):
    if payload.email:
        user = user_service.find_by_email(payload.email)
    else:
        user = user_service.find_by_cnic(payload.cnic)

    if user is None or not verify_password(payload.password, user.get("password")):
        log_debug("login_failed", {"email": payload.email, "cnic": payload.cnic})
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.get("isActive", True):
        raise HTTPException(status_code=401, detail="Account is deactivated")

    user = user_service.update_user(user["id"], {"lastLogin": utcnow(), "isOnline": True})
    logger.info("User %s logged in", user["id"])

    return {
        "status": "success",
        "message": "Login successful",
        "data": {"user": user_service.to_public(user), **create_token_pair(user["id"])},
    }


@router.post("/refresh")
async def refresh_token(payload: RefreshRequest = Body(...)):
    try:
        claims = decode_token(payload.refresh_token)
    except JWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid refresh token") from exc

    if claims.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = user_service.get_user(claims.get("id"))
    if user is None or not user.get("isActive", True):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    return {"status": "success", "data": create_token_pair(user["id"])}


@router.get("/me")
async def get_me(user=Depends(get_current_user)):
    return {"status": "success", "data": {"user": user_service.to_public(user)}}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate = Body(...),
    user=Depends(get_current_user),
):
    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    updated = user_service.update_user(user["id"], changes)
    return {
        "status": "success",
        "message": "Profile updated successfully",
        "data": {"user": user_service.to_public(updated)},
    }


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest = Body(...),
    user=Depends(get_current_user),
):
    if not verify_password(payload.current_password, user.get("password")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user_service.set_password(user["id"], payload.new_password)
    return {"status": "success", "message": "Password changed successfully"}


@router.post("/logout")
async def logout(user=Depends(get_current_user)):
    # Tokens are stateless; logging out only flips presence
    user_service.update_user(user["id"], {"isOnline": False})
    return {"status": "success", "message": "Logged out successfully"}
