"""User administration routes."""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from greedoc.api.deps import get_current_user, require_role
from greedoc.models.user import Role, UserUpdate
from greedoc.services import user_service
from greedoc.services.pagination import paginate

router = APIRouter(prefix="/users", tags=["users"])


def _load_user(user_id: str) -> dict:
    target = user_service.get_user(user_id)
    if target is None:
        raise HTTPException(status_code=404, detail="User not found")
    return target


def _can_view(user: dict, target: dict) -> bool:
    """Admins see everyone; doctors and patients see themselves and each other when linked."""
    if user["role"] == "admin" or user["id"] == target["id"]:
        return True
    if user["role"] == "doctor":
        return target.get("doctorId") == user["id"]
    return user.get("doctorId") == target["id"]


def _listing(role, search, page, limit) -> dict:
    users = [user_service.to_public(u) for u in user_service.list_users(role=role, search=search)]
    items, pagination = paginate(users, page, limit)
    return {"status": "success", "data": {"users": items, "pagination": pagination}}


@router.get("/")
async def list_users(
    role: Optional[Role] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(require_role(["admin"])),
):
    return _listing(role, search, page, limit)


@router.get("/search")
async def search_users(
    search: Optional[str] = None,
    role: Optional[Role] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(get_current_user),
):
    """Directory search (e.g. picking a chat partner). Active accounts only."""
    users = [
        user_service.to_public(u)
        for u in user_service.list_users(role=role, search=search)
        if u.get("isActive", True) and u["id"] != user["id"]
    ]
    items, pagination = paginate(users, page, limit)
    return {"status": "success", "data": {"users": items, "pagination": pagination}}


@router.get("/{user_id}")
async def get_user(user_id: str, user=Depends(get_current_user)):
    target = _load_user(user_id)
    if not _can_view(user, target):
        raise HTTPException(status_code=403, detail="Not authorized to view this user")
    return {"status": "success", "data": {"user": user_service.to_public(target)}}


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: UserUpdate = Body(...),
    user=Depends(get_current_user),
):
    if user["role"] != "admin" and user["id"] != user_id:
        raise HTTPException(status_code=403, detail="Not authorized to update this user")

    _load_user(user_id)
    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    updated = user_service.update_user(user_id, changes)
    return {
        "status": "success",
        "message": "User updated successfully",
        "data": {"user": user_service.to_public(updated)},
    }


@router.delete("/{user_id}")
async def delete_user(user_id: str, user=Depends(require_role(["admin"]))):
    if user_id == user["id"]:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    _load_user(user_id)
    user_service.delete_user(user_id)
    return {"status": "success", "message": "User deleted successfully"}


@router.put("/{user_id}/deactivate")
async def deactivate_user(user_id: str, user=Depends(require_role(["admin"]))):
    if user_id == user["id"]:
        raise HTTPException(status_code=400, detail="Cannot deactivate your own account")

    _load_user(user_id)
    updated = user_service.update_user(user_id, {"isActive": False, "isOnline": False})
    return {
        "status": "success",
        "message": "User deactivated successfully",
        "data": {"user": user_service.to_public(updated)},
    }


@router.put("/{user_id}/activate")
async def activate_user(user_id: str, user=Depends(require_role(["admin"]))):
    _load_user(user_id)
    updated = user_service.update_user(user_id, {"isActive": True})
    return {
        "status": "success",
        "message": "User activated successfully",
        "data": {"user": user_service.to_public(updated)},
    }


@router.get("/{user_id}/patients")
async def list_doctor_patients(
    user_id: str,
    user=Depends(require_role(["doctor", "admin"])),
):
    if user["role"] == "doctor" and user["id"] != user_id:
        raise HTTPException(status_code=403, detail="Not authorized to view these patients")

    doctor = _load_user(user_id)
    if doctor.get("role") != "doctor":
        raise HTTPException(status_code=400, detail="User is not a doctor")

    patients = [user_service.to_public(p) for p in user_service.list_patients_of(user_id)]
    return {"status": "success", "data": {"patients": patients, "count": len(patients)}}
