"""Firestore access for the ``users`` collection."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from greedoc.core.firebase import get_db
from greedoc.core.security import hash_password
from greedoc.services.time_utils import age_from_birth_date, as_utc, utcnow

logger = logging.getLogger(__name__)

USERS = "users"

# Never leave the service layer
PRIVATE_FIELDS = ("password",)


def _doc_to_user(doc) -> Optional[Dict[str, Any]]:
    if not doc.exists:
        return None
    return {"id": doc.id, **(doc.to_dict() or {})}


def _first(query) -> Optional[Dict[str, Any]]:
    for doc in query.limit(1).stream():
        return {"id": doc.id, **(doc.to_dict() or {})}
    return None


def full_name(user: Dict[str, Any]) -> str:
    return f"{user.get('firstName', '')} {user.get('lastName', '')}".strip()


def to_public(user: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Shape a stored user for API responses: no secrets, derived fields added."""
    if user is None:
        return None
    public = {k: v for k, v in user.items() if k not in PRIVATE_FIELDS}
    public["fullName"] = full_name(user)
    public["age"] = age_from_birth_date(user.get("dateOfBirth"))
    public.setdefault("isActive", True)
    return public


def get_user(user_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not user_id:
        return None
    return _doc_to_user(get_db().collection(USERS).document(user_id).get())


def find_by_email(email: str) -> Optional[Dict[str, Any]]:
    query = get_db().collection(USERS).where(filter=FieldFilter("email", "==", email.lower()))
    return _first(query)


def find_by_cnic(cnic: str) -> Optional[Dict[str, Any]]:
    query = get_db().collection(USERS).where(filter=FieldFilter("cnic", "==", cnic))
    return _first(query)


def create_user(data: Dict[str, Any], password: str) -> Dict[str, Any]:
    """
    Insert a user document. ``data`` uses camelCase field names.

    The plain password is hashed here; callers never store it themselves.
    """
    now = utcnow()
    doc = {
        "isActive": True,
        "lastLogin": None,
        "fcmToken": None,
        "isOnline": False,
        **data,
        "email": data["email"].lower(),
        "password": hash_password(password),
        "createdAt": now,
        "updatedAt": now,
    }
    _, ref = get_db().collection(USERS).add(doc)
    logger.info("Created %s account %s", doc.get("role"), ref.id)
    return {"id": ref.id, **doc}


def update_user(user_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    ref = get_db().collection(USERS).document(user_id)
    ref.update({**changes, "updatedAt": utcnow()})
    return _doc_to_user(ref.get())


def set_password(user_id: str, new_password: str) -> None:
    update_user(user_id, {"password": hash_password(new_password)})


def delete_user(user_id: str) -> None:
    get_db().collection(USERS).document(user_id).delete()


def _matches(user: Dict[str, Any], search: str) -> bool:
    needle = search.lower()
    haystack = (
        user.get("firstName"),
        user.get("lastName"),
        user.get("email"),
        user.get("cnic"),
    )
    return any(needle in str(v).lower() for v in haystack if v)


def list_users(
    role: Optional[str] = None,
    doctor_id: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Users filtered by equality clauses, newest first.

    Search and ordering happen in memory so no composite index is needed.
    """
    query = get_db().collection(USERS)
    if role:
        query = query.where(filter=FieldFilter("role", "==", role))
    if doctor_id:
        query = query.where(filter=FieldFilter("doctorId", "==", doctor_id))

    users = [{"id": d.id, **(d.to_dict() or {})} for d in query.stream()]
    if search:
        users = [u for u in users if _matches(u, search)]

    users.sort(key=lambda u: as_utc(u.get("createdAt")) or utcnow(), reverse=True)
    return users


def list_patients_of(doctor_id: str, search: Optional[str] = None) -> List[Dict[str, Any]]:
    return list_users(role="patient", doctor_id=doctor_id, search=search)
