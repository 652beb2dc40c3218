"""Pydantic models for user accounts (doctors, patients and admins)."""
import re
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import EmailStr, Field, field_serializer, field_validator, model_validator

from greedoc.models.base import CamelModel

Role = Literal["doctor", "patient", "admin"]
Gender = Literal["male", "female", "other", "prefer_not_to_say"]
PatientGender = Literal["male", "female", "other"]

CNIC_PATTERN = re.compile(r"^\d{5}-?\d{7}-?\d$")


def normalize_cnic(value: Optional[str]) -> Optional[str]:
    """Canonical CNIC form: 12345-1234567-1."""
    if value is None:
        return None
    value = value.strip()
    if not CNIC_PATTERN.match(value):
        raise ValueError("CNIC must be 13 digits, e.g. 12345-1234567-1")
    digits = value.replace("-", "")
    return f"{digits[:5]}-{digits[5:12]}-{digits[12]}"


def _lower_email(value):
    return value.strip().lower() if isinstance(value, str) else value


class _BirthDateMixin(CamelModel):
    @field_serializer("date_of_birth", check_fields=False)
    def _iso_birth_date(self, value: Optional[date]):
        return value.isoformat() if value else None


class MedicalInfo(CamelModel):
    blood_type: Optional[str] = Field(None, max_length=5)
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    conditions: Optional[List[str]] = None
    height_cm: Optional[float] = Field(None, gt=0)
    weight_kg: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = Field(None, max_length=1000)


class DoctorRegister(_BirthDateMixin):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    date_of_birth: date
    gender: Gender
    phone_number: str = Field(..., min_length=10, max_length=15)
    specialization: Optional[str] = Field(None, min_length=2, max_length=100)
    license_number: Optional[str] = Field(None, min_length=5, max_length=50)

    _email = field_validator("email", mode="before")(_lower_email)


class LoginRequest(CamelModel):
    email: Optional[EmailStr] = None
    cnic: Optional[str] = None
    password: str = Field(..., min_length=1)

    _email = field_validator("email", mode="before")(_lower_email)

    @field_validator("cnic")
    @classmethod
    def _cnic(cls, v):
        return normalize_cnic(v)

    @model_validator(mode="after")
    def _identifier_required(self):
        if not self.email and not self.cnic:
            raise ValueError("Either email or CNIC is required")
        return self


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ProfileUpdate(_BirthDateMixin):
    """Fields a user may change on their own profile."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone_number: Optional[str] = Field(None, min_length=10, max_length=15)
    date_of_birth: Optional[date] = None
    address: Optional[Union[str, Dict[str, Any]]] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    medical_info: Optional[MedicalInfo] = None
    preferences: Optional[Dict[str, Any]] = None


class UserUpdate(ProfileUpdate):
    """Admin (or self) update. Role and password are not changeable here."""

    gender: Optional[Gender] = None
    specialization: Optional[str] = Field(None, min_length=2, max_length=100)
    license_number: Optional[str] = Field(None, min_length=5, max_length=50)
    avatar: Optional[str] = None


class PatientCreate(_BirthDateMixin):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone_number: str = Field(..., min_length=10, max_length=15)
    date_of_birth: date
    gender: PatientGender
    password: Optional[str] = Field(None, min_length=6)
    cnic: Optional[str] = None
    address: Optional[Union[str, Dict[str, Any]]] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    medical_info: Optional[MedicalInfo] = None

    _email = field_validator("email", mode="before")(_lower_email)

    @field_validator("cnic")
    @classmethod
    def _cnic(cls, v):
        return normalize_cnic(v)


class PatientUpdate(_BirthDateMixin):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone_number: Optional[str] = Field(None, min_length=10, max_length=15)
    date_of_birth: Optional[date] = None
    gender: Optional[PatientGender] = None
    cnic: Optional[str] = None
    address: Optional[Union[str, Dict[str, Any]]] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None

    @field_validator("cnic")
    @classmethod
    def _cnic(cls, v):
        return normalize_cnic(v)


class FcmTokenUpdate(CamelModel):
    fcm_token: str = Field(..., min_length=1)
