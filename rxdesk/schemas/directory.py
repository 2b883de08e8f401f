"""Doctor, patient and pharmacy schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DoctorCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=200)
    specialization: Optional[str] = None
    license_number: str = Field(min_length=1, max_length=50)
    phone_number: Optional[str] = None
    email: Optional[str] = None
    clinic_address: Optional[str] = None


class DoctorRead(DoctorCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PatientCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=200)
    phone_number: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    address: Optional[str] = None


class PatientRead(PatientCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PharmacyCreate(BaseModel):
    pharmacy_name: str = Field(min_length=1, max_length=200)
    license_number: str = Field(min_length=1, max_length=50)
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None


class PharmacyRead(PharmacyCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
