"""Prescription and dispense schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PrescriptionCreate(BaseModel):
    patient_id: int
    doctor_id: int
    medications: str
    instructions: Optional[str] = None


class PrescriptionRead(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    medications: str
    instructions: Optional[str] = None
    issued_at: datetime
    is_dispensed: bool

    model_config = ConfigDict(from_attributes=True)


class DispenseCreate(BaseModel):
    pharmacy_id: int
    pharmacist_name: str
    # range checks live in the service so every caller gets the same errors
    amount: Decimal
    notes: Optional[str] = None


class DispenseRead(BaseModel):
    id: int
    prescription_id: int
    pharmacy_id: int
    pharmacist_name: str
    total_amount: Decimal
    notes: Optional[str] = None
    dispensed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DispenseHistoryItem(DispenseRead):
    patient_name: str
    medications: str
