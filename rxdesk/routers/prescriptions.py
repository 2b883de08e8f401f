"""Prescription lifecycle endpoints."""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rxdesk.core.database import get_db
from rxdesk.schemas.prescription import (
    DispenseCreate,
    DispenseRead,
    PrescriptionCreate,
    PrescriptionRead,
)
from rxdesk.services.prescription_service import PrescriptionService

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])


@router.post("", response_model=PrescriptionRead, status_code=status.HTTP_201_CREATED)
async def issue_prescription(payload: PrescriptionCreate, db: Session = Depends(get_db)):
    return PrescriptionService.issue_prescription(
        db,
        patient_id=payload.patient_id,
        doctor_id=payload.doctor_id,
        medications=payload.medications,
        instructions=payload.instructions,
    )


# Declared before /{prescription_id} so "available" is not parsed as an id
@router.get("/available", response_model=List[PrescriptionRead])
async def available_prescriptions(db: Session = Depends(get_db)):
    return PrescriptionService.list_available_prescriptions(db)


@router.get("/{prescription_id}", response_model=PrescriptionRead)
async def get_prescription(prescription_id: int, db: Session = Depends(get_db)):
    return PrescriptionService.get_prescription(db, prescription_id)


@router.post(
    "/{prescription_id}/dispense",
    response_model=DispenseRead,
    status_code=status.HTTP_201_CREATED,
)
async def dispense_prescription(
    prescription_id: int,
    payload: DispenseCreate,
    db: Session = Depends(get_db),
):
    return PrescriptionService.dispense_prescription(
        db,
        prescription_id=prescription_id,
        pharmacy_id=payload.pharmacy_id,
        pharmacist_name=payload.pharmacist_name,
        amount=payload.amount,
        notes=payload.notes,
    )
