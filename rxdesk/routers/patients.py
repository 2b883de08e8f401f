"""Patient endpoints."""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rxdesk.core.database import get_db
from rxdesk.schemas.directory import PatientCreate, PatientRead
from rxdesk.schemas.prescription import PrescriptionRead
from rxdesk.services.directory_service import DirectoryService
from rxdesk.services.prescription_service import PrescriptionService

router = APIRouter(prefix="/patients", tags=["patients"])


@router.post("", response_model=PatientRead, status_code=status.HTTP_201_CREATED)
async def create_patient(payload: PatientCreate, db: Session = Depends(get_db)):
    return DirectoryService.add_patient(db, payload.model_dump())


@router.get("", response_model=List[PatientRead])
async def list_patients(db: Session = Depends(get_db)):
    return DirectoryService.list_patients(db)


@router.get("/{patient_id}/prescriptions", response_model=List[PrescriptionRead])
async def patient_prescriptions(patient_id: int, db: Session = Depends(get_db)):
    return PrescriptionService.get_patient_prescriptions(db, patient_id)
