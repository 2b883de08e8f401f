"""Doctor endpoints."""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rxdesk.core.database import get_db
from rxdesk.schemas.directory import DoctorCreate, DoctorRead
from rxdesk.schemas.prescription import PrescriptionRead
from rxdesk.services.directory_service import DirectoryService
from rxdesk.services.prescription_service import PrescriptionService

router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.post("", response_model=DoctorRead, status_code=status.HTTP_201_CREATED)
async def create_doctor(payload: DoctorCreate, db: Session = Depends(get_db)):
    return DirectoryService.add_doctor(db, payload.model_dump())


@router.get("", response_model=List[DoctorRead])
async def list_doctors(db: Session = Depends(get_db)):
    return DirectoryService.list_doctors(db)


@router.get("/{doctor_id}/prescriptions", response_model=List[PrescriptionRead])
async def doctor_prescriptions(doctor_id: int, db: Session = Depends(get_db)):
    return PrescriptionService.get_doctor_prescriptions(db, doctor_id)
