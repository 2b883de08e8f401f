"""Pharmacy endpoints, including the dispense history report."""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rxdesk.core.database import get_db
from rxdesk.schemas.directory import PharmacyCreate, PharmacyRead
from rxdesk.schemas.prescription import DispenseHistoryItem
from rxdesk.services.directory_service import DirectoryService
from rxdesk.services.prescription_service import PrescriptionService

router = APIRouter(prefix="/pharmacies", tags=["pharmacies"])


@router.post("", response_model=PharmacyRead, status_code=status.HTTP_201_CREATED)
async def create_pharmacy(payload: PharmacyCreate, db: Session = Depends(get_db)):
    return DirectoryService.add_pharmacy(db, payload.model_dump())


@router.get("", response_model=List[PharmacyRead])
async def list_pharmacies(db: Session = Depends(get_db)):
    return DirectoryService.list_pharmacies(db)


@router.get("/{pharmacy_id}/dispenses", response_model=List[DispenseHistoryItem])
async def dispense_history(pharmacy_id: int, db: Session = Depends(get_db)):
    directory = DirectoryService(db)
    history = PrescriptionService.get_dispense_history(db, pharmacy_id, directory=directory)
    return [
        DispenseHistoryItem(
            id=d.id,
            prescription_id=d.prescription_id,
            pharmacy_id=d.pharmacy_id,
            pharmacist_name=d.pharmacist_name,
            total_amount=d.total_amount,
            notes=d.notes,
            dispensed_at=d.dispensed_at,
            patient_name=directory.get_patient_display_name(d.prescription.patient_id),
            medications=d.prescription.medications,
        )
        for d in history
    ]
