from typing import List, Protocol

from sqlalchemy.orm import Session

from rxdesk.core.database import storage_errors
from rxdesk.models.directory import Doctor, Patient, Pharmacy
from rxdesk.utils.errors import NotFoundError, ValidationError

import logging

logger = logging.getLogger(__name__)


class Directory(Protocol):
    """What the prescription lifecycle needs to know about directory records."""

    def patient_exists(self, patient_id: int) -> bool: ...
    def doctor_exists(self, doctor_id: int) -> bool: ...
    def pharmacy_exists(self, pharmacy_id: int) -> bool: ...
    def get_patient_display_name(self, patient_id: int) -> str: ...
    def get_doctor_display_name(self, doctor_id: int) -> str: ...
    def get_pharmacy_display_name(self, pharmacy_id: int) -> str: ...


class DirectoryService:
    """Store-and-list for doctors, patients and pharmacies.

    Instances bound to a session satisfy the ``Directory`` protocol; the
    static helpers handle record creation and listings.
    """

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Existence checks / display data
    # -------------------------------------------------------------------------
    def _exists(self, model, record_id: int) -> bool:
        with storage_errors(self.db, f"look up {model.__tablename__}"):
            return self.db.query(model.id).filter(model.id == record_id).first() is not None

    def patient_exists(self, patient_id: int) -> bool:
        return self._exists(Patient, patient_id)

    def doctor_exists(self, doctor_id: int) -> bool:
        return self._exists(Doctor, doctor_id)

    def pharmacy_exists(self, pharmacy_id: int) -> bool:
        return self._exists(Pharmacy, pharmacy_id)

    def _get(self, model, record_id: int, label: str):
        with storage_errors(self.db, f"look up {model.__tablename__}"):
            record = self.db.query(model).filter(model.id == record_id).first()
        if not record:
            raise NotFoundError(f"{label} {record_id} not found")
        return record

    def get_patient_display_name(self, patient_id: int) -> str:
        return self._get(Patient, patient_id, "Patient").full_name

    def get_doctor_display_name(self, doctor_id: int) -> str:
        doctor = self._get(Doctor, doctor_id, "Doctor")
        if doctor.specialization:
            return f"{doctor.full_name} ({doctor.specialization})"
        return doctor.full_name

    def get_pharmacy_display_name(self, pharmacy_id: int) -> str:
        return self._get(Pharmacy, pharmacy_id, "Pharmacy").pharmacy_name

    # -------------------------------------------------------------------------
    # Record management
    # -------------------------------------------------------------------------
    @staticmethod
    def _add(db: Session, record):
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def _ensure_unique_license(db: Session, model, license_number: str, label: str) -> None:
        exists = db.query(model.id).filter(model.license_number == license_number).first()
        if exists:
            raise ValidationError(f"{label} license {license_number} already registered")

    @staticmethod
    def add_doctor(db: Session, payload: dict) -> Doctor:
        DirectoryService._ensure_unique_license(db, Doctor, payload["license_number"], "Doctor")
        doctor = DirectoryService._add(db, Doctor(**payload))
        logger.info("Doctor created: %s (%s)", doctor.full_name, doctor.specialization)
        return doctor

    @staticmethod
    def add_patient(db: Session, payload: dict) -> Patient:
        patient = DirectoryService._add(db, Patient(**payload))
        logger.info("Patient created: %s (%s)", patient.full_name, patient.phone_number)
        return patient

    @staticmethod
    def add_pharmacy(db: Session, payload: dict) -> Pharmacy:
        DirectoryService._ensure_unique_license(db, Pharmacy, payload["license_number"], "Pharmacy")
        pharmacy = DirectoryService._add(db, Pharmacy(**payload))
        logger.info("Pharmacy created: %s", pharmacy.pharmacy_name)
        return pharmacy

    @staticmethod
    def list_doctors(db: Session) -> List[Doctor]:
        return db.query(Doctor).order_by(Doctor.id.asc()).all()

    @staticmethod
    def list_patients(db: Session) -> List[Patient]:
        return db.query(Patient).order_by(Patient.id.asc()).all()

    @staticmethod
    def list_pharmacies(db: Session) -> List[Pharmacy]:
        return db.query(Pharmacy).order_by(Pharmacy.id.asc()).all()
