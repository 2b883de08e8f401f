from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from rxdesk.core.database import storage_errors
from rxdesk.models.base import utcnow
from rxdesk.models.prescription import Prescription, Dispense
from rxdesk.services.directory_service import Directory, DirectoryService
from rxdesk.utils.errors import AlreadyDispensedError, NotFoundError, ValidationError
from rxdesk.utils.locks import KeyedLock

import logging

logger = logging.getLogger(__name__)

# One lock per prescription id; the unique index on dispenses.prescription_id
# covers writers in other processes.
_dispense_locks = KeyedLock()


def _parse_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValidationError("Amount must not be negative")
    return value.quantize(Decimal("0.01"))


class PrescriptionService:
    """
    Prescription lifecycle:
    - Issuing prescriptions against known patients/doctors
    - The one-shot Issued -> Dispensed transition
    - Available / history listings
    """

    # -------------------------------------------------------------------------
    # Issue
    # -------------------------------------------------------------------------
    @staticmethod
    def issue_prescription(
        db: Session,
        patient_id: int,
        doctor_id: int,
        medications: str,
        instructions: Optional[str] = None,
        directory: Optional[Directory] = None,
    ) -> Prescription:
        directory = directory or DirectoryService(db)

        if not medications or not medications.strip():
            raise ValidationError("Medication text must not be empty")
        if not directory.patient_exists(patient_id):
            raise NotFoundError(f"Patient {patient_id} not found")
        if not directory.doctor_exists(doctor_id):
            raise NotFoundError(f"Doctor {doctor_id} not found")

        prescription = Prescription(
            patient_id=patient_id,
            doctor_id=doctor_id,
            medications=medications.strip(),
            instructions=instructions,
            issued_at=utcnow(),
        )
        with storage_errors(db, "save prescription"):
            db.add(prescription)
            db.commit()
            db.refresh(prescription)

        logger.info(
            "Prescription %s issued by doctor %s for patient %s",
            prescription.id, doctor_id, patient_id,
        )
        return prescription

    @staticmethod
    def get_prescription(db: Session, prescription_id: int) -> Prescription:
        with storage_errors(db, "load prescription"):
            prescription = db.query(Prescription).filter(Prescription.id == prescription_id).first()
        if not prescription:
            raise NotFoundError(f"Prescription {prescription_id} not found")
        return prescription

    # -------------------------------------------------------------------------
    # Dispense
    # -------------------------------------------------------------------------
    @staticmethod
    def dispense_prescription(
        db: Session,
        prescription_id: int,
        pharmacy_id: int,
        pharmacist_name: str,
        amount,
        notes: Optional[str] = None,
        directory: Optional[Directory] = None,
    ) -> Dispense:
        """
        Record that a pharmacy fulfilled a prescription.

        The existing-dispense check runs before argument validation, so any
        repeat call for a fulfilled prescription reports AlreadyDispensedError.
        """
        directory = directory or DirectoryService(db)

        with _dispense_locks.hold(prescription_id):
            prescription = PrescriptionService.get_prescription(db, prescription_id)

            with storage_errors(db, "check existing dispense"):
                existing = (
                    db.query(Dispense.id)
                    .filter(Dispense.prescription_id == prescription_id)
                    .first()
                )
            if existing:
                logger.warning("Prescription %s already dispensed (dispense %s)", prescription_id, existing.id)
                raise AlreadyDispensedError(f"Prescription {prescription_id} already dispensed")

            if not directory.pharmacy_exists(pharmacy_id):
                raise NotFoundError(f"Pharmacy {pharmacy_id} not found")
            if not pharmacist_name or not pharmacist_name.strip():
                raise ValidationError("Pharmacist name must not be empty")
            total = _parse_amount(amount)

            dispense = Dispense(
                prescription=prescription,
                pharmacy_id=pharmacy_id,
                pharmacist_name=pharmacist_name.strip(),
                total_amount=total,
                notes=notes,
                dispensed_at=utcnow(),
            )
            with storage_errors(db, "save dispense"):
                try:
                    db.add(dispense)
                    db.commit()
                except IntegrityError:
                    # Lost the race against a writer outside this process
                    db.rollback()
                    already = (
                        db.query(Dispense.id)
                        .filter(Dispense.prescription_id == prescription_id)
                        .first()
                    )
                    if already:
                        logger.warning("Concurrent dispense rejected for prescription %s", prescription_id)
                        raise AlreadyDispensedError(f"Prescription {prescription_id} already dispensed")
                    raise
                db.refresh(dispense)

        logger.info(
            "Prescription %s dispensed by pharmacy %s: dispense %s, amount %s",
            prescription_id, pharmacy_id, dispense.id, dispense.total_amount,
        )
        return dispense

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------
    @staticmethod
    def list_available_prescriptions(db: Session) -> List[Prescription]:
        """Prescriptions with no dispense yet, oldest first."""
        with storage_errors(db, "list available prescriptions"):
            return (
                db.query(Prescription)
                .options(selectinload(Prescription.dispense))
                .filter(~Prescription.dispense.has())
                .order_by(Prescription.issued_at.asc(), Prescription.id.asc())
                .all()
            )

    @staticmethod
    def get_dispense_history(
        db: Session,
        pharmacy_id: int,
        directory: Optional[Directory] = None,
    ) -> List[Dispense]:
        directory = directory or DirectoryService(db)
        if not directory.pharmacy_exists(pharmacy_id):
            raise NotFoundError(f"Pharmacy {pharmacy_id} not found")

        with storage_errors(db, "load dispense history"):
            return (
                db.query(Dispense)
                .options(selectinload(Dispense.prescription))
                .filter(Dispense.pharmacy_id == pharmacy_id)
                .order_by(Dispense.dispensed_at.asc(), Dispense.id.asc())
                .all()
            )

    @staticmethod
    def get_doctor_prescriptions(
        db: Session,
        doctor_id: int,
        directory: Optional[Directory] = None,
    ) -> List[Prescription]:
        directory = directory or DirectoryService(db)
        if not directory.doctor_exists(doctor_id):
            raise NotFoundError(f"Doctor {doctor_id} not found")

        with storage_errors(db, "load doctor prescriptions"):
            return (
                db.query(Prescription)
                .options(selectinload(Prescription.dispense))
                .filter(Prescription.doctor_id == doctor_id)
                .order_by(Prescription.issued_at.asc(), Prescription.id.asc())
                .all()
            )

    @staticmethod
    def get_patient_prescriptions(
        db: Session,
        patient_id: int,
        directory: Optional[Directory] = None,
    ) -> List[Prescription]:
        directory = directory or DirectoryService(db)
        if not directory.patient_exists(patient_id):
            raise NotFoundError(f"Patient {patient_id} not found")

        with storage_errors(db, "load patient prescriptions"):
            return (
                db.query(Prescription)
                .options(selectinload(Prescription.dispense))
                .filter(Prescription.patient_id == patient_id)
                .order_by(Prescription.issued_at.asc(), Prescription.id.asc())
                .all()
            )
