from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from rxdesk.core.database import Base
from rxdesk.models.base import utcnow


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)

    medications = Column(Text, nullable=False)
    instructions = Column(Text, nullable=True)
    issued_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    doctor = relationship("Doctor", back_populates="prescriptions")
    patient = relationship("Patient", back_populates="prescriptions")
    dispense = relationship("Dispense", back_populates="prescription", uselist=False)

    @property
    def is_dispensed(self) -> bool:
        return self.dispense is not None

    def __repr__(self):
        return f"<Prescription {self.id}>"


class Dispense(Base):
    __tablename__ = "dispenses"

    id = Column(Integer, primary_key=True, index=True)
    # unique: a prescription is fulfilled by at most one dispense
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), unique=True, nullable=False)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False, index=True)

    pharmacist_name = Column(String(100), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    dispensed_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    prescription = relationship("Prescription", back_populates="dispense")
    pharmacy = relationship("Pharmacy", back_populates="dispenses")

    def __repr__(self):
        return f"<Dispense {self.id} rx={self.prescription_id}>"
