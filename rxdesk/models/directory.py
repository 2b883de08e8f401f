"""Directory records: doctors, patients and pharmacies."""
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from rxdesk.core.database import Base
from rxdesk.models.base import IDMixin, TimestampMixin


class Doctor(IDMixin, TimestampMixin, Base):
    __tablename__ = "doctors"

    full_name = Column(String(200), nullable=False)
    specialization = Column(String(100), nullable=True)
    license_number = Column(String(50), unique=True, index=True, nullable=False)
    phone_number = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    clinic_address = Column(Text, nullable=True)

    prescriptions = relationship("Prescription", back_populates="doctor")

    def __repr__(self):
        return f"<Doctor {self.full_name}>"


class Patient(IDMixin, TimestampMixin, Base):
    __tablename__ = "patients"

    full_name = Column(String(200), nullable=False)
    phone_number = Column(String(20), index=True, nullable=True)
    age = Column(Integer, nullable=True)
    address = Column(Text, nullable=True)

    prescriptions = relationship("Prescription", back_populates="patient")

    def __repr__(self):
        return f"<Patient {self.full_name}>"


class Pharmacy(IDMixin, TimestampMixin, Base):
    __tablename__ = "pharmacies"

    pharmacy_name = Column(String(200), nullable=False)
    license_number = Column(String(50), unique=True, index=True, nullable=False)
    phone_number = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True, index=True)
    postal_code = Column(String(10), nullable=True)

    dispenses = relationship("Dispense", back_populates="pharmacy")

    def __repr__(self):
        return f"<Pharmacy {self.pharmacy_name}>"
