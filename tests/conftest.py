"""Pytest fixtures for service and API tests.

Loads `.env.test` before any `rxdesk` module reads settings, initializes a
clean test database, and provides an `AsyncClient` for integration tests.
SMS delivery is stubbed so tests never reach Twilio.
"""
import os
import pathlib
import uuid

import pytest
from dotenv import load_dotenv

_root = pathlib.Path(__file__).resolve().parent.parent
_dotenv_path = _root / ".env.test"
if _dotenv_path.exists():
    load_dotenv(dotenv_path=str(_dotenv_path))
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_rxdesk.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "False")


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session."""
    from rxdesk.core.database import engine, Base

    # Drop / create all tables to ensure clean DB
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    # Teardown: drop all tables
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    from rxdesk.core.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def sent_sms(monkeypatch):
    """Capture OTP SMS instead of sending them."""
    import rxdesk.services.sms_service as sms_service

    outbox = []

    def fake_send_otp_sms(to_phone, otp_code):
        outbox.append((to_phone, otp_code))
        return True

    monkeypatch.setattr(sms_service, "send_otp_sms", fake_send_otp_sms)
    return outbox


@pytest.fixture
def directory_data(db_session):
    """One doctor, patient and pharmacy with unique license numbers."""
    from rxdesk.services.directory_service import DirectoryService

    suffix = uuid.uuid4().hex[:8]
    doctor = DirectoryService.add_doctor(db_session, {
        "full_name": "Dr. John Smith",
        "specialization": "Cardiology",
        "license_number": f"MD-{suffix}",
        "phone_number": "0771234567",
    })
    patient = DirectoryService.add_patient(db_session, {
        "full_name": "Alice Johnson",
        "phone_number": "0777123456",
        "age": 28,
    })
    pharmacy = DirectoryService.add_pharmacy(db_session, {
        "pharmacy_name": "MediPlus Pharmacy",
        "license_number": f"PH-{suffix}",
        "city": "Colombo",
    })
    return {"doctor": doctor, "patient": patient, "pharmacy": pharmacy}


@pytest.fixture
def unique_phone():
    return "07" + str(uuid.uuid4().int)[:8]


@pytest.fixture
async def async_client(prepare_database):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import ASGITransport, AsyncClient
    from rxdesk.main import create_app

    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
