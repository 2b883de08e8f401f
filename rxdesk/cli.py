"""Small CLI helpers wired to console scripts for developer convenience.

Usage (from project root):
  rxdesk-runserver --host=0.0.0.0 --port=8000 --no-reload
  rxdesk-tests
  rxdesk-migrate        # defaults to `alembic upgrade head`
  rxdesk-init-env       # copies .env.example -> .env if missing
  rxdesk-init-db        # create tables without alembic
  rxdesk-demo           # walk through issue -> dispense -> reports -> OTP
"""
from __future__ import annotations

import sys
import shutil
import logging
import subprocess
from decimal import Decimal
from pathlib import Path
from typing import List

logger = logging.getLogger("rxdesk.demo")


def _args() -> List[str]:
    return sys.argv[1:]


def runserver() -> None:
    """Run Uvicorn programmatically. Accepts simple flags:

    --host=<host>  (default 127.0.0.1)
    --port=<port>  (default 8000)
    --no-reload    (disable auto-reload)
    --reload       (enable auto-reload)
    """
    import uvicorn

    host = "127.0.0.1"
    port = 8000
    reload = True

    for a in _args():
        if a.startswith("--host="):
            host = a.split("=", 1)[1]
        elif a.startswith("--port="):
            try:
                port = int(a.split("=", 1)[1])
            except ValueError:
                print(f"Ignoring invalid port: {a}")
        elif a == "--no-reload":
            reload = False
        elif a == "--reload":
            reload = True

    print(f"Starting uvicorn on {host}:{port} (reload={reload})")
    uvicorn.run("rxdesk.main:app", host=host, port=port, reload=reload)


def run_tests() -> None:
    """Run pytest with any forwarded args."""
    args = _args()
    cmd = ["pytest"] + args
    subprocess.run(cmd, check=True)


def run_migrations() -> None:
    """Run alembic. If no args provided, runs `alembic upgrade head`."""
    args = _args()
    if args:
        cmd = ["alembic"] + args
    else:
        cmd = ["alembic", "upgrade", "head"]
    subprocess.run(cmd, check=True)


def init_env() -> None:
    """Copy `.env.example` to `.env` if `.env` is missing."""
    root = Path(__file__).resolve().parents[1]
    src = root / ".env.example"
    dst = root / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return
    if not src.exists():
        print(f".env.example not found at {src}")
        return
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")


def init_db() -> None:
    from rxdesk.core.database import init_db as create_tables

    create_tables()
    print("Database tables created")


def demo() -> None:
    """Replay the sample walkthrough. Expects a fresh database (license numbers are unique)."""
    from rxdesk.core.database import SessionLocal, init_db as create_tables
    from rxdesk.core.logger import setup_logging
    from rxdesk.services.directory_service import DirectoryService
    from rxdesk.services.otp_service import OTPService
    from rxdesk.services.prescription_service import PrescriptionService
    from rxdesk.utils.errors import AlreadyDispensedError

    setup_logging()
    create_tables()

    db = SessionLocal()
    try:
        logger.info("--- Creating doctors ---")
        doctor1 = DirectoryService.add_doctor(db, {
            "full_name": "Dr. John Smith", "specialization": "Cardiology",
            "license_number": "MD001", "phone_number": "0771234567",
            "email": "dr.johnsmith@hospital.com", "clinic_address": "Main Hospital, Colombo",
        })
        doctor2 = DirectoryService.add_doctor(db, {
            "full_name": "Dr. Sarah Johnson", "specialization": "Pediatrics",
            "license_number": "MD002", "phone_number": "0772345678",
            "email": "dr.sarahjohnson@hospital.com", "clinic_address": "Main Hospital, Colombo",
        })

        logger.info("--- Creating pharmacies ---")
        pharmacy1 = DirectoryService.add_pharmacy(db, {
            "pharmacy_name": "MediPlus Pharmacy", "license_number": "PH001",
            "phone_number": "0113456789", "address": "Main Street, Colombo",
            "city": "Colombo", "postal_code": "00100",
        })
        DirectoryService.add_pharmacy(db, {
            "pharmacy_name": "HealthCare Pharmacy", "license_number": "PH002",
            "phone_number": "0114567890", "address": "Main Street, Colombo",
            "city": "Colombo", "postal_code": "00100",
        })

        logger.info("--- Creating patients ---")
        patient1 = DirectoryService.add_patient(db, {
            "full_name": "Alice Johnson", "phone_number": "0777123456",
            "age": 28, "address": "Sample Address, Colombo",
        })
        patient2 = DirectoryService.add_patient(db, {
            "full_name": "Bob Wilson", "phone_number": "0777234567",
            "age": 45, "address": "Sample Address, Colombo",
        })

        logger.info("--- Creating prescriptions ---")
        rx1 = PrescriptionService.issue_prescription(
            db, patient1.id, doctor1.id,
            "Lisinopril 10mg - Take once daily", "Follow prescribed dosage",
        )
        PrescriptionService.issue_prescription(
            db, patient2.id, doctor2.id,
            "Amoxicillin 500mg - Take twice daily", "Follow prescribed dosage",
        )

        logger.info("--- Pharmacy operations ---")
        available = PrescriptionService.list_available_prescriptions(db)
        logger.info("Found %d available prescriptions", len(available))
        dispense = PrescriptionService.dispense_prescription(
            db, rx1.id, pharmacy1.id, "John Pharmacist", Decimal("25.50"), "Dispensed successfully",
        )
        logger.info("Dispense %s recorded, amount %s", dispense.id, dispense.total_amount)
        try:
            PrescriptionService.dispense_prescription(
                db, rx1.id, pharmacy1.id, "John Pharmacist", Decimal("25.50"),
            )
        except AlreadyDispensedError as exc:
            logger.info("Second dispense refused: %s", exc.detail)

        logger.info("--- Search and reports ---")
        directory = DirectoryService(db)
        doctor_rx = PrescriptionService.get_doctor_prescriptions(db, doctor1.id)
        logger.info("%s has %d prescriptions", directory.get_doctor_display_name(doctor1.id), len(doctor_rx))
        history = PrescriptionService.get_dispense_history(db, pharmacy1.id)
        logger.info("%s has %d dispense records", directory.get_pharmacy_display_name(pharmacy1.id), len(history))
        for record in history:
            logger.info(
                "  - Patient: %s, Amount: %s, Date: %s",
                directory.get_patient_display_name(record.prescription.patient_id),
                record.total_amount,
                record.dispensed_at.strftime("%Y-%m-%d"),
            )

        logger.info("--- OTP verification ---")
        code = OTPService.generate_code(db, patient1.phone_number)
        logger.info("First verification: %s", OTPService.verify_code(db, patient1.phone_number, code))
        logger.info("Repeat verification: %s", OTPService.verify_code(db, patient1.phone_number, code))

        logger.info("=== All demos completed successfully! ===")
    finally:
        db.close()


if __name__ == "__main__":
    # Allow running the helpers directly: python -m rxdesk.cli demo
    if len(sys.argv) <= 1:
        print(__doc__)
        sys.exit(0)
    cmd = sys.argv[1]
    sys.argv.pop(1)
    if cmd == "runserver":
        runserver()
    elif cmd in ("run-tests", "tests", "test"):
        run_tests()
    elif cmd in ("migrate", "alembic"):
        run_migrations()
    elif cmd in ("init-env", "initenv"):
        init_env()
    elif cmd in ("init-db", "initdb"):
        init_db()
    elif cmd == "demo":
        demo()
    else:
        print(f"Unknown command: {cmd}")
