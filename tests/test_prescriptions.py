"""Prescription lifecycle service tests."""
import threading
import uuid
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from rxdesk.models.prescription import Dispense
from rxdesk.services.directory_service import DirectoryService
from rxdesk.services.prescription_service import PrescriptionService
from rxdesk.utils.errors import (
    AlreadyDispensedError,
    NotFoundError,
    StorageError,
    ValidationError,
)


def _issue(db, data, medications="Amoxicillin 500mg"):
    return PrescriptionService.issue_prescription(
        db,
        patient_id=data["patient"].id,
        doctor_id=data["doctor"].id,
        medications=medications,
        instructions="Take twice daily",
    )


# ============================================================================
# ISSUE
# ============================================================================

def test_issue_prescription(db_session, directory_data):
    rx = _issue(db_session, directory_data)

    assert rx.id is not None
    assert rx.medications == "Amoxicillin 500mg"
    assert rx.issued_at is not None
    assert rx.is_dispensed is False


def test_issue_rejects_unknown_patient(db_session, directory_data):
    with pytest.raises(NotFoundError):
        PrescriptionService.issue_prescription(
            db_session, 999_999, directory_data["doctor"].id, "Lisinopril 10mg"
        )


def test_issue_rejects_unknown_doctor(db_session, directory_data):
    with pytest.raises(NotFoundError):
        PrescriptionService.issue_prescription(
            db_session, directory_data["patient"].id, 999_999, "Lisinopril 10mg"
        )


@pytest.mark.parametrize("medications", ["", "   ", None])
def test_issue_rejects_empty_medication(db_session, directory_data, medications):
    with pytest.raises(ValidationError):
        PrescriptionService.issue_prescription(
            db_session, directory_data["patient"].id, directory_data["doctor"].id, medications
        )


def test_issue_uses_supplied_directory(db_session, directory_data):
    class NoPatients:
        def patient_exists(self, patient_id):
            return False

        def doctor_exists(self, doctor_id):
            return True

    with pytest.raises(NotFoundError, match="Patient"):
        PrescriptionService.issue_prescription(
            db_session,
            directory_data["patient"].id,
            directory_data["doctor"].id,
            "Lisinopril 10mg",
            directory=NoPatients(),
        )


# ============================================================================
# DISPENSE
# ============================================================================

def test_dispense_scenario(db_session, directory_data):
    rx = _issue(db_session, directory_data)
    pharmacy = directory_data["pharmacy"]

    dispense = PrescriptionService.dispense_prescription(
        db_session, rx.id, pharmacy.id, "Jane", Decimal("25.50"), "Dispensed successfully"
    )

    assert dispense.total_amount == Decimal("25.50")
    assert dispense.prescription_id == rx.id
    assert dispense.pharmacy_id == pharmacy.id
    assert dispense.dispensed_at is not None
    assert rx.is_dispensed is True

    available_ids = [p.id for p in PrescriptionService.list_available_prescriptions(db_session)]
    assert rx.id not in available_ids

    with pytest.raises(AlreadyDispensedError):
        PrescriptionService.dispense_prescription(
            db_session, rx.id, pharmacy.id, "Jane", Decimal("25.50"), None
        )


def test_second_dispense_fails_whatever_the_arguments(db_session, directory_data):
    rx = _issue(db_session, directory_data)
    pharmacy = directory_data["pharmacy"]
    PrescriptionService.dispense_prescription(db_session, rx.id, pharmacy.id, "Jane", 10)

    for args in [
        (pharmacy.id, "Other", 99),
        (999_999, "Jane", 10),
        (pharmacy.id, "Jane", -5),
        (pharmacy.id, "", "not-a-number"),
    ]:
        with pytest.raises(AlreadyDispensedError):
            PrescriptionService.dispense_prescription(db_session, rx.id, *args)

    count = db_session.query(Dispense).filter(Dispense.prescription_id == rx.id).count()
    assert count == 1


def test_dispense_rejects_negative_amount(db_session, directory_data):
    rx = _issue(db_session, directory_data)

    with pytest.raises(ValidationError):
        PrescriptionService.dispense_prescription(
            db_session, rx.id, directory_data["pharmacy"].id, "Jane", Decimal("-0.01")
        )

    available_ids = [p.id for p in PrescriptionService.list_available_prescriptions(db_session)]
    assert rx.id in available_ids


def test_dispense_accepts_zero_amount(db_session, directory_data):
    rx = _issue(db_session, directory_data)

    dispense = PrescriptionService.dispense_prescription(
        db_session, rx.id, directory_data["pharmacy"].id, "Jane", 0
    )
    assert dispense.total_amount == Decimal("0")


@pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", None])
def test_dispense_rejects_malformed_amount(db_session, directory_data, amount):
    rx = _issue(db_session, directory_data)

    with pytest.raises(ValidationError):
        PrescriptionService.dispense_prescription(
            db_session, rx.id, directory_data["pharmacy"].id, "Jane", amount
        )


def test_dispense_unknown_prescription(db_session, directory_data):
    with pytest.raises(NotFoundError):
        PrescriptionService.dispense_prescription(
            db_session, 999_999, directory_data["pharmacy"].id, "Jane", 10
        )


def test_dispense_unknown_pharmacy(db_session, directory_data):
    rx = _issue(db_session, directory_data)

    with pytest.raises(NotFoundError):
        PrescriptionService.dispense_prescription(db_session, rx.id, 999_999, "Jane", 10)

    assert PrescriptionService.get_prescription(db_session, rx.id).is_dispensed is False


def test_concurrent_dispense_has_single_winner(db_session, directory_data):
    from rxdesk.core.database import SessionLocal

    rx = _issue(db_session, directory_data)
    pharmacy_id = directory_data["pharmacy"].id
    barrier = threading.Barrier(4)
    outcomes = []
    guard = threading.Lock()

    def attempt(name):
        db = SessionLocal()
        try:
            barrier.wait()
            PrescriptionService.dispense_prescription(db, rx.id, pharmacy_id, name, 12)
            result = "ok"
        except AlreadyDispensedError:
            result = "already"
        finally:
            db.close()
        with guard:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(f"pharmacist-{i}",)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["already", "already", "already", "ok"]
    count = db_session.query(Dispense).filter(Dispense.prescription_id == rx.id).count()
    assert count == 1


def test_storage_failure_is_surfaced(db_session, directory_data, monkeypatch):
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)

    with pytest.raises(StorageError) as exc_info:
        _issue(db_session, directory_data)
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_directory_lookup_failure_is_surfaced(db_session, directory_data, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "query", broken_query)

    with pytest.raises(StorageError) as exc_info:
        _issue(db_session, directory_data)
    assert isinstance(exc_info.value.__cause__, OperationalError)

    with pytest.raises(StorageError):
        PrescriptionService.get_dispense_history(db_session, directory_data["pharmacy"].id)


def test_dispense_locks_are_released(db_session, directory_data):
    from rxdesk.services.prescription_service import _dispense_locks

    pharmacy_id = directory_data["pharmacy"].id
    before = len(_dispense_locks)
    for _ in range(20):
        rx = _issue(db_session, directory_data)
        PrescriptionService.dispense_prescription(db_session, rx.id, pharmacy_id, "Jane", 3)
        with pytest.raises(AlreadyDispensedError):
            PrescriptionService.dispense_prescription(db_session, rx.id, pharmacy_id, "Jane", 3)

    assert len(_dispense_locks) == before


def test_keyed_lock_serialises_same_key():
    from rxdesk.utils.locks import KeyedLock

    locks = KeyedLock()
    inside = []
    overlap = []
    guard = threading.Lock()

    def worker():
        with locks.hold("rx-1"):
            with guard:
                inside.append(1)
                if len(inside) > 1:
                    overlap.append(True)
            with guard:
                inside.pop()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlap == []
    assert len(locks) == 0


# ============================================================================
# LISTINGS
# ============================================================================

def test_available_prescriptions_oldest_first(db_session, directory_data):
    first = _issue(db_session, directory_data, "Lisinopril 10mg")
    second = _issue(db_session, directory_data, "Metformin 500mg")
    third = _issue(db_session, directory_data, "Atorvastatin 20mg")
    PrescriptionService.dispense_prescription(
        db_session, second.id, directory_data["pharmacy"].id, "Jane", 5
    )

    available = PrescriptionService.list_available_prescriptions(db_session)
    ours = [p.id for p in available if p.id in {first.id, second.id, third.id}]

    assert ours == [first.id, third.id]
    assert all(not p.is_dispensed for p in available)
    issued = [p.issued_at for p in available]
    assert issued == sorted(issued)


def test_listings_load_dispense_state_up_front(db_session, directory_data):
    from sqlalchemy import inspect

    from rxdesk.core.database import SessionLocal

    rx = _issue(db_session, directory_data)
    PrescriptionService.dispense_prescription(
        db_session, rx.id, directory_data["pharmacy"].id, "Jane", 4
    )
    _issue(db_session, directory_data, "Metformin 500mg")

    db = SessionLocal()
    try:
        listings = [
            PrescriptionService.list_available_prescriptions(db),
            PrescriptionService.get_doctor_prescriptions(db, directory_data["doctor"].id),
            PrescriptionService.get_patient_prescriptions(db, directory_data["patient"].id),
        ]
        for result in listings:
            assert result
            for p in result:
                assert "dispense" not in inspect(p).unloaded

        history = PrescriptionService.get_dispense_history(db, directory_data["pharmacy"].id)
        assert all("prescription" not in inspect(d).unloaded for d in history)
    finally:
        db.close()


def test_doctor_prescriptions(db_session, directory_data):
    first = _issue(db_session, directory_data, "Lisinopril 10mg")
    second = _issue(db_session, directory_data, "Metformin 500mg")

    result = PrescriptionService.get_doctor_prescriptions(db_session, directory_data["doctor"].id)

    assert [p.id for p in result] == [first.id, second.id]


def test_doctor_prescriptions_unknown_doctor(db_session):
    with pytest.raises(NotFoundError):
        PrescriptionService.get_doctor_prescriptions(db_session, 999_999)


def test_patient_prescriptions(db_session, directory_data):
    rx = _issue(db_session, directory_data)

    result = PrescriptionService.get_patient_prescriptions(db_session, directory_data["patient"].id)

    assert [p.id for p in result] == [rx.id]


def test_dispense_history_in_dispense_order(db_session, directory_data):
    pharmacy = directory_data["pharmacy"]
    first = _issue(db_session, directory_data, "Lisinopril 10mg")
    second = _issue(db_session, directory_data, "Metformin 500mg")

    d2 = PrescriptionService.dispense_prescription(db_session, second.id, pharmacy.id, "Jane", 7)
    d1 = PrescriptionService.dispense_prescription(db_session, first.id, pharmacy.id, "Jane", 9)

    history = PrescriptionService.get_dispense_history(db_session, pharmacy.id)

    assert [d.id for d in history] == [d2.id, d1.id]
    assert history[0].prescription.medications == "Metformin 500mg"


def test_dispense_history_empty_for_new_pharmacy(db_session):
    pharmacy = DirectoryService.add_pharmacy(db_session, {
        "pharmacy_name": "HealthCare Pharmacy",
        "license_number": f"PH-{uuid.uuid4().hex[:8]}",
    })

    assert PrescriptionService.get_dispense_history(db_session, pharmacy.id) == []


def test_dispense_history_unknown_pharmacy(db_session):
    with pytest.raises(NotFoundError):
        PrescriptionService.get_dispense_history(db_session, 999_999)
