"""CLI helper tests."""
import logging

from rxdesk import cli
from rxdesk.models.directory import Pharmacy
from rxdesk.models.prescription import Dispense


def test_demo_walkthrough(db_session, caplog, monkeypatch):
    # dictConfig would replace the capture handler on the root logger
    monkeypatch.setattr("rxdesk.core.logger.setup_logging", lambda: None)
    caplog.set_level(logging.INFO, logger="rxdesk.demo")

    cli.demo()

    pharmacy = db_session.query(Pharmacy).filter(Pharmacy.license_number == "PH001").one()
    dispenses = db_session.query(Dispense).filter(Dispense.pharmacy_id == pharmacy.id).all()
    assert len(dispenses) == 1
    assert "Second dispense refused" in caplog.text
    assert "First verification: True" in caplog.text
    assert "Repeat verification: False" in caplog.text
    assert "All demos completed successfully" in caplog.text


def test_init_env_keeps_existing_file(tmp_path, monkeypatch, capsys):
    fake_module = tmp_path / "rxdesk" / "cli.py"
    fake_module.parent.mkdir()
    fake_module.write_text("")
    (tmp_path / ".env.example").write_text("ENV=local\n")
    monkeypatch.setattr(cli, "__file__", str(fake_module))

    cli.init_env()
    assert (tmp_path / ".env").read_text() == "ENV=local\n"

    cli.init_env()
    assert ".env already exists" in capsys.readouterr().out
