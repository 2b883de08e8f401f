"""initial schema: directory, prescriptions, dispenses, otp codes

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "doctors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("specialization", sa.String(100), nullable=True),
        sa.Column("license_number", sa.String(50), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("clinic_address", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_doctors_id", "doctors", ["id"])
    op.create_index("ix_doctors_license_number", "doctors", ["license_number"], unique=True)

    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_patients_id", "patients", ["id"])
    op.create_index("ix_patients_phone_number", "patients", ["phone_number"])

    op.create_table(
        "pharmacies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("pharmacy_name", sa.String(200), nullable=False),
        sa.Column("license_number", sa.String(50), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(10), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_pharmacies_id", "pharmacies", ["id"])
    op.create_index("ix_pharmacies_license_number", "pharmacies", ["license_number"], unique=True)
    op.create_index("ix_pharmacies_city", "pharmacies", ["city"])

    op.create_table(
        "prescriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("doctor_id", sa.Integer(), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("medications", sa.Text(), nullable=False),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("issued_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_prescriptions_id", "prescriptions", ["id"])
    op.create_index("ix_prescriptions_patient_id", "prescriptions", ["patient_id"])
    op.create_index("ix_prescriptions_doctor_id", "prescriptions", ["doctor_id"])
    op.create_index("ix_prescriptions_issued_at", "prescriptions", ["issued_at"])

    op.create_table(
        "dispenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("prescription_id", sa.Integer(), sa.ForeignKey("prescriptions.id"), nullable=False),
        sa.Column("pharmacy_id", sa.Integer(), sa.ForeignKey("pharmacies.id"), nullable=False),
        sa.Column("pharmacist_name", sa.String(100), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("dispensed_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("prescription_id"),
    )
    op.create_index("ix_dispenses_id", "dispenses", ["id"])
    op.create_index("ix_dispenses_pharmacy_id", "dispenses", ["pharmacy_id"])
    op.create_index("ix_dispenses_dispensed_at", "dispenses", ["dispensed_at"])

    op.create_table(
        "otp_codes",
        sa.Column("phone_number", sa.String(20), primary_key=True),
        sa.Column("code", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("consumed_at", sa.DateTime(), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade():
    op.drop_table("otp_codes")
    op.drop_table("dispenses")
    op.drop_table("prescriptions")
    op.drop_table("pharmacies")
    op.drop_table("patients")
    op.drop_table("doctors")
