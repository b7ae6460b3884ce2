"""initial vaccine catalog

Revision ID: 0001_initial_catalog
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial_catalog"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "vaccine_lineages",
        sa.Column("lineage_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("cvx_code", sa.String(), nullable=False),
        sa.Column("current_vaccine_id", sa.Uuid(), nullable=True),
        sa.Column("revision", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("lineage_id", name="pk_vaccine_lineages"),
        sa.UniqueConstraint("name", name="uq_vaccine_lineages_name"),
        sa.UniqueConstraint("cvx_code", name="uq_vaccine_lineages_cvx_code"),
        sa.UniqueConstraint("current_vaccine_id", name="uq_vaccine_lineages_current_vaccine_id"),
    )

    op.create_table(
        "vaccine_products",
        sa.Column("vaccine_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "lineage_id",
            sa.Uuid(),
            sa.ForeignKey(
                "vaccine_lineages.lineage_id",
                name="fk_vaccine_products_lineage_id_vaccine_lineages",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("generic_name", sa.String(), nullable=False),
        sa.Column("manufacturer", sa.String(), nullable=False),
        sa.Column("cvx_code", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("presentation", sa.String(), nullable=False),
        sa.Column("volume", sa.JSON(), nullable=False),
        sa.Column("storage_requirements", sa.JSON(), nullable=True),
        sa.Column("total_doses", sa.Integer(), nullable=False),
        sa.Column("approved_regions", sa.JSON(), nullable=False),
        sa.Column("contraindications", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.Column("valid_until", sa.DateTime(), nullable=True),
        sa.Column("update_reason", sa.String(), nullable=False),
        sa.Column("discontinued_reason", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("last_modified_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_vaccine_products_lineage_id", "vaccine_products", ["lineage_id"])
    op.create_index("ix_vaccine_products_cvx_code", "vaccine_products", ["cvx_code"])
    op.create_index("ix_vaccine_products_status_name", "vaccine_products", ["status", "name"])
    op.create_index(
        "uq_vaccine_products_current",
        "vaccine_products",
        ["lineage_id"],
        unique=True,
        postgresql_where=sa.text("valid_until IS NULL"),
        sqlite_where=sa.text("valid_until IS NULL"),
    )

    op.create_table(
        "dose_requirements",
        sa.Column("dose_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "vaccine_id",
            sa.Uuid(),
            sa.ForeignKey(
                "vaccine_products.vaccine_id",
                name="fk_dose_requirements_vaccine_id_vaccine_products",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("dose_number", sa.Integer(), nullable=False),
        sa.Column("dose_name", sa.String(), nullable=True),
        sa.Column("min_age", sa.JSON(), nullable=False),
        sa.Column("max_age", sa.JSON(), nullable=True),
        sa.Column("interval_from_previous", sa.JSON(), nullable=False),
        sa.Column("allowable_delay", sa.Integer(), nullable=False),
        sa.Column("priority", sa.String(), nullable=False),
        sa.Column("guidelines", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.Column("valid_until", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index(
        "ix_dose_requirements_vaccine_status", "dose_requirements", ["vaccine_id", "status"]
    )
    op.create_index(
        "uq_dose_requirements_active_number",
        "dose_requirements",
        ["vaccine_id", "dose_number"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "immunization_logs",
        sa.Column("log_id", sa.Uuid(), primary_key=True),
        sa.Column("patient_id", sa.String(), nullable=False),
        sa.Column(
            "vaccine_id",
            sa.Uuid(),
            sa.ForeignKey(
                "vaccine_products.vaccine_id",
                name="fk_immunization_logs_vaccine_id_vaccine_products",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("dose_number", sa.Integer(), nullable=False),
        sa.Column("date_administered", sa.DateTime(), nullable=False),
        sa.Column("next_due_date", sa.DateTime(), nullable=True),
        sa.Column("clinic", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("digital_certificate", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_immunization_logs_patient_id", "immunization_logs", ["patient_id"])

    op.create_table(
        "audit_log",
        sa.Column("audit_id", sa.Uuid(), primary_key=True),
        sa.Column("actor", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("target_type", sa.String(), nullable=False),
        sa.Column("target_id", sa.Uuid(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_index("ix_immunization_logs_patient_id", table_name="immunization_logs")
    op.drop_table("immunization_logs")
    op.drop_index("uq_dose_requirements_active_number", table_name="dose_requirements")
    op.drop_index("ix_dose_requirements_vaccine_status", table_name="dose_requirements")
    op.drop_table("dose_requirements")
    op.drop_index("uq_vaccine_products_current", table_name="vaccine_products")
    op.drop_index("ix_vaccine_products_status_name", table_name="vaccine_products")
    op.drop_index("ix_vaccine_products_cvx_code", table_name="vaccine_products")
    op.drop_index("ix_vaccine_products_lineage_id", table_name="vaccine_products")
    op.drop_table("vaccine_products")
    op.drop_table("vaccine_lineages")
