"""Initial schema: properties, invites, onboarding output, leases, wizard sessions.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-17

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # ── Properties ───────────────────────────────────────────

    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("property_type", sa.String(20), nullable=False, index=True),
        # General info
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("address", sa.JSON(), nullable=False),
        sa.Column("postal_code", sa.String(10)),
        sa.Column("city", sa.String(100)),
        sa.Column("country", sa.String(100)),
        sa.Column("total_area", sa.Float(), nullable=False),
        sa.Column("rent_amount", sa.Float(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("photos", sa.JSON(), server_default="[]"),
        # Home / apartment
        sa.Column("num_rooms", sa.Integer()),
        sa.Column("num_bedrooms", sa.Integer()),
        sa.Column("num_bathrooms", sa.Integer()),
        sa.Column("heating_type", sa.String(20)),
        sa.Column("property_condition", sa.String(30)),
        sa.Column("energy_class", sa.String(1)),
        sa.Column("co2_emission_class", sa.String(1)),
        sa.Column("has_garage", sa.Boolean()),
        sa.Column("garage_capacity", sa.Integer()),
        sa.Column("garage_size", sa.Float()),
        sa.Column("has_garden", sa.Boolean()),
        sa.Column("garden_area", sa.Float()),
        sa.Column("has_swimming_pool", sa.Boolean()),
        sa.Column("has_terrace", sa.Boolean()),
        sa.Column("terrace_size", sa.Float()),
        sa.Column("has_balcony", sa.Boolean()),
        sa.Column("balcony_size", sa.Float()),
        sa.Column("has_basement", sa.Boolean()),
        sa.Column("has_air_conditioning", sa.Boolean()),
        sa.Column("floor_number", sa.Integer()),
        sa.Column("wheelchair_accessible", sa.Boolean()),
        sa.Column("has_elevator", sa.Boolean()),
        sa.Column("has_storage_room", sa.Boolean()),
        # Garage
        sa.Column("garage_type", sa.String(30)),
        sa.Column("secure_access", sa.String(20)),
        sa.Column("parking_spots", sa.Integer()),
        sa.Column("height", sa.Float()),
        sa.Column("has_interior_lighting", sa.Boolean()),
        sa.Column("has_electrical_outlet", sa.Boolean()),
        sa.Column("has_water_supply", sa.Boolean()),
        sa.Column("has_security_camera", sa.Boolean()),
        sa.Column("has_automatic_door", sa.Boolean()),
        # Land
        sa.Column("is_buildable", sa.Boolean()),
        sa.Column("max_building_coverage", sa.Float()),
        sa.Column("is_serviced", sa.Boolean()),
        sa.Column("available_services", sa.JSON()),
        sa.Column("soil_type", sa.String(20)),
        sa.Column("land_use_zone", sa.String(20)),
        sa.Column("is_fenced", sa.Boolean()),
        sa.Column("has_vehicle_access", sa.Boolean()),
        # Other
        sa.Column("other_type_description", sa.String(50)),
        sa.Column("specific_description", sa.Text()),
        sa.Column("property_category", sa.String(30)),
        sa.Column("occupancy_status", sa.String(30)),
        sa.Column("has_parking", sa.Boolean()),
        sa.Column("has_loading_dock", sa.Boolean()),
        sa.Column("has_security_system", sa.Boolean()),
        sa.Column("has_fire_safety", sa.Boolean()),
        *_timestamps(),
    )

    # ── Invites ──────────────────────────────────────────────

    op.create_table(
        "temp_tenants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("landlord_id", sa.String(36), nullable=False, index=True),
        sa.Column("property_id", sa.String(36), sa.ForeignKey("properties.id"), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("lease_start_date", sa.Date(), nullable=False),
        sa.Column("lease_end_date", sa.Date(), nullable=False),
        sa.Column("deposit", sa.Float(), nullable=False),
        sa.Column("rent_amount", sa.Float(), nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", index=True),
        sa.Column("invite_token", sa.String(64), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        *_timestamps(),
    )

    # ── Onboarding output ────────────────────────────────────

    op.create_table(
        "tenant_profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("temp_tenant_id", sa.String(36), sa.ForeignKey("temp_tenants.id"), nullable=False, index=True),
        sa.Column("date_of_birth", sa.String(10), nullable=False),
        sa.Column("occupation", sa.String(100), nullable=False),
        sa.Column("emergency_contact", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "tenant_documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_profile_id", sa.String(36), sa.ForeignKey("tenant_profiles.id"), nullable=False, index=True),
        sa.Column("id_document", sa.JSON(), nullable=False),
        sa.Column("income_proof", sa.JSON(), server_default="[]"),
        sa.Column("proof_of_income", sa.JSON()),
        sa.Column("proof_of_residence", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "tenant_guarantors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_profile_id", sa.String(36), sa.ForeignKey("tenant_profiles.id"), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("occupation", sa.String(100), nullable=False),
        sa.Column("proof_of_income", sa.JSON(), nullable=False),
        sa.Column("proof_of_residence", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── Leases ───────────────────────────────────────────────

    op.create_table(
        "leases",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), index=True),
        sa.Column("tenant_id", sa.String(36), nullable=False, index=True),
        sa.Column("property_id", sa.String(36), sa.ForeignKey("properties.id"), nullable=False, index=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("rent_amount", sa.Float(), nullable=False),
        sa.Column("deposit_amount", sa.Float(), server_default="0"),
        sa.Column("payment_due_date", sa.Integer(), server_default="1"),
        sa.Column("status", sa.String(20), server_default="active", index=True),
        *_timestamps(),
    )

    # ── Wizard sessions ──────────────────────────────────────

    op.create_table(
        "wizard_sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("owner_id", sa.String(36), nullable=False, index=True),
        sa.Column("target_id", sa.String(36)),
        sa.Column("current_step", sa.Integer(), server_default="0"),
        sa.Column("draft_data", sa.JSON(), server_default="{}"),
        sa.Column("errors", sa.JSON(), server_default="{}"),
        sa.Column("submission_error", sa.JSON()),
        sa.Column("status", sa.String(20), server_default="open"),
        sa.Column("result", sa.JSON()),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "wizard_sessions",
        "leases",
        "tenant_guarantors",
        "tenant_documents",
        "tenant_profiles",
        "temp_tenants",
        "properties",
    ):
        op.drop_table(table)
