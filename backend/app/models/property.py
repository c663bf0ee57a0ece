"""Property: one flat row per rental unit.

Common listing fields plus every type-specific attribute column. Only the
block matching `property_type` is populated; the rest stay NULL.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # home | apartment | garage | land | other
    property_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # ── General info ───────────────────────────────────────────
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    # {"street", "postalCode", "city", "country"}
    address: Mapped[dict] = mapped_column(JSON, nullable=False)
    postal_code: Mapped[str | None] = mapped_column(String(10))
    city: Mapped[str | None] = mapped_column(String(100))
    country: Mapped[str | None] = mapped_column(String(100))
    total_area: Mapped[float] = mapped_column(Float, nullable=False)
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # Public URLs, in upload order
    photos: Mapped[list] = mapped_column(JSON, default=list)

    # ── Home / apartment ───────────────────────────────────────
    num_rooms: Mapped[int | None] = mapped_column(Integer)
    num_bedrooms: Mapped[int | None] = mapped_column(Integer)
    num_bathrooms: Mapped[int | None] = mapped_column(Integer)
    heating_type: Mapped[str | None] = mapped_column(String(20))
    property_condition: Mapped[str | None] = mapped_column(String(30))
    energy_class: Mapped[str | None] = mapped_column(String(1))
    co2_emission_class: Mapped[str | None] = mapped_column(String(1))
    has_garage: Mapped[bool | None] = mapped_column(Boolean)
    garage_capacity: Mapped[int | None] = mapped_column(Integer)
    garage_size: Mapped[float | None] = mapped_column(Float)
    has_garden: Mapped[bool | None] = mapped_column(Boolean)
    garden_area: Mapped[float | None] = mapped_column(Float)
    has_swimming_pool: Mapped[bool | None] = mapped_column(Boolean)
    has_terrace: Mapped[bool | None] = mapped_column(Boolean)
    terrace_size: Mapped[float | None] = mapped_column(Float)
    has_balcony: Mapped[bool | None] = mapped_column(Boolean)
    balcony_size: Mapped[float | None] = mapped_column(Float)
    has_basement: Mapped[bool | None] = mapped_column(Boolean)
    has_air_conditioning: Mapped[bool | None] = mapped_column(Boolean)
    floor_number: Mapped[int | None] = mapped_column(Integer)
    wheelchair_accessible: Mapped[bool | None] = mapped_column(Boolean)
    has_elevator: Mapped[bool | None] = mapped_column(Boolean)
    has_storage_room: Mapped[bool | None] = mapped_column(Boolean)

    # ── Garage ─────────────────────────────────────────────────
    garage_type: Mapped[str | None] = mapped_column(String(30))
    secure_access: Mapped[str | None] = mapped_column(String(20))
    parking_spots: Mapped[int | None] = mapped_column(Integer)
    height: Mapped[float | None] = mapped_column(Float)
    has_interior_lighting: Mapped[bool | None] = mapped_column(Boolean)
    has_electrical_outlet: Mapped[bool | None] = mapped_column(Boolean)
    has_water_supply: Mapped[bool | None] = mapped_column(Boolean)
    has_security_camera: Mapped[bool | None] = mapped_column(Boolean)
    has_automatic_door: Mapped[bool | None] = mapped_column(Boolean)

    # ── Land ───────────────────────────────────────────────────
    is_buildable: Mapped[bool | None] = mapped_column(Boolean)
    max_building_coverage: Mapped[float | None] = mapped_column(Float)
    is_serviced: Mapped[bool | None] = mapped_column(Boolean)
    # ["water", "electricity", "gas", "sewer"] subset
    available_services: Mapped[list | None] = mapped_column(JSON)
    soil_type: Mapped[str | None] = mapped_column(String(20))
    land_use_zone: Mapped[str | None] = mapped_column(String(20))
    is_fenced: Mapped[bool | None] = mapped_column(Boolean)
    has_vehicle_access: Mapped[bool | None] = mapped_column(Boolean)

    # ── Other ──────────────────────────────────────────────────
    other_type_description: Mapped[str | None] = mapped_column(String(50))
    specific_description: Mapped[str | None] = mapped_column(Text)
    property_category: Mapped[str | None] = mapped_column(String(30))
    occupancy_status: Mapped[str | None] = mapped_column(String(30))
    has_parking: Mapped[bool | None] = mapped_column(Boolean)
    has_loading_dock: Mapped[bool | None] = mapped_column(Boolean)
    has_security_system: Mapped[bool | None] = mapped_column(Boolean)
    has_fire_safety: Mapped[bool | None] = mapped_column(Boolean)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
