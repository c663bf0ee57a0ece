"""Pydantic schemas for the property wizard and property responses.

Draft keys follow the wizard form (``totalArea``, ``garageType``);
Python field names follow the `properties` columns (``total_area``,
``garage_type``). Each specific-fields model therefore declares the
form key as its alias and dumps straight to column names.

One specific-fields model per property type, selected through
`specific_schema_for()`.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.validators import validate_file_refs
from app.wizard.errors import UnknownPropertyType


# ── Enums ───────────────────────────────────────────────────

class PropertyType(str, Enum):
    HOME = "home"
    APARTMENT = "apartment"
    GARAGE = "garage"
    LAND = "land"
    OTHER = "other"


class HeatingType(str, Enum):
    GAS = "gas"
    ELECTRIC = "electric"
    WOOD = "wood"
    HEAT_PUMP = "heat_pump"
    COLLECTIVE = "collective"


class PropertyCondition(str, Enum):
    NEW = "new"
    GOOD_CONDITION = "good_condition"
    NEEDS_RENOVATION = "needs_renovation"


class EnergyClass(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"


class GarageType(str, Enum):
    ENCLOSED_BOX = "enclosed_box"
    OUTDOOR_PARKING = "outdoor_parking"
    UNDERGROUND = "underground"


class SecureAccessType(str, Enum):
    BADGE = "badge"
    KEY = "key"
    KEYPAD = "keypad"
    REMOTE = "remote"
    NONE = "none"


class SoilType(str, Enum):
    CLAY = "clay"
    LOAM = "loam"
    SAND = "sand"
    SILT = "silt"
    ROCK = "rock"
    MIXED = "mixed"


class LandUseZone(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    AGRICULTURAL = "agricultural"
    MIXED = "mixed"


class PropertyCategory(str, Enum):
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    AGRICULTURAL = "agricultural"
    INSTITUTIONAL = "institutional"
    MIXED_USE = "mixed_use"
    SPECIAL_PURPOSE = "special_purpose"


class OccupancyStatus(str, Enum):
    VACANT = "vacant"
    OCCUPIED = "occupied"
    PARTIALLY_OCCUPIED = "partially_occupied"


# ── Step 1: Type selection ──────────────────────────────────

class PropertyTypeSelection(BaseModel):
    type: PropertyType


# ── Step 2: General info ────────────────────────────────────

class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    street: str = Field(..., min_length=5, max_length=200)
    postal_code: str = Field(..., alias="postalCode", min_length=4, max_length=10)
    city: str = Field(..., min_length=2, max_length=100)
    country: str = Field(..., min_length=2, max_length=100)


class PropertyGeneralInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=5, max_length=100)
    address: Address
    total_area: float = Field(..., alias="totalArea", gt=0, le=100_000)
    rent_amount: float = Field(..., alias="rentAmount", gt=0, le=1_000_000)
    description: str = Field(..., min_length=20, max_length=2000)
    photos: list[Any]

    @field_validator("photos")
    @classmethod
    def _photo_count(cls, v: list[Any]) -> list[Any]:
        if len(v) < 1:
            raise ValueError("At least one photo is required")
        if len(v) > 10:
            raise ValueError("Maximum 10 photos allowed")
        return validate_file_refs(v)


# ── Step 3: Type-specific fields ────────────────────────────

class SpecificFields(BaseModel):
    """Base for the per-type attribute blocks."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_columns(self) -> dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_columns(cls, row: Mapping[str, Any]) -> dict[str, Any]:
        """Rebuild the draft's `specificFields` from a stored row."""
        draft: dict[str, Any] = {}
        for name, info in cls.model_fields.items():
            value = row.get(name)
            if value is not None:
                draft[info.alias or name] = value
        return draft


class HomeFields(SpecificFields):
    num_rooms: int = Field(..., gt=0)
    num_bedrooms: int = Field(..., gt=0)
    num_bathrooms: int = Field(..., gt=0)
    heating_type: HeatingType
    property_condition: PropertyCondition
    energy_class: EnergyClass
    co2_emission_class: EnergyClass
    has_garden: bool
    garden_area: float | None = Field(None, ge=0)
    has_garage: bool
    garage_capacity: int | None = Field(None, ge=0)
    garage_size: float | None = Field(None, ge=0)
    has_swimming_pool: bool
    has_terrace: bool
    has_balcony: bool
    has_basement: bool
    has_air_conditioning: bool


class ApartmentFields(SpecificFields):
    num_rooms: int = Field(..., gt=0)
    num_bedrooms: int = Field(..., gt=0)
    num_bathrooms: int = Field(..., gt=0)
    floor_number: int = Field(..., ge=0)
    heating_type: HeatingType
    property_condition: PropertyCondition
    energy_class: EnergyClass
    co2_emission_class: EnergyClass
    wheelchair_accessible: bool
    has_elevator: bool
    has_storage_room: bool
    has_balcony: bool
    balcony_size: float | None = Field(None, ge=0)
    has_terrace: bool
    terrace_size: float | None = Field(None, ge=0)
    has_garage: bool
    garage_size: float | None = Field(None, ge=0)
    has_air_conditioning: bool


class GarageFields(SpecificFields):
    garage_type: GarageType = Field(..., alias="garageType")
    secure_access: SecureAccessType = Field(..., alias="secureAccessType")
    parking_spots: int = Field(..., alias="parkingSpots", gt=0)
    height: float = Field(..., gt=0)
    has_interior_lighting: bool = Field(..., alias="interiorLighting")
    has_electrical_outlet: bool = Field(..., alias="electricalOutlet")
    has_water_supply: bool = Field(..., alias="waterSupply")
    has_security_camera: bool = Field(..., alias="securityCamera")
    has_automatic_door: bool = Field(..., alias="automaticDoor")


# Service flag field → label stored in `available_services`
LAND_SERVICES = {
    "water_service": "water",
    "electricity_service": "electricity",
    "gas_service": "gas",
    "sewer_service": "sewer",
}


class LandFields(SpecificFields):
    is_buildable: bool = Field(..., alias="buildable")
    max_building_coverage: float | None = Field(None, alias="maxBuildingCoverage", ge=0, le=100)
    is_serviced: bool = Field(..., alias="serviced")
    water_service: bool = Field(..., alias="waterService")
    electricity_service: bool = Field(..., alias="electricityService")
    gas_service: bool = Field(..., alias="gasService")
    sewer_service: bool = Field(..., alias="sewerService")
    # Shown on the form only; not stored
    internet_service: bool = Field(..., alias="internetService")
    soil_type: SoilType = Field(..., alias="soilType")
    land_use_zone: LandUseZone | None = Field(None, alias="landUseZone")
    is_fenced: bool = Field(..., alias="fenced")
    has_vehicle_access: bool = Field(..., alias="vehicleAccess")

    def to_columns(self) -> dict[str, Any]:
        columns = self.model_dump(exclude={*LAND_SERVICES, "internet_service"})
        columns["available_services"] = [
            label for flag, label in LAND_SERVICES.items() if getattr(self, flag)
        ]
        return columns

    @classmethod
    def from_columns(cls, row: Mapping[str, Any]) -> dict[str, Any]:
        draft = super().from_columns(row)
        services = row.get("available_services") or []
        for flag, label in LAND_SERVICES.items():
            draft[cls.model_fields[flag].alias] = label in services
        return draft


class OtherFields(SpecificFields):
    other_type_description: str = Field(..., alias="typeDescription", min_length=5, max_length=50)
    specific_description: str = Field(..., alias="propertyDetails", min_length=20, max_length=1000)
    property_condition: PropertyCondition = Field(..., alias="propertyCondition")
    property_category: PropertyCategory | None = Field(None, alias="propertyCategory")
    occupancy_status: OccupancyStatus | None = Field(None, alias="occupancyStatus")
    has_parking: bool = Field(..., alias="parking")
    has_loading_dock: bool = Field(..., alias="loadingDock")
    has_security_system: bool = Field(..., alias="securitySystem")
    has_fire_safety: bool = Field(..., alias="fireSafety")
    has_air_conditioning: bool = Field(..., alias="airConditioning")


SPECIFIC_FIELD_SCHEMAS: dict[PropertyType, type[SpecificFields]] = {
    PropertyType.HOME: HomeFields,
    PropertyType.APARTMENT: ApartmentFields,
    PropertyType.GARAGE: GarageFields,
    PropertyType.LAND: LandFields,
    PropertyType.OTHER: OtherFields,
}


def specific_schema_for(property_type: Any) -> type[SpecificFields]:
    """Pick the attribute block for a type. Unknown types are not recoverable."""
    try:
        return SPECIFIC_FIELD_SCHEMAS[PropertyType(property_type)]
    except (ValueError, KeyError):
        raise UnknownPropertyType(property_type)


# ── Responses ───────────────────────────────────────────────

class PropertySummary(BaseModel):
    id: str
    property_type: str
    title: str
    city: str | None
    rent_amount: float
    total_area: float
    photos: list[str] = []
    created_at: datetime

    model_config = {"from_attributes": True}


class PropertyOut(PropertySummary):
    user_id: str
    address: dict
    postal_code: str | None
    country: str | None
    description: str | None
    updated_at: datetime
    # Populated type-specific columns only
    specific: dict[str, Any] = {}
