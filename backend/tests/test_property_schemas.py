"""Tests for the property step validators and record building."""

import pytest

from app.schemas.property import SPECIFIC_FIELD_SCHEMAS, PropertyType, specific_schema_for
from app.wizard.errors import UnknownPropertyType
from app.wizard.property import (
    SPECIFIC_COLUMNS,
    build_property_record,
    draft_from_property,
    validate_general_step,
    validate_review_step,
    validate_specific_step,
    validate_type_step,
)

from factories import garage_draft, home_fields, land_fields, photo

VALID_SPECIFIC = {
    "home": home_fields(),
    "apartment": {
        "num_rooms": 3,
        "num_bedrooms": 2,
        "num_bathrooms": 1,
        "floor_number": 4,
        "heating_type": "collective",
        "property_condition": "new",
        "energy_class": "B",
        "co2_emission_class": "B",
    },
    "garage": {"garageType": "enclosed_box", "secureAccessType": "key", "parkingSpots": 2, "height": 2.5},
    "land": land_fields(),
    "other": {
        "typeDescription": "Retail unit",
        "propertyDetails": "Ground floor shop with a large street-facing window.",
        "propertyCondition": "good_condition",
    },
}


@pytest.mark.unit
class TestSchemaTable:
    def test_every_property_type_has_a_schema(self):
        assert set(SPECIFIC_FIELD_SCHEMAS) == set(PropertyType)

    def test_unknown_type_is_not_recoverable(self):
        with pytest.raises(UnknownPropertyType):
            specific_schema_for("castle")
        with pytest.raises(UnknownPropertyType):
            validate_specific_step({"type": "castle", "specificFields": {}})

    def test_unknown_type_is_a_field_error_on_the_type_step(self):
        assert "type" in validate_type_step({"type": "castle"})
        assert validate_type_step({"type": "land"}) == {}


@pytest.mark.unit
class TestSpecificStep:
    @pytest.mark.parametrize("property_type", [t.value for t in PropertyType])
    def test_valid_fields_have_no_errors(self, property_type):
        draft = {"type": property_type, "specificFields": VALID_SPECIFIC[property_type]}
        assert validate_specific_step(draft) == {}

    @pytest.mark.parametrize("property_type", [t.value for t in PropertyType])
    def test_each_missing_required_key_is_reported(self, property_type):
        fields = VALID_SPECIFIC[property_type]
        schema = specific_schema_for(property_type)
        required = [
            info.alias or name
            for name, info in schema.model_fields.items()
            if info.is_required() and info.annotation is not bool
        ]
        for key in required:
            partial = {k: v for k, v in fields.items() if k != key}
            errors = validate_specific_step({"type": property_type, "specificFields": partial})
            assert f"specificFields.{key}" in errors

    def test_omitted_booleans_default_to_false(self):
        fields = home_fields()
        assert not any(k.startswith("has_swimming") for k in fields)
        errors = validate_specific_step({"type": "home", "specificFields": fields})
        assert errors == {}

    def test_validation_does_not_mutate_the_draft(self):
        fields = home_fields()
        draft = {"type": "home", "specificFields": fields}
        validate_specific_step(draft)
        assert "has_basement" not in draft["specificFields"]

    def test_building_coverage_range(self):
        draft = {"type": "land", "specificFields": land_fields(maxBuildingCoverage=120)}
        assert "specificFields.maxBuildingCoverage" in validate_specific_step(draft)

    def test_enum_must_match(self):
        draft = {"type": "garage", "specificFields": {**VALID_SPECIFIC["garage"], "garageType": "carport"}}
        assert "specificFields.garageType" in validate_specific_step(draft)


@pytest.mark.unit
class TestGeneralStep:
    def test_valid(self):
        assert validate_general_step(garage_draft()) == {}

    def test_errors_are_keyed_by_dotted_path(self):
        draft = garage_draft(address={"street": "12 Rue de Rivoli", "postalCode": "75", "city": "Paris", "country": "France"})
        errors = validate_general_step(draft)
        assert list(errors) == ["address.postalCode"]

    def test_photo_count_bounds(self):
        assert validate_general_step(garage_draft(photos=[]))["photos"] == "At least one photo is required"
        too_many = [photo(f"{i}.jpg") for i in range(11)]
        assert validate_general_step(garage_draft(photos=too_many))["photos"] == "Maximum 10 photos allowed"

    def test_file_size_is_not_checked_here(self):
        huge = photo(size=11 * 1024 * 1024)
        assert validate_general_step(garage_draft(photos=[huge])) == {}

    def test_uploaded_urls_are_accepted(self):
        assert validate_general_step(garage_draft(photos=["https://files.test/p/1.jpg"])) == {}

    def test_positive_amounts(self):
        errors = validate_general_step(garage_draft(totalArea=0, rentAmount=-5))
        assert {"totalArea", "rentAmount"} <= set(errors)


@pytest.mark.unit
class TestReviewStep:
    def test_skips_specific_check_when_type_is_invalid(self):
        errors = validate_review_step(garage_draft(type="castle"))
        assert "type" in errors
        assert not any(k.startswith("specificFields") for k in errors)

    def test_combines_sections(self):
        draft = garage_draft(title="Spot", specificFields={})
        errors = validate_review_step(draft)
        assert "title" in errors
        assert "specificFields.garageType" in errors


@pytest.mark.unit
class TestBuildPropertyRecord:
    def test_garage_record(self):
        draft = garage_draft(photos=["https://files.test/p/1.jpg"])
        record = build_property_record(draft, "landlord-1")
        assert record["user_id"] == "landlord-1"
        assert record["property_type"] == "garage"
        assert record["garage_type"] == "underground"
        assert record["secure_access"] == "badge"
        assert record["has_automatic_door"] is False
        assert record["postal_code"] == "75001"
        assert record["address"]["postalCode"] == "75001"
        # Other types' columns are present and empty
        assert record["num_rooms"] is None
        assert record["soil_type"] is None

    def test_land_services_are_derived(self):
        draft = garage_draft(type="land", specificFields=land_fields(sewerService=True))
        record = build_property_record(draft, "landlord-1")
        assert record["available_services"] == ["water", "electricity", "sewer"]
        assert "water_service" not in record
        assert "internet_service" not in record

    def test_every_record_key_is_a_column(self):
        from app.models.property import Property

        columns = set(Property.__table__.columns.keys())
        record = build_property_record(garage_draft(type="home", specificFields=home_fields()), "u")
        assert set(record) <= columns
        assert SPECIFIC_COLUMNS <= columns

    def test_round_trip_through_a_stored_row(self):
        draft = garage_draft(type="land", photos=["https://files.test/p/1.jpg"], specificFields=land_fields())
        row = {"id": "p1", **build_property_record(draft, "u")}
        seeded = draft_from_property(row)
        assert seeded["type"] == "land"
        assert seeded["specificFields"]["waterService"] is True
        assert seeded["specificFields"]["gasService"] is False
        assert validate_review_step(seeded) == {}
