"""Draft and row builders shared by the test modules."""

from app.wizard.files import PendingFile


def photo(name: str = "front.jpg", content_type: str = "image/jpeg", size: int = 2048) -> PendingFile:
    return PendingFile(name, content_type, b"\xff" * size)


def pdf(name: str = "document.pdf", size: int = 1024) -> PendingFile:
    return PendingFile(name, "application/pdf", b"%PDF" + b"0" * size)


def garage_draft(**overrides) -> dict:
    draft = {
        "type": "garage",
        "title": "Underground parking spot",
        "address": {
            "street": "12 Rue de Rivoli",
            "postalCode": "75001",
            "city": "Paris",
            "country": "France",
        },
        "totalArea": 15,
        "rentAmount": 120,
        "description": "Secure underground parking close to the metro.",
        "photos": [photo()],
        "specificFields": {
            "garageType": "underground",
            "secureAccessType": "badge",
            "parkingSpots": 1,
            "height": 2.1,
        },
    }
    draft.update(overrides)
    return draft


def home_fields(**overrides) -> dict:
    fields = {
        "num_rooms": 5,
        "num_bedrooms": 3,
        "num_bathrooms": 2,
        "heating_type": "gas",
        "property_condition": "good_condition",
        "energy_class": "C",
        "co2_emission_class": "D",
        "has_garden": True,
        "garden_area": 250,
    }
    fields.update(overrides)
    return fields


def land_fields(**overrides) -> dict:
    fields = {
        "buildable": True,
        "maxBuildingCoverage": 40,
        "serviced": True,
        "waterService": True,
        "electricityService": True,
        "soilType": "loam",
        "landUseZone": "residential",
    }
    fields.update(overrides)
    return fields


def onboarding_draft(with_guarantor: bool = False) -> dict:
    draft = {
        "personal_info": {
            "date_of_birth": "1990-04-12",
            "occupation": "Software engineer",
            "emergency_contact": {
                "name": "Jane Doe",
                "phone": "+33612345678",
                "email": "jane@example.com",
            },
        },
        "financial_info": {"income_proof": [pdf("payslip.pdf")]},
        "documents": {"id_document": [pdf("passport.pdf")]},
    }
    if with_guarantor:
        draft["guarantor"] = {
            "name": "John Doe",
            "email": "john@example.com",
            "phone": "+33698765432",
            "occupation": "Nurse",
            "documents": {
                "proof_of_income": [pdf("guarantor-income.pdf")],
                "proof_of_residence": [pdf("guarantor-residence.pdf")],
            },
        }
    return draft


def pending_invite(**overrides) -> dict:
    invite = {
        "id": "invite-1",
        "landlord_id": "landlord-1",
        "property_id": "property-1",
        "email": "tenant@example.com",
        "lease_start_date": "2026-11-01",
        "lease_end_date": "2027-10-31",
        "rent_amount": 950.0,
        "deposit": 1900.0,
        "status": "pending",
    }
    invite.update(overrides)
    return invite
