"""Property creation wizard.

Steps: type → general → specific → review. The `type` discriminant picks
the specific-fields schema on step 3 and the attribute block merged into
the final `properties` row.

Edit mode: `draft_from_property()` seeds a draft from a stored row and
`PropertySubmission(existing_id=...)` updates that row instead of
inserting a new one.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from app.config import settings
from app.schemas.property import (
    LAND_SERVICES,
    SPECIFIC_FIELD_SCHEMAS,
    PropertyGeneralInfo,
    PropertyType,
    PropertyTypeSelection,
    specific_schema_for,
)
from app.wizard.collaborators import Persistence, PersistenceError, Principal, Storage
from app.wizard.controller import WizardController
from app.wizard.draft import PathLike, merge
from app.wizard.files import PHOTO_RULE, PendingFile, storage_path
from app.wizard.steps import (
    FieldErrors,
    StepDefinition,
    apply_boolean_defaults,
    section_slice,
    validate_model,
)
from app.wizard.submission import (
    PHASE_PRIMARY_INSERT,
    FileSlot,
    JournalEntry,
    SubmissionOrchestrator,
    SubmissionPhaseError,
)

logger = logging.getLogger(__name__)

PROPERTIES_TABLE = "properties"
GENERAL_KEYS = ("title", "address", "totalArea", "rentAmount", "description", "photos")


# ── Step validators ─────────────────────────────────────────

def validate_type_step(draft: Mapping[str, Any]) -> FieldErrors:
    return validate_model(PropertyTypeSelection, section_slice(draft, ("type",)))


def validate_general_step(draft: Mapping[str, Any]) -> FieldErrors:
    return validate_model(PropertyGeneralInfo, section_slice(draft, GENERAL_KEYS))


def validate_specific_step(draft: Mapping[str, Any]) -> FieldErrors:
    """Raises UnknownPropertyType when the discriminant is not a known type."""
    schema = specific_schema_for(draft.get("type"))
    data = apply_boolean_defaults(schema, draft.get("specificFields"))
    return validate_model(schema, data, prefix="specificFields")


def validate_review_step(draft: Mapping[str, Any]) -> FieldErrors:
    errors = validate_type_step(draft)
    errors.update(validate_general_step(draft))
    if "type" not in errors:
        errors.update(validate_specific_step(draft))
    return errors


TYPE_STEP = StepDefinition("type", "Property type", validate_type_step, "PropertyTypeStep")
GENERAL_STEP = StepDefinition("general", "General information", validate_general_step, "GeneralInfoStep")
SPECIFIC_STEP = StepDefinition("specific", "Specific details", validate_specific_step, "SpecificFieldsStep")
REVIEW_STEP = StepDefinition("review", "Review", validate_review_step, "ReviewStep")

PROPERTY_STEPS = (TYPE_STEP, GENERAL_STEP, SPECIFIC_STEP, REVIEW_STEP)


class PropertyWizardController(WizardController):
    """Clears `specificFields` when the property type changes."""

    def __init__(self, steps=PROPERTY_STEPS, **kwargs):
        super().__init__(steps, **kwargs)

    def update(self, partial: Mapping[str, Any], path: PathLike = None) -> dict[str, Any]:
        before = self.draft
        draft = super().update(partial, path)
        previous_type = before.get("type")
        if previous_type is not None and draft.get("type") != previous_type:
            # Keep only the specific fields written by this same merge
            self._draft = merge(merge(before, {"specificFields": {}}), partial, path)
            self.errors.pop(SPECIFIC_STEP.id, None)
        return self._draft


# ── Record building ─────────────────────────────────────────

def _specific_columns() -> frozenset[str]:
    columns: set[str] = set()
    for schema in SPECIFIC_FIELD_SCHEMAS.values():
        columns.update(schema.model_fields)
    columns -= {*LAND_SERVICES, "internet_service"}
    columns.add("available_services")
    return frozenset(columns)


SPECIFIC_COLUMNS = _specific_columns()


def build_property_record(draft: Mapping[str, Any], owner_id: str) -> dict[str, Any]:
    """Flatten a validated draft into one `properties` row.

    Columns belonging to the other property types are set to None so an
    edited row never keeps attributes of its previous type.
    """
    general = PropertyGeneralInfo.model_validate(section_slice(draft, GENERAL_KEYS))
    schema = specific_schema_for(draft.get("type"))
    specific = schema.model_validate(apply_boolean_defaults(schema, draft.get("specificFields")))

    record: dict[str, Any] = dict.fromkeys(SPECIFIC_COLUMNS)
    record.update(
        user_id=owner_id,
        property_type=PropertyType(draft["type"]).value,
        title=general.title,
        address=general.address.model_dump(by_alias=True),
        postal_code=general.address.postal_code,
        city=general.address.city,
        country=general.address.country,
        total_area=general.total_area,
        rent_amount=general.rent_amount,
        description=general.description,
        photos=list(general.photos),
    )
    record.update(specific.to_columns())
    return record


def draft_from_property(row: Mapping[str, Any]) -> dict[str, Any]:
    """Seed an edit-mode draft from a stored property row."""
    schema = specific_schema_for(row.get("property_type"))
    return {
        "type": row["property_type"],
        "title": row["title"],
        "address": dict(row.get("address") or {}),
        "totalArea": row["total_area"],
        "rentAmount": row["rent_amount"],
        "description": row.get("description") or "",
        "photos": list(row.get("photos") or []),
        "specificFields": schema.from_columns(row),
    }


# ── Submission ──────────────────────────────────────────────

class PropertySubmission(SubmissionOrchestrator):
    """upload photos → insert (or update) the `properties` row."""

    final_step = REVIEW_STEP

    def __init__(
        self,
        storage: Storage,
        persistence: Persistence,
        *,
        existing_id: str | None = None,
        bucket: str | None = None,
        compensate: bool | None = None,
    ):
        super().__init__(storage, persistence, compensate=compensate)
        self.existing_id = existing_id
        self.bucket = bucket or settings.property_photo_bucket

    def pending_files(self, draft: Mapping[str, Any], principal: Principal) -> list[FileSlot]:
        return [
            FileSlot(("photos", i), photo, self.bucket, storage_path(principal.id, photo.name), PHOTO_RULE)
            for i, photo in enumerate(draft.get("photos") or [])
            if isinstance(photo, PendingFile)
        ]

    async def write(
        self,
        draft: Mapping[str, Any],
        principal: Principal,
        journal: list[JournalEntry],
        created: dict[str, str],
    ) -> None:
        self._enter(PHASE_PRIMARY_INSERT)
        record = build_property_record(draft, principal.id)

        if self.existing_id is None:
            row = await self.insert(PHASE_PRIMARY_INSERT, PROPERTIES_TABLE, record, journal)
            created["property_id"] = row["id"]
            return

        previous = await self._current_values(record)
        await self.update(
            PHASE_PRIMARY_INSERT, PROPERTIES_TABLE, self.existing_id, record, journal, previous
        )
        created["property_id"] = self.existing_id

    async def _current_values(self, record: Mapping[str, Any]) -> dict[str, Any]:
        try:
            rows = await self.persistence.select(PROPERTIES_TABLE, {"id": self.existing_id})
        except PersistenceError as exc:
            raise SubmissionPhaseError(PHASE_PRIMARY_INSERT, f"select:{PROPERTIES_TABLE}", str(exc))
        if not rows:
            raise SubmissionPhaseError(
                PHASE_PRIMARY_INSERT,
                f"update:{PROPERTIES_TABLE}",
                f"Property {self.existing_id} not found",
            )
        return {key: rows[0].get(key) for key in record}
