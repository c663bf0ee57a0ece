"""Property listing and the property creation wizard.

Endpoints:
  GET  /api/properties/                → paginated list (cached per landlord)
  GET  /api/properties/available       → properties that can take a tenant
  GET  /api/properties/{id}            → one property with its type-specific fields
  POST /api/properties/wizard          → open a wizard (pass property_id to edit)
  ...  /api/properties/wizard/{sid}/…  → see routers/wizard.py
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_landlord
from app.database import get_db
from app.models.wizard_session import WizardSession
from app.routers.wizard import build_wizard_router
from app.schemas.common import PaginatedResponse
from app.schemas.property import PropertyOut, PropertySummary
from app.schemas.wizard import PropertyWizardCreate, WizardProgress
from app.services.persistence import SqlPersistence, row_to_dict
from app.services.properties import (
    available_properties,
    get_property,
    invalidate_property_cache,
    list_properties,
    property_out,
)
from app.services.wizard_sessions import create_session, progress
from app.wizard.collaborators import Principal, Storage
from app.wizard.property import PropertySubmission, draft_from_property
from app.wizard.submission import SubmissionResult

router = APIRouter()


# ── Wizard wiring ───────────────────────────────────────────

async def _make_orchestrator(
    db: AsyncSession, session: WizardSession, principal: Principal, storage: Storage
) -> PropertySubmission:
    return PropertySubmission(storage, SqlPersistence(db), existing_id=session.target_id)


async def _after_submit(session: WizardSession, principal: Principal, result: SubmissionResult) -> None:
    await invalidate_property_cache(principal.id)


@router.post("/wizard", response_model=WizardProgress, status_code=status.HTTP_201_CREATED)
async def open_property_wizard(
    body: PropertyWizardCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    draft: dict = {}
    if body.property_id:
        prop = await get_property(db, body.property_id, principal.id)
        draft = draft_from_property(row_to_dict(prop))
    session = await create_session(db, "property", principal.id, draft, target_id=body.property_id)
    return progress(session)


router.include_router(
    build_wizard_router("property", require_landlord, _make_orchestrator, _after_submit),
    prefix="/wizard",
)


# ── Listing ─────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[PropertySummary])
async def list_my_properties(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    return await list_properties(db, user_id=principal.id, limit=limit, offset=offset)


@router.get("/available", response_model=list[PropertySummary])
async def list_available_properties(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    """Not land, and no active lease: the properties an invite can target."""
    return await available_properties(db, principal.id)


@router.get("/{property_id}", response_model=PropertyOut)
async def get_one_property(
    property_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    prop = await get_property(db, property_id, principal.id)
    return property_out(prop)
