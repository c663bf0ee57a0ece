"""Tenant invites and the tenant onboarding wizard.

Endpoints:
  POST /api/onboarding/invites          → landlord invites a tenant (sends email)
  GET  /api/onboarding/invites          → landlord's invites
  POST /api/onboarding/verify           → invitee exchanges email + token for a token
  POST /api/onboarding/wizard           → invitee opens (or resumes) the wizard
  ...  /api/onboarding/wizard/{sid}/…   → see routers/wizard.py
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_invitee, require_landlord
from app.database import get_db
from app.models.tenant_invite import TenantInvite
from app.models.wizard_session import WizardSession
from app.routers.wizard import build_wizard_router
from app.schemas.invite import (
    InviteCreateResult,
    InviteVerifyRequest,
    InviteVerifyResponse,
    TenantInviteCreate,
    TenantInviteOut,
)
from app.schemas.wizard import WizardProgress
from app.services.invites import create_invite, get_invite, verify_invite
from app.services.notifications import get_notifier
from app.services.persistence import SqlPersistence, row_to_dict
from app.services.wizard_sessions import create_session, find_open_session, progress
from app.wizard.collaborators import Notifier, Principal, Storage
from app.wizard.onboarding import OnboardingSubmission

router = APIRouter()


# ── Invites (landlord) ──────────────────────────────────────

@router.post("/invites", response_model=InviteCreateResult, status_code=status.HTTP_201_CREATED)
async def invite_tenant(
    body: TenantInviteCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
    notifier: Notifier = Depends(get_notifier),
):
    """The invite is kept even if the email fails; check `email_sent`."""
    return await create_invite(body, principal, db, notifier)


@router.get("/invites", response_model=list[TenantInviteOut])
async def list_invites(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    result = await db.execute(
        select(TenantInvite)
        .where(TenantInvite.landlord_id == principal.id)
        .order_by(TenantInvite.created_at.desc())
    )
    return result.scalars().all()


# ── Verification (public) ───────────────────────────────────

@router.post("/verify", response_model=InviteVerifyResponse)
async def verify(
    body: InviteVerifyRequest,
    db: AsyncSession = Depends(get_db),
):
    invite, token = await verify_invite(body.email, body.token, db)
    return InviteVerifyResponse(access_token=token, invite=invite)


# ── Wizard (invitee) ────────────────────────────────────────

async def _make_orchestrator(
    db: AsyncSession, session: WizardSession, principal: Principal, storage: Storage
) -> OnboardingSubmission:
    invite = await get_invite(principal.id, db)
    return OnboardingSubmission(storage, SqlPersistence(db), row_to_dict(invite))


@router.post("/wizard", response_model=WizardProgress, status_code=status.HTTP_201_CREATED)
async def open_onboarding_wizard(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_invitee),
):
    session = await find_open_session(db, "onboarding", principal.id)
    if session is None:
        session = await create_session(db, "onboarding", principal.id)
    return progress(session)


router.include_router(
    build_wizard_router("onboarding", require_invitee, _make_orchestrator),
    prefix="/wizard",
)
