"""Wizard session endpoints shared by the property and onboarding wizards.

Endpoints (mounted under /api/properties/wizard and /api/onboarding/wizard):
  GET    /{session_id}           → progress + draft
  PATCH  /{session_id}/draft     → merge a partial into the draft (no validation)
  POST   /{session_id}/files     → stage a file into a file-array field
  POST   /{session_id}/advance   → validate current step, move forward
  POST   /{session_id}/retreat   → move back one step
  POST   /{session_id}/jump      → go to a step (forward only through valid steps)
  POST   /{session_id}/submit    → run the submission orchestrator
  DELETE /{session_id}           → cancel: discard the draft and staged files

Session creation is wizard-specific and lives in the owning router.
"""

from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.wizard_session import WizardSession
from app.schemas.wizard import DraftPatch, JumpRequest, WizardProgress, WizardSubmitResponse
from app.services.staging import discard_staged
from app.services.storage import get_storage
from app.services.wizard_sessions import (
    attach_file,
    controller_for,
    load_session,
    progress,
    save_controller,
    submit_session,
)
from app.wizard.collaborators import Principal, Storage
from app.wizard.submission import SubmissionOrchestrator, SubmissionResult

OrchestratorFactory = Callable[
    [AsyncSession, WizardSession, Principal, Storage], Awaitable[SubmissionOrchestrator]
]
AfterSubmit = Callable[[WizardSession, Principal, SubmissionResult], Awaitable[None]]


def build_wizard_router(
    kind: str,
    principal_dep: Callable[..., Awaitable[Principal]],
    make_orchestrator: OrchestratorFactory,
    after_submit: AfterSubmit | None = None,
) -> APIRouter:
    router = APIRouter()

    async def _load(db: AsyncSession, session_id: str, principal: Principal, for_update: bool = False):
        return await load_session(db, session_id, kind, principal.id, for_update=for_update)

    # ── GET /{session_id} ───────────────────────────────────

    @router.get("/{session_id}", response_model=WizardProgress)
    async def get_wizard(
        session_id: str,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        return progress(session)

    # ── PATCH /{session_id}/draft ───────────────────────────

    @router.patch("/{session_id}/draft", response_model=WizardProgress)
    async def patch_draft(
        session_id: str,
        body: DraftPatch,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        controller = controller_for(session)
        controller.update(body.data, body.path)
        save_controller(session, controller)
        await db.flush()
        return progress(session, controller)

    # ── POST /{session_id}/files ────────────────────────────

    @router.post("/{session_id}/files", response_model=WizardProgress)
    async def upload_file(
        session_id: str,
        field: str = Form(...),
        file: UploadFile = File(...),
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        controller = controller_for(session)
        data = await file.read()
        await attach_file(
            session,
            controller,
            field,
            file.filename or "upload",
            file.content_type or "application/octet-stream",
            data,
        )
        save_controller(session, controller)
        await db.flush()
        return progress(session, controller)

    # ── Navigation ──────────────────────────────────────────

    @router.post("/{session_id}/advance", response_model=WizardProgress)
    async def advance(
        session_id: str,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        controller = controller_for(session)
        moved = controller.advance()
        save_controller(session, controller)
        await db.flush()
        return progress(session, controller, moved=moved)

    @router.post("/{session_id}/retreat", response_model=WizardProgress)
    async def retreat(
        session_id: str,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        controller = controller_for(session)
        moved = controller.retreat()
        save_controller(session, controller)
        await db.flush()
        return progress(session, controller, moved=moved)

    @router.post("/{session_id}/jump", response_model=WizardProgress)
    async def jump(
        session_id: str,
        body: JumpRequest,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        controller = controller_for(session)
        moved = controller.jump(body.step)
        save_controller(session, controller)
        await db.flush()
        return progress(session, controller, moved=moved)

    # ── POST /{session_id}/submit ───────────────────────────

    @router.post("/{session_id}/submit", response_model=WizardSubmitResponse)
    async def submit(
        session_id: str,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
        storage: Storage = Depends(get_storage),
    ):
        """A failed submission is a normal response (`success=false`)."""
        session = await _load(db, session_id, principal, for_update=True)
        orchestrator = await make_orchestrator(db, session, principal, storage)
        result, controller = await submit_session(db, session, orchestrator, principal)
        if result.success and after_submit:
            await after_submit(session, principal, result)
        return WizardSubmitResponse(
            success=result.success,
            created=result.created,
            error=result.error.to_dict() if result.error else None,
            progress=progress(session, controller),
        )

    # ── DELETE /{session_id} ────────────────────────────────

    @router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def cancel(
        session_id: str,
        db: AsyncSession = Depends(get_db),
        principal: Principal = Depends(principal_dep),
    ):
        session = await _load(db, session_id, principal)
        await discard_staged(session.id)
        await db.delete(session)

    return router
