"""Server-side wizard sessions.

A `wizard_sessions` row stores the controller snapshot between requests.
Each request loads the row, rebuilds the controller, applies one
operation (patch / advance / retreat / jump / attach / submit) and
writes the snapshot back.

Submission locks the row (SELECT ... FOR UPDATE) so two concurrent
submits of the same session cannot both run the orchestrator.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from app.models.wizard_session import WizardSession
from app.schemas.wizard import WizardProgress, WizardStepInfo
from app.services.staging import discard_staged, resolve_staged, stage_file
from app.wizard.collaborators import Principal
from app.wizard.controller import WizardController
from app.wizard.draft import get_path, split_path
from app.wizard.errors import DraftLockedError
from app.wizard.files import DOCUMENT_RULE, PHOTO_RULE, UploadRule
from app.wizard.onboarding import DOCUMENT_FIELDS, OnboardingWizardController
from app.wizard.property import PropertyWizardController
from app.wizard.submission import SubmissionOrchestrator, SubmissionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WizardKind:
    name: str
    controller_cls: type[WizardController]
    # Draft path of each file-array field → its upload rule
    file_fields: Mapping[str, UploadRule]


WIZARD_KINDS = {
    "property": WizardKind("property", PropertyWizardController, {"photos": PHOTO_RULE}),
    "onboarding": WizardKind(
        "onboarding",
        OnboardingWizardController,
        {field: DOCUMENT_RULE for field in DOCUMENT_FIELDS},
    ),
}


# ── Load / save ─────────────────────────────────────────────

async def create_session(
    db: AsyncSession,
    kind: str,
    owner_id: str,
    draft: dict | None = None,
    target_id: str | None = None,
) -> WizardSession:
    session = WizardSession(
        kind=kind,
        owner_id=owner_id,
        target_id=target_id,
        current_step=0,
        draft_data=draft or {},
        errors={},
        status="open",
    )
    db.add(session)
    await db.flush()
    logger.info(f"Wizard session {session.id} ({kind}) opened for {owner_id}")
    return session


async def load_session(
    db: AsyncSession,
    session_id: str,
    kind: str,
    owner_id: str,
    for_update: bool = False,
) -> WizardSession:
    query = select(WizardSession).where(
        WizardSession.id == session_id,
        WizardSession.kind == kind,
        WizardSession.owner_id == owner_id,
    )
    if for_update:
        query = query.with_for_update()
    session = (await db.execute(query)).scalar_one_or_none()
    if not session:
        raise ResourceNotFoundError("Wizard session", session_id)
    return session


def controller_for(session: WizardSession) -> WizardController:
    kind = WIZARD_KINDS[session.kind]
    controller = kind.controller_cls(
        draft=session.draft_data,
        current_step=session.current_step,
        errors=session.errors,
    )
    controller.submission_error = session.submission_error
    controller.locked = session.status in ("submitting", "submitted")
    return controller


def save_controller(session: WizardSession, controller: WizardController) -> None:
    state = controller.to_state()
    session.current_step = state["current_step"]
    session.draft_data = dict(state["draft_data"])
    session.errors = {k: dict(v) for k, v in state["errors"].items()}
    session.submission_error = controller.submission_error


def progress(
    session: WizardSession,
    controller: WizardController | None = None,
    moved: bool | None = None,
) -> WizardProgress:
    controller = controller or controller_for(session)
    return WizardProgress(
        id=session.id,
        kind=session.kind,
        status=session.status,
        current_step=controller.current_step,
        step_count=controller.step_count,
        steps=[
            WizardStepInfo(
                index=i,
                id=step.id,
                title=step.title,
                renderer=step.renderer,
                has_errors=bool(controller.errors.get(step.id)),
            )
            for i, step in enumerate(controller.steps)
        ],
        draft_data=controller.draft,
        errors=controller.errors,
        submission_error=controller.submission_error,
        moved=moved,
    )


# ── Attachments ─────────────────────────────────────────────

async def attach_file(
    session: WizardSession,
    controller: WizardController,
    field: str,
    name: str,
    content_type: str,
    data: bytes,
) -> dict:
    """Stage a file and append its descriptor to the file-array at `field`."""
    rule = WIZARD_KINDS[session.kind].file_fields.get(field)
    if rule is None:
        raise BusinessLogicError(f"{field} does not accept files", error_code="NOT_A_FILE_FIELD")
    if controller.locked:
        raise DraftLockedError()

    descriptor = await stage_file(session.id, name, content_type, data, rule)
    current = list(get_path(controller.draft, field) or [])
    *parent, leaf = split_path(field)
    controller.update({leaf: current + [descriptor]}, path=tuple(parent) or None)
    return descriptor


# ── Submission ──────────────────────────────────────────────

async def submit_session(
    db: AsyncSession,
    session: WizardSession,
    orchestrator: SubmissionOrchestrator,
    principal: Principal,
) -> tuple[SubmissionResult, WizardController]:
    """Run the orchestrator on the session's draft and record the outcome.

    A failed submission unlocks the draft again (status `failed`) so the
    user can correct it and resubmit.
    """
    if session.status in ("submitting", "submitted"):
        raise DraftLockedError("This wizard has already been submitted")

    controller = controller_for(session)
    snapshot = controller.begin_submission()
    session.status = "submitting"
    await db.flush()

    try:
        draft: Any = await resolve_staged(session.id, snapshot)
        result = await orchestrator.submit(draft, principal)
    except BaseException:
        controller.locked = False
        session.status = "open"
        raise

    controller.finish_submission(result)
    save_controller(session, controller)
    session.status = "submitted" if result.success else "failed"
    session.result = result.to_dict()
    await db.flush()

    if result.success:
        await discard_staged(session.id)
    return result, controller


async def find_open_session(db: AsyncSession, kind: str, owner_id: str) -> WizardSession | None:
    """Most recent not-yet-submitted session, so a returning user resumes it."""
    result = await db.execute(
        select(WizardSession)
        .where(
            WizardSession.kind == kind,
            WizardSession.owner_id == owner_id,
            WizardSession.status.in_(("open", "failed")),
        )
        .order_by(WizardSession.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
