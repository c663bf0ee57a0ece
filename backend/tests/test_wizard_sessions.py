"""Tests for server-side wizard sessions (no database needed)."""

import pytest

from app.middleware.exceptions import BusinessLogicError
from app.models.wizard_session import WizardSession
from app.services.wizard_sessions import (
    attach_file,
    controller_for,
    progress,
    save_controller,
    submit_session,
)
from app.wizard.errors import DraftLockedError
from app.wizard.files import UploadRejectedError
from app.wizard.property import PropertySubmission

from factories import garage_draft


class _Db:
    async def flush(self):
        pass


def _session(kind="property", draft=None, step=0, status="open") -> WizardSession:
    return WizardSession(
        id="session-1",
        kind=kind,
        owner_id="landlord-1",
        current_step=step,
        draft_data=draft or {},
        errors={},
        status=status,
    )


def _submittable_draft() -> dict:
    draft = garage_draft()
    draft["photos"] = []
    return draft


@pytest.mark.unit
class TestProgress:
    def test_describes_steps(self):
        session = _session()
        controller = controller_for(session)
        controller.advance()
        save_controller(session, controller)

        info = progress(session, controller, moved=False)

        assert info.current_step == 0
        assert info.step_count == 4
        assert [s.id for s in info.steps] == ["type", "general", "specific", "review"]
        assert info.steps[0].has_errors is True
        assert session.errors == {"type": {"type": "Field required"}}
        assert info.moved is False

    def test_submitted_session_is_locked(self):
        assert controller_for(_session(status="submitted")).locked is True
        assert controller_for(_session(status="failed")).locked is False


@pytest.mark.unit
@pytest.mark.asyncio
class TestAttachments:
    async def test_attach_appends_a_descriptor(self, fake_redis):
        session = _session()
        controller = controller_for(session)

        await attach_file(session, controller, "photos", "front.jpg", "image/jpeg", b"\xff\xd8")
        await attach_file(session, controller, "photos", "back.jpg", "image/jpeg", b"\xff\xd8")

        photos = controller.draft["photos"]
        assert [p["name"] for p in photos] == ["front.jpg", "back.jpg"]

    async def test_nested_document_field(self, fake_redis):
        session = _session(kind="onboarding")
        controller = controller_for(session)

        await attach_file(
            session, controller, "guarantor.documents.proof_of_income", "p.pdf", "application/pdf", b"%PDF"
        )

        assert controller.draft["guarantor"]["documents"]["proof_of_income"][0]["name"] == "p.pdf"

    async def test_unknown_field(self, fake_redis):
        session = _session()
        with pytest.raises(BusinessLogicError):
            await attach_file(session, controller_for(session), "title", "a.jpg", "image/jpeg", b"x")

    async def test_rejected_type(self, fake_redis):
        session = _session()
        with pytest.raises(UploadRejectedError):
            await attach_file(session, controller_for(session), "photos", "a.gif", "image/gif", b"x")


@pytest.mark.unit
@pytest.mark.asyncio
class TestSubmitSession:
    async def test_successful_submission(self, fake_redis, storage, persistence, landlord):
        session = _session(step=3)
        controller = controller_for(session)
        await attach_file(session, controller, "photos", "front.jpg", "image/jpeg", b"\xff\xd8")
        controller.update({k: v for k, v in _submittable_draft().items() if k != "photos"})
        save_controller(session, controller)

        result, controller = await submit_session(_Db(), session, PropertySubmission(storage, persistence), landlord)

        assert result.success
        assert session.status == "submitted"
        assert session.result["created"] == result.created
        assert controller.locked is True
        # Staged blobs are gone once submitted
        assert [k async for k in fake_redis.scan_iter(match="staged:session-1:*")] == []

    async def test_failed_submission_can_be_retried(self, fake_redis, storage, persistence, landlord):
        session = _session(step=3, draft=_submittable_draft())

        result, controller = await submit_session(_Db(), session, PropertySubmission(storage, persistence), landlord)

        assert result.success is False
        assert session.status == "failed"
        assert session.submission_error["phase"] == "precheck"
        assert controller.locked is False

    async def test_second_submit_is_refused(self, storage, persistence, landlord):
        session = _session(step=3, status="submitted")
        with pytest.raises(DraftLockedError):
            await submit_session(_Db(), session, PropertySubmission(storage, persistence), landlord)
