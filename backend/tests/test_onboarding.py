"""Tests for the tenant onboarding steps and submission."""

from datetime import date, timedelta

import pytest

from app.wizard.collaborators import Principal
from app.wizard.files import PendingFile
from app.wizard.onboarding import (
    OnboardingSubmission,
    OnboardingWizardController,
    validate_documents,
    validate_financial_info,
    validate_guarantor,
    validate_personal_info,
)

from fakes import FakePersistence, FakeStorage
from factories import onboarding_draft, pdf, pending_invite

INVITEE = Principal(id="invite-1", role="invitee", email="tenant@example.com")


def _persistence(**kwargs) -> FakePersistence:
    return FakePersistence(rows={"temp_tenants": [pending_invite()]}, **kwargs)


@pytest.mark.unit
class TestOnboardingSteps:
    def test_complete_draft_is_valid(self):
        draft = onboarding_draft(with_guarantor=True)
        for validate in (validate_personal_info, validate_financial_info, validate_documents, validate_guarantor):
            assert validate(draft) == {}

    def test_date_of_birth_must_be_in_the_past(self):
        draft = onboarding_draft()
        draft["personal_info"]["date_of_birth"] = (date.today() + timedelta(days=1)).isoformat()
        errors = validate_personal_info(draft)
        assert errors == {"personal_info.date_of_birth": "Date of birth must be in the past"}

    def test_emergency_phone_needs_country_code(self):
        draft = onboarding_draft()
        draft["personal_info"]["emergency_contact"]["phone"] = "0612345678"
        assert "personal_info.emergency_contact.phone" in validate_personal_info(draft)

    def test_missing_files_have_readable_messages(self):
        assert validate_financial_info({}) == {
            "financial_info.income_proof": "At least one income proof document is required"
        }
        assert validate_documents({"documents": {}}) == {"documents.id_document": "ID document is required"}

    def test_guarantor_is_optional(self):
        assert validate_guarantor({}) == {}
        assert validate_guarantor({"guarantor": {}}) == {}

    def test_entered_guarantor_needs_both_documents(self):
        draft = onboarding_draft(with_guarantor=True)
        draft["guarantor"]["documents"]["proof_of_residence"] = []
        errors = validate_guarantor(draft)
        assert errors == {"guarantor.documents.proof_of_residence": "Proof of residence is required"}

    def test_controller_walks_four_steps(self):
        wizard = OnboardingWizardController(draft=onboarding_draft())
        assert wizard.step_count == 4
        for _ in range(3):
            assert wizard.advance()
        assert wizard.is_last_step
        assert wizard.validate_step() == {}


@pytest.mark.unit
@pytest.mark.asyncio
class TestOnboardingSubmission:
    async def test_without_guarantor(self):
        """Scenario B."""
        storage, persistence = FakeStorage(), _persistence()
        result = await OnboardingSubmission(storage, persistence, pending_invite()).submit(
            onboarding_draft(), INVITEE
        )

        assert result.success is True
        assert persistence.log == [
            ("insert", "tenant_profiles"),
            ("insert", "tenant_documents"),
            ("insert", "leases"),
            ("update", "temp_tenants"),
        ]
        assert "tenant_guarantor_id" not in result.created
        assert persistence.rows("tenant_guarantors") == []

    async def test_rows_reference_the_profile(self):
        storage, persistence = FakeStorage(), _persistence()
        result = await OnboardingSubmission(storage, persistence, pending_invite()).submit(
            onboarding_draft(with_guarantor=True), INVITEE
        )

        profile_id = result.created["tenant_profile_id"]
        profile = persistence.rows("tenant_profiles")[0]
        assert profile["temp_tenant_id"] == "invite-1"
        assert profile["date_of_birth"] == "1990-04-12"

        documents = persistence.rows("tenant_documents")[0]
        assert documents["tenant_profile_id"] == profile_id
        assert documents["id_document"][0].startswith("https://files.test/tenant_documents/id_document/")
        assert documents["income_proof"][0].startswith("https://files.test/tenant_documents/income_proof/")

        guarantor = persistence.rows("tenant_guarantors")[0]
        assert guarantor["tenant_profile_id"] == profile_id
        assert "/guarantor/proof_of_income/" in guarantor["proof_of_income"][0]

        lease = persistence.rows("leases")[0]
        assert lease["tenant_id"] == profile_id
        assert lease["user_id"] == "landlord-1"
        assert lease["property_id"] == "property-1"
        assert lease["deposit_amount"] == 1900.0
        assert lease["status"] == "active"

        assert persistence.rows("temp_tenants")[0]["status"] == "completed"
        assert len(storage.calls) == 4

    async def test_dependent_failure_stops_later_writes(self):
        persistence = _persistence(fail_on={"tenant_documents"})
        result = await OnboardingSubmission(FakeStorage(), persistence, pending_invite(), compensate=False).submit(
            onboarding_draft(), INVITEE
        )

        assert result.error.phase == "dependent_inserts"
        assert result.error.operation == "insert:tenant_documents"
        # The profile stays; the invite is still pending
        assert len(persistence.rows("tenant_profiles")) == 1
        assert persistence.rows("leases") == []
        assert persistence.rows("temp_tenants")[0]["status"] == "pending"
        assert result.created == {"tenant_profile_id": persistence.rows("tenant_profiles")[0]["id"]}

    async def test_compensation_undoes_in_reverse_order(self):
        storage = FakeStorage()
        persistence = _persistence(fail_on={"update:temp_tenants"})
        submission = OnboardingSubmission(storage, persistence, pending_invite(), compensate=True)

        result = await submission.submit(onboarding_draft(), INVITEE)

        assert result.error.phase == "status_transition"
        deletes = [table for action, table in persistence.log if action == "delete"]
        assert deletes == ["leases", "tenant_documents", "tenant_profiles"]
        assert storage.objects == {}

    async def test_not_pending_invite_is_rejected_up_front(self):
        storage, persistence = FakeStorage(), _persistence()
        invite = pending_invite(status="completed")
        result = await OnboardingSubmission(storage, persistence, invite).submit(onboarding_draft(), INVITEE)

        assert result.error.phase == "precheck"
        assert result.error.operation == "check:temp_tenants"
        assert storage.calls == []
        assert persistence.log == []

    async def test_disallowed_document_type(self):
        draft = onboarding_draft()
        draft["documents"]["id_document"] = [pdf("id.pdf"), PendingFile("id.docx", "application/msword", b"doc")]
        result = await OnboardingSubmission(FakeStorage(), _persistence(), pending_invite()).submit(draft, INVITEE)

        assert result.error.phase == "upload"
        assert result.error.operation == "validate:id.docx"
