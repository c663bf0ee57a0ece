"""Tenant onboarding wizard.

Steps: personal_info → financial_info → documents → guarantor (optional).

Submission writes, in order:
    tenant_profiles    primary insert, linked to the invite
    tenant_documents   references the profile id
    tenant_guarantors  only when a guarantor was entered
    leases             built from the invite's lease terms
    temp_tenants       status → completed (last write, signals success)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from app.config import settings
from app.schemas.onboarding import DocumentSet, FinancialInfo, Guarantor, PersonalInfo
from app.wizard.collaborators import Persistence, Principal, Storage
from app.wizard.controller import WizardController
from app.wizard.draft import get_path, split_path
from app.wizard.files import DOCUMENT_RULE, PendingFile, storage_path
from app.wizard.steps import FieldErrors, StepDefinition, validate_model
from app.wizard.submission import (
    PHASE_DEPENDENT_INSERTS,
    PHASE_PRECHECK,
    PHASE_PRIMARY_INSERT,
    PHASE_STATUS_TRANSITION,
    FileSlot,
    JournalEntry,
    SubmissionOrchestrator,
    SubmissionPhaseError,
)

logger = logging.getLogger(__name__)

# Draft paths of every file-array field
DOCUMENT_FIELDS = (
    "financial_info.income_proof",
    "documents.id_document",
    "documents.proof_of_income",
    "documents.proof_of_residence",
    "guarantor.documents.proof_of_income",
    "guarantor.documents.proof_of_residence",
)


def has_guarantor(draft: Mapping[str, Any]) -> bool:
    """An untouched or cleared guarantor section counts as absent."""
    return bool(draft.get("guarantor"))


# ── Step validators ─────────────────────────────────────────

def validate_personal_info(draft: Mapping[str, Any]) -> FieldErrors:
    return validate_model(PersonalInfo, draft.get("personal_info") or {}, "personal_info")


def validate_financial_info(draft: Mapping[str, Any]) -> FieldErrors:
    return validate_model(FinancialInfo, draft.get("financial_info") or {}, "financial_info")


def validate_documents(draft: Mapping[str, Any]) -> FieldErrors:
    return validate_model(DocumentSet, draft.get("documents") or {}, "documents")


def validate_guarantor(draft: Mapping[str, Any]) -> FieldErrors:
    if not has_guarantor(draft):
        return {}
    return validate_model(Guarantor, draft["guarantor"], "guarantor")


def validate_onboarding(draft: Mapping[str, Any]) -> FieldErrors:
    errors: FieldErrors = {}
    for step in ONBOARDING_STEPS:
        errors.update(step.validate(draft))
    return errors


ONBOARDING_STEPS = (
    StepDefinition("personal_info", "Personal information", validate_personal_info, "PersonalInfoStep"),
    StepDefinition("financial_info", "Financial information", validate_financial_info, "FinancialInfoStep"),
    StepDefinition("documents", "Documents", validate_documents, "DocumentUploadStep"),
    StepDefinition("guarantor", "Guarantor information", validate_guarantor, "GuarantorStep"),
)

# Used by the submission precheck: the whole draft must be valid
COMPLETE_ONBOARDING = StepDefinition("onboarding", "Onboarding", validate_onboarding, "OnboardingReview")


class OnboardingWizardController(WizardController):
    def __init__(self, steps=ONBOARDING_STEPS, **kwargs):
        super().__init__(steps, **kwargs)


# ── Submission ──────────────────────────────────────────────

class OnboardingSubmission(SubmissionOrchestrator):
    """upload documents → profile → documents → guarantor? → lease → invite completed.

    `invite` is the `temp_tenants` row the invitee was verified against;
    the router only builds this orchestrator for that invite's own invitee.
    """

    final_step = COMPLETE_ONBOARDING

    def __init__(
        self,
        storage: Storage,
        persistence: Persistence,
        invite: Mapping[str, Any],
        *,
        bucket: str | None = None,
        compensate: bool | None = None,
    ):
        super().__init__(storage, persistence, compensate=compensate)
        self.invite = dict(invite)
        self.bucket = bucket or settings.tenant_document_bucket

    def _precheck(self, draft: Mapping[str, Any]) -> None:
        if self.invite.get("status") != "pending":
            raise SubmissionPhaseError(
                PHASE_PRECHECK, "check:temp_tenants", "This invitation is no longer pending"
            )
        super()._precheck(draft)

    def pending_files(self, draft: Mapping[str, Any], principal: Principal) -> list[FileSlot]:
        slots: list[FileSlot] = []
        for field in DOCUMENT_FIELDS:
            files = get_path(draft, field) or []
            # `guarantor/proof_of_income`, `id_document`, ...
            prefix = "guarantor/" if field.startswith("guarantor.") else ""
            prefix += field.rsplit(".", 1)[-1]
            for i, item in enumerate(files):
                if isinstance(item, PendingFile):
                    slots.append(
                        FileSlot(
                            split_path(field) + (i,),
                            item,
                            self.bucket,
                            storage_path(prefix, item.name),
                            DOCUMENT_RULE,
                        )
                    )
        return slots

    async def write(
        self,
        draft: Mapping[str, Any],
        principal: Principal,
        journal: list[JournalEntry],
        created: dict[str, str],
    ) -> None:
        invite = self.invite
        personal = PersonalInfo.model_validate(draft["personal_info"])
        documents = DocumentSet.model_validate(draft.get("documents") or {})
        financial = FinancialInfo.model_validate(draft.get("financial_info") or {})

        profile = await self.insert(
            PHASE_PRIMARY_INSERT,
            "tenant_profiles",
            {
                "temp_tenant_id": invite["id"],
                "date_of_birth": personal.date_of_birth.isoformat(),
                "occupation": personal.occupation,
                "emergency_contact": personal.emergency_contact.model_dump(),
            },
            journal,
        )
        profile_id = profile["id"]
        created["tenant_profile_id"] = profile_id

        row = await self.insert(
            PHASE_DEPENDENT_INSERTS,
            "tenant_documents",
            {
                "tenant_profile_id": profile_id,
                "id_document": documents.id_document,
                "income_proof": financial.income_proof,
                "proof_of_income": documents.proof_of_income,
                "proof_of_residence": documents.proof_of_residence,
            },
            journal,
        )
        created["tenant_documents_id"] = row["id"]

        if has_guarantor(draft):
            guarantor = Guarantor.model_validate(draft["guarantor"])
            row = await self.insert(
                PHASE_DEPENDENT_INSERTS,
                "tenant_guarantors",
                {
                    "tenant_profile_id": profile_id,
                    "name": guarantor.name,
                    "email": guarantor.email,
                    "phone": guarantor.phone,
                    "occupation": guarantor.occupation,
                    "proof_of_income": guarantor.documents.proof_of_income,
                    "proof_of_residence": guarantor.documents.proof_of_residence,
                },
                journal,
            )
            created["tenant_guarantor_id"] = row["id"]

        row = await self.insert(
            PHASE_DEPENDENT_INSERTS,
            "leases",
            {
                "user_id": invite.get("landlord_id"),
                "tenant_id": profile_id,
                "property_id": invite["property_id"],
                "start_date": invite["lease_start_date"],
                "end_date": invite["lease_end_date"],
                "rent_amount": invite["rent_amount"],
                "deposit_amount": invite.get("deposit") or 0.0,
                "status": "active",
            },
            journal,
        )
        created["lease_id"] = row["id"]

        await self.update(
            PHASE_STATUS_TRANSITION,
            "temp_tenants",
            invite["id"],
            {"status": "completed"},
            journal,
            previous={"status": invite["status"]},
        )
        logger.info(f"Invite {invite['id']} completed by onboarding")
