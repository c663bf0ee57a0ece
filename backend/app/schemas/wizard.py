"""Pydantic schemas for the wizard session API.

Both wizards (property creation, tenant onboarding) share one request /
response shape; the draft itself is free-form JSON validated per step.
"""

from typing import Any

from pydantic import BaseModel, Field


# ── Wizard state / progress ─────────────────────────────────

class WizardStepInfo(BaseModel):
    index: int
    id: str
    title: str
    renderer: str
    has_errors: bool = False


class WizardProgress(BaseModel):
    id: str
    kind: str
    status: str
    current_step: int
    step_count: int
    steps: list[WizardStepInfo]
    draft_data: dict[str, Any] = {}
    # {section_id: {field_path: message}}
    errors: dict[str, dict[str, str]] = {}
    submission_error: dict | None = None
    # Whether the last navigation request moved the step index
    moved: bool | None = None


# ── Requests ────────────────────────────────────────────────

class PropertyWizardCreate(BaseModel):
    """Pass `property_id` to edit an existing property."""
    property_id: str | None = None


class DraftPatch(BaseModel):
    """Merge `data` into the draft, at `path` when given (``"address"``).

    Keys of `data` may be dotted paths themselves (``"address.city"``).
    """
    data: dict[str, Any]
    path: str | None = None


class JumpRequest(BaseModel):
    step: int = Field(..., ge=0)


# ── Submission ──────────────────────────────────────────────

class SubmissionErrorOut(BaseModel):
    phase: str
    operation: str
    message: str
    details: dict | None = None


class WizardSubmitResponse(BaseModel):
    success: bool
    created: dict[str, str] = {}
    error: SubmissionErrorOut | None = None
    progress: WizardProgress
