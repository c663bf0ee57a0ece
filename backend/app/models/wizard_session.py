"""Server-side state of one wizard run (property creation or onboarding).

One row per mounted wizard. Holds the controller snapshot (step index,
draft, per-section errors) plus the submission outcome.

Status flow: open → submitting → submitted | failed (failed may resubmit).
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class WizardSession(Base):
    __tablename__ = "wizard_sessions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # property | onboarding
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    # Landlord id (property) or invite id (onboarding)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # Set in edit mode: the property row being edited
    target_id: Mapped[str | None] = mapped_column(String(36))

    current_step: Mapped[int] = mapped_column(Integer, default=0)
    draft_data: Mapped[dict] = mapped_column(JSON, default=dict)
    # {section_id: {field_path: message}}
    errors: Mapped[dict] = mapped_column(JSON, default=dict)
    # {"phase", "operation", "message"} of the last failed submission
    submission_error: Mapped[dict | None] = mapped_column(JSON, default=None)
    status: Mapped[str] = mapped_column(String(20), default="open")
    result: Mapped[dict | None] = mapped_column(JSON, default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
