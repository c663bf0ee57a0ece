"""Onboarding output: tenant profile plus its documents and guarantor.

tenant_profiles ← tenant_documents (1:1)
                ← tenant_guarantors (0..1)

Document columns hold lists of public file URLs.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class TenantProfile(Base):
    __tablename__ = "tenant_profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    temp_tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("temp_tenants.id"), nullable=False, index=True
    )
    date_of_birth: Mapped[str] = mapped_column(String(10), nullable=False)
    occupation: Mapped[str] = mapped_column(String(100), nullable=False)
    # {"name", "phone", "email"}
    emergency_contact: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class TenantDocuments(Base):
    __tablename__ = "tenant_documents"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    tenant_profile_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenant_profiles.id"), nullable=False, index=True
    )
    id_document: Mapped[list] = mapped_column(JSON, nullable=False)
    income_proof: Mapped[list] = mapped_column(JSON, default=list)
    proof_of_income: Mapped[list | None] = mapped_column(JSON)
    proof_of_residence: Mapped[list | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class TenantGuarantor(Base):
    __tablename__ = "tenant_guarantors"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    tenant_profile_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenant_profiles.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    occupation: Mapped[str] = mapped_column(String(100), nullable=False)
    proof_of_income: Mapped[list] = mapped_column(JSON, nullable=False)
    proof_of_residence: Mapped[list] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
