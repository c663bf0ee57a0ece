"""Aggregate model imports for Alembic auto-detection."""

from app.models.property import Property  # noqa: F401
from app.models.tenant_invite import TenantInvite  # noqa: F401
from app.models.tenant_profile import TenantDocuments, TenantGuarantor, TenantProfile  # noqa: F401
from app.models.lease import Lease  # noqa: F401
from app.models.wizard_session import WizardSession  # noqa: F401
