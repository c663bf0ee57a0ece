"""Tenant invite service.

Handles:
  - Creating a `temp_tenants` invite for one of the landlord's available
    properties, then sending the invite email
  - Verifying an invite link (email + token) and issuing the invitee token
  - Expiring stale invites (CLI)

Email delivery happens after the invite row is written and never undoes
it: a failure is reported in the result (`email_sent=False`,
`email_error`) so the landlord can resend or share the link manually.
"""

import logging
import secrets
from datetime import datetime, timedelta
from urllib.parse import quote

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import create_invitee_token
from app.config import settings
from app.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from app.models.property import Property
from app.models.tenant_invite import TenantInvite
from app.schemas.invite import TenantInviteCreate
from app.services.properties import has_active_lease
from app.wizard.collaborators import NotificationError, Notifier, Principal

logger = logging.getLogger(__name__)


def invite_link(email: str, token: str) -> str:
    return f"{settings.app_base_url}/onboarding/{quote(email)}?token={token}"


def _property_label(prop: Property) -> str:
    address = prop.address or {}
    parts = [address.get("street"), address.get("postalCode"), address.get("city")]
    return f"{prop.title} - {' '.join(p for p in parts if p)}"


async def create_invite(
    body: TenantInviteCreate,
    principal: Principal,
    db: AsyncSession,
    notifier: Notifier,
) -> dict:
    """Create an invite and send its email.

    Returns:
        {"invite": TenantInvite, "invite_link": str,
         "email_sent": bool, "email_error": str | None}

    Raises:
        ResourceNotFoundError if the property is not the landlord's.
        BusinessLogicError if the property cannot take a new tenant.
    """
    prop = (
        await db.execute(
            select(Property).where(
                Property.id == body.property_id,
                Property.user_id == principal.id,
            )
        )
    ).scalar_one_or_none()
    if not prop:
        raise ResourceNotFoundError("Property", body.property_id)
    if prop.property_type == "land":
        raise BusinessLogicError("Land properties cannot be leased", error_code="PROPERTY_NOT_LEASABLE")
    if await has_active_lease(db, prop.id):
        raise BusinessLogicError("Property already has an active lease", error_code="PROPERTY_LEASED")

    token = secrets.token_urlsafe(32)
    invite = TenantInvite(
        landlord_id=principal.id,
        property_id=prop.id,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone=body.phone,
        lease_start_date=body.lease_start_date,
        lease_end_date=body.lease_end_date,
        deposit=body.deposit,
        rent_amount=body.rent_amount,
        status="pending",
        invite_token=token,
        expires_at=datetime.utcnow() + timedelta(days=settings.invite_expiry_days),
    )
    db.add(invite)
    await db.flush()
    logger.info(f"Invite {invite.id} created for property {prop.id}", extra={"landlord": principal.id})

    link = invite_link(invite.email, token)
    email_error: str | None = None
    try:
        await notifier.send_invite_email(
            invite.email,
            {
                "email": invite.email,
                "firstName": invite.first_name,
                "propertyAddress": _property_label(prop),
                "inviteLink": link,
                "expiresAt": invite.expires_at.isoformat(),
            },
        )
    except NotificationError as e:
        email_error = str(e)
        logger.warning(f"Invite {invite.id} created but email failed: {e}")

    return {
        "invite": invite,
        "invite_link": link,
        "email_sent": email_error is None,
        "email_error": email_error,
    }


async def verify_invite(email: str, token: str, db: AsyncSession) -> tuple[TenantInvite, str]:
    """Match a pending invite by email + token; return it with an invitee token."""
    invite = (
        await db.execute(
            select(TenantInvite).where(
                TenantInvite.email == email,
                TenantInvite.invite_token == token,
                TenantInvite.status == "pending",
            )
        )
    ).scalar_one_or_none()
    if not invite:
        raise ResourceNotFoundError("Invite", email)
    if invite.expires_at < datetime.utcnow():
        raise BusinessLogicError("This invitation has expired", error_code="INVITE_EXPIRED")

    return invite, create_invitee_token(invite.id, invite.email)


async def get_invite(invite_id: str, db: AsyncSession) -> TenantInvite:
    invite = await db.get(TenantInvite, invite_id)
    if not invite:
        raise ResourceNotFoundError("Invite", invite_id)
    return invite


async def expire_invites(db: AsyncSession) -> int:
    """Mark pending invites past their expiry as `expired`. Returns the count."""
    result = await db.execute(
        update(TenantInvite)
        .where(TenantInvite.status == "pending", TenantInvite.expires_at < datetime.utcnow())
        .values(status="expired")
    )
    return result.rowcount or 0
