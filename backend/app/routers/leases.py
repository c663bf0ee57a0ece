"""Lease endpoints.

Endpoints:
  GET  /api/leases/   → the landlord's leases (optional status filter)
  POST /api/leases/   → create a lease on one of the landlord's properties
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_landlord
from app.database import get_db
from app.middleware.exceptions import BusinessLogicError
from app.models.lease import Lease
from app.schemas.lease import LeaseCreate, LeaseOut, LeaseStatus
from app.services.properties import get_property, has_active_lease
from app.wizard.collaborators import Principal

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[LeaseOut])
async def list_leases(
    status_filter: LeaseStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    query = select(Lease).where(Lease.user_id == principal.id)
    if status_filter:
        query = query.where(Lease.status == status_filter)
    result = await db.execute(query.order_by(Lease.start_date.desc()))
    return result.scalars().all()


@router.post("/", response_model=LeaseOut, status_code=status.HTTP_201_CREATED)
async def create_lease(
    body: LeaseCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_landlord),
):
    prop = await get_property(db, body.property_id, principal.id)
    if body.status == "active" and await has_active_lease(db, prop.id):
        raise BusinessLogicError(
            "This property already has an active lease", error_code="PROPERTY_LEASED"
        )

    lease = Lease(user_id=principal.id, **body.model_dump())
    db.add(lease)
    await db.flush()
    await db.refresh(lease)
    logger.info(f"Lease {lease.id} created on property {prop.id}")
    return lease
