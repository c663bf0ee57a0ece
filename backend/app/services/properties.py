"""Property queries used by the listing, invite and wizard routes."""

import logging

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import ResourceNotFoundError
from app.models.lease import Lease
from app.models.property import Property
from app.schemas.property import PropertyOut, PropertySummary, specific_schema_for
from app.services.persistence import row_to_dict
from app.utils.cache import cached, invalidate_cache

logger = logging.getLogger(__name__)


def _list_key(db, *, user_id: str, limit: int = 50, offset: int = 0) -> str:
    return f"properties:{user_id}:list:{limit}:{offset}"


@cached(ttl=120, prefix="properties", key_builder=_list_key)
async def list_properties(db: AsyncSession, *, user_id: str, limit: int = 50, offset: int = 0) -> dict:
    """Paginated summaries of the landlord's properties (JSON-ready, cached)."""
    total = (
        await db.execute(select(func.count(Property.id)).where(Property.user_id == user_id))
    ).scalar() or 0
    rows = (
        await db.execute(
            select(Property)
            .where(Property.user_id == user_id)
            .order_by(Property.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
    ).scalars().all()
    return {
        "items": [PropertySummary.model_validate(p).model_dump(mode="json") for p in rows],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


async def invalidate_property_cache(user_id: str) -> None:
    await invalidate_cache(f"properties:{user_id}:*")


async def get_property(db: AsyncSession, property_id: str, user_id: str) -> Property:
    prop = (
        await db.execute(
            select(Property).where(Property.id == property_id, Property.user_id == user_id)
        )
    ).scalar_one_or_none()
    if not prop:
        raise ResourceNotFoundError("Property", property_id)
    return prop


def property_out(prop: Property) -> PropertyOut:
    """Response model with the populated type-specific columns under `specific`."""
    row = row_to_dict(prop)
    schema = specific_schema_for(prop.property_type)
    columns = schema.model_fields.keys() | {"available_services"}
    out = PropertyOut.model_validate(prop)
    out.specific = {k: row[k] for k in columns if row.get(k) is not None}
    return out


def _active_lease_clause(property_id_column):
    return exists().where(Lease.property_id == property_id_column, Lease.status == "active")


async def has_active_lease(db: AsyncSession, property_id: str) -> bool:
    return bool((await db.execute(select(_active_lease_clause(property_id)))).scalar())


async def available_properties(db: AsyncSession, user_id: str) -> list[Property]:
    """The landlord's properties that can take a tenant: not land, no active lease."""
    result = await db.execute(
        select(Property)
        .where(
            Property.user_id == user_id,
            Property.property_type != "land",
            ~_active_lease_clause(Property.id),
        )
        .order_by(Property.title)
    )
    return list(result.scalars().all())
