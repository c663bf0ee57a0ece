"""SQL persistence collaborator for the submission orchestrators.

Maps table names to ORM models and runs every call inside a SAVEPOINT
on the request session, so one failed insert does not poison the
session for the writes already made. Database errors are raised as
PersistenceError carrying the driver's message verbatim.

The surrounding request transaction (see `get_db`) commits whatever the
orchestrator completed, including the writes of a failed submission.
"""

import logging
from datetime import date, datetime
from typing import Any, Mapping

from sqlalchemy import Date, DateTime, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.lease import Lease
from app.models.property import Property
from app.models.tenant_invite import TenantInvite
from app.models.tenant_profile import TenantDocuments, TenantGuarantor, TenantProfile
from app.wizard.collaborators import PersistenceError

logger = logging.getLogger(__name__)

TABLES = {
    "properties": Property,
    "temp_tenants": TenantInvite,
    "tenant_profiles": TenantProfile,
    "tenant_documents": TenantDocuments,
    "tenant_guarantors": TenantGuarantor,
    "leases": Lease,
}


def row_to_dict(obj) -> dict:
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


def _coerce(model, record: Mapping[str, Any]) -> dict:
    """ISO strings → date/datetime for Date/DateTime columns."""
    columns = model.__table__.columns
    values = dict(record)
    for key, value in values.items():
        if not isinstance(value, str) or key not in columns:
            continue
        column_type = columns[key].type
        if isinstance(column_type, DateTime):
            values[key] = datetime.fromisoformat(value)
        elif isinstance(column_type, Date):
            values[key] = date.fromisoformat(value)
    return values


def _describe(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc)


class SqlPersistence:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise PersistenceError(f"Unknown table: {table}")

    async def insert(self, table: str, record: Mapping[str, Any]) -> dict:
        model = self._model(table)
        try:
            obj = model(**_coerce(model, record))
            async with self.db.begin_nested():
                self.db.add(obj)
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            logger.warning(f"Insert into {table} failed: {_describe(exc)}")
            raise PersistenceError(_describe(exc)) from exc
        return row_to_dict(obj)

    async def update(self, table: str, id: str, patch: Mapping[str, Any]) -> None:
        model = self._model(table)
        try:
            async with self.db.begin_nested():
                result = await self.db.execute(
                    update(model).where(model.id == id).values(**_coerce(model, patch))
                )
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning(f"Update of {table}/{id} failed: {_describe(exc)}")
            raise PersistenceError(_describe(exc)) from exc
        if result.rowcount == 0:
            raise PersistenceError(f"No {table} row with id {id}")

    async def select(self, table: str, filters: Mapping[str, Any]) -> list[dict]:
        model = self._model(table)
        try:
            result = await self.db.execute(select(model).filter_by(**filters))
        except SQLAlchemyError as exc:
            raise PersistenceError(_describe(exc)) from exc
        return [row_to_dict(obj) for obj in result.scalars().all()]

    async def delete(self, table: str, id: str) -> None:
        model = self._model(table)
        try:
            async with self.db.begin_nested():
                await self.db.execute(delete(model).where(model.id == id))
        except SQLAlchemyError as exc:
            raise PersistenceError(_describe(exc)) from exc
