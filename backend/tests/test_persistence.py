"""SqlPersistence against the test database."""

from datetime import date

import pytest
from sqlalchemy import select

from app.models.lease import Lease
from app.models.property import Property
from app.models.tenant_profile import TenantProfile
from app.services.persistence import SqlPersistence, _coerce
from app.wizard.collaborators import PersistenceError, Principal
from app.wizard.onboarding import OnboardingSubmission

from factories import onboarding_draft, pending_invite


def property_record(**overrides) -> dict:
    record = {
        "user_id": "landlord-1",
        "property_type": "garage",
        "title": "Underground parking spot",
        "address": {"street": "12 Rue de Rivoli", "postalCode": "75001", "city": "Paris", "country": "France"},
        "total_area": 15,
        "rent_amount": 120,
    }
    record.update(overrides)
    return record


@pytest.mark.unit
def test_coerce_parses_iso_dates_for_date_columns():
    values = _coerce(Lease, {"start_date": "2026-11-01", "status": "2026-11-01", "rent_amount": 950})
    assert values["start_date"] == date(2026, 11, 1)
    # String column: left alone
    assert values["status"] == "2026-11-01"
    assert values["rent_amount"] == 950


@pytest.mark.asyncio
class TestSqlPersistence:
    async def test_insert_returns_the_row_with_its_id(self, db_session):
        persistence = SqlPersistence(db_session)
        row = await persistence.insert("properties", property_record())
        assert row["id"]
        assert row["title"] == "Underground parking spot"

        rows = await persistence.select("properties", {"user_id": "landlord-1"})
        assert [r["id"] for r in rows] == [row["id"]]

    async def test_unknown_table(self, db_session):
        with pytest.raises(PersistenceError, match="Unknown table: listings"):
            await SqlPersistence(db_session).insert("listings", {})

    async def test_unknown_column(self, db_session):
        with pytest.raises(PersistenceError):
            await SqlPersistence(db_session).insert("properties", property_record(colour="red"))

    async def test_not_null_violation_leaves_the_session_usable(self, db_session):
        persistence = SqlPersistence(db_session)
        kept = await persistence.insert("properties", property_record(title="Kept"))

        with pytest.raises(PersistenceError, match="(?i)not[ -]null"):
            await persistence.insert("properties", property_record(title=None))

        row = await persistence.insert("properties", property_record(title="After the failure"))
        await db_session.commit()

        titles = (await db_session.execute(select(Property.title).order_by(Property.title))).scalars().all()
        assert titles == ["After the failure", "Kept"]
        assert kept["id"] != row["id"]

    async def test_update_and_missing_row(self, db_session):
        persistence = SqlPersistence(db_session)
        row = await persistence.insert("properties", property_record())

        await persistence.update("properties", row["id"], {"title": "Renamed"})
        rows = await persistence.select("properties", {"id": row["id"]})
        assert rows[0]["title"] == "Renamed"

        with pytest.raises(PersistenceError, match="No properties row with id missing"):
            await persistence.update("properties", "missing", {"title": "x"})

    async def test_delete(self, db_session):
        persistence = SqlPersistence(db_session)
        row = await persistence.insert("properties", property_record())
        await persistence.delete("properties", row["id"])
        assert await persistence.select("properties", {"id": row["id"]}) == []


@pytest.mark.asyncio
class TestConstraintFailureDuringSubmission:
    async def test_foreign_key_failure_is_a_primary_insert_failure(self, db_session, storage):
        persistence = SqlPersistence(db_session)
        invite = pending_invite(id="missing-invite")
        orchestrator = OnboardingSubmission(storage, persistence, invite, compensate=False)
        principal = Principal(id="missing-invite", role="invitee", email="tenant@example.com")

        result = await orchestrator.submit(onboarding_draft(), principal)

        assert result.success is False
        assert result.error.phase == "primary_insert"
        assert result.error.operation == "insert:tenant_profiles"
        assert "foreign key" in result.error.message.lower()
        assert result.created == {}
        assert [entry.action for entry in result.journal] == ["upload", "upload"]

        # The session keeps working after the failed insert
        row = await persistence.insert("properties", property_record(title="Still writable"))
        await db_session.commit()
        assert (await db_session.get(Property, row["id"])).title == "Still writable"
        assert (await db_session.execute(select(TenantProfile))).scalars().all() == []

    async def test_compensation_removes_the_uploads(self, db_session, storage):
        orchestrator = OnboardingSubmission(
            storage, SqlPersistence(db_session), pending_invite(id="missing-invite"), compensate=True
        )
        principal = Principal(id="missing-invite", role="invitee", email="tenant@example.com")

        result = await orchestrator.submit(onboarding_draft(), principal)

        assert result.error.phase == "primary_insert"
        assert len(storage.removed) == 2
        assert storage.objects == {}
