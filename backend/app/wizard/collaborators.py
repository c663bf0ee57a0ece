"""External collaborators the wizard calls but does not implement.

The submission orchestrators only see these protocols; concrete
implementations live in `app.services` (SQL persistence, local/HTTP
storage, HTTP email) and tests substitute in-memory fakes.

The authenticated principal is passed in explicitly; nothing in the
wizard core reads an ambient session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol


@dataclass(frozen=True)
class Principal:
    """Authenticated caller. `id` stamps ownership on inserted records."""
    id: str
    role: str = "landlord"  # landlord | invitee
    email: str | None = None


# ── Collaborator errors (surfaced verbatim) ─────────────────

class AuthError(Exception):
    """No authenticated session."""


class StorageError(Exception):
    """Upload / URL resolution failed (quota, type rejection, transport)."""


class PersistenceError(Exception):
    """Insert / update failed (constraint violation, transport)."""


class NotificationError(Exception):
    """Invite email could not be delivered."""


# ── Protocols ───────────────────────────────────────────────

class Storage(Protocol):
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store `data` under `path` and return the stored path."""
        ...

    def get_public_url(self, bucket: str, path: str) -> str:
        ...

    async def remove(self, bucket: str, path: str) -> None:
        ...


class Persistence(Protocol):
    async def insert(self, table: str, record: Mapping[str, Any]) -> dict:
        """Insert a row and return it including its generated `id`."""
        ...

    async def update(self, table: str, id: str, patch: Mapping[str, Any]) -> None:
        ...

    async def select(self, table: str, filters: Mapping[str, Any]) -> list[dict]:
        ...

    async def delete(self, table: str, id: str) -> None:
        ...


class Notifier(Protocol):
    async def send_invite_email(self, to: str, template_data: Mapping[str, Any]) -> None:
        ...
