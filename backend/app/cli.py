"""Management CLI.

Usage:
    python -m app.cli create-tables           # Create every table (dev; use Alembic in prod)
    python -m app.cli expire-invites          # Mark overdue pending invites as expired
    python -m app.cli issue-token <user_id>   # Print a landlord bearer token
"""

import asyncio
import sys

from sqlalchemy import create_engine

import app.models  # noqa: F401
from app.auth.jwt import create_access_token
from app.config import settings
from app.database import Base
from app.services.scheduler import run_invite_sweep


def create_tables():
    engine = create_engine(settings.database_url_sync)
    Base.metadata.create_all(engine)
    for name in Base.metadata.tables:
        print(f"  {name}")
    print(f"\n{len(Base.metadata.tables)} table(s) ensured")


def expire_invites():
    count = asyncio.run(run_invite_sweep())
    print(f"Expired {count} invite(s)")


def issue_token(user_id: str, email: str | None = None):
    print(create_access_token(user_id, role="landlord", email=email))


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "create-tables":
        create_tables()
    elif cmd == "expire-invites":
        expire_invites()
    elif cmd == "issue-token" and len(sys.argv) > 2:
        issue_token(sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else None)
    else:
        print("Usage: python -m app.cli [create-tables|expire-invites|issue-token <user_id> [email]]")
