"""JWT token creation and decoding.

Token claims:
  - sub:    landlord user ID, or invite ID for an invitee token
  - role:   "landlord" | "invitee"
  - email:  optional, the invitee's email
  - type:   "access"
  - exp:    expiry timestamp

Landlord tokens are issued by the identity provider in front of the API
(or `python -m app.cli issue-token` locally). Invitee tokens are issued
by invite verification and only open the onboarding wizard.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ALGORITHM = settings.jwt_algorithm


def create_access_token(
    subject: str,
    role: str = "landlord",
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": subject,
        "role": role,
        "type": "access",
        "exp": expire,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def create_invitee_token(invite_id: str, email: str) -> str:
    return create_access_token(
        invite_id,
        role="invitee",
        email=email,
        expires_delta=timedelta(minutes=settings.invitee_token_expire_minutes),
    )


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
