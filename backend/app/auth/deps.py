"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_principal  → decode JWT, return the caller as a Principal
  require_landlord       → restrict to landlord tokens
  require_invitee        → restrict to invitee tokens (onboarding only)

Routes pass the Principal on to services and orchestrators explicitly.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.auth.jwt import decode_token
from app.middleware.exceptions import PermissionDeniedError
from app.wizard.collaborators import Principal

# auto_error=False: a missing header is reported as 401, not 403
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/onboarding/verify", auto_error=False)


async def get_current_principal(
    token: str | None = Depends(oauth2_scheme),
) -> Principal:
    payload = decode_token(token) if token else {}
    subject: str | None = payload.get("sub")
    if not subject or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Principal(
        id=subject,
        role=payload.get("role", "landlord"),
        email=payload.get("email"),
    )


async def require_landlord(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if principal.role != "landlord":
        raise PermissionDeniedError("Landlord access required")
    return principal


async def require_invitee(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """The principal's id is the invite (temp_tenants) id."""
    if principal.role != "invitee":
        raise PermissionDeniedError("Onboarding invitation token required")
    return principal
