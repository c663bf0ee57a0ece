from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.middleware.exceptions import register_exception_handlers
from app.routers import health, leases, onboarding, properties
from app.services.scheduler import lifespan

app = FastAPI(
    title="EasyRent",
    description="Property management: property creation and tenant onboarding wizards",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
# Public
app.include_router(health.router)

# Landlord (or invitee, for the onboarding wizard) bearer tokens
app.include_router(properties.router, prefix="/api/properties", tags=["properties"])
app.include_router(onboarding.router, prefix="/api/onboarding", tags=["onboarding"])
app.include_router(leases.router, prefix="/api/leases", tags=["leases"])
