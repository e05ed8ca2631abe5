"""
API v1 router setup
Organized into: public (booking link + auth), dashboard (JWT) and cron routes
"""
from fastapi import APIRouter

from app.api.v1 import cron
from app.api.v1.dashboard import analytics, appointments, availability, business, services, staff, team, whatsapp
from app.api.v1.public import auth, booking

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    booking.router,
    prefix="/public",
    tags=["Public"]
)

api_v1_router.include_router(
    auth.router,
    # No prefix needed - auth.router already has "/auth" prefix
    tags=["Authentication"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication required)
# ============================================================================
for dashboard_router in (
        appointments.router,
        services.router,
        staff.router,
        availability.router,
        business.router,
        whatsapp.router,
        analytics.router,
        team.router,
):
    api_v1_router.include_router(
        dashboard_router,
        prefix="/dashboard",
        tags=["Dashboard"]
    )

# ============================================================================
# CRON ROUTES (shared secret)
# ============================================================================
api_v1_router.include_router(cron.router, tags=["Cron"])


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    Shows the structure of all API routes organized by authentication type.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "dashboard": "JWT Bearer token required (owner login)",
            "cron": "Bearer CRON_SECRET required"
        }
    }
