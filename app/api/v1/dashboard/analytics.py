# app/api/v1/dashboard/analytics.py
"""
Dashboard home counters and reports.

/stats is open to anyone who can read the dashboard; the /analytics
reports need the "reports" permission.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from app.api.dependencies import get_current_business, require_permission
from app.config.database import get_db
from app.models.business import Business
from app.models.team import Permission
from app.services.analytics.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard-analytics"])

reports_access = Depends(require_permission(Permission.REPORTS))


def _failed(business: Business, report: str, e: Exception) -> HTTPException:
    logger.error(f"Error building {report} for business {business.id}: {str(e)}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "analytics_failed", "message": f"Failed to build {report}"}
    )


@router.get("/stats")
def get_dashboard_stats(
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    try:
        return AnalyticsService.dashboard_stats(db, business.id)
    except Exception as e:
        raise _failed(business, "dashboard stats", e)


@router.get("/analytics/overview", dependencies=[reports_access])
def get_overview(
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    try:
        return AnalyticsService.overview(db, business.id)
    except Exception as e:
        raise _failed(business, "overview", e)


@router.get("/analytics/patterns", dependencies=[reports_access])
def get_booking_patterns(
        days: int = Query(30, ge=1, le=366, description="How many days back to look"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    try:
        return AnalyticsService.patterns(db, business.id, days)
    except Exception as e:
        raise _failed(business, "booking patterns", e)


@router.get("/analytics/services", dependencies=[reports_access])
def get_service_performance(
        days: int = Query(30, ge=1, le=366),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    try:
        return AnalyticsService.services(db, business.id, days)
    except Exception as e:
        raise _failed(business, "service performance", e)


@router.get("/analytics/staff", dependencies=[reports_access])
def get_staff_performance(
        days: int = Query(30, ge=1, le=366),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    try:
        return AnalyticsService.staff(db, business.id, days)
    except Exception as e:
        raise _failed(business, "staff performance", e)
