# ============================================================================
# FILE: app/services/analytics/analytics_service.py
# Reporting over a business's appointments - no FastAPI dependencies
# ============================================================================
"""
Dashboard reporting.

Every figure is derived from appointment rows of the requested period.
Revenue counts completed appointments only, priced at their service's
current price; appointments without a service contribute no revenue.
"""
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.appointment import Appointment, AppointmentStatus
from app.models.business import Business
from app.models.service import Service
from app.models.staff import StaffMember
from app.services.availability.availability_service import day_of_week
from app.utils.time_utils import local_today
import logging

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
TOP_SERVICES_LIMIT = 5
OVERVIEW_MONTHS = 6
ZERO = Decimal("0")

PricedRow = Tuple[Appointment, Optional[Decimal]]


def month_start(day: date, offset: int = 0) -> date:
    """First day of the month `offset` months away from the month of `day`"""
    index = day.year * 12 + day.month - 1 + offset
    return date(index // 12, index % 12 + 1, 1)


def percent(part, whole, digits: Optional[int] = None):
    """part/whole as a percentage; whole-number result unless digits is given"""
    if not whole:
        return 0 if digits is None else 0.0
    return round(part / whole * 100, digits)


def growth(current, previous) -> float:
    """Month-over-month change in percent, 0 when the previous month is empty"""
    if not previous:
        return 0.0
    return float(round((current - previous) / previous * 100, 1))


def money(value) -> float:
    return float(round(Decimal(value or 0), 2))


def _revenue(rows: List[PricedRow]) -> Decimal:
    return sum(
        (price or ZERO for appointment, price in rows if appointment.status == AppointmentStatus.COMPLETED),
        ZERO
    )


def _outcomes(appointments: List[Appointment]) -> Dict[str, int]:
    counts = Counter(a.status for a in appointments)
    return {
        "total": len(appointments),
        "completed": counts[AppointmentStatus.COMPLETED],
        "cancelled": counts[AppointmentStatus.CANCELLED],
        "no_show": counts[AppointmentStatus.NO_SHOW],
    }


def _bucket() -> Dict[str, Any]:
    return {"bookings": 0, "completed": 0, "revenue": ZERO}


class AnalyticsService:
    """Aggregations behind the dashboard home page and reports screens."""

    @staticmethod
    def _priced_rows(
            db: Session,
            business_id: UUID,
            start: Optional[date] = None,
            end: Optional[date] = None
    ) -> List[PricedRow]:
        """Appointments dated in [start, end) with the price of their service"""
        query = db.query(Appointment, Service.price).outerjoin(
            Service, Appointment.service_id == Service.id
        ).filter(Appointment.business_id == business_id)

        if start:
            query = query.filter(Appointment.date >= start)
        if end:
            query = query.filter(Appointment.date < end)
        return query.all()

    @staticmethod
    def dashboard_stats(db: Session, business_id: UUID, today: Optional[date] = None) -> Dict[str, Any]:
        """Headline counters: totals, today's bookings, customers, unconfirmed upcoming bookings."""
        today = today or local_today()
        base = db.query(Appointment).filter(Appointment.business_id == business_id)

        total_customers = db.query(func.count(func.distinct(Appointment.customer_phone))).filter(
            Appointment.business_id == business_id,
            Appointment.customer_phone.isnot(None)
        ).scalar()

        return {
            "business_id": str(business_id),
            "date": today.isoformat(),
            "total_appointments": base.count(),
            "today_appointments": base.filter(
                Appointment.date == today,
                Appointment.status != AppointmentStatus.CANCELLED
            ).count(),
            "total_customers": total_customers or 0,
            "pending_appointments": base.filter(
                Appointment.date >= today,
                Appointment.status == AppointmentStatus.SCHEDULED
            ).count(),
        }

    @staticmethod
    def overview(db: Session, business_id: UUID, today: Optional[date] = None) -> Dict[str, Any]:
        """
        This month against last month: booking counts, revenue and their
        growth, top services, status split, plus a six-month booking series.
        """
        today = today or local_today()
        this_month = month_start(today)
        next_month = month_start(today, 1)
        last_month = month_start(today, -1)

        total = db.query(func.count(Appointment.id)).filter(Appointment.business_id == business_id).scalar()
        current = AnalyticsService._priced_rows(db, business_id, this_month, next_month)
        previous = AnalyticsService._priced_rows(db, business_id, last_month, this_month)

        current_revenue = _revenue(current)
        previous_revenue = _revenue(previous)

        status_stats = {status: 0 for status in AppointmentStatus.ALL}
        for appointment, _ in current:
            if appointment.status in status_stats:
                status_stats[appointment.status] += 1

        service_counts = Counter(a.service_id for a, _ in current if a.service_id)
        services = {}
        if service_counts:
            services = {
                s.id: s for s in db.query(Service).filter(Service.id.in_(list(service_counts))).all()
            }
        top_services = [
            {
                "id": str(service_id),
                "name": services[service_id].name,
                "color": services[service_id].color,
                "count": count,
            }
            for service_id, count in service_counts.most_common(TOP_SERVICES_LIMIT)
            if service_id in services
        ]

        series_start = month_start(today, 1 - OVERVIEW_MONTHS)
        dated = db.query(Appointment.date).filter(
            Appointment.business_id == business_id,
            Appointment.date >= series_start,
            Appointment.date < next_month
        ).all()
        per_month = Counter(d.strftime("%Y-%m") for (d,) in dated)
        monthly = []
        for offset in range(1 - OVERVIEW_MONTHS, 1):
            month = month_start(today, offset).strftime("%Y-%m")
            monthly.append({"month": month, "appointments": per_month.get(month, 0)})

        return {
            "business_id": str(business_id),
            "period": this_month.strftime("%Y-%m"),
            "total_appointments": total or 0,
            "this_month_appointments": len(current),
            "last_month_appointments": len(previous),
            "appointment_growth": growth(len(current), len(previous)),
            "this_month_revenue": money(current_revenue),
            "last_month_revenue": money(previous_revenue),
            "revenue_growth": growth(current_revenue, previous_revenue),
            "top_services": top_services,
            "monthly": monthly,
            "status_stats": status_stats,
        }

    @staticmethod
    def patterns(db: Session, business_id: UUID, days: int = 30, today: Optional[date] = None) -> Dict[str, Any]:
        """Booking patterns for appointments dated from `days` ago onwards."""
        today = today or local_today()
        since = today - timedelta(days=days)
        rows = AnalyticsService._priced_rows(db, business_id, start=since)

        hours: Dict[int, Dict[str, Any]] = {}
        weekdays: Dict[int, Dict[str, Any]] = {}
        months: Dict[str, Dict[str, Any]] = {}

        for appointment, price in rows:
            completed = appointment.status == AppointmentStatus.COMPLETED
            keyed = (
                (hours, appointment.start_time.hour),
                (weekdays, day_of_week(appointment.date)),
                (months, appointment.date.strftime("%Y-%m")),
            )
            for buckets, key in keyed:
                bucket = buckets.setdefault(key, _bucket())
                bucket["bookings"] += 1
                if completed:
                    bucket["completed"] += 1
                    bucket["revenue"] += price or ZERO

        popular_hours = [
            {
                "hour": f"{hour:02d}:00",
                "bookings": b["bookings"],
                "completed": b["completed"],
                "completion_rate": percent(b["completed"], b["bookings"]),
            }
            for hour, b in sorted(hours.items())
        ]

        weekly_patterns = [
            {
                "day_of_week": day,
                "day_name": DAY_NAMES[day],
                "bookings": b["bookings"],
                "completed": b["completed"],
                "revenue": money(b["revenue"]),
                "completion_rate": percent(b["completed"], b["bookings"]),
                "average_revenue": money(b["revenue"] / b["completed"]) if b["completed"] else 0.0,
            }
            for day, b in sorted(weekdays.items())
        ]

        monthly_patterns = [
            {
                "month": month,
                "bookings": b["bookings"],
                "completed": b["completed"],
                "revenue": money(b["revenue"]),
                "completion_rate": percent(b["completed"], b["bookings"]),
            }
            for month, b in sorted(months.items())
        ]

        cancelled = [a for a, _ in rows if a.status == AppointmentStatus.CANCELLED]
        reasons = Counter(a.cancellation_reason for a in cancelled if a.cancellation_reason)
        cancellation_analysis = [
            {"reason": reason, "count": count, "percentage": percent(count, len(cancelled))}
            for reason, count in reasons.most_common()
        ]

        return {
            "business_id": str(business_id),
            "days": days,
            "since": since.isoformat(),
            "popular_hours": popular_hours,
            "weekly_patterns": weekly_patterns,
            "monthly_patterns": monthly_patterns,
            "cancellation_analysis": cancellation_analysis,
        }

    @staticmethod
    def services(db: Session, business_id: UUID, days: int = 30, today: Optional[date] = None) -> Dict[str, Any]:
        """Per-service bookings, outcome rates and revenue, busiest first."""
        today = today or local_today()
        rows = AnalyticsService._priced_rows(db, business_id, start=today - timedelta(days=days))

        by_service: Dict[UUID, List[Appointment]] = {}
        for appointment, _ in rows:
            if appointment.service_id:
                by_service.setdefault(appointment.service_id, []).append(appointment)

        performance = []
        for service in db.query(Service).filter(Service.business_id == business_id).all():
            outcomes = _outcomes(by_service.get(service.id, []))
            revenue = (service.price or ZERO) * outcomes["completed"]
            performance.append({
                "id": str(service.id),
                "name": service.name,
                "color": service.color,
                "price": money(service.price) if service.price is not None else None,
                "total_bookings": outcomes["total"],
                "completed_bookings": outcomes["completed"],
                "cancelled_bookings": outcomes["cancelled"],
                "no_show_bookings": outcomes["no_show"],
                "completion_rate": percent(outcomes["completed"], outcomes["total"], 2),
                "cancellation_rate": percent(outcomes["cancelled"], outcomes["total"], 2),
                "total_revenue": money(revenue),
                "average_revenue": money(revenue / outcomes["completed"]) if outcomes["completed"] else 0.0,
            })

        performance.sort(key=lambda s: s["total_bookings"], reverse=True)

        return {
            "business_id": str(business_id),
            "days": days,
            "service_performance": performance,
            "service_distribution": [
                {"name": s["name"], "value": s["total_bookings"], "color": s["color"], "revenue": s["total_revenue"]}
                for s in performance if s["total_bookings"]
            ],
        }

    @staticmethod
    def staff(db: Session, business_id: UUID, days: int = 30, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Per-staff performance. Bookings without a staff member are the
        owner's and are reported under the id "owner".
        """
        today = today or local_today()
        rows = AnalyticsService._priced_rows(db, business_id, start=today - timedelta(days=days))

        by_staff: Dict[Optional[UUID], List[PricedRow]] = {}
        for row in rows:
            by_staff.setdefault(row[0].staff_member_id, []).append(row)

        performance = []
        owner_rows = by_staff.get(None, [])
        if owner_rows:
            business = db.get(Business, business_id)
            owner = business.owner if business else None
            performance.append(AnalyticsService._performance(
                "owner",
                owner.full_name if owner and owner.full_name else "Business owner",
                owner.email if owner else None,
                owner_rows
            ))

        active_staff = db.query(StaffMember).filter(
            StaffMember.business_id == business_id,
            StaffMember.is_active == True  # noqa: E712
        ).all()
        for member in active_staff:
            member_rows = by_staff.get(member.id, [])
            if member_rows:
                performance.append(
                    AnalyticsService._performance(str(member.id), member.name, member.email, member_rows)
                )

        performance.sort(key=lambda s: s["total_appointments"], reverse=True)

        return {
            "business_id": str(business_id),
            "days": days,
            "staff_performance": performance,
            "staff_comparison": [
                {
                    "name": s["name"],
                    "appointments": s["total_appointments"],
                    "completed": s["completed_appointments"],
                    "revenue": s["total_revenue"],
                    "completion_rate": s["completion_rate"],
                }
                for s in performance
            ],
        }

    @staticmethod
    def _performance(entry_id: str, name: str, email: Optional[str], rows: List[PricedRow]) -> Dict[str, Any]:
        outcomes = _outcomes([appointment for appointment, _ in rows])
        revenue = _revenue(rows)
        return {
            "id": entry_id,
            "name": name,
            "email": email,
            "total_appointments": outcomes["total"],
            "completed_appointments": outcomes["completed"],
            "cancelled_appointments": outcomes["cancelled"],
            "no_show_appointments": outcomes["no_show"],
            "completion_rate": percent(outcomes["completed"], outcomes["total"], 2),
            "total_revenue": money(revenue),
            "average_revenue": money(revenue / outcomes["completed"]) if outcomes["completed"] else 0.0,
        }
