from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.errors import UnexpectedError
from clinicalcanvas.models import Appointment, Client, Invoice
from clinicalcanvas.schemas import DashboardPeriod, DashboardSummary


def period_bounds(period: DashboardPeriod, now: datetime) -> tuple[datetime, datetime]:
    """
    Half-open UTC window [start, end), aligned to midnight.

    month: 이번 달 1일 ~ 다음 달 1일
    week:  오늘 포함 최근 7일 (6일 전 00:00 ~ 내일 00:00)
    """
    now = now.astimezone(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return today - timedelta(days=6), today + timedelta(days=1)
    start = today.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class DashboardAggregator:
    """Four scoped aggregate queries, recomputed on every call."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scalar(self, stmt) -> Optional[float]:
        return (await self.db.execute(stmt)).scalar()

    async def summary(
        self,
        owner_id: int,
        period: DashboardPeriod = "month",
        now: Optional[datetime] = None,
    ) -> DashboardSummary:
        start, end = period_bounds(period, now or datetime.now(timezone.utc))

        try:
            total_clients = await self._scalar(
                select(func.count(Client.id)).where(Client.therapist_id == owner_id)
            )
            period_appointments = await self._scalar(
                select(func.count(Appointment.id)).where(
                    Appointment.therapist_id == owner_id,
                    Appointment.start_time >= start,
                    Appointment.start_time < end,
                )
            )
            # 청구서는 날짜 단위. 예약과 같은 [start, end) 구간
            revenue_day = func.coalesce(Invoice.paid_date, Invoice.service_date)
            period_revenue = await self._scalar(
                select(func.sum(Invoice.amount)).where(
                    Invoice.therapist_id == owner_id,
                    Invoice.status == "paid",
                    revenue_day >= start.date(),
                    revenue_day < end.date(),
                )
            )
            outstanding = await self._scalar(
                select(func.sum(Invoice.amount)).where(
                    Invoice.therapist_id == owner_id,
                    Invoice.status == "pending",
                )
            )
        except SQLAlchemyError as e:
            raise UnexpectedError("Failed to fetch analytics") from e

        # SUM() over no rows is NULL
        return DashboardSummary(
            totalClients=int(total_clients or 0),
            periodAppointments=int(period_appointments or 0),
            periodRevenue=float(period_revenue or 0),
            outstandingBalance=float(outstanding or 0),
        )
