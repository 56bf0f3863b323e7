# app/services/crm/dashboard_service.py

import calendar
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc

from app.models.crm.company_models import Company
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.quotation_models import Quotation
from app.models.enums.quotation_status import QuotationStatus
from app.schemas.crm.dashboard_schemas import (
    DashboardStats,
    LostReasonCount,
    RecentEntry,
    RecentActivityData,
    MonthlyEnquiryCount,
    QuotationValueByStatus,
)

RECENT_LIMIT = 5


async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
    return DashboardStats(
        company_count=await db.scalar(select(func.count(Company.id))) or 0,
        enquiry_count=await db.scalar(select(func.count(Enquiry.id))) or 0,
        quotation_count=await db.scalar(select(func.count(Quotation.id))) or 0,
        won_deals_count=await db.scalar(
            select(func.count(Quotation.id)).where(Quotation.status == QuotationStatus.WON)
        ) or 0,
    )


async def get_lost_reasons(db: AsyncSession) -> list[LostReasonCount]:
    """Lost quotations grouped by reason; quotations without a reason are left out."""
    result = await db.execute(
        select(Quotation.lost_reason, func.count(Quotation.id))
        .where(
            Quotation.status == QuotationStatus.LOST,
            Quotation.lost_reason.is_not(None),
        )
        .group_by(Quotation.lost_reason)
        .order_by(desc(func.count(Quotation.id)))
    )
    return [
        LostReasonCount(name=reason.value, count=count)
        for reason, count in result.all()
    ]


async def get_recent(db: AsyncSession) -> RecentActivityData:
    enquiries = await db.execute(
        select(Enquiry.id, Enquiry.subject, Enquiry.status, Company.name)
        .outerjoin(Company, Company.id == Enquiry.company_id)
        .order_by(desc(Enquiry.created_at), desc(Enquiry.id))
        .limit(RECENT_LIMIT)
    )
    quotations = await db.execute(
        select(Quotation.id, Quotation.quotation_number, Quotation.status, Company.name)
        .join(Enquiry, Enquiry.id == Quotation.enquiry_id)
        .outerjoin(Company, Company.id == Enquiry.company_id)
        .order_by(desc(Quotation.created_at))
        .limit(RECENT_LIMIT)
    )

    return RecentActivityData(
        enquiries=[
            RecentEntry(
                id=str(e_id),
                label=subject or f"Enquiry #{e_id}",
                status=status.value,
                company_name=company_name,
            )
            for e_id, subject, status, company_name in enquiries.all()
        ],
        quotations=[
            RecentEntry(
                id=q_id,
                label=number,
                status=status.value,
                company_name=company_name,
            )
            for q_id, number, status, company_name in quotations.all()
        ],
    )


async def get_monthly_enquiry_trends(
    db: AsyncSession,
    year: Optional[int] = None,
) -> list[MonthlyEnquiryCount]:
    """Enquiries created per calendar month of `year` (UTC), Jan..Dec, zero-filled."""
    year = year or datetime.now(timezone.utc).year

    result = await db.execute(
        select(Enquiry.created_at).where(
            Enquiry.created_at >= datetime(year, 1, 1, tzinfo=timezone.utc),
            Enquiry.created_at < datetime(year + 1, 1, 1, tzinfo=timezone.utc),
        )
    )

    counts = [0] * 12
    for (created_at,) in result.all():
        counts[created_at.month - 1] += 1

    return [
        MonthlyEnquiryCount(month=calendar.month_abbr[index + 1], count=count)
        for index, count in enumerate(counts)
    ]


async def get_quotation_value_by_status(db: AsyncSession) -> list[QuotationValueByStatus]:
    """Quotation count and summed total value per status, highest value first."""
    total = func.coalesce(func.sum(Quotation.total_value), 0)
    result = await db.execute(
        select(Quotation.status, func.count(Quotation.id), total)
        .group_by(Quotation.status)
        .order_by(desc(total))
    )
    return [
        QuotationValueByStatus(
            status=status.value,
            count=count,
            total_value=Decimal(str(value)).quantize(Decimal("0.01")),
        )
        for status, count, value in result.all()
    ]
