# app/routers/crm/dashboard_router.py

from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.crm.dashboard_schemas import (
    DashboardStats,
    LostReasonCount,
    RecentActivityData,
    MonthlyEnquiryCount,
    QuotationValueByStatus,
)
from app.services.crm.dashboard_service import (
    get_dashboard_stats,
    get_lost_reasons,
    get_recent,
    get_monthly_enquiry_trends,
    get_quotation_value_by_status,
)
from app.utils.response import APIResponse, success_response

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=APIResponse[DashboardStats])
async def dashboard_stats_api(db: AsyncSession = Depends(get_db)):
    return success_response("Dashboard stats fetched", await get_dashboard_stats(db))


@router.get("/lost-reasons", response_model=APIResponse[List[LostReasonCount]])
async def lost_reasons_api(db: AsyncSession = Depends(get_db)):
    return success_response("Lost reasons fetched", await get_lost_reasons(db))


@router.get("/recent", response_model=APIResponse[RecentActivityData])
async def recent_api(db: AsyncSession = Depends(get_db)):
    return success_response("Recent records fetched", await get_recent(db))


@router.get("/monthly-enquiry-trends", response_model=APIResponse[List[MonthlyEnquiryCount]])
async def monthly_enquiry_trends_api(
    db: AsyncSession = Depends(get_db),
    year: Optional[int] = Query(None, ge=2000, le=9998),
):
    data = await get_monthly_enquiry_trends(db, year)
    return success_response("Monthly enquiry trends fetched", data)


@router.get("/quotation-value-by-status", response_model=APIResponse[List[QuotationValueByStatus]])
async def quotation_value_by_status_api(db: AsyncSession = Depends(get_db)):
    return success_response("Quotation values fetched", await get_quotation_value_by_status(db))
