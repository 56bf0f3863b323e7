from decimal import Decimal

from pydantic import BaseModel
from typing import List


class DashboardStats(BaseModel):
    company_count: int
    enquiry_count: int
    quotation_count: int
    won_deals_count: int


class LostReasonCount(BaseModel):
    name: str
    count: int


class RecentEntry(BaseModel):
    id: str
    label: str
    status: str
    company_name: str | None


class RecentActivityData(BaseModel):
    enquiries: List[RecentEntry]
    quotations: List[RecentEntry]


class MonthlyEnquiryCount(BaseModel):
    month: str
    count: int


class QuotationValueByStatus(BaseModel):
    status: str
    count: int
    total_value: Decimal
