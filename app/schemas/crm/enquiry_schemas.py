from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date

from app.models.enums.enquiry_status import EnquiryStatus
from app.models.enums.enquiry_fields import (
    EnquiryPriority,
    EnquirySource,
    DesignRequired,
    CustomerType,
)
from app.schemas.common.normalizers import NormalizedModel, ensure_uuid

# =====================================================
# CREATE / UPDATE
# =====================================================

class EnquiryFields(NormalizedModel):
    subject: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    timeline: Optional[str] = None
    enquiry_date: Optional[date] = None
    priority: Optional[EnquiryPriority] = None
    source: Optional[EnquirySource] = None
    notes: Optional[str] = None
    quotation_number: Optional[str] = None
    region: Optional[str] = None
    oa_number: Optional[str] = None
    block_model: Optional[str] = None
    number_of_blocks: Optional[int] = Field(None, ge=0)
    design_required: Optional[DesignRequired] = None
    customer_type: Optional[CustomerType] = None


class EnquiryCreate(EnquiryFields):
    company_id: Optional[str] = None
    # Office or plant of the company; resolved by the service
    location_id: Optional[str] = None
    status: EnquiryStatus = EnquiryStatus.LIVE
    # Same per-status contract as the status endpoint
    purchase_order_number: Optional[str] = None
    po_value: Optional[Decimal] = Field(None, ge=0)
    po_date: Optional[date] = None
    date_of_receipt: Optional[date] = None

    @field_validator("company_id", "location_id")
    @classmethod
    def _check_uuid(cls, value, info):
        return ensure_uuid(value, info.field_name)


class EnquiryUpdate(EnquiryFields):
    """
    General edit. Absent keys are left unchanged, explicit nulls clear the
    column. Status and purchase-order data change only through the status
    endpoint.
    """


class EnquiryStatusUpdate(NormalizedModel):
    status: EnquiryStatus
    purchase_order_number: Optional[str] = None
    po_value: Optional[Decimal] = Field(None, ge=0)
    po_date: Optional[date] = None
    date_of_receipt: Optional[date] = None
    receipt_number: Optional[str] = None


# =====================================================
# RESPONSES
# =====================================================

class EnquiryOut(BaseModel):
    id: int
    subject: Optional[str]

    company_id: Optional[str]
    company_name: Optional[str]
    office_id: Optional[str]
    office_name: Optional[str]
    plant_id: Optional[str]
    plant_name: Optional[str]

    description: Optional[str]
    requirements: Optional[str]
    timeline: Optional[str]
    enquiry_date: Optional[date]
    priority: Optional[EnquiryPriority]
    source: Optional[EnquirySource]
    notes: Optional[str]
    quotation_number: Optional[str]
    region: Optional[str]
    oa_number: Optional[str]
    block_model: Optional[str]
    number_of_blocks: Optional[int]
    design_required: Optional[DesignRequired]
    customer_type: Optional[CustomerType]

    status: EnquiryStatus
    purchase_order_number: Optional[str]
    po_value: Optional[Decimal]
    po_date: Optional[date]
    date_of_receipt: Optional[date]

    created_at: datetime
    updated_at: Optional[datetime]


class EnquiryListItem(BaseModel):
    id: int
    subject: Optional[str]
    company_name: Optional[str]
    status: EnquiryStatus
    priority: Optional[EnquiryPriority]
    quotation_number: Optional[str]
    enquiry_date: Optional[date]
    created_at: datetime


class EnquiryListData(BaseModel):
    total: int
    items: List[EnquiryListItem]


class EnquiryStats(BaseModel):
    total: int
    live: int
    budgetary: int
    rcd: int
    won: int
    lost: int
    dead: int
