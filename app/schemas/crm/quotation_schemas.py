from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date

from app.core.config import DEFAULT_CURRENCY
from app.models.enums.quotation_status import QuotationStatus, LostReason
from app.schemas.common.normalizers import NormalizedModel

# =====================================================
# ITEM PAYLOADS
# =====================================================

class QuotationItemCreate(NormalizedModel):
    material_description: str = Field(..., min_length=1)
    specifications: Optional[str] = None
    quantity: int = Field(..., ge=1)
    price_per_unit: Decimal = Field(..., ge=0)


# =====================================================
# QUOTATION CREATE / UPDATE
# =====================================================

class QuotationCreate(NormalizedModel):
    enquiry_id: int = Field(..., ge=1)
    # Falls back to the enquiry's quotation number, then to a generated one
    quotation_number: Optional[str] = None
    revision_number: int = Field(0, ge=0)
    quotation_date: Optional[date] = None
    validity_period: Optional[str] = None
    payment_terms: Optional[str] = None
    delivery_schedule: Optional[str] = None
    special_instructions: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    transport_costs: Decimal = Field(Decimal("0"), ge=0)
    gst: Decimal = Field(Decimal("0"), ge=0, le=100)
    packing_forwarding_percentage: Decimal = Field(Decimal("3"), ge=0, le=5)
    incoterms: Optional[str] = None
    items: List[QuotationItemCreate] = Field(..., min_length=1)


class QuotationUpdate(QuotationCreate):
    pass


class QuotationStatusUpdate(NormalizedModel):
    status: QuotationStatus
    lost_reason: Optional[LostReason] = None
    purchase_order_number: Optional[str] = None
    po_value: Optional[Decimal] = Field(None, ge=0)
    po_date: Optional[date] = None
    date_of_receipt: Optional[date] = None


class QuotationNumberCheck(NormalizedModel):
    quotation_number: str = Field(..., min_length=1)


# =====================================================
# RESPONSES
# =====================================================

class QuotationItemOut(BaseModel):
    id: int
    material_description: str
    specifications: Optional[str]
    quantity: int
    price_per_unit: Decimal
    total: Decimal

    class Config:
        from_attributes = True


class QuotationOut(BaseModel):
    id: str
    quotation_number: str
    revision_number: int
    quotation_date: Optional[date]

    enquiry_id: int
    enquiry_subject: Optional[str]
    enquiry_status: Optional[str]
    company_name: Optional[str]

    validity_period: Optional[str]
    payment_terms: Optional[str]
    delivery_schedule: Optional[str]
    special_instructions: Optional[str]
    incoterms: Optional[str]
    currency: str

    transport_costs: Decimal
    gst: Decimal
    packing_forwarding_percentage: Decimal
    subtotal: Decimal
    tax: Decimal
    total_value: Decimal

    status: QuotationStatus
    lost_reason: Optional[LostReason]
    purchase_order_number: Optional[str]
    po_value: Optional[Decimal]
    po_date: Optional[date]
    date_of_receipt: Optional[date]

    created_at: datetime
    updated_at: Optional[datetime]

    items: List[QuotationItemOut]


class QuotationListItem(BaseModel):
    id: str
    quotation_number: str
    enquiry_id: int
    company_name: Optional[str]
    status: QuotationStatus
    items_count: int
    total_value: Decimal
    quotation_date: Optional[date]
    created_at: datetime


class QuotationListData(BaseModel):
    total: int
    items: List[QuotationListItem]


class QuotationStats(BaseModel):
    total: int
    live: int
    won: int
    lost: int
    budgetary: int
    dead: int
    received: int
    live_total_value: Decimal
    active_total_value: Decimal


class QuotationNumberCheckOut(BaseModel):
    exists: bool
    quotation_number: str
