from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date as Date, datetime

from app.models.enums.communication_type import CommunicationType
from app.schemas.common.normalizers import NormalizedModel, ensure_uuid


class CommunicationCreate(NormalizedModel):
    date: Date
    company_id: str
    contact_id: Optional[str] = None
    enquiry_id: Optional[int] = Field(None, ge=1)
    subject: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: CommunicationType
    next_communication_date: Optional[Date] = None
    proposed_next_action: Optional[str] = None

    @field_validator("company_id", "contact_id")
    @classmethod
    def _check_uuid(cls, value, info):
        return ensure_uuid(value, info.field_name)


class CommunicationUpdate(NormalizedModel):
    date: Optional[Date] = None
    contact_id: Optional[str] = None
    enquiry_id: Optional[int] = Field(None, ge=1)
    subject: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[CommunicationType] = None
    next_communication_date: Optional[Date] = None
    proposed_next_action: Optional[str] = None

    @field_validator("contact_id")
    @classmethod
    def _check_uuid(cls, value, info):
        return ensure_uuid(value, info.field_name)


class CommunicationOut(BaseModel):
    id: str
    date: Date
    company_id: str
    company_name: Optional[str]
    contact_id: Optional[str]
    contact_name: Optional[str]
    enquiry_id: Optional[int]
    subject: str
    description: Optional[str]
    type: CommunicationType
    next_communication_date: Optional[Date]
    proposed_next_action: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]


class CommunicationListData(BaseModel):
    total: int
    items: List[CommunicationOut]


class CommunicationReschedule(NormalizedModel):
    next_communication_date: Date
    reason: Optional[str] = None
