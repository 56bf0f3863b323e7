# app/schemas/crm/company_schemas.py

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common.normalizers import NormalizedModel, ensure_uuid


# =====================================================
# NESTED PAYLOADS
# =====================================================

class ContactPersonIn(NormalizedModel):
    name: str = Field(..., min_length=1)
    designation: Optional[str] = None
    phone_number: Optional[str] = None
    email_id: Optional[EmailStr] = None
    is_primary: bool = False


class LocationIn(NormalizedModel):
    name: str = Field(..., min_length=1)
    address: Optional[str] = None
    area: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None
    contacts: List[ContactPersonIn] = []


class PurchaseOrderFlags(NormalizedModel):
    po_rupture_discs: bool = False
    po_thermowells: bool = False
    po_heat_exchanger: bool = False
    po_miscellaneous: bool = False
    po_water_jet_steam_jet: bool = False


# =====================================================
# COMPANY CREATE / UPDATE
# =====================================================

class CompanyCreate(PurchaseOrderFlags):
    name: str = Field(..., min_length=1)
    website: Optional[str] = None
    industry: Optional[str] = None
    existing_graphite_suppliers: Optional[str] = None
    problems_faced: Optional[str] = None
    offices: List[LocationIn] = Field(..., min_length=1)
    plants: List[LocationIn] = []


class CompanyUpdate(NormalizedModel):
    name: Optional[str] = Field(None, min_length=1)
    website: Optional[str] = None
    industry: Optional[str] = None
    po_rupture_discs: Optional[bool] = None
    po_thermowells: Optional[bool] = None
    po_heat_exchanger: Optional[bool] = None
    po_miscellaneous: Optional[bool] = None
    po_water_jet_steam_jet: Optional[bool] = None
    existing_graphite_suppliers: Optional[str] = None
    problems_faced: Optional[str] = None


class ContactCreate(ContactPersonIn):
    office_id: Optional[str] = None
    plant_id: Optional[str] = None

    @field_validator("office_id", "plant_id")
    @classmethod
    def _check_uuid(cls, value, info):
        return ensure_uuid(value, info.field_name)


class ContactUpdate(NormalizedModel):
    name: Optional[str] = Field(None, min_length=1)
    designation: Optional[str] = None
    phone_number: Optional[str] = None
    email_id: Optional[EmailStr] = None
    is_primary: Optional[bool] = None


# =====================================================
# OFFICES / PLANTS
# =====================================================

class OfficeCreate(LocationIn):
    is_head_office: bool = False


class PlantCreate(LocationIn):
    plant_type: Optional[str] = "Manufacturing"


class LocationUpdate(NormalizedModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    area: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None


class OfficeUpdate(LocationUpdate):
    # Only True is meaningful; the head office moves, it is never unset
    is_head_office: Optional[bool] = None


class PlantUpdate(LocationUpdate):
    plant_type: Optional[str] = None


# =====================================================
# RESPONSES
# =====================================================

class ContactPersonOut(BaseModel):
    id: str
    name: str
    designation: Optional[str]
    phone_number: Optional[str]
    email_id: Optional[str]
    is_primary: bool
    office_id: Optional[str]
    plant_id: Optional[str]

    class Config:
        from_attributes = True


class OfficeOut(BaseModel):
    id: str
    name: str
    address: Optional[str]
    area: Optional[str]
    city: Optional[str]
    state: Optional[str]
    country: Optional[str]
    pincode: Optional[str]
    is_head_office: bool
    contact_persons: List[ContactPersonOut]

    class Config:
        from_attributes = True


class PlantOut(BaseModel):
    id: str
    name: str
    address: Optional[str]
    area: Optional[str]
    city: Optional[str]
    state: Optional[str]
    country: Optional[str]
    pincode: Optional[str]
    plant_type: Optional[str]
    contact_persons: List[ContactPersonOut]

    class Config:
        from_attributes = True


class CompanyOut(BaseModel):
    id: str
    name: str
    website: Optional[str]
    industry: Optional[str]
    po_rupture_discs: bool
    po_thermowells: bool
    po_heat_exchanger: bool
    po_miscellaneous: bool
    po_water_jet_steam_jet: bool
    existing_graphite_suppliers: Optional[str]
    problems_faced: Optional[str]
    offices: List[OfficeOut]
    plants: List[PlantOut]
    contact_persons: List[ContactPersonOut]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class CompanyListItem(BaseModel):
    id: str
    name: str
    industry: Optional[str]
    offices_count: int
    plants_count: int
    contacts_count: int
    created_at: datetime


class CompanyListData(BaseModel):
    total: int
    items: List[CompanyListItem]


class CompanyLocations(BaseModel):
    company_id: str
    offices: List[OfficeOut]
    plants: List[PlantOut]
