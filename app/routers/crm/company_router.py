# app/routers/crm/company_router.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.crm.company_schemas import (
    CompanyCreate,
    CompanyUpdate,
    CompanyOut,
    CompanyListData,
    ContactCreate,
    ContactUpdate,
    ContactPersonOut,
    OfficeCreate,
    PlantCreate,
    OfficeUpdate,
    PlantUpdate,
    OfficeOut,
    PlantOut,
    CompanyLocations,
)
from app.services.crm.company_service import (
    create_company,
    get_company,
    list_companies,
    update_company,
    delete_company,
    add_contact,
    update_contact,
    delete_contact,
)
from app.services.crm.location_service import (
    list_locations,
    create_office,
    create_plant,
    update_office,
    update_plant,
    delete_office,
    delete_plant,
)
from app.utils.get_actor import get_actor
from app.utils.id_params import uuid_path
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/companies", tags=["Companies"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[CompanyOut])
async def create_company_api(
    payload: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Create company", extra={"company_name": payload.name})
    company = await create_company(db, payload, actor)
    return success_response("Company created successfully", company)


@router.get("/", response_model=APIResponse[CompanyListData])
async def list_companies_api(
    db: AsyncSession = Depends(get_db),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_companies(db, search=search, page=page, page_size=page_size)
    return success_response("Companies fetched successfully", data)


@router.get("/{company_id}", response_model=APIResponse[CompanyOut])
async def get_company_api(
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
):
    company = await get_company(db, company_id)
    return success_response("Company fetched successfully", company)


@router.patch("/{company_id}", response_model=APIResponse[CompanyOut])
async def update_company_api(
    payload: CompanyUpdate,
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Update company", extra={"company_id": company_id})
    company = await update_company(db, company_id, payload, actor)
    return success_response("Company updated successfully", company)


@router.delete("/{company_id}", response_model=APIResponse[dict])
async def delete_company_api(
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete company", extra={"company_id": company_id})
    data = await delete_company(db, company_id, actor)
    return success_response("Company deleted successfully", data)


# =====================================================
# CONTACTS
# =====================================================

@router.post("/{company_id}/contacts", response_model=APIResponse[ContactPersonOut])
async def add_contact_api(
    payload: ContactCreate,
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Add contact", extra={"company_id": company_id})
    contact = await add_contact(db, company_id, payload, actor)
    return success_response("Contact added successfully", contact)


@router.patch("/contacts/{contact_id}", response_model=APIResponse[ContactPersonOut])
async def update_contact_api(
    payload: ContactUpdate,
    contact_id: str = Depends(uuid_path("contact_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    contact = await update_contact(db, contact_id, payload, actor)
    return success_response("Contact updated successfully", contact)


@router.delete("/contacts/{contact_id}", response_model=APIResponse[dict])
async def delete_contact_api(
    contact_id: str = Depends(uuid_path("contact_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete contact", extra={"contact_id": contact_id})
    data = await delete_contact(db, contact_id, actor)
    return success_response("Contact deleted successfully", data)


# =====================================================
# OFFICES / PLANTS
# =====================================================

@router.get("/{company_id}/locations", response_model=APIResponse[CompanyLocations])
async def list_locations_api(
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
):
    data = await list_locations(db, company_id)
    return success_response("Locations fetched successfully", data)


@router.post("/{company_id}/offices", response_model=APIResponse[OfficeOut])
async def create_office_api(
    payload: OfficeCreate,
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Add office", extra={"company_id": company_id})
    office = await create_office(db, company_id, payload, actor)
    return success_response("Office added successfully", office)


@router.post("/{company_id}/plants", response_model=APIResponse[PlantOut])
async def create_plant_api(
    payload: PlantCreate,
    company_id: str = Depends(uuid_path("company_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Add plant", extra={"company_id": company_id})
    plant = await create_plant(db, company_id, payload, actor)
    return success_response("Plant added successfully", plant)


@router.patch("/offices/{office_id}", response_model=APIResponse[OfficeOut])
async def update_office_api(
    payload: OfficeUpdate,
    office_id: str = Depends(uuid_path("office_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    office = await update_office(db, office_id, payload, actor)
    return success_response("Office updated successfully", office)


@router.patch("/plants/{plant_id}", response_model=APIResponse[PlantOut])
async def update_plant_api(
    payload: PlantUpdate,
    plant_id: str = Depends(uuid_path("plant_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    plant = await update_plant(db, plant_id, payload, actor)
    return success_response("Plant updated successfully", plant)


@router.delete("/offices/{office_id}", response_model=APIResponse[dict])
async def delete_office_api(
    office_id: str = Depends(uuid_path("office_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete office", extra={"office_id": office_id})
    data = await delete_office(db, office_id, actor)
    return success_response("Office deleted successfully", data)


@router.delete("/plants/{plant_id}", response_model=APIResponse[dict])
async def delete_plant_api(
    plant_id: str = Depends(uuid_path("plant_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete plant", extra={"plant_id": plant_id})
    data = await delete_plant(db, plant_id, actor)
    return success_response("Plant deleted successfully", data)
