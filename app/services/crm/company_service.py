# app/services/crm/company_service.py

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, desc
from sqlalchemy.exc import IntegrityError

from app.models.crm.company_models import Company, Office, Plant, ContactPerson
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.communication_models import Communication
from app.schemas.crm.company_schemas import (
    CompanyCreate,
    CompanyUpdate,
    CompanyOut,
    CompanyListItem,
    CompanyListData,
    ContactPersonIn,
    ContactCreate,
    ContactUpdate,
    ContactPersonOut,
)

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _company_name_taken() -> AppException:
    return AppException(
        409,
        "A company with this name already exists",
        ErrorCode.COMPANY_NAME_EXISTS,
    )


async def _load_company(db: AsyncSession, company_id: str) -> Company:
    result = await db.execute(
        select(Company)
        .where(Company.id == company_id)
        .execution_options(populate_existing=True)
    )
    company = result.scalar_one_or_none()
    if not company:
        raise AppException(
            404,
            "Company not found",
            ErrorCode.COMPANY_NOT_FOUND,
        )
    return company


def _contacts(items: list[ContactPersonIn], company_id: str, **location) -> list[ContactPerson]:
    return [
        ContactPerson(**c.model_dump(), company_id=company_id, **location)
        for c in items
    ]


# =====================================================
# CREATE
# =====================================================
async def create_company(
    db: AsyncSession,
    payload: CompanyCreate,
    actor: str,
) -> CompanyOut:
    """
    Create a company with its offices, plants and their contacts.
    The first office is the head office.
    """
    exists = await db.scalar(select(Company.id).where(Company.name == payload.name))
    if exists:
        raise _company_name_taken()

    company = Company(
        **payload.model_dump(exclude={"offices", "plants"}),
    )

    try:
        db.add(company)
        await db.flush()

        for index, office_in in enumerate(payload.offices):
            office = Office(
                **office_in.model_dump(exclude={"contacts"}),
                company_id=company.id,
                is_head_office=index == 0,
            )
            db.add(office)
            await db.flush()
            db.add_all(_contacts(office_in.contacts, company.id, office_id=office.id))

        for plant_in in payload.plants:
            plant = Plant(
                **plant_in.model_dump(exclude={"contacts"}),
                company_id=company.id,
                plant_type="Manufacturing",
            )
            db.add(plant)
            await db.flush()
            db.add_all(_contacts(plant_in.contacts, company.id, plant_id=plant.id))

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.CREATE_COMPANY,
            target_name=company.name,
        )

        await db.commit()

    except IntegrityError:
        await db.rollback()
        raise _company_name_taken()

    logger.info(
        "Company created",
        extra={
            "company_id": company.id,
            "offices": len(payload.offices),
            "plants": len(payload.plants),
        },
    )
    return CompanyOut.model_validate(await _load_company(db, company.id))


# =====================================================
# GET / LIST
# =====================================================
async def get_company(db: AsyncSession, company_id: str) -> CompanyOut:
    return CompanyOut.model_validate(await _load_company(db, company_id))


async def list_companies(
    db: AsyncSession,
    *,
    search: Optional[str],
    page: int,
    page_size: int,
) -> CompanyListData:
    offices_count = (
        select(func.count(Office.id))
        .where(Office.company_id == Company.id)
        .correlate(Company)
        .scalar_subquery()
    )
    plants_count = (
        select(func.count(Plant.id))
        .where(Plant.company_id == Company.id)
        .correlate(Company)
        .scalar_subquery()
    )
    contacts_count = (
        select(func.count(ContactPerson.id))
        .where(ContactPerson.company_id == Company.id)
        .correlate(Company)
        .scalar_subquery()
    )

    base = select(
        Company.id,
        Company.name,
        Company.industry,
        offices_count.label("offices_count"),
        plants_count.label("plants_count"),
        contacts_count.label("contacts_count"),
        Company.created_at,
    )

    if search:
        base = base.where(Company.name.ilike(f"%{search}%"))

    total = await db.scalar(
        select(func.count()).select_from(base.subquery())
    )

    result = await db.execute(
        base.order_by(desc(Company.created_at), Company.name)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return CompanyListData(
        total=total or 0,
        items=[CompanyListItem(**row._mapping) for row in result.all()],
    )


# =====================================================
# UPDATE
# =====================================================
async def update_company(
    db: AsyncSession,
    company_id: str,
    payload: CompanyUpdate,
    actor: str,
) -> CompanyOut:
    company = await _load_company(db, company_id)
    updates = payload.supplied()

    if "name" in updates and updates["name"] is None:
        raise AppException(
            422,
            "Invalid request data",
            ErrorCode.VALIDATION_ERROR,
            details=[{"field": "name", "message": "name cannot be cleared"}],
        )

    new_name = updates.get("name")
    if new_name and new_name != company.name:
        taken = await db.scalar(
            select(Company.id).where(Company.name == new_name, Company.id != company.id)
        )
        if taken:
            raise _company_name_taken()

    changes: list[str] = []
    for field, new_value in updates.items():
        old_value = getattr(company, field)
        if new_value is None and field.startswith("po_"):
            new_value = False
        if old_value != new_value:
            setattr(company, field, new_value)
            changes.append(f"{field}: {old_value} → {new_value}")

    if not changes:
        return CompanyOut.model_validate(company)

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.UPDATE_COMPANY,
        target_name=company.name,
        changes=", ".join(changes),
    )

    await db.commit()

    logger.info(
        "Company updated",
        extra={"company_id": company.id, "changes": len(changes)},
    )
    return CompanyOut.model_validate(await _load_company(db, company.id))


# =====================================================
# DELETE
# =====================================================
async def delete_company(
    db: AsyncSession,
    company_id: str,
    actor: str,
) -> dict:
    """
    Hard delete with its communications, contacts, offices and plants.
    Refused while enquiries still point at the company.
    """
    company = await _load_company(db, company_id)
    company_name = company.name

    enquiries = await db.scalar(
        select(func.count(Enquiry.id)).where(Enquiry.company_id == company_id)
    )
    if enquiries:
        raise AppException(
            409,
            "Company has enquiries; delete them first",
            ErrorCode.COMPANY_HAS_ENQUIRIES,
            details={"enquiries": enquiries},
        )

    try:
        await db.execute(delete(Communication).where(Communication.company_id == company_id))
        await db.execute(delete(ContactPerson).where(ContactPerson.company_id == company_id))
        await db.execute(delete(Office).where(Office.company_id == company_id))
        await db.execute(delete(Plant).where(Plant.company_id == company_id))
        await db.execute(delete(Company).where(Company.id == company_id))

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.DELETE_COMPANY,
            target_name=company_name,
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info("Company deleted", extra={"company_id": company_id})
    return {"id": company_id, "name": company_name}


# =====================================================
# CONTACTS
# =====================================================
async def _get_contact_or_404(db: AsyncSession, contact_id: str) -> ContactPerson:
    contact = await db.get(ContactPerson, contact_id)
    if not contact:
        raise AppException(
            404,
            "Contact not found",
            ErrorCode.CONTACT_NOT_FOUND,
        )
    return contact


async def add_contact(
    db: AsyncSession,
    company_id: str,
    payload: ContactCreate,
    actor: str,
) -> ContactPersonOut:
    company = await _load_company(db, company_id)

    for model, location_id in ((Office, payload.office_id), (Plant, payload.plant_id)):
        if location_id is None:
            continue
        location = await db.get(model, location_id)
        if not location or location.company_id != company.id:
            raise AppException(
                404,
                "Location not found for this company",
                ErrorCode.LOCATION_NOT_FOUND,
                details={"location_id": location_id},
            )

    contact = ContactPerson(**payload.model_dump(), company_id=company.id)
    db.add(contact)
    await db.flush()

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.CREATE_CONTACT,
        target_name=contact.name,
        company_name=company.name,
    )

    await db.commit()
    await db.refresh(contact)

    logger.info(
        "Contact added",
        extra={"company_id": company.id, "contact_id": contact.id},
    )
    return ContactPersonOut.model_validate(contact)


async def update_contact(
    db: AsyncSession,
    contact_id: str,
    payload: ContactUpdate,
    actor: str,
) -> ContactPersonOut:
    contact = await _get_contact_or_404(db, contact_id)
    updates = payload.supplied()

    if "name" in updates and updates["name"] is None:
        raise AppException(
            422,
            "Invalid request data",
            ErrorCode.VALIDATION_ERROR,
            details=[{"field": "name", "message": "name cannot be cleared"}],
        )
    if "is_primary" in updates and updates["is_primary"] is None:
        updates["is_primary"] = False

    changes: list[str] = []
    for field, new_value in updates.items():
        old_value = getattr(contact, field)
        if old_value != new_value:
            setattr(contact, field, new_value)
            changes.append(f"{field}: {old_value} → {new_value}")

    if not changes:
        return ContactPersonOut.model_validate(contact)

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.UPDATE_CONTACT,
        target_name=contact.name,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(contact)

    return ContactPersonOut.model_validate(contact)


async def delete_contact(
    db: AsyncSession,
    contact_id: str,
    actor: str,
) -> dict:
    contact = await _get_contact_or_404(db, contact_id)
    contact_name = contact.name

    try:
        await db.execute(
            update(Communication)
            .where(Communication.contact_id == contact_id)
            .values(contact_id=None)
        )
        await db.execute(delete(ContactPerson).where(ContactPerson.id == contact_id))

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.DELETE_CONTACT,
            target_name=contact_name,
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info("Contact deleted", extra={"contact_id": contact_id})
    return {"id": contact_id, "name": contact_name}
