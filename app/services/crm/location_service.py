# app/services/crm/location_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, asc

from app.models.crm.company_models import Company, Office, Plant, ContactPerson
from app.models.crm.enquiry_models import Enquiry
from app.schemas.crm.company_schemas import (
    OfficeCreate,
    PlantCreate,
    OfficeUpdate,
    PlantUpdate,
    OfficeOut,
    PlantOut,
    CompanyLocations,
)

from app.core.exceptions import AppException, field_error
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)

LOCATION_KIND = {Office: "office", Plant: "plant"}


async def _get_company_or_404(db: AsyncSession, company_id: str) -> Company:
    company = await db.get(Company, company_id)
    if not company:
        raise AppException(
            404,
            "Company not found",
            ErrorCode.COMPANY_NOT_FOUND,
        )
    return company


async def _load_location(db: AsyncSession, model, location_id: str):
    result = await db.execute(
        select(model)
        .where(model.id == location_id)
        .execution_options(populate_existing=True)
    )
    location = result.scalar_one_or_none()
    if not location:
        raise AppException(
            404,
            f"{LOCATION_KIND[model].capitalize()} not found",
            ErrorCode.LOCATION_NOT_FOUND,
            details={"location_id": location_id},
        )
    return location


async def _company_name(db: AsyncSession, company_id: str) -> str:
    return await db.scalar(select(Company.name).where(Company.id == company_id))


async def _demote_head_offices(db: AsyncSession, company_id: str, keep_id: str) -> None:
    await db.execute(
        update(Office)
        .where(Office.company_id == company_id, Office.id != keep_id)
        .values(is_head_office=False)
    )


# =====================================================
# LIST
# =====================================================
async def list_locations(db: AsyncSession, company_id: str) -> CompanyLocations:
    """Offices (head office first) and plants of one company, by name."""
    await _get_company_or_404(db, company_id)

    offices = await db.execute(
        select(Office)
        .where(Office.company_id == company_id)
        .order_by(Office.is_head_office.desc(), asc(Office.name))
    )
    plants = await db.execute(
        select(Plant)
        .where(Plant.company_id == company_id)
        .order_by(asc(Plant.name))
    )

    return CompanyLocations(
        company_id=company_id,
        offices=[OfficeOut.model_validate(o) for o in offices.scalars().all()],
        plants=[PlantOut.model_validate(p) for p in plants.scalars().all()],
    )


# =====================================================
# CREATE
# =====================================================
async def _create_location(db: AsyncSession, company_id: str, location, contacts, actor: str):
    company = await _get_company_or_404(db, company_id)
    location.company_id = company.id

    db.add(location)
    await db.flush()

    if isinstance(location, Office) and location.is_head_office:
        await _demote_head_offices(db, company.id, location.id)

    location_key = "office_id" if isinstance(location, Office) else "plant_id"
    db.add_all([
        ContactPerson(**c.model_dump(), company_id=company.id, **{location_key: location.id})
        for c in contacts
    ])

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.CREATE_LOCATION,
        location_kind=LOCATION_KIND[type(location)],
        target_name=location.name,
        company_name=company.name,
    )

    await db.commit()

    logger.info(
        "Location added",
        extra={
            "company_id": company.id,
            "location_id": location.id,
            "kind": LOCATION_KIND[type(location)],
            "contacts": len(contacts),
        },
    )
    return await _load_location(db, type(location), location.id)


async def create_office(
    db: AsyncSession,
    company_id: str,
    payload: OfficeCreate,
    actor: str,
) -> OfficeOut:
    office = Office(**payload.model_dump(exclude={"contacts"}))
    office = await _create_location(db, company_id, office, payload.contacts, actor)
    return OfficeOut.model_validate(office)


async def create_plant(
    db: AsyncSession,
    company_id: str,
    payload: PlantCreate,
    actor: str,
) -> PlantOut:
    plant = Plant(**payload.model_dump(exclude={"contacts"}))
    plant = await _create_location(db, company_id, plant, payload.contacts, actor)
    return PlantOut.model_validate(plant)


# =====================================================
# UPDATE
# =====================================================
async def _apply_updates(db: AsyncSession, location, updates: dict, actor: str):
    if "name" in updates and updates["name"] is None:
        raise field_error("name", "name cannot be cleared")

    changes: list[str] = []
    for field, new_value in updates.items():
        old_value = getattr(location, field)
        if old_value != new_value:
            setattr(location, field, new_value)
            changes.append(f"{field}: {old_value} → {new_value}")

    if not changes:
        return location

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.UPDATE_LOCATION,
        location_kind=LOCATION_KIND[type(location)],
        target_name=location.name,
        changes=", ".join(changes),
    )

    await db.commit()

    logger.info(
        "Location updated",
        extra={"location_id": location.id, "changes": len(changes)},
    )
    return await _load_location(db, type(location), location.id)


async def update_office(
    db: AsyncSession,
    office_id: str,
    payload: OfficeUpdate,
    actor: str,
) -> OfficeOut:
    office = await _load_location(db, Office, office_id)
    updates = payload.supplied()

    head = updates.pop("is_head_office", None)
    if head is False and office.is_head_office:
        raise field_error("is_head_office", "mark another office as head office instead")
    if head and not office.is_head_office:
        await _demote_head_offices(db, office.company_id, office.id)
        updates["is_head_office"] = True

    return OfficeOut.model_validate(await _apply_updates(db, office, updates, actor))


async def update_plant(
    db: AsyncSession,
    plant_id: str,
    payload: PlantUpdate,
    actor: str,
) -> PlantOut:
    plant = await _load_location(db, Plant, plant_id)
    return PlantOut.model_validate(await _apply_updates(db, plant, payload.supplied(), actor))


# =====================================================
# DELETE
# =====================================================
async def _delete_location(db: AsyncSession, location, actor: str) -> dict:
    """
    Contacts stay with the company and enquiries keep their company;
    both simply lose the link to this location.
    """
    model = type(location)
    location_id = location.id
    location_name = location.name
    company_id = location.company_id
    was_head_office = model is Office and location.is_head_office
    contact_column = ContactPerson.office_id if model is Office else ContactPerson.plant_id
    enquiry_column = Enquiry.office_id if model is Office else Enquiry.plant_id

    try:
        await db.execute(
            update(ContactPerson)
            .where(contact_column == location_id)
            .values({contact_column.key: None})
        )
        await db.execute(
            update(Enquiry)
            .where(enquiry_column == location_id)
            .values({enquiry_column.key: None})
        )
        await db.execute(delete(model).where(model.id == location_id))

        if was_head_office:
            successor = await db.scalar(
                select(Office)
                .where(Office.company_id == company_id)
                .order_by(asc(Office.created_at), asc(Office.id))
                .limit(1)
            )
            successor.is_head_office = True

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.DELETE_LOCATION,
            location_kind=LOCATION_KIND[model],
            target_name=location_name,
            company_name=await _company_name(db, company_id),
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Location deleted",
        extra={"location_id": location_id, "company_id": company_id},
    )
    return {"id": location_id, "name": location_name}


async def delete_office(db: AsyncSession, office_id: str, actor: str) -> dict:
    office = await _load_location(db, Office, office_id)

    offices = await db.scalar(
        select(func.count(Office.id)).where(Office.company_id == office.company_id)
    )
    if offices <= 1:
        raise AppException(
            409,
            "A company must keep at least one office",
            ErrorCode.COMPANY_NEEDS_OFFICE,
        )

    return await _delete_location(db, office, actor)


async def delete_plant(db: AsyncSession, plant_id: str, actor: str) -> dict:
    plant = await _load_location(db, Plant, plant_id)
    return await _delete_location(db, plant, actor)
