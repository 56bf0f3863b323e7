# app/services/crm/enquiry_service.py

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, desc

from app.models.crm.company_models import Company, Office, Plant
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.quotation_models import Quotation, QuotationItem
from app.models.crm.communication_models import Communication
from app.models.enums.enquiry_status import EnquiryStatus
from app.schemas.crm.enquiry_schemas import (
    EnquiryCreate,
    EnquiryUpdate,
    EnquiryStatusUpdate,
    EnquiryOut,
    EnquiryListItem,
    EnquiryListData,
    EnquiryStats,
)
from app.services.crm import status_sync_service

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)

PO_CREATE_FIELDS = {"purchase_order_number", "po_value", "po_date", "date_of_receipt"}


def _map_enquiry(e: Enquiry) -> EnquiryOut:
    return EnquiryOut(
        id=e.id,
        subject=e.subject,

        company_id=e.company_id,
        company_name=e.company.name if e.company else None,
        office_id=e.office_id,
        office_name=e.office.name if e.office else None,
        plant_id=e.plant_id,
        plant_name=e.plant.name if e.plant else None,

        description=e.description,
        requirements=e.requirements,
        timeline=e.timeline,
        enquiry_date=e.enquiry_date,
        priority=e.priority,
        source=e.source,
        notes=e.notes,
        quotation_number=e.quotation_number,
        region=e.region,
        oa_number=e.oa_number,
        block_model=e.block_model,
        number_of_blocks=e.number_of_blocks,
        design_required=e.design_required,
        customer_type=e.customer_type,

        status=e.status,
        purchase_order_number=e.purchase_order_number,
        po_value=e.po_value,
        po_date=e.po_date,
        date_of_receipt=e.date_of_receipt,

        created_at=e.created_at,
        updated_at=e.updated_at,
    )


async def _get_enquiry_or_404(db: AsyncSession, enquiry_id: int) -> Enquiry:
    enquiry = await db.get(Enquiry, enquiry_id)
    if not enquiry:
        raise AppException(
            404,
            "Enquiry not found",
            ErrorCode.ENQUIRY_NOT_FOUND,
        )
    return enquiry


async def _resolve_location(
    db: AsyncSession,
    company_id: Optional[str],
    location_id: Optional[str],
) -> tuple[Optional[str], Optional[str]]:
    """location_id may name an office or a plant of the company."""
    if not location_id:
        return None, None

    office = await db.get(Office, location_id)
    if office and (company_id is None or office.company_id == company_id):
        return office.id, None

    plant = await db.get(Plant, location_id)
    if plant and (company_id is None or plant.company_id == company_id):
        return None, plant.id

    raise AppException(
        404,
        "Location not found for this company",
        ErrorCode.LOCATION_NOT_FOUND,
        details={"location_id": location_id},
    )


# =====================================================
# CREATE
# =====================================================
async def create_enquiry(
    db: AsyncSession,
    payload: EnquiryCreate,
    actor: str,
) -> EnquiryOut:
    if payload.company_id:
        company = await db.get(Company, payload.company_id)
        if not company:
            raise AppException(
                404,
                "Company not found",
                ErrorCode.COMPANY_NOT_FOUND,
            )

    office_id, plant_id = await _resolve_location(
        db, payload.company_id, payload.location_id
    )

    po_supplied = payload.supplied(include=PO_CREATE_FIELDS)
    status_sync_service.require_receipt_date(payload.status, po_supplied)

    fields = payload.supplied(
        exclude={"company_id", "location_id", "status", *PO_CREATE_FIELDS}
    )

    enquiry = Enquiry(
        **fields,
        **status_sync_service.po_field_values(payload.status, po_supplied),
        company_id=payload.company_id,
        office_id=office_id,
        plant_id=plant_id,
        status=payload.status,
    )
    db.add(enquiry)
    await db.flush()

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.CREATE_ENQUIRY,
        target_id=enquiry.id,
    )

    await db.commit()
    await db.refresh(enquiry)

    logger.info(
        "Enquiry created",
        extra={"enquiry_id": enquiry.id, "company_id": enquiry.company_id},
    )
    return _map_enquiry(enquiry)


# =====================================================
# GET / LIST / STATS
# =====================================================
async def get_enquiry(db: AsyncSession, enquiry_id: int) -> EnquiryOut:
    enquiry = await _get_enquiry_or_404(db, enquiry_id)
    return _map_enquiry(enquiry)


async def list_enquiries(
    db: AsyncSession,
    *,
    status: Optional[EnquiryStatus],
    company_id: Optional[str],
    search: Optional[str],
    page: int,
    page_size: int,
) -> EnquiryListData:
    base = (
        select(
            Enquiry.id,
            Enquiry.subject,
            Company.name.label("company_name"),
            Enquiry.status,
            Enquiry.priority,
            Enquiry.quotation_number,
            Enquiry.enquiry_date,
            Enquiry.created_at,
        )
        .outerjoin(Company, Company.id == Enquiry.company_id)
    )

    if status:
        base = base.where(Enquiry.status == status)
    if company_id:
        base = base.where(Enquiry.company_id == company_id)
    if search:
        base = base.where(Enquiry.subject.ilike(f"%{search}%"))

    total = await db.scalar(
        select(func.count()).select_from(base.subquery())
    )

    result = await db.execute(
        base.order_by(desc(Enquiry.created_at), desc(Enquiry.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return EnquiryListData(
        total=total or 0,
        items=[EnquiryListItem(**row._mapping) for row in result.all()],
    )


async def get_enquiry_stats(db: AsyncSession) -> EnquiryStats:
    result = await db.execute(
        select(Enquiry.status, func.count(Enquiry.id)).group_by(Enquiry.status)
    )
    counts = {status: count for status, count in result.all()}

    return EnquiryStats(
        total=sum(counts.values()),
        **{s.value.lower(): counts.get(s, 0) for s in EnquiryStatus},
    )


# =====================================================
# UPDATE (GENERAL EDIT)
# =====================================================
async def update_enquiry(
    db: AsyncSession,
    enquiry_id: int,
    payload: EnquiryUpdate,
    actor: str,
) -> EnquiryOut:
    enquiry = await _get_enquiry_or_404(db, enquiry_id)

    updates = payload.supplied()
    changes: list[str] = []

    for field, new_value in updates.items():
        old_value = getattr(enquiry, field)
        if old_value != new_value:
            setattr(enquiry, field, new_value)
            changes.append(f"{field}: {old_value} → {new_value}")

    if not changes:
        return _map_enquiry(enquiry)

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.UPDATE_ENQUIRY,
        target_id=enquiry.id,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(enquiry)

    logger.info(
        "Enquiry updated",
        extra={"enquiry_id": enquiry.id, "changes": len(changes)},
    )
    return _map_enquiry(enquiry)


# =====================================================
# STATUS
# =====================================================
async def change_enquiry_status(
    db: AsyncSession,
    enquiry_id: int,
    payload: EnquiryStatusUpdate,
    actor: str,
) -> EnquiryOut:
    enquiry = await status_sync_service.update_enquiry_status(
        db, enquiry_id, payload, actor
    )
    return _map_enquiry(enquiry)


# =====================================================
# DELETE
# =====================================================
async def delete_enquiry(
    db: AsyncSession,
    enquiry_id: int,
    actor: str,
) -> dict:
    """Hard delete: quotation items, quotations, communication links, enquiry."""
    enquiry = await _get_enquiry_or_404(db, enquiry_id)

    quotation_ids = select(Quotation.id).where(Quotation.enquiry_id == enquiry.id)

    try:
        await db.execute(
            delete(QuotationItem).where(QuotationItem.quotation_id.in_(quotation_ids))
        )
        removed = await db.execute(
            delete(Quotation).where(Quotation.enquiry_id == enquiry.id)
        )
        await db.execute(
            update(Communication)
            .where(Communication.enquiry_id == enquiry.id)
            .values(enquiry_id=None)
        )
        await db.execute(delete(Enquiry).where(Enquiry.id == enquiry.id))

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.DELETE_ENQUIRY,
            target_id=enquiry_id,
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Enquiry deleted",
        extra={"enquiry_id": enquiry_id, "quotations": removed.rowcount},
    )
    return {"id": enquiry_id, "quotations_deleted": removed.rowcount}
