# app/services/crm/quotation_service.py

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, desc
from sqlalchemy.exc import IntegrityError

from app.models.crm.company_models import Company
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.quotation_models import Quotation, QuotationItem
from app.models.enums.quotation_status import QuotationStatus
from app.schemas.crm.quotation_schemas import (
    QuotationCreate,
    QuotationUpdate,
    QuotationStatusUpdate,
    QuotationOut,
    QuotationItemOut,
    QuotationListItem,
    QuotationListData,
    QuotationStats,
    QuotationNumberCheckOut,
)
from app.services.crm import status_sync_service

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity
from app.utils.decimal_utils import line_total, quotation_totals
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Statuses counted as an open pipeline value
ACTIVE_STATUSES = (
    QuotationStatus.LIVE,
    QuotationStatus.BUDGETARY,
    QuotationStatus.DRAFT,
    QuotationStatus.SUBMITTED,
    QuotationStatus.PENDING,
)


def generate_quotation_number(now: Optional[datetime] = None) -> str:
    """Q + year + month + last six digits of the millisecond timestamp."""
    now = now or datetime.now(timezone.utc)
    millis = str(int(now.timestamp() * 1000))
    return f"Q{now:%Y%m}{millis[-6:]}"


def _map_quotation(q: Quotation) -> QuotationOut:
    enquiry = q.enquiry
    company = enquiry.company if enquiry else None

    return QuotationOut(
        id=q.id,
        quotation_number=q.quotation_number,
        revision_number=q.revision_number,
        quotation_date=q.quotation_date,

        enquiry_id=q.enquiry_id,
        enquiry_subject=enquiry.subject if enquiry else None,
        enquiry_status=enquiry.status.value if enquiry else None,
        company_name=company.name if company else None,

        validity_period=q.validity_period,
        payment_terms=q.payment_terms,
        delivery_schedule=q.delivery_schedule,
        special_instructions=q.special_instructions,
        incoterms=q.incoterms,
        currency=q.currency,

        transport_costs=q.transport_costs,
        gst=q.gst,
        packing_forwarding_percentage=q.packing_forwarding_percentage,
        subtotal=q.subtotal,
        tax=q.tax,
        total_value=q.total_value,

        status=q.status,
        lost_reason=q.lost_reason,
        purchase_order_number=q.purchase_order_number,
        po_value=q.po_value,
        po_date=q.po_date,
        date_of_receipt=q.date_of_receipt,

        created_at=q.created_at,
        updated_at=q.updated_at,

        items=[QuotationItemOut.model_validate(i) for i in q.items],
    )


async def _load_quotation(db: AsyncSession, quotation_id: str) -> Quotation:
    result = await db.execute(
        select(Quotation)
        .where(Quotation.id == quotation_id)
        .execution_options(populate_existing=True)
    )
    quotation = result.scalar_one_or_none()
    if not quotation:
        raise AppException(
            404,
            "Quotation not found",
            ErrorCode.QUOTATION_NOT_FOUND,
        )
    return quotation


async def _get_enquiry_or_404(db: AsyncSession, enquiry_id: int) -> Enquiry:
    enquiry = await db.get(Enquiry, enquiry_id)
    if not enquiry:
        raise AppException(
            404,
            "Enquiry not found",
            ErrorCode.ENQUIRY_NOT_FOUND,
        )
    return enquiry


async def _ensure_number_free(
    db: AsyncSession,
    quotation_number: str,
    exclude_id: Optional[str] = None,
) -> None:
    query = select(Quotation.id).where(Quotation.quotation_number == quotation_number)
    if exclude_id:
        query = query.where(Quotation.id != exclude_id)

    if await db.scalar(query):
        raise AppException(
            409,
            f"Quotation number {quotation_number} already exists",
            ErrorCode.QUOTATION_NUMBER_EXISTS,
            details={"quotation_number": quotation_number},
        )


def _build_items(payload: QuotationCreate) -> list[QuotationItem]:
    return [
        QuotationItem(
            material_description=i.material_description,
            specifications=i.specifications,
            quantity=i.quantity,
            price_per_unit=i.price_per_unit,
            total=line_total(i.quantity, i.price_per_unit),
        )
        for i in payload.items
    ]


def _commercial_fields(payload: QuotationCreate) -> dict:
    fields = payload.model_dump(
        exclude={"enquiry_id", "quotation_number", "items"},
    )
    # Undated quotations are dated the day they are saved
    if fields["quotation_date"] is None:
        fields["quotation_date"] = date.today()
    return fields


# =====================================================
# CREATE
# =====================================================
async def create_quotation(
    db: AsyncSession,
    payload: QuotationCreate,
    actor: str,
) -> QuotationOut:
    """
    Create a quotation with its items for an existing enquiry.

    Number precedence: payload, then the enquiry's quotation number, then a
    generated one.
    """
    enquiry = await _get_enquiry_or_404(db, payload.enquiry_id)

    quotation_number = (
        payload.quotation_number
        or enquiry.quotation_number
        or generate_quotation_number()
    )
    await _ensure_number_free(db, quotation_number)

    subtotal, tax, total_value = quotation_totals(
        (i.quantity, i.price_per_unit) for i in payload.items
    )

    quotation = Quotation(
        **_commercial_fields(payload),
        enquiry_id=enquiry.id,
        quotation_number=quotation_number,
        status=QuotationStatus.LIVE,
        subtotal=subtotal,
        tax=tax,
        total_value=total_value,
        items=_build_items(payload),
    )

    try:
        db.add(quotation)
        await db.flush()

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.CREATE_QUOTATION,
            target_name=quotation.quotation_number,
        )

        await db.commit()

    except IntegrityError:
        await db.rollback()
        raise AppException(
            409,
            f"Quotation number {quotation_number} already exists",
            ErrorCode.QUOTATION_NUMBER_EXISTS,
        )

    logger.info(
        "Quotation created",
        extra={
            "quotation_id": quotation.id,
            "enquiry_id": enquiry.id,
            "items": len(payload.items),
        },
    )
    return _map_quotation(await _load_quotation(db, quotation.id))


# =====================================================
# GET / LIST / STATS
# =====================================================
async def get_quotation(db: AsyncSession, quotation_id: str) -> QuotationOut:
    return _map_quotation(await _load_quotation(db, quotation_id))


async def list_quotations(
    db: AsyncSession,
    *,
    status: Optional[QuotationStatus],
    enquiry_id: Optional[int],
    page: int,
    page_size: int,
) -> QuotationListData:
    items_count = (
        select(func.count(QuotationItem.id))
        .where(QuotationItem.quotation_id == Quotation.id)
        .correlate(Quotation)
        .scalar_subquery()
    )

    base = (
        select(
            Quotation.id,
            Quotation.quotation_number,
            Quotation.enquiry_id,
            Company.name.label("company_name"),
            Quotation.status,
            items_count.label("items_count"),
            Quotation.total_value,
            Quotation.quotation_date,
            Quotation.created_at,
        )
        .join(Enquiry, Enquiry.id == Quotation.enquiry_id)
        .outerjoin(Company, Company.id == Enquiry.company_id)
    )

    if status:
        base = base.where(Quotation.status == status)
    if enquiry_id:
        base = base.where(Quotation.enquiry_id == enquiry_id)

    total = await db.scalar(
        select(func.count()).select_from(base.subquery())
    )

    result = await db.execute(
        base.order_by(desc(Quotation.created_at), desc(Quotation.quotation_number))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return QuotationListData(
        total=total or 0,
        items=[QuotationListItem(**row._mapping) for row in result.all()],
    )


async def get_quotation_stats(db: AsyncSession) -> QuotationStats:
    result = await db.execute(
        select(
            Quotation.status,
            func.count(Quotation.id),
            func.coalesce(func.sum(Quotation.total_value), 0),
        ).group_by(Quotation.status)
    )
    rows = result.all()
    counts = {status: count for status, count, _ in rows}
    values = {status: Decimal(str(value)) for status, _, value in rows}

    return QuotationStats(
        total=sum(counts.values()),
        live=counts.get(QuotationStatus.LIVE, 0),
        won=counts.get(QuotationStatus.WON, 0),
        lost=counts.get(QuotationStatus.LOST, 0),
        budgetary=counts.get(QuotationStatus.BUDGETARY, 0),
        dead=counts.get(QuotationStatus.DEAD, 0),
        received=counts.get(QuotationStatus.RECEIVED, 0),
        live_total_value=values.get(QuotationStatus.LIVE, Decimal("0")),
        active_total_value=sum(
            (values.get(s, Decimal("0")) for s in ACTIVE_STATUSES),
            Decimal("0"),
        ),
    )


async def check_quotation_number(
    db: AsyncSession,
    quotation_number: str,
) -> QuotationNumberCheckOut:
    exists = await db.scalar(
        select(Quotation.id).where(Quotation.quotation_number == quotation_number)
    )
    return QuotationNumberCheckOut(
        exists=exists is not None,
        quotation_number=quotation_number,
    )


# =====================================================
# UPDATE (FULL EDIT)
# =====================================================
async def update_quotation(
    db: AsyncSession,
    quotation_id: str,
    payload: QuotationUpdate,
    actor: str,
) -> QuotationOut:
    """Replace commercial fields and items. Status is not touched here."""
    quotation = await _load_quotation(db, quotation_id)
    enquiry = await _get_enquiry_or_404(db, payload.enquiry_id)

    quotation_number = (
        payload.quotation_number
        or enquiry.quotation_number
        or quotation.quotation_number
    )
    await _ensure_number_free(db, quotation_number, exclude_id=quotation.id)

    subtotal, tax, total_value = quotation_totals(
        (i.quantity, i.price_per_unit) for i in payload.items
    )

    try:
        await db.execute(
            delete(QuotationItem).where(QuotationItem.quotation_id == quotation.id)
        )

        for field, value in _commercial_fields(payload).items():
            setattr(quotation, field, value)

        quotation.enquiry_id = enquiry.id
        quotation.quotation_number = quotation_number
        quotation.subtotal = subtotal
        quotation.tax = tax
        quotation.total_value = total_value

        items = _build_items(payload)
        for item in items:
            item.quotation_id = quotation.id
        db.add_all(items)
        await db.flush()

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.UPDATE_QUOTATION,
            target_name=quotation.quotation_number,
        )

        await db.commit()

    except IntegrityError:
        await db.rollback()
        raise AppException(
            409,
            f"Quotation number {quotation_number} already exists",
            ErrorCode.QUOTATION_NUMBER_EXISTS,
        )

    logger.info(
        "Quotation updated",
        extra={"quotation_id": quotation.id, "items": len(payload.items)},
    )
    return _map_quotation(await _load_quotation(db, quotation.id))


# =====================================================
# STATUS
# =====================================================
async def change_quotation_status(
    db: AsyncSession,
    quotation_id: str,
    payload: QuotationStatusUpdate,
    actor: str,
) -> QuotationOut:
    quotation = await status_sync_service.update_quotation_status(
        db, quotation_id, payload, actor
    )
    return _map_quotation(quotation)


# =====================================================
# DELETE
# =====================================================
async def delete_quotation(
    db: AsyncSession,
    quotation_id: str,
    actor: str,
) -> dict:
    """Hard delete: items first, then the quotation."""
    quotation = await _load_quotation(db, quotation_id)
    quotation_number = quotation.quotation_number

    try:
        await db.execute(
            delete(QuotationItem).where(QuotationItem.quotation_id == quotation_id)
        )
        await db.execute(delete(Quotation).where(Quotation.id == quotation_id))

        await emit_activity(
            db=db,
            actor=actor,
            code=ActivityCode.DELETE_QUOTATION,
            target_name=quotation_number,
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Quotation deleted",
        extra={"quotation_id": quotation_id, "quotation_number": quotation_number},
    )
    return {"id": quotation_id, "quotation_number": quotation_number}
