# app/services/crm/status_sync_service.py

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from app.models.crm.enquiry_models import Enquiry
from app.models.crm.quotation_models import Quotation
from app.models.enums.enquiry_status import EnquiryStatus
from app.models.enums.quotation_status import QuotationStatus
from app.schemas.crm.enquiry_schemas import EnquiryStatusUpdate
from app.schemas.crm.quotation_schemas import QuotationStatusUpdate

from app.core.exceptions import AppException, field_error
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity
from app.utils.logger import get_logger

logger = get_logger("crm.status_sync")


# =====================================================
# STATUS MAPPING
# =====================================================

ENQUIRY_TO_QUOTATION = {
    EnquiryStatus.LIVE: QuotationStatus.LIVE,
    EnquiryStatus.BUDGETARY: QuotationStatus.BUDGETARY,
    EnquiryStatus.RCD: QuotationStatus.RECEIVED,
    EnquiryStatus.WON: QuotationStatus.WON,
    EnquiryStatus.LOST: QuotationStatus.LOST,
    EnquiryStatus.DEAD: QuotationStatus.DEAD,
}

# DRAFT / SUBMITTED / PENDING have no enquiry counterpart
QUOTATION_TO_ENQUIRY = {
    QuotationStatus.LIVE: EnquiryStatus.LIVE,
    QuotationStatus.BUDGETARY: EnquiryStatus.BUDGETARY,
    QuotationStatus.RECEIVED: EnquiryStatus.RCD,
    QuotationStatus.WON: EnquiryStatus.WON,
    QuotationStatus.LOST: EnquiryStatus.LOST,
    QuotationStatus.DEAD: EnquiryStatus.DEAD,
}

PO_FIELDS = ("purchase_order_number", "po_value", "po_date")

# Statuses under which purchase-order data is kept
PO_STATUSES = {
    EnquiryStatus.WON,
    EnquiryStatus.RCD,
    QuotationStatus.WON,
    QuotationStatus.RECEIVED,
}

RECEIPT_STATUSES = {EnquiryStatus.RCD, QuotationStatus.RECEIVED}


def to_quotation_status(status: EnquiryStatus) -> QuotationStatus:
    return ENQUIRY_TO_QUOTATION[status]


def to_enquiry_status(status: QuotationStatus) -> Optional[EnquiryStatus]:
    return QUOTATION_TO_ENQUIRY.get(status)


def po_field_values(status, supplied: dict) -> dict:
    """
    Purchase-order columns to write for a status.

    WON / RCD / RECEIVED: supplied values are kept, anything not supplied
    becomes null. Every other status clears them all.
    """
    if status not in PO_STATUSES:
        return {**{f: None for f in PO_FIELDS}, "date_of_receipt": None}

    values = {f: supplied.get(f) for f in PO_FIELDS}
    values["date_of_receipt"] = supplied.get("date_of_receipt")
    return values


def require_receipt_date(status, supplied: dict) -> None:
    if status in RECEIPT_STATUSES and supplied.get("date_of_receipt") is None:
        raise field_error(
            "date_of_receipt",
            f"date_of_receipt is required when status is {status.value}",
        )


def _collect_changes(entity, values: dict) -> list[str]:
    changes: list[str] = []
    for field, new_value in values.items():
        old_value = getattr(entity, field)
        if old_value != new_value:
            changes.append(f"{field}: {old_value} → {new_value}")
    return changes


async def _get_enquiry_for_propagation(
    db: AsyncSession,
    enquiry_id: int,
) -> Optional[Enquiry]:
    return await db.get(Enquiry, enquiry_id)


# =====================================================
# ENQUIRY -> QUOTATIONS
# =====================================================
async def update_enquiry_status(
    db: AsyncSession,
    enquiry_id: int,
    payload: EnquiryStatusUpdate,
    actor: str,
) -> Enquiry:
    """
    Change an enquiry's status and push the mapped status to every
    quotation of that enquiry, unconditionally.

    Primary write, propagation and audit row commit together.
    """
    enquiry = await db.get(Enquiry, enquiry_id)
    if not enquiry:
        raise AppException(
            404,
            "Enquiry not found",
            ErrorCode.ENQUIRY_NOT_FOUND,
        )

    supplied = payload.supplied(exclude={"status"})
    new_status = payload.status
    require_receipt_date(new_status, supplied)

    values = {"status": new_status, **po_field_values(new_status, supplied)}
    if new_status == EnquiryStatus.RCD and supplied.get("receipt_number") is not None:
        values["oa_number"] = supplied["receipt_number"]

    old_status = enquiry.status
    changes = _collect_changes(enquiry, values)

    quotation_status = to_quotation_status(new_status)
    quotation_values = {
        "status": quotation_status,
        **po_field_values(quotation_status, supplied),
    }
    if quotation_status != QuotationStatus.LOST:
        quotation_values["lost_reason"] = None

    try:
        for field, value in values.items():
            setattr(enquiry, field, value)
        await db.flush()

        result = await db.execute(
            update(Quotation)
            .where(Quotation.enquiry_id == enquiry.id)
            .values(**quotation_values)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount:
            propagation = f"{result.rowcount} quotation(s) → {quotation_status.value}"
            logger.info(
                "Enquiry status propagated to quotations",
                extra={
                    "enquiry_id": enquiry.id,
                    "quotation_status": quotation_status.value,
                    "quotations": result.rowcount,
                },
            )
        else:
            propagation = "no quotations"
            logger.info(
                "Enquiry has no quotations, propagation skipped",
                extra={"enquiry_id": enquiry.id},
            )

        if changes:
            await emit_activity(
                db=db,
                actor=actor,
                code=ActivityCode.UPDATE_ENQUIRY_STATUS,
                target_id=enquiry.id,
                old_status=getattr(old_status, "value", old_status),
                new_status=new_status.value,
                propagation=propagation,
            )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    await db.refresh(enquiry)
    return enquiry


# =====================================================
# QUOTATION -> ENQUIRY
# =====================================================
async def update_quotation_status(
    db: AsyncSession,
    quotation_id: str,
    payload: QuotationStatusUpdate,
    actor: str,
) -> Quotation:
    """
    Change a quotation's status and push the mapped status to its enquiry.

    An enquiry already in RCD is never overwritten. The RCD check is part
    of the UPDATE itself, so an enquiry that turned RCD after it was read
    here is still left alone.
    """
    quotation = await db.get(Quotation, quotation_id)
    if not quotation:
        raise AppException(
            404,
            "Quotation not found",
            ErrorCode.QUOTATION_NOT_FOUND,
        )

    supplied = payload.supplied(exclude={"status", "lost_reason"})
    new_status = payload.status
    require_receipt_date(new_status, supplied)

    values = {
        "status": new_status,
        "lost_reason": payload.lost_reason if new_status == QuotationStatus.LOST else None,
        **po_field_values(new_status, supplied),
    }

    old_status = quotation.status
    changes = _collect_changes(quotation, values)

    # Read before any write: nothing is locked until the first flush
    enquiry_status = to_enquiry_status(new_status)
    enquiry = None
    if enquiry_status is not None:
        enquiry = await _get_enquiry_for_propagation(db, quotation.enquiry_id)

    try:
        for field, value in values.items():
            setattr(quotation, field, value)
        await db.flush()

        if enquiry_status is None:
            propagation = f"{new_status.value} not propagated"
            logger.info(
                "Quotation status has no enquiry counterpart, propagation skipped",
                extra={
                    "quotation_id": quotation.id,
                    "quotation_status": new_status.value,
                },
            )

        elif enquiry is None:
            propagation = "enquiry missing"
            logger.warning(
                "Enquiry not found, propagation skipped",
                extra={
                    "quotation_id": quotation.id,
                    "enquiry_id": quotation.enquiry_id,
                },
            )

        else:
            result = await db.execute(
                update(Enquiry)
                .where(
                    Enquiry.id == quotation.enquiry_id,
                    Enquiry.status != EnquiryStatus.RCD,
                )
                .values(
                    status=enquiry_status,
                    **po_field_values(enquiry_status, supplied),
                )
                .execution_options(synchronize_session=False)
            )

            if result.rowcount:
                propagation = f"enquiry → {enquiry_status.value}"
                logger.info(
                    "Quotation status propagated to enquiry",
                    extra={
                        "quotation_id": quotation.id,
                        "enquiry_id": quotation.enquiry_id,
                        "enquiry_status": enquiry_status.value,
                    },
                )
            else:
                propagation = "enquiry kept RCD"
                logger.info(
                    "Enquiry is RCD, propagation suppressed",
                    extra={
                        "quotation_id": quotation.id,
                        "enquiry_id": quotation.enquiry_id,
                    },
                )

        if changes:
            await emit_activity(
                db=db,
                actor=actor,
                code=ActivityCode.UPDATE_QUOTATION_STATUS,
                target_name=quotation.quotation_number,
                old_status=getattr(old_status, "value", old_status),
                new_status=new_status.value,
                propagation=propagation,
            )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    await db.refresh(quotation)
    if enquiry is not None:
        await db.refresh(enquiry)
    return quotation
