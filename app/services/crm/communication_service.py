# app/services/crm/communication_service.py

from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, desc, asc

from app.models.crm.company_models import Company, ContactPerson
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.communication_models import Communication
from app.models.enums.communication_type import CommunicationType
from app.schemas.crm.communication_schemas import (
    CommunicationCreate,
    CommunicationUpdate,
    CommunicationOut,
    CommunicationListData,
    CommunicationReschedule,
)

from app.core.exceptions import AppException, field_error
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _map_communication(c: Communication) -> CommunicationOut:
    return CommunicationOut(
        id=c.id,
        date=c.date,
        company_id=c.company_id,
        company_name=c.company.name if c.company else None,
        contact_id=c.contact_id,
        contact_name=c.contact.name if c.contact else None,
        enquiry_id=c.enquiry_id,
        subject=c.subject,
        description=c.description,
        type=c.type,
        next_communication_date=c.next_communication_date,
        proposed_next_action=c.proposed_next_action,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


async def _load_communication(db: AsyncSession, communication_id: str) -> Communication:
    result = await db.execute(
        select(Communication)
        .where(Communication.id == communication_id)
        .execution_options(populate_existing=True)
    )
    communication = result.scalar_one_or_none()
    if not communication:
        raise AppException(
            404,
            "Communication not found",
            ErrorCode.COMMUNICATION_NOT_FOUND,
        )
    return communication


async def _check_references(
    db: AsyncSession,
    company_id: str,
    contact_id: Optional[str],
    enquiry_id: Optional[int],
) -> None:
    if contact_id is not None:
        contact = await db.get(ContactPerson, contact_id)
        if not contact or contact.company_id != company_id:
            raise AppException(
                404,
                "Contact not found for this company",
                ErrorCode.CONTACT_NOT_FOUND,
                details={"contact_id": contact_id},
            )

    if enquiry_id is not None:
        enquiry = await db.get(Enquiry, enquiry_id)
        if not enquiry:
            raise AppException(
                404,
                "Enquiry not found",
                ErrorCode.ENQUIRY_NOT_FOUND,
                details={"enquiry_id": enquiry_id},
            )


# =====================================================
# CREATE
# =====================================================
async def create_communication(
    db: AsyncSession,
    payload: CommunicationCreate,
    actor: str,
) -> CommunicationOut:
    company = await db.get(Company, payload.company_id)
    if not company:
        raise AppException(
            404,
            "Company not found",
            ErrorCode.COMPANY_NOT_FOUND,
        )

    await _check_references(db, company.id, payload.contact_id, payload.enquiry_id)

    communication = Communication(**payload.model_dump())
    db.add(communication)
    await db.flush()

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.CREATE_COMMUNICATION,
        target_name=communication.subject,
        comm_type=communication.type.value,
    )

    await db.commit()

    logger.info(
        "Communication logged",
        extra={"communication_id": communication.id, "company_id": company.id},
    )
    return _map_communication(await _load_communication(db, communication.id))


# =====================================================
# GET / LIST
# =====================================================
async def get_communication(db: AsyncSession, communication_id: str) -> CommunicationOut:
    return _map_communication(await _load_communication(db, communication_id))


async def list_communications(
    db: AsyncSession,
    *,
    company_id: Optional[str],
    type: Optional[CommunicationType],
    enquiry_id: Optional[int],
    page: int,
    page_size: int,
) -> CommunicationListData:
    base = select(Communication)

    if company_id:
        base = base.where(Communication.company_id == company_id)
    if type:
        base = base.where(Communication.type == type)
    if enquiry_id:
        base = base.where(Communication.enquiry_id == enquiry_id)

    total = await db.scalar(
        select(func.count()).select_from(base.subquery())
    )

    result = await db.execute(
        base.order_by(desc(Communication.date), desc(Communication.created_at))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return CommunicationListData(
        total=total or 0,
        items=[_map_communication(c) for c in result.scalars().all()],
    )


async def list_upcoming(
    db: AsyncSession,
    *,
    limit: int,
    today: Optional[date] = None,
) -> list[CommunicationOut]:
    """Follow-ups due today or later, soonest first."""
    today = today or date.today()

    result = await db.execute(
        select(Communication)
        .where(Communication.next_communication_date >= today)
        .order_by(asc(Communication.next_communication_date))
        .limit(limit)
    )
    return [_map_communication(c) for c in result.scalars().all()]


# =====================================================
# UPDATE
# =====================================================
async def update_communication(
    db: AsyncSession,
    communication_id: str,
    payload: CommunicationUpdate,
    actor: str,
) -> CommunicationOut:
    communication = await _load_communication(db, communication_id)
    updates = payload.supplied()

    for required in ("date", "subject", "type"):
        if required in updates and updates[required] is None:
            raise AppException(
                422,
                "Invalid request data",
                ErrorCode.VALIDATION_ERROR,
                details=[{"field": required, "message": f"{required} cannot be cleared"}],
            )

    await _check_references(
        db,
        communication.company_id,
        updates.get("contact_id"),
        updates.get("enquiry_id"),
    )

    changed = False
    for field, new_value in updates.items():
        if getattr(communication, field) != new_value:
            setattr(communication, field, new_value)
            changed = True

    if not changed:
        return _map_communication(communication)

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.UPDATE_COMMUNICATION,
        target_name=communication.subject,
    )

    await db.commit()

    return _map_communication(await _load_communication(db, communication.id))


# =====================================================
# RESCHEDULE
# =====================================================
async def reschedule_communication(
    db: AsyncSession,
    communication_id: str,
    payload: CommunicationReschedule,
    actor: str,
    today: Optional[date] = None,
) -> CommunicationOut:
    """
    Move the follow-up to a new date. A reason, when given, is appended
    to the description together with the new date.
    """
    today = today or date.today()
    if payload.next_communication_date < today:
        raise field_error("next_communication_date", "cannot reschedule into the past")

    communication = await _load_communication(db, communication_id)
    old_date = communication.next_communication_date

    communication.next_communication_date = payload.next_communication_date
    if payload.reason:
        note = f"{payload.reason}\n\nRescheduled to {payload.next_communication_date.isoformat()}"
        communication.description = (
            f"{communication.description}\n\n{note}" if communication.description else note
        )

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.RESCHEDULE_COMMUNICATION,
        target_name=communication.subject,
        old_date=old_date.isoformat() if old_date else "unscheduled",
        new_date=payload.next_communication_date.isoformat(),
    )

    await db.commit()

    logger.info(
        "Communication rescheduled",
        extra={"communication_id": communication.id, "next_date": str(payload.next_communication_date)},
    )
    return _map_communication(await _load_communication(db, communication.id))


# =====================================================
# DELETE
# =====================================================
async def delete_communication(
    db: AsyncSession,
    communication_id: str,
    actor: str,
) -> dict:
    communication = await _load_communication(db, communication_id)
    subject = communication.subject

    await db.execute(delete(Communication).where(Communication.id == communication_id))

    await emit_activity(
        db=db,
        actor=actor,
        code=ActivityCode.DELETE_COMMUNICATION,
        target_name=subject,
    )

    await db.commit()

    logger.info("Communication deleted", extra={"communication_id": communication_id})
    return {"id": communication_id, "subject": subject}
