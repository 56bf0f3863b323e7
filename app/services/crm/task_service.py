# app/services/crm/task_service.py

from datetime import date, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, asc

from app.models.crm.company_models import Company
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.quotation_models import Quotation
from app.models.crm.communication_models import Communication
from app.models.enums.quotation_status import QuotationStatus
from app.models.enums.communication_type import CommunicationType
from app.schemas.crm.task_schemas import TaskOut, TaskType, TaskPriority

CLOSED_QUOTATION_STATUSES = (QuotationStatus.WON, QuotationStatus.LOST)

COMMUNICATION_LABELS = {
    CommunicationType.TELEPHONIC: "Phone Call",
    CommunicationType.VIRTUAL_MEETING: "Video Call",
    CommunicationType.EMAIL: "Email",
    CommunicationType.PLANT_VISIT: "Plant Visit",
    CommunicationType.OFFICE_VISIT: "Office Visit",
}

SOON = timedelta(days=7)


def _quotation_priority(status: QuotationStatus) -> TaskPriority:
    if status == QuotationStatus.DRAFT:
        return TaskPriority.HIGH
    if status == QuotationStatus.RECEIVED:
        return TaskPriority.LOW
    return TaskPriority.MEDIUM


def _follow_up_state(due: date, today: date) -> tuple[str, TaskPriority]:
    if due < today:
        return "OVERDUE", TaskPriority.HIGH
    if due == today:
        return "DUE_TODAY", TaskPriority.HIGH
    if due - today <= SOON:
        return "SCHEDULED", TaskPriority.MEDIUM
    return "SCHEDULED", TaskPriority.LOW


async def _quotation_tasks(db: AsyncSession) -> list[TaskOut]:
    result = await db.execute(
        select(
            Quotation.id,
            Quotation.quotation_number,
            Quotation.status,
            Quotation.quotation_date,
            Quotation.created_at,
            Company.name,
        )
        .join(Enquiry, Enquiry.id == Quotation.enquiry_id)
        .outerjoin(Company, Company.id == Enquiry.company_id)
        .where(Quotation.status.not_in(CLOSED_QUOTATION_STATUSES))
        .order_by(desc(Quotation.created_at))
    )

    return [
        TaskOut(
            id=q_id,
            type=TaskType.QUOTATION,
            due_date=quotation_date or created_at.date(),
            customer_name=company_name,
            description=f"Quotation #{number}",
            status=status.value,
            priority=_quotation_priority(status),
            link=f"/quotations/{q_id}",
        )
        for q_id, number, status, quotation_date, created_at, company_name in result.all()
    ]


async def _communication_tasks(db: AsyncSession, today: date) -> list[TaskOut]:
    result = await db.execute(
        select(Communication)
        .where(Communication.next_communication_date.is_not(None))
        .order_by(asc(Communication.next_communication_date))
    )

    tasks = []
    for c in result.scalars().all():
        label = COMMUNICATION_LABELS.get(c.type, c.type.value)
        with_contact = f" with {c.contact.name}" if c.contact else ""
        status, priority = _follow_up_state(c.next_communication_date, today)
        tasks.append(TaskOut(
            id=c.id,
            type=TaskType.COMMUNICATION,
            due_date=c.next_communication_date,
            customer_name=c.company.name if c.company else None,
            description=f"{label}{with_contact} - {c.proposed_next_action or c.subject}",
            status=status,
            priority=priority,
            link=f"/communications/{c.id}",
        ))
    return tasks


async def get_upcoming_tasks(
    db: AsyncSession,
    *,
    type: Optional[TaskType] = None,
    today: Optional[date] = None,
) -> list[TaskOut]:
    """
    Open quotations and scheduled follow-ups as one list, earliest due first.

    Quotations are due on their quotation date. Follow-ups include overdue
    ones, flagged OVERDUE, so nothing scheduled drops off the list.
    """
    today = today or date.today()

    tasks: list[TaskOut] = []
    if type in (None, TaskType.QUOTATION):
        tasks += await _quotation_tasks(db)
    if type in (None, TaskType.COMMUNICATION):
        tasks += await _communication_tasks(db, today)

    tasks.sort(key=lambda t: t.due_date)
    return tasks
