from enum import Enum
from typing import Optional
from datetime import date

from pydantic import BaseModel


class TaskType(str, Enum):
    QUOTATION = "QUOTATION"
    COMMUNICATION = "COMMUNICATION"


class TaskPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskOut(BaseModel):
    id: str
    type: TaskType
    due_date: date
    customer_name: Optional[str]
    description: str
    status: str
    priority: TaskPriority
    link: str
