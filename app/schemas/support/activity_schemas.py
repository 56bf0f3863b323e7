# app/schemas/support/activity_schemas.py

from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime
from fastapi import Query

from app.constants.activity_codes import ActivityCode


class ActivityFilters(BaseModel):
    actor: Optional[str] = Query(None, description="Substring of the actor name")
    code: Optional[ActivityCode] = Query(None)
    search: Optional[str] = Query(None, description="Substring of the rendered message")
    created_from: Optional[datetime] = Query(None)
    created_to: Optional[datetime] = Query(None)

    page: int = Query(1, ge=1)
    page_size: int = Query(20, ge=1, le=100)

    sort_by: str = Query("created_at")
    sort_order: Literal["asc", "desc"] = Query("desc")


class ActivityOut(BaseModel):
    id: int
    actor_snapshot: str
    code: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityListData(BaseModel):
    total: int
    page: int
    page_size: int
    items: List[ActivityOut]
