from typing import Optional

from fastapi import Header, Request

SYSTEM_ACTOR = "system"


async def get_actor(
    request: Request,
    x_actor: Optional[str] = Header(None),
) -> str:
    """Name recorded in the activity log for the current request."""
    actor = (x_actor or "").strip() or SYSTEM_ACTOR
    request.state.actor = actor
    return actor
