from sqlalchemy.ext.asyncio import AsyncSession

from app.models.support.activity_models import ActivityLog
from app.constants.activity_templates import ACTIVITY_TEMPLATES
from app.constants.activity_codes import ActivityCode
from app.utils.logger import get_logger

logger = get_logger(__name__)


def render_activity(code: ActivityCode, actor: str, **context) -> str:
    template = ACTIVITY_TEMPLATES.get(code)
    if template is None:
        raise ValueError(f"No activity template for {code}")
    try:
        return template.format(actor=actor, **context)
    except KeyError as e:
        raise ValueError(f"Activity {code} is missing context key {e.args[0]!r}")


async def emit_activity(
    db: AsyncSession,
    *,
    actor: str,
    code: ActivityCode,
    **context,
) -> ActivityLog:
    """
    Stage an audit row on the caller's session.

    Nothing is committed here: the row lands or disappears together with the
    change it describes.
    """
    entry = ActivityLog(
        actor_snapshot=actor,
        code=code.value,
        message=render_activity(code, actor, **context),
    )
    db.add(entry)
    logger.debug("Activity staged", extra={"code": code.value, "actor": actor})
    return entry
