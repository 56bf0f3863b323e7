from typing import Optional

from fastapi import Query, Request

from app.core.exceptions import field_error
from app.schemas.common.normalizers import ensure_uuid, is_blank


def _checked(value: str, name: str) -> str:
    try:
        return ensure_uuid(value, name)
    except ValueError as e:
        raise field_error(name, str(e))


def uuid_path(name: str):
    """Path segment `{name}`, rejected with a 422 naming it unless it is a UUID."""

    async def dependency(request: Request) -> str:
        return _checked(request.path_params[name], name)

    return dependency


def uuid_query(name: str):
    """Optional query filter `name`. Blank means no filter."""

    async def dependency(value: Optional[str] = Query(None, alias=name)) -> Optional[str]:
        if value is None or is_blank(value):
            return None
        return _checked(value, name)

    return dependency
