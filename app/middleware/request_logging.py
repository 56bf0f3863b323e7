import time
import logging
from fastapi import Request

from app.utils.get_actor import SYSTEM_ACTOR

logger = logging.getLogger("access")

# Health checks and the keep-alive ping would drown the access log
QUIET_PATHS = {"/"}


async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers["X-Process-Time-Ms"] = str(elapsed_ms)

    if request.url.path in QUIET_PATHS and response.status_code < 400:
        return response

    logger.info(
        "",
        extra={
            "client_addr": request.client.host if request.client else "unknown",
            "actor": getattr(request.state, "actor", SYSTEM_ACTOR),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
        },
    )

    return response
