# app/routers/__init__.py

from .crm.company_router import router as company_router
from .crm.enquiry_router import router as enquiry_router
from .crm.quotation_router import router as quotation_router
from .crm.communication_router import router as communication_router
from .crm.dashboard_router import router as dashboard_router
from .crm.task_router import router as task_router

from .support.activity_router import router as activity_router


__all__ = [
"company_router",
"enquiry_router",
"quotation_router",
"communication_router",
"dashboard_router",
"task_router",

"activity_router",
]
