# CRM
from app.models.crm.company_models import Company, Office, Plant, ContactPerson
from app.models.crm.enquiry_models import Enquiry
from app.models.crm.quotation_models import Quotation, QuotationItem
from app.models.crm.communication_models import Communication

# Support
from app.models.support.activity_models import ActivityLog
