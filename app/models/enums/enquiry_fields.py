# app/models/enums/enquiry_fields.py
import enum


class EnquiryPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class EnquirySource(str, enum.Enum):
    WEBSITE = "Website"
    EMAIL = "Email"
    PHONE = "Phone"
    REFERRAL = "Referral"
    TRADE_SHOW = "Trade Show"
    SOCIAL_MEDIA = "Social Media"
    VISIT = "Visit"


class DesignRequired(str, enum.Enum):
    STANDARD = "Standard"
    CUSTOM = "Custom"
    MODIFIED = "Modified"
    NONE = "None"


class CustomerType(str, enum.Enum):
    NEW = "NEW"
    OLD = "OLD"
