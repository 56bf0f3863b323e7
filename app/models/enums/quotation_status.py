# app/models/enums/quotation_status.py
import enum


class QuotationStatus(str, enum.Enum):
    LIVE = "LIVE"
    WON = "WON"
    LOST = "LOST"
    BUDGETARY = "BUDGETARY"
    DEAD = "DEAD"
    RECEIVED = "RECEIVED"
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"


class LostReason(str, enum.Enum):
    PRICE = "PRICE"
    DELIVERY_SCHEDULE = "DELIVERY_SCHEDULE"
    LACK_OF_CONFIDENCE = "LACK_OF_CONFIDENCE"
    OTHER = "OTHER"
