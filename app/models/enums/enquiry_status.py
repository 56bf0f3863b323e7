# app/models/enums/enquiry_status.py
import enum


class EnquiryStatus(str, enum.Enum):
    LIVE = "LIVE"
    BUDGETARY = "BUDGETARY"
    RCD = "RCD"
    WON = "WON"
    LOST = "LOST"
    DEAD = "DEAD"
