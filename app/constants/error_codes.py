# app/constants/error_codes.py
from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- COMPANIES ----------------
    COMPANY_NOT_FOUND = "COMPANY_NOT_FOUND"
    COMPANY_NAME_EXISTS = "COMPANY_NAME_EXISTS"
    COMPANY_HAS_ENQUIRIES = "COMPANY_HAS_ENQUIRIES"
    CONTACT_NOT_FOUND = "CONTACT_NOT_FOUND"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"
    COMPANY_NEEDS_OFFICE = "COMPANY_NEEDS_OFFICE"

    # ---------------- ENQUIRIES ----------------
    ENQUIRY_NOT_FOUND = "ENQUIRY_NOT_FOUND"
    ENQUIRY_NO_QUOTATION_NUMBER = "ENQUIRY_NO_QUOTATION_NUMBER"

    # ---------------- QUOTATIONS ----------------
    QUOTATION_NOT_FOUND = "QUOTATION_NOT_FOUND"
    QUOTATION_NUMBER_EXISTS = "QUOTATION_NUMBER_EXISTS"

    # ---------------- COMMUNICATIONS ----------------
    COMMUNICATION_NOT_FOUND = "COMMUNICATION_NOT_FOUND"
