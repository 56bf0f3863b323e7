# app/constants/activity_codes.py
from enum import Enum


class ActivityCode(str, Enum):
    # ---------------- COMPANIES ----------------
    CREATE_COMPANY = "CREATE_COMPANY"
    UPDATE_COMPANY = "UPDATE_COMPANY"
    DELETE_COMPANY = "DELETE_COMPANY"
    CREATE_CONTACT = "CREATE_CONTACT"
    UPDATE_CONTACT = "UPDATE_CONTACT"
    DELETE_CONTACT = "DELETE_CONTACT"
    CREATE_LOCATION = "CREATE_LOCATION"
    UPDATE_LOCATION = "UPDATE_LOCATION"
    DELETE_LOCATION = "DELETE_LOCATION"

    # ---------------- ENQUIRIES ----------------
    CREATE_ENQUIRY = "CREATE_ENQUIRY"
    UPDATE_ENQUIRY = "UPDATE_ENQUIRY"
    UPDATE_ENQUIRY_STATUS = "UPDATE_ENQUIRY_STATUS"
    DELETE_ENQUIRY = "DELETE_ENQUIRY"

    # ---------------- QUOTATIONS ----------------
    CREATE_QUOTATION = "CREATE_QUOTATION"
    UPDATE_QUOTATION = "UPDATE_QUOTATION"
    UPDATE_QUOTATION_STATUS = "UPDATE_QUOTATION_STATUS"
    DELETE_QUOTATION = "DELETE_QUOTATION"

    # ---------------- COMMUNICATIONS ----------------
    CREATE_COMMUNICATION = "CREATE_COMMUNICATION"
    UPDATE_COMMUNICATION = "UPDATE_COMMUNICATION"
    DELETE_COMMUNICATION = "DELETE_COMMUNICATION"
    RESCHEDULE_COMMUNICATION = "RESCHEDULE_COMMUNICATION"
