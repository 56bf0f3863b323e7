from app.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- COMPANIES ----------------
    ActivityCode.CREATE_COMPANY:
        "{actor} created company {target_name}",

    ActivityCode.UPDATE_COMPANY:
        "{actor} updated company {target_name}: {changes}",

    ActivityCode.DELETE_COMPANY:
        "{actor} deleted company {target_name}",

    ActivityCode.CREATE_CONTACT:
        "{actor} added contact {target_name} to company {company_name}",

    ActivityCode.UPDATE_CONTACT:
        "{actor} updated contact {target_name}: {changes}",

    ActivityCode.DELETE_CONTACT:
        "{actor} deleted contact {target_name}",

    ActivityCode.CREATE_LOCATION:
        "{actor} added {location_kind} {target_name} to company {company_name}",

    ActivityCode.UPDATE_LOCATION:
        "{actor} updated {location_kind} {target_name}: {changes}",

    ActivityCode.DELETE_LOCATION:
        "{actor} deleted {location_kind} {target_name} of company {company_name}",

    # ---------------- ENQUIRIES ----------------
    ActivityCode.CREATE_ENQUIRY:
        "{actor} created enquiry #{target_id}",

    ActivityCode.UPDATE_ENQUIRY:
        "{actor} updated enquiry #{target_id}: {changes}",

    ActivityCode.UPDATE_ENQUIRY_STATUS:
        "{actor} changed enquiry #{target_id} status "
        "from {old_status} → {new_status} ({propagation})",

    ActivityCode.DELETE_ENQUIRY:
        "{actor} deleted enquiry #{target_id}",

    # ---------------- QUOTATIONS ----------------
    ActivityCode.CREATE_QUOTATION:
        "{actor} created quotation {target_name}",

    ActivityCode.UPDATE_QUOTATION:
        "{actor} updated quotation {target_name}",

    ActivityCode.UPDATE_QUOTATION_STATUS:
        "{actor} changed quotation {target_name} status "
        "from {old_status} → {new_status} ({propagation})",

    ActivityCode.DELETE_QUOTATION:
        "{actor} deleted quotation {target_name}",

    # ---------------- COMMUNICATIONS ----------------
    ActivityCode.CREATE_COMMUNICATION:
        "{actor} logged {comm_type} communication '{target_name}'",

    ActivityCode.UPDATE_COMMUNICATION:
        "{actor} updated communication '{target_name}'",

    ActivityCode.DELETE_COMMUNICATION:
        "{actor} deleted communication '{target_name}'",

    ActivityCode.RESCHEDULE_COMMUNICATION:
        "{actor} rescheduled follow-up of '{target_name}' from {old_date} → {new_date}",
}
