import enum


class CommunicationType(str, enum.Enum):
    TELEPHONIC = "TELEPHONIC"
    VIRTUAL_MEETING = "VIRTUAL_MEETING"
    EMAIL = "EMAIL"
    PLANT_VISIT = "PLANT_VISIT"
    OFFICE_VISIT = "OFFICE_VISIT"
