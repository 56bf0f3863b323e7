from sqlalchemy import Column, Integer, String, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.types import Date
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, UUIDPrimaryKeyMixin, str_enum
from app.models.enums.communication_type import CommunicationType


class Communication(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "communications"

    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    contact_id = Column(String(36), ForeignKey("contact_persons.id"), nullable=True, index=True)
    enquiry_id = Column(Integer, ForeignKey("enquiries.id"), nullable=True, index=True)

    date = Column(Date, nullable=False)
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(str_enum(CommunicationType), nullable=False, index=True)
    next_communication_date = Column(Date, nullable=True, index=True)
    proposed_next_action = Column(Text, nullable=True)

    company = relationship("Company", lazy="selectin")
    contact = relationship("ContactPerson", lazy="selectin")

    __table_args__ = (Index("ix_communication_company_date", "company_id", "date"),)

    def __repr__(self):
        return f"<Communication id={self.id} type={self.type}>"
