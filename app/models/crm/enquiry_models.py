from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import Date
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, str_enum
from app.models.enums.enquiry_status import EnquiryStatus
from app.models.enums.enquiry_fields import (
    EnquiryPriority,
    EnquirySource,
    DesignRequired,
    CustomerType,
)


class Enquiry(Base, TimestampMixin):
    __tablename__ = "enquiries"

    id = Column(Integer, primary_key=True)
    subject = Column(String(255), nullable=True)

    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True, index=True)
    office_id = Column(String(36), ForeignKey("offices.id"), nullable=True)
    plant_id = Column(String(36), ForeignKey("plants.id"), nullable=True)

    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    timeline = Column(String(255), nullable=True)
    enquiry_date = Column(Date, nullable=True)
    priority = Column(str_enum(EnquiryPriority), nullable=True)
    source = Column(str_enum(EnquirySource), nullable=True)
    notes = Column(Text, nullable=True)
    quotation_number = Column(String(100), nullable=True, index=True)
    region = Column(String(120), nullable=True)
    oa_number = Column(String(100), nullable=True)
    block_model = Column(String(120), nullable=True)
    number_of_blocks = Column(Integer, nullable=True)
    design_required = Column(str_enum(DesignRequired), nullable=True)
    customer_type = Column(str_enum(CustomerType), nullable=True)

    status = Column(str_enum(EnquiryStatus), nullable=False, default=EnquiryStatus.LIVE, index=True)

    # Only meaningful for WON / RCD
    purchase_order_number = Column(String(100), nullable=True)
    po_value = Column(Numeric(14, 2), nullable=True)
    po_date = Column(Date, nullable=True)
    date_of_receipt = Column(Date, nullable=True)

    company = relationship("Company", lazy="selectin")
    office = relationship("Office", lazy="selectin")
    plant = relationship("Plant", lazy="selectin")
    quotations = relationship(
        "Quotation",
        back_populates="enquiry",
        lazy="noload",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_enquiry_company_status", "company_id", "status"),
        CheckConstraint("number_of_blocks IS NULL OR number_of_blocks >= 0", name="ck_enquiry_blocks_non_negative"),
    )

    def __repr__(self):
        return f"<Enquiry id={self.id} status={self.status}>"
