from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import Date
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, UUIDPrimaryKeyMixin, str_enum
from app.models.enums.quotation_status import QuotationStatus, LostReason


class Quotation(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "quotations"

    enquiry_id = Column(Integer, ForeignKey("enquiries.id"), nullable=False, index=True)
    quotation_number = Column(String(100), nullable=False, unique=True, index=True)
    revision_number = Column(Integer, nullable=False, default=0)
    quotation_date = Column(Date, nullable=True)

    validity_period = Column(String(120), nullable=True)
    payment_terms = Column(Text, nullable=True)
    delivery_schedule = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)
    incoterms = Column(String(120), nullable=True)
    currency = Column(String(10), nullable=False, default="INR")

    transport_costs = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    gst = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    packing_forwarding_percentage = Column(Numeric(5, 2), nullable=False, default=Decimal("3.00"))

    subtotal = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    tax = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_value = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    status = Column(str_enum(QuotationStatus), nullable=False, default=QuotationStatus.LIVE, index=True)
    lost_reason = Column(str_enum(LostReason), nullable=True)

    # Only meaningful for WON / RECEIVED
    purchase_order_number = Column(String(100), nullable=True)
    po_value = Column(Numeric(14, 2), nullable=True)
    po_date = Column(Date, nullable=True)
    date_of_receipt = Column(Date, nullable=True)

    enquiry = relationship("Enquiry", back_populates="quotations", lazy="selectin")
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        lazy="selectin",
        order_by="QuotationItem.id",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_quotation_enquiry_status", "enquiry_id", "status"),
        CheckConstraint("subtotal >= 0 AND tax >= 0 AND total_value >= 0", name="ck_quotation_amounts_non_negative"),
        CheckConstraint("gst >= 0 AND gst <= 100", name="ck_quotation_gst_range"),
        CheckConstraint("packing_forwarding_percentage >= 0 AND packing_forwarding_percentage <= 5", name="ck_quotation_pf_range"),
    )

    def __repr__(self):
        return f"<Quotation {self.quotation_number} status={self.status}>"


class QuotationItem(Base, TimestampMixin):
    __tablename__ = "quotation_items"

    id = Column(Integer, primary_key=True)
    quotation_id = Column(String(36), ForeignKey("quotations.id"), nullable=False, index=True)
    material_description = Column(String(500), nullable=False)
    specifications = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False)
    price_per_unit = Column(Numeric(14, 2), nullable=False)
    total = Column(Numeric(14, 2), nullable=False)

    quotation = relationship("Quotation", back_populates="items", lazy="noload")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_quotation_item_quantity_positive"),
        CheckConstraint("price_per_unit >= 0", name="ck_quotation_item_price_non_negative"),
        CheckConstraint("total >= 0", name="ck_quotation_item_total_non_negative"),
    )

    def __repr__(self):
        return f"<QuotationItem id={self.id} qty={self.quantity}>"
