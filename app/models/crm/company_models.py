from sqlalchemy import Column, String, Boolean, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class Company(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "companies"

    name = Column(String(255), nullable=False, unique=True, index=True)
    website = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)

    # Product lines the company has already placed purchase orders for
    po_rupture_discs = Column(Boolean, nullable=False, default=False)
    po_thermowells = Column(Boolean, nullable=False, default=False)
    po_heat_exchanger = Column(Boolean, nullable=False, default=False)
    po_miscellaneous = Column(Boolean, nullable=False, default=False)
    po_water_jet_steam_jet = Column(Boolean, nullable=False, default=False)

    existing_graphite_suppliers = Column(Text, nullable=True)
    problems_faced = Column(Text, nullable=True)

    offices = relationship("Office", back_populates="company", lazy="selectin", order_by="Office.created_at")
    plants = relationship("Plant", back_populates="company", lazy="selectin", order_by="Plant.created_at")
    contact_persons = relationship("ContactPerson", back_populates="company", lazy="selectin")

    def __repr__(self):
        return f"<Company id={self.id} name={self.name}>"


class _LocationColumns:
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    area = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(120), nullable=True)
    country = Column(String(120), nullable=True)
    pincode = Column(String(20), nullable=True)


class Office(Base, UUIDPrimaryKeyMixin, TimestampMixin, _LocationColumns):
    __tablename__ = "offices"

    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    is_head_office = Column(Boolean, nullable=False, default=False)

    company = relationship("Company", back_populates="offices", lazy="noload")
    contact_persons = relationship("ContactPerson", back_populates="office", lazy="selectin")

    def __repr__(self):
        return f"<Office id={self.id} name={self.name} head={self.is_head_office}>"


class Plant(Base, UUIDPrimaryKeyMixin, TimestampMixin, _LocationColumns):
    __tablename__ = "plants"

    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    plant_type = Column(String(50), nullable=True, default="Manufacturing")

    company = relationship("Company", back_populates="plants", lazy="noload")
    contact_persons = relationship("ContactPerson", back_populates="plant", lazy="selectin")

    def __repr__(self):
        return f"<Plant id={self.id} name={self.name}>"


class ContactPerson(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "contact_persons"

    name = Column(String(255), nullable=False)
    designation = Column(String(255), nullable=True)
    phone_number = Column(String(30), nullable=True)
    email_id = Column(String(255), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    office_id = Column(String(36), ForeignKey("offices.id"), nullable=True, index=True)
    plant_id = Column(String(36), ForeignKey("plants.id"), nullable=True, index=True)

    company = relationship("Company", back_populates="contact_persons", lazy="noload")
    office = relationship("Office", back_populates="contact_persons", lazy="noload")
    plant = relationship("Plant", back_populates="contact_persons", lazy="noload")

    __table_args__ = (Index("ix_contact_company_primary", "company_id", "is_primary"),)

    def __repr__(self):
        return f"<ContactPerson id={self.id} name={self.name}>"
