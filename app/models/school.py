"""Schools - the billing tenant"""

from sqlalchemy import Column, String, Text, Date
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, StatusMixin
from app.models.enums import SchoolType, ProductTier


class School(BaseModel, StatusMixin):
    """
    A registered school.

    Its invoice and collection lists are back-references used for the
    aggregate balance; the records themselves are addressed independently.
    """
    __tablename__ = "schools"

    # Basic Information
    name = Column(String(255), nullable=False)
    type = Column(
        ENUM(SchoolType, name="school_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    product = Column(
        ENUM(ProductTier, name="product_tier", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    county = Column(String(100), nullable=True)
    registration_date = Column(Date, nullable=True)

    # Contact
    address = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    # Relationships
    invoices = relationship("Invoice", back_populates="school", order_by="Invoice.created_at")
    collections = relationship("Collection", back_populates="school", order_by="Collection.created_at")

    def __repr__(self) -> str:
        return f"<School {self.name}>"
