"""Billing Models: invoices, collections and the invoice number counter"""

from decimal import Decimal

from sqlalchemy import Column, Date, Numeric, String, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ENUM, JSONB
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.base import BaseModel, SchoolScopedMixin
from app.models.enums import InvoiceStatus, CollectionStatus


class Invoice(BaseModel, SchoolScopedMixin):
    """
    A bill issued to a school for one billing cycle.

    Ledger invariant after every collection posting:
    balance == amount - paid_amount, status == Completed iff balance <= 0.
    """
    __tablename__ = "invoices"

    invoice_number = Column(String(32), nullable=False, unique=True, index=True)
    items = Column(JSONB, default=list, nullable=False)  # [{description, quantity, unit_price}]
    due_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    # paid_amount supplied at creation; derived reconciliation folds collections on top of it
    opening_paid_amount = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    balance = Column(Numeric(12, 2), nullable=False)
    status = Column(
        ENUM(InvoiceStatus, name="invoice_status", values_callable=lambda e: [m.value for m in e]),
        default=InvoiceStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Relationships
    school = relationship("School", back_populates="invoices")
    # No cascade: the database refuses to delete an invoice that collections still reference
    collections = relationship(
        "Collection", back_populates="invoice", passive_deletes="all", order_by="Collection.created_at"
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number} {self.amount} - {self.status}>"


class Collection(BaseModel, SchoolScopedMixin):
    """A payment recorded against an invoice"""
    __tablename__ = "collections"

    collection_number = Column(String(64), nullable=False, unique=True, index=True)
    invoice_id = Column(
        UUID(as_uuid=True),
        ForeignKey("invoices.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    # Open set of statuses; see CollectionStatus for the ones the ledger reacts to
    status = Column(String(50), default=CollectionStatus.PENDING.value, nullable=False, index=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="collections")
    school = relationship("School", back_populates="collections")

    def __repr__(self) -> str:
        return f"<Collection {self.collection_number} {self.amount} - {self.status}>"


class InvoiceSequence(Base):
    """
    Named counter behind invoice numbers.

    Read under SELECT ... FOR UPDATE so concurrent invoice creations are
    serialized on numbering.
    """
    __tablename__ = "invoice_sequences"

    name = Column(String(32), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<InvoiceSequence {self.name}={self.last_value}>"
