from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, model_validator
from uuid import UUID
from datetime import datetime, date
from decimal import Decimal

from app.models.enums import InvoiceStatus, CollectionStatus


class InvoiceItem(BaseModel):
    """One billed line"""
    description: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)
    unit_price: Decimal = Field(..., ge=0)


class InvoiceCreate(BaseModel):
    """
    New invoice for a school.

    paid_amount defaults to 0; balance and status are derived from amount and
    paid_amount when omitted.
    """
    school_id: UUID
    items: List[InvoiceItem] = []
    due_date: date
    amount: Decimal = Field(..., ge=0)
    paid_amount: Decimal = Field(Decimal("0"), ge=0)
    balance: Optional[Decimal] = None
    status: Optional[InvoiceStatus] = None


class InvoiceUpdate(BaseModel):
    """Raw partial update; no ledger fields are re-derived"""
    items: Optional[List[InvoiceItem]] = None
    due_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    paid_amount: Optional[Decimal] = Field(None, ge=0)
    balance: Optional[Decimal] = None
    status: Optional[InvoiceStatus] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "InvoiceUpdate":
        # Every invoice column is NOT NULL; omit a field to leave it unchanged
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"fields cannot be null: {', '.join(nulls)}")
        return self


class InvoiceResponse(BaseModel):
    id: UUID
    invoice_number: str
    school_id: UUID
    items: List[InvoiceItem]
    due_date: date
    amount: Decimal
    paid_amount: Decimal
    opening_paid_amount: Decimal = Decimal("0")
    balance: Decimal
    status: InvoiceStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollectionCreate(BaseModel):
    invoice_id: UUID
    collection_number: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(..., gt=0)
    status: str = Field(CollectionStatus.PENDING.value, min_length=1, max_length=50)


class CollectionStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=50)


class CollectionResponse(BaseModel):
    id: UUID
    collection_number: str
    invoice_id: UUID
    school_id: UUID
    amount: Decimal
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
