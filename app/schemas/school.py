from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID

from app.models.enums import SchoolType, ProductTier
from app.schemas.billing import InvoiceResponse, CollectionResponse


class SchoolBase(BaseModel):
    name: str = Field(..., min_length=1, description="School name cannot be empty")
    type: SchoolType
    product: ProductTier
    county: Optional[str] = None
    registration_date: Optional[date] = None
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None


class SchoolCreate(SchoolBase):
    pass


class SchoolResponse(SchoolBase):
    id: UUID
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SchoolAggregateResponse(SchoolResponse):
    """
    A school with its invoices and collections expanded and its balance.

    school_balance = total_invoiced - total_collected
    """
    invoices: List[InvoiceResponse] = []
    collections: List[CollectionResponse] = []
    total_invoiced: Decimal
    total_collected: Decimal
    school_balance: Decimal
