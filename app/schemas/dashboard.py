"""Dashboard summary schemas."""

from decimal import Decimal
from typing import Dict

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    """
    Figures behind the dashboard cards.
    Returned by GET /api/v1/dashboard/summary.
    """

    total_schools: int = Field(..., ge=0, description="Registered schools (sign ups)")
    schools_by_product: Dict[str, int] = Field(
        ..., description="Sign ups per product tier; every tier is present, zero when unused"
    )
    total_invoiced: Decimal = Field(..., description="Sum of all invoice amounts")
    total_collected: Decimal = Field(..., description="Sum of all collection amounts, any status")
    total_outstanding: Decimal = Field(..., description="Sum of all invoice balances")
    invoices_by_status: Dict[str, int]
    collections_by_status: Dict[str, int]
