import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.utils.time import get_utc_today
from app.models.school import School
from app.schemas.school import SchoolCreate
from app.services.ledger_service import counted_total, schools

logger = logging.getLogger(__name__)


@dataclass
class SchoolAggregate:
    """A school with its invoices/collections loaded and its balance"""
    school: School
    total_invoiced: Decimal
    total_collected: Decimal

    @property
    def school_balance(self) -> Decimal:
        return self.total_invoiced - self.total_collected


def summarize_school(school: School) -> SchoolAggregate:
    """
    Aggregate a school's loaded invoices and collections.

    Legacy mode sums every collection whatever its status, so bounced or
    pending collections still reduce the school balance even though a bounce
    reopens the invoice. Derived mode applies the same filter as the invoice
    ledger.
    """
    total_invoiced = sum((Decimal(inv.amount) for inv in school.invoices), Decimal("0"))
    if settings.uses_derived_ledger:
        total_collected = counted_total(school.collections)
    else:
        total_collected = sum((Decimal(c.amount) for c in school.collections), Decimal("0"))
    return SchoolAggregate(school=school, total_invoiced=total_invoiced, total_collected=total_collected)


class SchoolService:
    """Service layer for School operations"""

    @staticmethod
    async def list_schools(db: AsyncSession) -> List[School]:
        return await schools.find(db)

    @staticmethod
    async def create_school(db: AsyncSession, school_data: SchoolCreate) -> School:
        data = school_data.model_dump()
        if data.get("registration_date") is None:
            data["registration_date"] = get_utc_today()
        school = School(**data, is_active=True)
        school = await schools.save(db, school)
        logger.info(
            "School registered",
            extra={"school_id": str(school.id), "product": school_data.product.value},
        )
        return school

    @staticmethod
    async def get_school_aggregate(db: AsyncSession, school_id: UUID) -> Optional[SchoolAggregate]:
        """Load a school with invoices and collections expanded. None when absent."""
        result = await db.execute(
            select(School)
            .where(School.id == school_id)
            .options(selectinload(School.invoices), selectinload(School.collections))
        )
        school = result.scalar_one_or_none()
        if school is None:
            return None
        return summarize_school(school)
