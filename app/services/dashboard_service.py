from decimal import Decimal
from typing import Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.billing import Invoice, Collection
from app.models.enums import ProductTier, InvoiceStatus, CollectionStatus
from app.models.school import School


def _status_key(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


class DashboardService:
    """Summary statistics for the admin dashboard"""

    @staticmethod
    async def _counts(db: AsyncSession, column) -> Dict[str, int]:
        result = await db.execute(select(column, func.count()).group_by(column))
        return {_status_key(key): count for key, count in result.all()}

    @staticmethod
    async def get_summary(db: AsyncSession) -> Dict[str, object]:
        """
        Get aggregated figures for the dashboard cards.

        Every product tier and known status is reported, zero when unused;
        unknown collection statuses are reported as stored.
        """
        total_schools = await db.scalar(select(func.count(School.id)))

        by_product = {tier.value: 0 for tier in ProductTier}
        by_product.update(await DashboardService._counts(db, School.product))

        totals = await db.execute(
            select(
                func.coalesce(func.sum(Invoice.amount), 0),
                func.coalesce(func.sum(Invoice.balance), 0),
            )
        )
        total_invoiced, total_outstanding = totals.one()
        total_collected = await db.scalar(select(func.coalesce(func.sum(Collection.amount), 0)))

        invoices_by_status = {status.value: 0 for status in InvoiceStatus}
        invoices_by_status.update(await DashboardService._counts(db, Invoice.status))

        collections_by_status = {status.value: 0 for status in CollectionStatus}
        collections_by_status.update(await DashboardService._counts(db, Collection.status))

        return {
            "total_schools": total_schools or 0,
            "schools_by_product": by_product,
            "total_invoiced": Decimal(total_invoiced),
            "total_collected": Decimal(total_collected or 0),
            "total_outstanding": Decimal(total_outstanding),
            "invoices_by_status": invoices_by_status,
            "collections_by_status": collections_by_status,
        }
