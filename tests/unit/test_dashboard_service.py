"""Unit tests for DashboardService."""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from app.models.enums import InvoiceStatus, ProductTier
from app.services.dashboard_service import DashboardService


def _rows(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


def _one(row):
    result = MagicMock()
    result.one.return_value = row
    return result


@pytest.mark.asyncio
async def test_summary_fills_missing_tiers_and_statuses(db):
    db.scalar.side_effect = [3, Decimal("600")]
    db.execute.side_effect = [
        _rows([(ProductTier.FINANCE, 2), (ProductTier.ANALYTICS, 1)]),
        _one((Decimal("3000"), Decimal("2500"))),
        _rows([(InvoiceStatus.PENDING, 2)]),
        _rows([("Completed", 1), ("Bounced", 1), ("Reversed", 1)]),
    ]

    summary = await DashboardService.get_summary(db)

    assert summary["total_schools"] == 3
    assert summary["schools_by_product"] == {"Analytics": 1, "Finance": 2, "Timetable": 0}
    assert summary["total_invoiced"] == Decimal("3000")
    assert summary["total_collected"] == Decimal("600")
    assert summary["total_outstanding"] == Decimal("2500")
    assert summary["invoices_by_status"] == {"Pending": 2, "Completed": 0}
    assert summary["collections_by_status"] == {
        "Pending": 0,
        "Completed": 1,
        "Bounced": 1,
        "Reversed": 1,
    }


@pytest.mark.asyncio
async def test_summary_on_empty_database(db):
    db.scalar.side_effect = [0, 0]
    db.execute.side_effect = [_rows([]), _one((0, 0)), _rows([]), _rows([])]

    summary = await DashboardService.get_summary(db)

    assert summary["total_schools"] == 0
    assert summary["total_invoiced"] == Decimal("0")
    assert summary["total_collected"] == Decimal("0")
    assert set(summary["schools_by_product"].values()) == {0}
