"""Unit tests for LedgerService (invoice creation and collection reconciliation)."""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from app.config import settings
from app.core.exceptions import (
    CollectionNotFoundError,
    InvoiceNotFoundError,
    SchoolNotFoundError,
)
from app.models.billing import Invoice, Collection
from app.models.enums import InvoiceStatus
from app.schemas.billing import CollectionCreate, InvoiceCreate, InvoiceItem, InvoiceUpdate
from app.services import ledger_service
from app.services.ledger_service import LedgerService
from tests.conftest import make_collection, make_invoice, make_school


def _collection_in(invoice, amount, status="Completed"):
    return CollectionCreate(
        invoice_id=invoice.id,
        collection_number=f"COL-{uuid4().hex[:6]}",
        amount=Decimal(amount),
        status=status,
    )


@pytest.fixture
def derived_mode(monkeypatch):
    monkeypatch.setattr(settings, "LEDGER_RECONCILIATION_MODE", "derived")


# --- create_invoice ---


@pytest.mark.asyncio
async def test_create_invoice_derives_balance_and_status(db):
    school = make_school()
    invoice_in = InvoiceCreate(
        school_id=school.id,
        items=[InvoiceItem(description="Timetable module", quantity=2, unit_price=Decimal("500"))],
        due_date=date(2026, 4, 30),
        amount=Decimal("1000"),
    )

    with patch.object(ledger_service.schools, "find_by_id", new_callable=AsyncMock) as mock_school, \
            patch.object(LedgerService, "generate_invoice_number", new_callable=AsyncMock) as mock_number:
        mock_school.return_value = school
        mock_number.return_value = "INV3"

        invoice = await LedgerService.create_invoice(db, invoice_in)

    assert invoice.invoice_number == "INV3"
    assert invoice.school_id == school.id
    assert invoice.paid_amount == Decimal("0")
    assert invoice.balance == Decimal("1000")
    assert invoice.status == InvoiceStatus.PENDING
    assert invoice.items == [{"description": "Timetable module", "quantity": 2, "unit_price": "500"}]
    db.add.assert_called_once_with(invoice)
    assert db.flush.called


@pytest.mark.asyncio
async def test_create_invoice_keeps_supplied_ledger_fields(db):
    school = make_school()
    invoice_in = InvoiceCreate(
        school_id=school.id,
        due_date=date(2026, 4, 30),
        amount=Decimal("1000"),
        paid_amount=Decimal("1000"),
        balance=Decimal("0"),
        status=InvoiceStatus.COMPLETED,
    )

    with patch.object(ledger_service.schools, "find_by_id", new_callable=AsyncMock) as mock_school, \
            patch.object(LedgerService, "generate_invoice_number", new_callable=AsyncMock) as mock_number:
        mock_school.return_value = school
        mock_number.return_value = "INV4"

        invoice = await LedgerService.create_invoice(db, invoice_in)

    assert invoice.opening_paid_amount == Decimal("1000")
    assert invoice.paid_amount == Decimal("1000")
    assert invoice.balance == Decimal("0")
    assert invoice.status == InvoiceStatus.COMPLETED


@pytest.mark.asyncio
async def test_create_invoice_unknown_school(db):
    invoice_in = InvoiceCreate(school_id=uuid4(), due_date=date(2026, 4, 30), amount=Decimal("10"))

    with patch.object(ledger_service.schools, "find_by_id", new_callable=AsyncMock) as mock_school, \
            patch.object(LedgerService, "generate_invoice_number", new_callable=AsyncMock) as mock_number:
        mock_school.return_value = None

        with pytest.raises(SchoolNotFoundError):
            await LedgerService.create_invoice(db, invoice_in)

        assert not mock_number.called
    assert not db.add.called


# --- add_collection ---


@pytest.mark.asyncio
async def test_partial_collection_leaves_invoice_pending(db):
    invoice = make_invoice(amount="1000")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = invoice
        collection = await LedgerService.add_collection(db, _collection_in(invoice, "500"))

    assert isinstance(collection, Collection)
    assert collection.invoice_id == invoice.id
    assert collection.school_id == invoice.school_id
    assert invoice.paid_amount == Decimal("500")
    assert invoice.balance == Decimal("500")
    assert invoice.status == InvoiceStatus.PENDING


@pytest.mark.asyncio
async def test_second_collection_completes_invoice(db):
    invoice = make_invoice(amount="1000")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = invoice
        await LedgerService.add_collection(db, _collection_in(invoice, "500"))
        await LedgerService.add_collection(db, _collection_in(invoice, "500"))

    assert invoice.paid_amount == Decimal("1000")
    assert invoice.balance == Decimal("0")
    assert invoice.status == InvoiceStatus.COMPLETED


@pytest.mark.asyncio
async def test_overpayment_gives_negative_balance_and_completes(db):
    invoice = make_invoice(amount="1000", paid_amount="900")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = invoice
        await LedgerService.add_collection(db, _collection_in(invoice, "300"))

    assert invoice.paid_amount == Decimal("1200")
    assert invoice.balance == Decimal("-200")
    assert invoice.status == InvoiceStatus.COMPLETED


@pytest.mark.asyncio
async def test_pending_collection_still_posts_amount(db):
    invoice = make_invoice(amount="1000")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = invoice
        await LedgerService.add_collection(db, _collection_in(invoice, "250", status="Pending"))

    assert invoice.paid_amount == Decimal("250")


@pytest.mark.asyncio
async def test_add_collection_to_missing_invoice(db):
    invoice = make_invoice()

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = None
        with pytest.raises(InvoiceNotFoundError) as exc_info:
            await LedgerService.add_collection(db, _collection_in(invoice, "100"))

    assert exc_info.value.record_id == invoice.id
    assert not db.add.called


# --- update_collection_status ---


@pytest.mark.asyncio
async def test_bounce_reopens_completed_invoice_without_touching_amounts(db):
    invoice = make_invoice(amount="1000", paid_amount="1000")
    collection = make_collection(invoice, amount="1000", status="Completed")
    assert invoice.status == InvoiceStatus.COMPLETED

    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll, \
            patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_coll.return_value = collection
        mock_invoice.return_value = invoice

        result = await LedgerService.update_collection_status(db, collection.id, "Bounced")

    assert result.status == "Bounced"
    assert invoice.status == InvoiceStatus.PENDING
    assert invoice.paid_amount == Decimal("1000")
    assert invoice.balance == Decimal("0")


@pytest.mark.asyncio
async def test_non_bounce_status_leaves_invoice_alone(db):
    invoice = make_invoice(amount="1000", paid_amount="500")
    collection = make_collection(invoice, amount="500", status="Pending")

    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll, \
            patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_coll.return_value = collection

        result = await LedgerService.update_collection_status(db, collection.id, "Completed")

        assert not mock_invoice.called

    assert result.status == "Completed"
    assert invoice.status == InvoiceStatus.PENDING


@pytest.mark.asyncio
async def test_status_match_is_exact(db):
    invoice = make_invoice(amount="1000", paid_amount="1000")
    collection = make_collection(invoice, amount="1000")

    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll, \
            patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_coll.return_value = collection
        mock_invoice.return_value = invoice

        await LedgerService.update_collection_status(db, collection.id, "bounced")

    assert invoice.status == InvoiceStatus.COMPLETED


@pytest.mark.asyncio
async def test_update_status_of_missing_collection(db):
    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll:
        mock_coll.return_value = None
        with pytest.raises(CollectionNotFoundError):
            await LedgerService.update_collection_status(db, uuid4(), "Bounced")


@pytest.mark.asyncio
async def test_derived_bounce_removes_amount_from_paid(db, derived_mode):
    invoice = make_invoice(amount="1000", paid_amount="1000", opening_paid_amount=Decimal("0"))
    bounced = make_collection(invoice, amount="600", status="Completed")
    cleared = make_collection(invoice, amount="400", status="Completed")

    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll, \
            patch.object(ledger_service.collections, "find", new_callable=AsyncMock) as mock_find, \
            patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_coll.return_value = bounced
        mock_invoice.return_value = invoice
        mock_find.return_value = [bounced, cleared]

        await LedgerService.update_collection_status(db, bounced.id, "Bounced")

    assert invoice.paid_amount == Decimal("400")
    assert invoice.balance == Decimal("600")
    assert invoice.status == InvoiceStatus.PENDING


@pytest.mark.asyncio
async def test_derived_recovery_from_bounce_completes_again(db, derived_mode):
    invoice = make_invoice(amount="1000", paid_amount="0")
    collection = make_collection(invoice, amount="1000", status="Bounced")

    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll, \
            patch.object(ledger_service.collections, "find", new_callable=AsyncMock) as mock_find, \
            patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_coll.return_value = collection
        mock_invoice.return_value = invoice
        mock_find.return_value = [collection]

        await LedgerService.update_collection_status(db, collection.id, "Completed")

    assert invoice.paid_amount == Decimal("1000")
    assert invoice.balance == Decimal("0")
    assert invoice.status == InvoiceStatus.COMPLETED


@pytest.mark.asyncio
async def test_derived_bounced_posting_adds_nothing(db, derived_mode):
    invoice = make_invoice(amount="1000")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice, \
            patch.object(ledger_service.collections, "find", new_callable=AsyncMock) as mock_find:
        mock_invoice.return_value = invoice
        mock_find.side_effect = lambda db, **filters: [db.add.call_args[0][0]]

        collection = await LedgerService.add_collection(db, _collection_in(invoice, "1000", status="Bounced"))

    assert collection.status == "Bounced"
    assert invoice.paid_amount == Decimal("0")
    assert invoice.balance == Decimal("1000")
    assert invoice.status == InvoiceStatus.PENDING


@pytest.mark.asyncio
async def test_derived_posting_folds_counting_collections(db, derived_mode):
    invoice = make_invoice(amount="1000")
    earlier = make_collection(invoice, amount="300", status="Completed")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice, \
            patch.object(ledger_service.collections, "find", new_callable=AsyncMock) as mock_find:
        mock_invoice.return_value = invoice
        mock_find.side_effect = lambda db, **filters: [earlier, db.add.call_args[0][0]]

        await LedgerService.add_collection(db, _collection_in(invoice, "700", status="Completed"))

        mock_find.assert_awaited_once_with(db, invoice_id=invoice.id)

    assert invoice.paid_amount == Decimal("1000")
    assert invoice.balance == Decimal("0")
    assert invoice.status == InvoiceStatus.COMPLETED


@pytest.mark.asyncio
async def test_derived_reconcile_keeps_opening_paid_amount(db, derived_mode):
    invoice = make_invoice(amount="1000", paid_amount="400")
    collection = make_collection(invoice, amount="100", status="Pending")

    with patch.object(ledger_service.collections, "find_by_id", new_callable=AsyncMock) as mock_coll, \
            patch.object(ledger_service.collections, "find", new_callable=AsyncMock) as mock_find, \
            patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_coll.return_value = collection
        mock_invoice.return_value = invoice
        mock_find.return_value = [collection]

        await LedgerService.update_collection_status(db, collection.id, "Completed")

    assert invoice.opening_paid_amount == Decimal("400")
    assert invoice.paid_amount == Decimal("500")
    assert invoice.balance == Decimal("500")
    assert invoice.status == InvoiceStatus.PENDING


# --- pass-through CRUD ---


@pytest.mark.asyncio
async def test_update_invoice_is_a_raw_patch(db):
    invoice = make_invoice(amount="1000")

    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = invoice
        updated = await LedgerService.update_invoice(
            db, invoice.id, InvoiceUpdate(amount=Decimal("1500"), due_date=date(2026, 5, 31))
        )

    assert updated is invoice
    assert invoice.amount == Decimal("1500")
    assert invoice.due_date == date(2026, 5, 31)
    # balance is not re-derived by a raw update
    assert invoice.balance == Decimal("1000")


@pytest.mark.asyncio
async def test_update_missing_invoice_returns_none(db):
    with patch.object(ledger_service.invoices, "find_by_id", new_callable=AsyncMock) as mock_invoice:
        mock_invoice.return_value = None
        assert await LedgerService.update_invoice(db, uuid4(), InvoiceUpdate(amount=Decimal("1"))) is None


@pytest.mark.asyncio
async def test_list_invoices_filters_by_school(db):
    school_id = uuid4()
    with patch.object(ledger_service.invoices, "find", new_callable=AsyncMock) as mock_find:
        mock_find.return_value = []
        await LedgerService.list_invoices(db, school_id=school_id)
        mock_find.assert_awaited_once_with(db, school_id=school_id)

        await LedgerService.list_invoices(db)
        mock_find.assert_awaited_with(db)
