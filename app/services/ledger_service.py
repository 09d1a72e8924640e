"""Ledger Service - invoice numbering, invoice creation and collection reconciliation"""

import logging
import re
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    CollectionNotFoundError,
    InvoiceNotFoundError,
    InvoiceNumberFormatError,
    SchoolNotFoundError,
)
from app.models.billing import Invoice, Collection, InvoiceSequence
from app.models.enums import InvoiceStatus, CollectionStatus, collection_counts_toward_paid
from app.models.school import School
from app.schemas.billing import InvoiceCreate, InvoiceUpdate, CollectionCreate
from app.services.repository import Repository

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE_NAME = "invoice"

schools = Repository(School)
invoices = Repository(Invoice)
collections = Repository(Collection)


def format_invoice_number(value: int) -> str:
    return f"{settings.INVOICE_NUMBER_PREFIX}{value}"


def parse_invoice_number(invoice_number: Optional[str]) -> int:
    """Numeric suffix of an invoice number such as INV41. Raises InvoiceNumberFormatError."""
    prefix = re.escape(settings.INVOICE_NUMBER_PREFIX)
    match = re.fullmatch(rf"{prefix}(\d+)", invoice_number or "")
    if match is None:
        raise InvoiceNumberFormatError(invoice_number)
    return int(match.group(1))


def next_invoice_number(latest: Optional[str]) -> str:
    """INV1 when there is no previous invoice, otherwise the previous suffix plus one"""
    if latest is None:
        return format_invoice_number(1)
    return format_invoice_number(parse_invoice_number(latest) + 1)


def derive_status(balance: Decimal) -> InvoiceStatus:
    return InvoiceStatus.PENDING if balance > 0 else InvoiceStatus.COMPLETED


def counted_total(records: Iterable[Collection]) -> Decimal:
    """Sum of the collections that still count as money received"""
    return sum(
        (Decimal(c.amount) for c in records if collection_counts_toward_paid(c.status)),
        Decimal("0"),
    )


class LedgerService:
    """Service layer for invoice and collection operations"""

    @staticmethod
    async def get_latest_invoice(db: AsyncSession) -> Optional[Invoice]:
        return await invoices.find_one(db, order_by=desc(Invoice.created_at))

    @staticmethod
    async def generate_invoice_number(db: AsyncSession) -> str:
        """
        Allocate the next INV<n> number.

        The counter row is locked for the rest of the transaction. On first use
        it is seeded from the most recently created invoice, so numbering
        carries on from records created before the counter existed.
        """
        result = await db.execute(
            select(InvoiceSequence)
            .where(InvoiceSequence.name == INVOICE_SEQUENCE_NAME)
            .with_for_update()
        )
        sequence = result.scalar_one_or_none()

        if sequence is None:
            latest = await LedgerService.get_latest_invoice(db)
            seed = parse_invoice_number(latest.invoice_number) if latest else 0
            sequence = InvoiceSequence(name=INVOICE_SEQUENCE_NAME, last_value=seed)
            db.add(sequence)

        sequence.last_value += 1
        await db.flush()
        return format_invoice_number(sequence.last_value)

    @staticmethod
    async def create_invoice(db: AsyncSession, invoice_in: InvoiceCreate) -> Invoice:
        """
        Number and persist an invoice and link it to its school.

        Both writes share the request transaction, so a failure while linking
        leaves no orphaned invoice behind.
        """
        school = await schools.find_by_id(db, invoice_in.school_id)
        if school is None:
            raise SchoolNotFoundError(invoice_in.school_id)

        invoice_number = await LedgerService.generate_invoice_number(db)

        paid_amount = invoice_in.paid_amount
        balance = invoice_in.balance if invoice_in.balance is not None else invoice_in.amount - paid_amount
        status = invoice_in.status if invoice_in.status is not None else derive_status(balance)

        invoice = Invoice(
            invoice_number=invoice_number,
            school_id=school.id,
            items=[item.model_dump(mode="json") for item in invoice_in.items],
            due_date=invoice_in.due_date,
            amount=invoice_in.amount,
            paid_amount=paid_amount,
            opening_paid_amount=paid_amount,
            balance=balance,
            status=status,
        )
        invoice = await invoices.save(db, invoice)

        logger.info(
            "Invoice created",
            extra={
                "invoice_id": str(invoice.id),
                "invoice_number": invoice_number,
                "school_id": str(school.id),
                "amount": str(invoice.amount),
            },
        )
        return invoice

    @staticmethod
    async def list_invoices(db: AsyncSession, school_id: Optional[UUID] = None) -> List[Invoice]:
        if school_id is None:
            return await invoices.find(db)
        return await invoices.find(db, school_id=school_id)

    @staticmethod
    async def get_invoice(db: AsyncSession, invoice_id: UUID) -> Optional[Invoice]:
        return await invoices.find_by_id(db, invoice_id)

    @staticmethod
    async def update_invoice(
        db: AsyncSession, invoice_id: UUID, invoice_update: InvoiceUpdate
    ) -> Optional[Invoice]:
        """Apply a raw partial update. Returns None when the invoice does not exist."""
        patch = invoice_update.model_dump(exclude_unset=True)
        if "items" in patch:
            patch["items"] = [item.model_dump(mode="json") for item in invoice_update.items or []]
        return await invoices.find_by_id_and_update(db, invoice_id, patch)

    @staticmethod
    async def delete_invoice(db: AsyncSession, invoice_id: UUID) -> None:
        # Refused by the database while collections still reference the invoice
        await invoices.find_by_id_and_delete(db, invoice_id)
        logger.info("Invoice deleted", extra={"invoice_id": str(invoice_id)})

    @staticmethod
    async def list_collections(db: AsyncSession, invoice_id: Optional[UUID] = None) -> List[Collection]:
        if invoice_id is None:
            return await collections.find(db)
        return await collections.find(db, invoice_id=invoice_id)

    @staticmethod
    async def add_collection(db: AsyncSession, collection_in: CollectionCreate) -> Collection:
        """
        Record a payment against an invoice and post it to the invoice.

        Legacy mode does paid_amount += amount whatever the collection's status,
        then balance = amount - paid_amount and the status is re-derived.
        Derived mode refolds paid_amount so a non-counting collection adds nothing.
        """
        invoice = await invoices.find_by_id(db, collection_in.invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(collection_in.invoice_id)

        collection = Collection(
            invoice_id=invoice.id,
            school_id=invoice.school_id,
            collection_number=collection_in.collection_number,
            amount=collection_in.amount,
            status=collection_in.status,
        )
        collection = await collections.save(db, collection)

        if settings.uses_derived_ledger:
            invoice = await LedgerService.reconcile_invoice(db, invoice.id)
        else:
            invoice.paid_amount = Decimal(invoice.paid_amount) + collection_in.amount
            invoice.balance = Decimal(invoice.amount) - invoice.paid_amount
            invoice.status = derive_status(invoice.balance)
            await invoices.save(db, invoice)

        logger.info(
            "Collection posted",
            extra={
                "collection_id": str(collection.id),
                "invoice_id": str(invoice.id),
                "amount": str(collection.amount),
                "paid_amount": str(invoice.paid_amount),
                "balance": str(invoice.balance),
                "invoice_status": invoice.status.value,
            },
        )
        return collection

    @staticmethod
    async def update_collection_status(db: AsyncSession, collection_id: UUID, status: str) -> Collection:
        """
        Overwrite a collection's status and apply its side effect on the invoice.

        In legacy mode a Bounced collection only reopens its invoice (status
        Pending); paid_amount and balance keep the bounced amount. In derived
        mode the invoice's paid_amount is recomputed from the collections that
        still count.
        """
        collection = await collections.find_by_id(db, collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)

        previous = collection.status
        collection.status = status
        collection = await collections.save(db, collection)

        if settings.uses_derived_ledger:
            await LedgerService.reconcile_invoice(db, collection.invoice_id)
        elif status == CollectionStatus.BOUNCED.value:
            invoice = await invoices.find_by_id(db, collection.invoice_id)
            if invoice is None:
                raise InvoiceNotFoundError(collection.invoice_id)
            invoice.status = InvoiceStatus.PENDING
            await invoices.save(db, invoice)
            logger.warning(
                "Collection bounced; invoice reopened with bounced amount still counted as paid",
                extra={
                    "collection_id": str(collection.id),
                    "invoice_id": str(invoice.id),
                    "paid_amount": str(invoice.paid_amount),
                    "balance": str(invoice.balance),
                },
            )

        logger.info(
            "Collection status changed",
            extra={"collection_id": str(collection.id), "from_status": previous, "to_status": status},
        )
        return collection

    @staticmethod
    async def reconcile_invoice(db: AsyncSession, invoice_id: UUID) -> Invoice:
        """Recompute paid_amount as the opening paid amount plus the counting collections"""
        invoice = await invoices.find_by_id(db, invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        posted = await collections.find(db, invoice_id=invoice_id)
        invoice.paid_amount = Decimal(invoice.opening_paid_amount) + counted_total(posted)
        invoice.balance = Decimal(invoice.amount) - invoice.paid_amount
        invoice.status = derive_status(invoice.balance)
        await invoices.save(db, invoice)

        logger.info(
            "Invoice reconciled",
            extra={
                "invoice_id": str(invoice.id),
                "paid_amount": str(invoice.paid_amount),
                "balance": str(invoice.balance),
                "invoice_status": invoice.status.value,
            },
        )
        return invoice
