from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api import deps
from app.services.ledger_service import LedgerService
from app.schemas.billing import InvoiceCreate, InvoiceUpdate, InvoiceResponse
from app.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[InvoiceResponse]])
async def list_all_invoices(db: AsyncSession = Depends(deps.get_db)) -> Any:
    """
    List every invoice, oldest first.
    """
    invoices = await LedgerService.list_invoices(db)
    return SuccessResponse(data=invoices)


@router.get("/school/{school_id}", response_model=SuccessResponse[List[InvoiceResponse]])
async def list_school_invoices(
    school_id: UUID,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    List the invoices issued to one school.
    """
    invoices = await LedgerService.list_invoices(db, school_id=school_id)
    return SuccessResponse(data=invoices)


@router.post("", response_model=SuccessResponse[InvoiceResponse], status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_in: InvoiceCreate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Create an invoice. The invoice number is allocated by the server.
    """
    invoice = await LedgerService.create_invoice(db, invoice_in)
    return SuccessResponse(data=invoice, message="Invoice created successfully")


@router.get("/{invoice_id}", response_model=SuccessResponse[InvoiceResponse])
async def get_invoice(
    invoice_id: UUID,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    invoice = await LedgerService.get_invoice(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return SuccessResponse(data=invoice)


@router.put("/{invoice_id}", response_model=SuccessResponse[Optional[InvoiceResponse]])
async def update_invoice(
    invoice_id: UUID,
    invoice_in: InvoiceUpdate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Overwrite invoice fields as given. Ledger fields are not re-derived;
    data is null when no invoice has this id.
    """
    invoice = await LedgerService.update_invoice(db, invoice_id, invoice_in)
    return SuccessResponse(data=invoice, message="Invoice updated successfully")


@router.delete("/{invoice_id}", response_model=SuccessResponse)
async def delete_invoice(
    invoice_id: UUID,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    await LedgerService.delete_invoice(db, invoice_id)
    return SuccessResponse(data=None, message="Invoice deleted successfully")
