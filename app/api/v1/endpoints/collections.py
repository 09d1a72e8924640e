from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api import deps
from app.services.ledger_service import LedgerService
from app.schemas.billing import CollectionCreate, CollectionStatusUpdate, CollectionResponse
from app.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[CollectionResponse]])
async def list_collections(
    invoice_id: Optional[UUID] = None,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    List collections, optionally only those posted against one invoice.
    """
    collections = await LedgerService.list_collections(db, invoice_id=invoice_id)
    return SuccessResponse(data=collections)


@router.post("", response_model=SuccessResponse[CollectionResponse], status_code=status.HTTP_201_CREATED)
async def add_collection(
    collection_in: CollectionCreate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Record a payment against an invoice and update the invoice's paid amount,
    balance and status.
    """
    collection = await LedgerService.add_collection(db, collection_in)
    return SuccessResponse(data=collection, message="Collection added successfully")


@router.patch("/{collection_id}/status", response_model=SuccessResponse[CollectionResponse])
async def update_collection_status(
    collection_id: UUID,
    status_in: CollectionStatusUpdate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Change a collection's status. Bounced reopens the invoice.
    """
    collection = await LedgerService.update_collection_status(db, collection_id, status_in.status)
    return SuccessResponse(data=collection, message="Collection status updated successfully")
