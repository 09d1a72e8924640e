from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api import deps
from app.services.school_service import SchoolService
from app.schemas.school import SchoolCreate, SchoolResponse, SchoolAggregateResponse
from app.schemas.billing import InvoiceResponse, CollectionResponse
from app.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[SchoolResponse]])
async def list_schools(db: AsyncSession = Depends(deps.get_db)) -> Any:
    """
    List all registered schools.
    """
    schools = await SchoolService.list_schools(db)
    return SuccessResponse(data=schools)


@router.post("", response_model=SuccessResponse[SchoolResponse], status_code=status.HTTP_201_CREATED)
async def create_school(
    school_in: SchoolCreate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Register a school.
    """
    school = await SchoolService.create_school(db, school_in)
    return SuccessResponse(data=school, message="School created successfully")


@router.get("/{school_id}", response_model=SuccessResponse[SchoolAggregateResponse])
async def get_school(
    school_id: UUID,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Fetch a school with its invoices, collections and balance.
    """
    aggregate = await SchoolService.get_school_aggregate(db, school_id)
    if not aggregate:
        raise HTTPException(status_code=404, detail="School not found")

    school = aggregate.school
    data = SchoolAggregateResponse(
        **SchoolResponse.model_validate(school).model_dump(),
        invoices=[InvoiceResponse.model_validate(i) for i in school.invoices],
        collections=[CollectionResponse.model_validate(c) for c in school.collections],
        total_invoiced=aggregate.total_invoiced,
        total_collected=aggregate.total_collected,
        school_balance=aggregate.school_balance,
    )
    return SuccessResponse(data=data)
