from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.schemas import InvoiceIn, InvoicePublic, MessageResponse, with_client_name
from clinicalcanvas.services import gateway
from clinicalcanvas.services.auth_service import TokenClaims, get_current_user

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=List[InvoicePublic])
async def list_invoices(
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    rows = await gateway.invoices.list_with_related(db, current_user.user_id)
    return [with_client_name(InvoicePublic, row) for row in rows]


@router.get("/{invoice_id}", response_model=InvoicePublic)
async def get_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    row = await gateway.invoices.get_with_related(db, current_user.user_id, invoice_id)
    return with_client_name(InvoicePublic, row)


@router.post("", response_model=InvoicePublic, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_in: InvoiceIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    # status 생략 시 'pending'
    return await gateway.invoices.create(db, current_user.user_id, invoice_in.model_dump())


@router.put("/{invoice_id}", response_model=InvoicePublic)
async def update_invoice(
    invoice_id: int,
    invoice_in: InvoiceIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.invoices.update(db, current_user.user_id, invoice_id, invoice_in.model_dump())


@router.delete("/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    await gateway.invoices.delete(db, current_user.user_id, invoice_id)
    return MessageResponse(message="Invoice deleted successfully")
