from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.schemas import ClientIn, ClientPublic, MessageResponse
from clinicalcanvas.services import gateway
from clinicalcanvas.services.auth_service import TokenClaims, get_current_user

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[ClientPublic])
async def list_clients(
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.clients.list(db, current_user.user_id)


@router.get("/{client_id}", response_model=ClientPublic)
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.clients.get(db, current_user.user_id, client_id)


@router.post("", response_model=ClientPublic, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_in: ClientIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.clients.create(db, current_user.user_id, client_in.model_dump())


@router.put("/{client_id}", response_model=ClientPublic)
async def update_client(
    client_id: int,
    client_in: ClientIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.clients.update(db, current_user.user_id, client_id, client_in.model_dump())


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    await gateway.clients.delete(db, current_user.user_id, client_id)
    return MessageResponse(message="Client deleted successfully")
