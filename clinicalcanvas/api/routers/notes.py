from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.schemas import NoteIn, NotePublic, MessageResponse, with_client_name
from clinicalcanvas.services import gateway
from clinicalcanvas.services.auth_service import TokenClaims, get_current_user

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("", response_model=List[NotePublic])
async def list_notes(
    client_id: Optional[int] = Query(None, description="Only notes about this client"),
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    """상담 기록 목록. client_id 를 주면 해당 내담자 기록만 조회"""
    rows = await gateway.notes.list_with_related(db, current_user.user_id, client_id=client_id)
    return [with_client_name(NotePublic, row) for row in rows]


@router.get("/{note_id}", response_model=NotePublic)
async def get_note(
    note_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    row = await gateway.notes.get_with_related(db, current_user.user_id, note_id)
    return with_client_name(NotePublic, row)


@router.post("", response_model=NotePublic, status_code=status.HTTP_201_CREATED)
async def create_note(
    note_in: NoteIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.notes.create(db, current_user.user_id, note_in.model_dump())


@router.put("/{note_id}", response_model=NotePublic)
async def update_note(
    note_id: int,
    note_in: NoteIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.notes.update(db, current_user.user_id, note_id, note_in.model_dump())


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    await gateway.notes.delete(db, current_user.user_id, note_id)
    return MessageResponse(message="Note deleted successfully")
