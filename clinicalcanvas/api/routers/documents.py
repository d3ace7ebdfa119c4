from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.schemas import DocumentIn, DocumentPublic, MessageResponse
from clinicalcanvas.services import gateway
from clinicalcanvas.services.auth_service import TokenClaims, get_current_user

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=List[DocumentPublic])
async def list_documents(
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.documents.list(db, current_user.user_id)


@router.get("/{document_id}", response_model=DocumentPublic)
async def get_document(
    document_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.documents.get(db, current_user.user_id, document_id)


@router.post("", response_model=DocumentPublic, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_in: DocumentIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    # file_url 은 외부 저장소 URL 그대로 저장
    return await gateway.documents.create(db, current_user.user_id, document_in.model_dump())


@router.put("/{document_id}", response_model=DocumentPublic)
async def update_document(
    document_id: int,
    document_in: DocumentIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.documents.update(db, current_user.user_id, document_id, document_in.model_dump())


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    await gateway.documents.delete(db, current_user.user_id, document_id)
    return MessageResponse(message="Document deleted successfully")
