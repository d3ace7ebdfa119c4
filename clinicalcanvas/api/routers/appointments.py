from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.schemas import AppointmentIn, AppointmentPublic, MessageResponse, with_client_name
from clinicalcanvas.services import gateway
from clinicalcanvas.services.auth_service import TokenClaims, get_current_user

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.get("", response_model=List[AppointmentPublic])
async def list_appointments(
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    """내 예약 목록 (내담자 이름 포함, 시작 시간 최신순)"""
    rows = await gateway.appointments.list_with_related(db, current_user.user_id)
    return [with_client_name(AppointmentPublic, row) for row in rows]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    row = await gateway.appointments.get_with_related(db, current_user.user_id, appointment_id)
    return with_client_name(AppointmentPublic, row)


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment_in: AppointmentIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.appointments.create(db, current_user.user_id, appointment_in.model_dump())


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment(
    appointment_id: int,
    appointment_in: AppointmentIn,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await gateway.appointments.update(
        db, current_user.user_id, appointment_id, appointment_in.model_dump()
    )


@router.delete("/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    await gateway.appointments.delete(db, current_user.user_id, appointment_id)
    return MessageResponse(message="Appointment deleted successfully")
