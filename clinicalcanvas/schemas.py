from __future__ import annotations
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator, model_validator
from datetime import date, datetime, timezone

from clinicalcanvas.models import TherapistRole, InvoiceStatus


# 인증
class UserCreate(BaseModel):
    """
    /api/auth/register 요청 스키마.
    """
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: TherapistRole = "therapist"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserPublic(BaseModel):
    """
    비밀번호 해시를 제외한 사용자 정보.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    token: str
    user: UserPublic


class MessageResponse(BaseModel):
    message: str


# 내담자
class ClientIn(BaseModel):
    """Create and full-replace update body. Omitted optional fields are stored as null."""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    insurance: Optional[str] = None
    notes: Optional[str] = None
    status: str = "active"


class ClientPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    therapist_id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    insurance: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# 예약
class AppointmentIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    type: Optional[str] = None
    status: str = "scheduled"
    location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # 타임존 없는 값은 UTC로 간주, 나머지는 UTC로 변환
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_time_range(self) -> "AppointmentIn":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    therapist_id: int
    client_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    type: Optional[str] = None
    status: str
    location: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client_name: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def mark_utc(cls, v: datetime) -> datetime:
        # SQLite 는 타임존 없이 돌려줌. 저장값은 항상 UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# 청구서
class InvoiceIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_id: Optional[int] = None
    amount: float = Field(..., ge=0)
    status: InvoiceStatus = "pending"
    description: Optional[str] = None
    due_date: Optional[date] = None
    service_date: Optional[date] = None
    service_type: Optional[str] = None
    payment_method: Optional[str] = None
    paid_date: Optional[date] = None
    notes: Optional[str] = None


class InvoicePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    therapist_id: int
    client_id: Optional[int] = None
    amount: float
    status: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    service_date: Optional[date] = None
    service_type: Optional[str] = None
    payment_method: Optional[str] = None
    paid_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client_name: Optional[str] = None


# 상담 기록
class NoteIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_id: Optional[int] = None
    appointment_id: Optional[int] = None
    type: str = "session"
    content: str = Field(..., min_length=1)
    session_date: Optional[date] = None


class NotePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    therapist_id: int
    client_id: Optional[int] = None
    appointment_id: Optional[int] = None
    type: str
    content: str
    session_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client_name: Optional[str] = None


# 문서
class DocumentIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    category: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None


class DocumentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    therapist_id: int
    title: str
    category: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# 대시보드
DashboardPeriod = Literal["month", "week"]


class DashboardSummary(BaseModel):
    totalClients: int
    periodAppointments: int
    periodRevenue: float
    outstandingBalance: float


def with_client_name(schema, row):
    """(entity, client_name) 조인 결과를 응답 스키마로 변환"""
    entity, client_name = row
    return schema.model_validate(entity).model_copy(update={"client_name": client_name})
