from __future__ import annotations
from datetime import date, datetime
from typing import Optional, Literal

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    BigInteger, String, Text, Date, DateTime, Numeric, CheckConstraint,
    ForeignKey, Index
)
from sqlalchemy.sql import func

from clinicalcanvas.db import Base, BigIntPK

TherapistRole = Literal["therapist", "psychologist", "counselor", "social_worker"]
THERAPIST_ROLES: tuple[str, ...] = ("therapist", "psychologist", "counselor", "social_worker")

InvoiceStatus = Literal["pending", "paid", "overdue", "cancelled"]


def _owner_fk() -> Mapped[int]:
    return mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )


def _client_fk() -> Mapped[Optional[int]]:
    return mapped_column(
        BigInteger, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role in ('therapist','psychologist','counselor','social_worker')",
            name="ck_users_role",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    # bcrypt/pbkdf2 해시만 저장 (평문 금지)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), default="therapist", server_default="therapist", nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        Index("idx_clients_therapist_created", "therapist_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    therapist_id: Mapped[int] = _owner_fk()

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    dob: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    insurance: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="active", server_default="active", nullable=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_therapist_start", "therapist_id", "start_time"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    therapist_id: Mapped[int] = _owner_fk()
    client_id: Mapped[Optional[int]] = _client_fk()

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="scheduled", server_default="scheduled", nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint(
            "status in ('pending','paid','overdue','cancelled')",
            name="ck_invoices_status",
        ),
        Index("idx_invoices_therapist_created", "therapist_id", "created_at"),
        Index("idx_invoices_therapist_status", "therapist_id", "status"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    therapist_id: Mapped[int] = _owner_fk()
    client_id: Mapped[Optional[int]] = _client_fk()

    # asdecimal=False: API는 float로 내려줌
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="pending", server_default="pending", nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    service_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    service_type: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Note(Base):
    __tablename__ = "notes"
    __table_args__ = (
        Index("idx_notes_therapist_client", "therapist_id", "client_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    therapist_id: Mapped[int] = _owner_fk()
    client_id: Mapped[Optional[int]] = _client_fk()
    appointment_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True
    )

    type: Mapped[str] = mapped_column(String(64), default="session", server_default="session", nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    session_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        Index("idx_documents_therapist_created", "therapist_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    therapist_id: Mapped[int] = _owner_fk()

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    # 파일 저장소는 외부. URL은 불투명 문자열로만 취급
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
