"""
Tenant-scoped data gateway.

Every statement issued here is intersected with ``therapist_id = :owner_id``.
Reads, updates and deletes of rows that belong to another therapist behave
exactly like reads of rows that do not exist (``NotFoundError``); creates
always stamp the caller's id as owner, whatever the request body says.

Foreign keys that point at other tenant-owned tables (``client_id``,
``appointment_id``) are checked against the same owner before they are
written, so a therapist cannot attach a note or invoice to someone else's
client.
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, Optional, Type, TypeVar

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from clinicalcanvas.db import Base
from clinicalcanvas.errors import AppError, NotFoundError, UnexpectedError, ValidationError
from clinicalcanvas.models import Appointment, Client, Document, Invoice, Note

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# server-assigned columns; never taken from the caller
SERVER_COLUMNS = frozenset({"id", "therapist_id", "created_at", "updated_at"})
# BIGINT 범위 밖의 id 는 존재할 수 없음
MAX_ID = 2**63 - 1


def valid_id(value: Any) -> bool:
    return isinstance(value, int) and 1 <= value <= MAX_ID


class TenantScopedGateway(Generic[ModelT]):

    def __init__(
        self,
        model: Type[ModelT],
        label: str,
        order_by: str = "created_at",
        references: Optional[dict[str, Type[Base]]] = None,
    ):
        self.model = model
        self.label = label
        self.order_by = order_by
        self.references = references or {}
        self._columns = {c.name: c for c in model.__table__.columns}
        self._writable = {name: c for name, c in self._columns.items() if name not in SERVER_COLUMNS}

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _owned(self, owner_id: int, *criteria):
        return and_(self.model.therapist_id == owner_id, *criteria)

    def _ordering(self):
        return (getattr(self.model, self.order_by).desc(), self.model.id.desc())

    def _filters(self, filters: dict[str, Any]) -> list:
        criteria = []
        for key, value in filters.items():
            if value is None:
                continue
            if key not in self._columns:
                raise ValueError(f"{self.label} has no column {key!r}")
            criteria.append(getattr(self.model, key) == value)
        return criteria

    @staticmethod
    def _unmatchable(filters: dict[str, Any]) -> bool:
        """True when an id filter is outside the key range, so no row can match."""
        return any(
            value is not None and not valid_id(value)
            for key, value in filters.items()
            if key == "id" or key.endswith("_id")
        )

    def _full_row(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Every writable column gets a value: the caller's, the column default, or null."""
        row: dict[str, Any] = {}
        for name, column in self._writable.items():
            value = fields.get(name)
            if value is None and column.default is not None and column.default.is_scalar:
                value = column.default.arg
            row[name] = value
        return row

    async def _check_references(self, db: AsyncSession, owner_id: int, row: dict[str, Any]) -> None:
        for key, ref_model in self.references.items():
            ref_id = row.get(key)
            if ref_id is None:
                continue
            if not valid_id(ref_id):
                raise ValidationError(f"Unknown {key}")
            found = await db.execute(
                select(ref_model.id).where(ref_model.id == ref_id, ref_model.therapist_id == owner_id)
            )
            if found.scalar_one_or_none() is None:
                # 없는 행과 다른 치료사의 행을 구분하지 않음
                raise ValidationError(f"Unknown {key}")

    @asynccontextmanager
    async def _statement(self, db: AsyncSession, action: str) -> AsyncIterator[None]:
        try:
            yield
        except AppError:
            raise
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Integrity error on {action} {self.label}: {e.orig}")
            raise ValidationError(f"{self.label} violates a data constraint") from e
        except SQLAlchemyError as e:
            await db.rollback()
            raise UnexpectedError(f"Failed to {action} {self.label.lower()}") from e

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    async def list(self, db: AsyncSession, owner_id: int, **filters: Any) -> list[ModelT]:
        if self._unmatchable(filters):
            return []
        async with self._statement(db, "list"):
            stmt = (
                select(self.model)
                .where(self._owned(owner_id, *self._filters(filters)))
                .order_by(*self._ordering())
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def list_with_related(
        self, db: AsyncSession, owner_id: int, **filters: Any
    ) -> list[tuple[ModelT, Optional[str]]]:
        """Rows joined with their client's name. The join is scoped to the owner as well."""
        if "client_id" not in self._columns:
            raise TypeError(f"{self.label} has no client reference")
        if self._unmatchable(filters):
            return []
        async with self._statement(db, "list"):
            stmt = (
                select(self.model, Client.name.label("client_name"))
                .outerjoin(
                    Client,
                    and_(Client.id == self.model.client_id, Client.therapist_id == owner_id),
                )
                .where(self._owned(owner_id, *self._filters(filters)))
                .order_by(*self._ordering())
            )
            result = await db.execute(stmt)
            return [(entity, client_name) for entity, client_name in result.all()]

    async def get(self, db: AsyncSession, owner_id: int, row_id: int) -> ModelT:
        if not valid_id(row_id):
            raise NotFoundError(f"{self.label} not found")
        async with self._statement(db, "fetch"):
            result = await db.execute(
                select(self.model).where(self._owned(owner_id, self.model.id == row_id))
            )
            entity = result.scalar_one_or_none()
        if entity is None:
            raise NotFoundError(f"{self.label} not found")
        return entity

    async def get_with_related(self, db: AsyncSession, owner_id: int, row_id: int) -> tuple[ModelT, Optional[str]]:
        rows = await self.list_with_related(db, owner_id, id=row_id)
        if not rows:
            raise NotFoundError(f"{self.label} not found")
        return rows[0]

    async def create(self, db: AsyncSession, owner_id: int, fields: dict[str, Any]) -> ModelT:
        row = self._full_row(fields)
        async with self._statement(db, "create"):
            await self._check_references(db, owner_id, row)
            result = await db.execute(
                insert(self.model)
                .values(therapist_id=owner_id, **row)
                .returning(self.model)
            )
            entity = result.scalar_one()
            await db.commit()
        logger.info(f"{self.label} {entity.id} created for therapist {owner_id}")
        return entity

    async def update(self, db: AsyncSession, owner_id: int, row_id: int, fields: dict[str, Any]) -> ModelT:
        """Full replace: columns the caller leaves out are reset, not kept."""
        if not valid_id(row_id):
            raise NotFoundError(f"{self.label} not found")
        row = self._full_row(fields)
        async with self._statement(db, "update"):
            await self._check_references(db, owner_id, row)
            result = await db.execute(
                update(self.model)
                .where(self._owned(owner_id, self.model.id == row_id))
                .values(updated_at=func.now(), **row)
                .returning(self.model)
                .execution_options(populate_existing=True)
            )
            entity = result.scalar_one_or_none()
            if entity is None:
                await db.rollback()
                raise NotFoundError(f"{self.label} not found")
            await db.commit()
        return entity

    async def delete(self, db: AsyncSession, owner_id: int, row_id: int) -> None:
        if not valid_id(row_id):
            raise NotFoundError(f"{self.label} not found")
        async with self._statement(db, "delete"):
            result = await db.execute(
                delete(self.model)
                .where(self._owned(owner_id, self.model.id == row_id))
                .returning(self.model.id)
            )
            deleted = result.scalar_one_or_none()
            if deleted is None:
                await db.rollback()
                raise NotFoundError(f"{self.label} not found")
            await db.commit()
        logger.info(f"{self.label} {row_id} deleted by therapist {owner_id}")


clients = TenantScopedGateway(Client, "Client")
appointments = TenantScopedGateway(
    Appointment, "Appointment", order_by="start_time", references={"client_id": Client}
)
invoices = TenantScopedGateway(Invoice, "Invoice", references={"client_id": Client})
notes = TenantScopedGateway(
    Note, "Note", references={"client_id": Client, "appointment_id": Appointment}
)
documents = TenantScopedGateway(Document, "Document")
