"""
SQLAlchemy ORM read models for the operative record store.

The engine only reads these tables; they are maintained by the staffing
dashboard (planning, execution import, checklist and document portals).
"""
from decimal import Decimal
from datetime import date as date_type, datetime
from sqlalchemy import String, Boolean, Numeric, Date, TIMESTAMP, func, Index
from sqlalchemy.orm import Mapped, mapped_column

from fleetscore.infrastructure.db.session import Base


class Operative(Base):
    """
    Field operative (custodian or armed guard)
    """
    __tablename__ = "operatives"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)

    # custodian | armed
    kind: Mapped[str] = mapped_column(String(16), nullable=False, server_default="custodian")

    # active | suspended | inactive
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="active")

    base_zone: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # local | out_of_town | indifferent
    service_preference: Mapped[str | None] = mapped_column(String(16), nullable=True)

    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    last_service_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


class AssignmentRecord(Base):
    """
    Planned service offered to an operative (independent of execution)
    """
    __tablename__ = "assignment_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    operative_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    service_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # confirmed | cancelled | pending | ...
    planning_state: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class ExecutionRecord(Base):
    """
    Realized service row. Joined to operatives by free-text name.
    """
    __tablename__ = "execution_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    service_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    operative_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    operative_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # completed | finished | cancelled | in_progress | ...
    state: Mapped[str | None] = mapped_column(String(32), nullable=True)

    scheduled_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True, index=True)
    checked_in_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    distance_km: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    operative_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    client_charge: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # local | out_of_town
    service_scope: Mapped[str | None] = mapped_column(String(16), nullable=True)

    __table_args__ = (
        Index("ix_execution_records_name_scheduled", "operative_name", "scheduled_at"),
    )


class RejectionRecord(Base):
    """
    Assignment declined by the operative
    """
    __tablename__ = "rejection_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    operative_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    service_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    rejected_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class ChecklistRecord(Base):
    """
    Pre-service inspection checklist, tied to the operative phone
    """
    __tablename__ = "checklist_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    operative_phone: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    service_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # complete | draft | ...
    state: Mapped[str] = mapped_column(String(16), nullable=False)

    filed_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class DocumentRecord(Base):
    """
    Document uploaded through the operative portal
    """
    __tablename__ = "document_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    operative_phone: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    doc_type: Mapped[str] = mapped_column(String(64), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    expires_on: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )