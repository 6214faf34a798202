"""Vacation and termination models."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, IdMixin, TimestampMixin
from hr_payroll.models.enums import TerminationReason, VacationStatus, check_values

if TYPE_CHECKING:
    from hr_payroll.models.access import User
    from hr_payroll.models.employee import Employee


class Vacation(Base, IdMixin, TimestampMixin):
    """Vacation entitlement for one acquisition period."""

    __tablename__ = "vacations"

    employee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    acquisition_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    acquisition_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    enjoyment_limit: Mapped[date] = mapped_column(Date, nullable=False)
    enjoyment_period_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    enjoyment_period_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=VacationStatus.PENDING.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("days > 0", name="vacations_days_check"),
        CheckConstraint(
            f"status IN ({check_values(VacationStatus)})",
            name="vacations_status_check",
        ),
        CheckConstraint(
            "acquisition_period_end >= acquisition_period_start",
            name="vacations_acquisition_dates_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="vacations")
    approver: Mapped[User | None] = relationship()


class Termination(Base, IdMixin, TimestampMixin):
    """Contract end of an employee and its document completion flags."""

    __tablename__ = "terminations"

    employee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    termination_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    receipt_issued: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    fgts_released: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    severance_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            f"reason IN ({check_values(TerminationReason)})",
            name="terminations_reason_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="terminations")
