"""Salary advance and monthly payroll models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, IdMixin, Money, Percentage, TimestampMixin
from hr_payroll.models.enums import PaymentStatus, check_values

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee

ZERO = Decimal("0.00")


def _money_column() -> Mapped[Decimal]:
    return mapped_column(Money, nullable=False, default=ZERO, server_default="0.00")


class Advance(Base, IdMixin, TimestampMixin):
    """Partial salary payment made before the regular payroll cycle."""

    __tablename__ = "advances"

    employee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Percentage, nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
    )

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="advances_month_check"),
        CheckConstraint("percentage >= 0 AND percentage <= 100", name="advances_percentage_check"),
        CheckConstraint(
            f"status IN ({check_values(PaymentStatus)})",
            name="advances_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="advances")


class Payroll(Base, IdMixin, TimestampMixin):
    """One employee's monthly compensation breakdown."""

    __tablename__ = "payroll"

    employee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Earnings
    base_salary: Mapped[Decimal] = _money_column()
    agreed_salary: Mapped[Decimal] = _money_column()
    night_shift_additional: Mapped[Decimal] = _money_column()
    night_shift_dsr: Mapped[Decimal] = _money_column()
    overtime: Mapped[Decimal] = _money_column()
    overtime_dsr: Mapped[Decimal] = _money_column()
    vacation_bonus: Mapped[Decimal] = _money_column()
    five_year_bonus: Mapped[Decimal] = _money_column()
    position_gratification: Mapped[Decimal] = _money_column()
    general_gratification: Mapped[Decimal] = _money_column()
    cashier_gratification: Mapped[Decimal] = _money_column()
    family_allowance: Mapped[Decimal] = _money_column()
    holiday_pay: Mapped[Decimal] = _money_column()
    unhealthiness: Mapped[Decimal] = _money_column()
    maternity_leave: Mapped[Decimal] = _money_column()
    tips: Mapped[Decimal] = _money_column()
    others: Mapped[Decimal] = _money_column()

    # Deductions
    advance: Mapped[Decimal] = _money_column()
    vouchers: Mapped[Decimal] = _money_column()
    inss: Mapped[Decimal] = _money_column()
    inss_vacation: Mapped[Decimal] = _money_column()
    irpf: Mapped[Decimal] = _money_column()
    union_fee: Mapped[Decimal] = _money_column()
    absences: Mapped[Decimal] = _money_column()
    absence_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Derived
    gross_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_month_check"),
        CheckConstraint(
            f"status IN ({check_values(PaymentStatus)})",
            name="payroll_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="payroll_entries")
