"""Employee and job position models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import (
    Base,
    IdMixin,
    Money,
    Percentage,
    TimestampMixin,
    UpdatedAtMixin,
)
from hr_payroll.models.enums import EmployeeStatus, check_values

if TYPE_CHECKING:
    from hr_payroll.models.branch import Branch
    from hr_payroll.models.leave import Termination, Vacation
    from hr_payroll.models.payroll import Advance, Payroll


class JobPosition(Base, IdMixin, TimestampMixin):
    """Job position/role."""

    __tablename__ = "job_positions"

    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_salary: Mapped[Decimal | None] = mapped_column(Money, nullable=True)

    # Relationships
    employees: Mapped[list[Employee]] = relationship(
        back_populates="position",
        passive_deletes=True,
    )


class Employee(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Employee record. Owned by a branch; owns its HR records."""

    __tablename__ = "employees"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    cpf: Mapped[str] = mapped_column(String(14), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    branch_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
    )
    position_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("job_positions.id", ondelete="SET NULL"),
        nullable=True,
    )
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(Money, nullable=False)
    agreed_salary: Mapped[Decimal] = mapped_column(Money, nullable=False)
    advance_percentage: Mapped[Decimal] = mapped_column(
        Percentage,
        nullable=False,
        default=Decimal("40.00"),
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EmployeeStatus.ACTIVE.value,
    )

    __table_args__ = (
        CheckConstraint("base_salary >= 0", name="employees_base_salary_check"),
        CheckConstraint("agreed_salary >= 0", name="employees_agreed_salary_check"),
        CheckConstraint(
            "advance_percentage >= 0 AND advance_percentage <= 100",
            name="employees_advance_percentage_check",
        ),
        CheckConstraint(
            f"status IN ({check_values(EmployeeStatus)})",
            name="employees_status_check",
        ),
    )

    # Relationships
    branch: Mapped[Branch] = relationship(back_populates="employees")
    position: Mapped[JobPosition | None] = relationship(back_populates="employees")
    vacations: Mapped[list[Vacation]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    terminations: Mapped[list[Termination]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    advances: Mapped[list[Advance]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payroll_entries: Mapped[list[Payroll]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
