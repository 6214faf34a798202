"""Branch (company unit) model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, IdMixin, TimestampMixin, UpdatedAtMixin

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee


class Branch(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Company branch. Owns its employees."""

    __tablename__ = "branches"

    fantasy_name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    cnpj: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    neighborhood: Mapped[str] = mapped_column(String(120), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(10), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    employees: Mapped[list[Employee]] = relationship(
        back_populates="branch",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
