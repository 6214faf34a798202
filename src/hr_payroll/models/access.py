"""System users, permission groups and module permissions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, IdMixin, TimestampMixin
from hr_payroll.models.enums import Module, check_values


class User(Base, IdMixin, TimestampMixin):
    """System user. Logs in with CPF and password."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    cpf: Mapped[str] = mapped_column(String(14), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    group_links: Mapped[list[UserGroup]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PermissionGroup(Base, IdMixin, TimestampMixin):
    """Named set of module permissions assigned to users."""

    __tablename__ = "permission_groups"

    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user_links: Mapped[list[UserGroup]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    module_permissions: Mapped[list[ModulePermission]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class UserGroup(Base, IdMixin):
    """Many-to-many link between users and permission groups."""

    __tablename__ = "user_groups"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("permission_groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="user_groups_user_group_unique"),
    )

    # Relationships
    user: Mapped[User] = relationship(back_populates="group_links")
    group: Mapped[PermissionGroup] = relationship(back_populates="user_links")


class ModulePermission(Base, IdMixin):
    """CRUD flags of one group for one module."""

    __tablename__ = "module_permissions"

    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("permission_groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    module: Mapped[str] = mapped_column(String(30), nullable=False)
    can_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_create: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("group_id", "module", name="module_permissions_group_module_unique"),
        CheckConstraint(
            f"module IN ({check_values(Module)})",
            name="module_permissions_module_check",
        ),
    )

    # Relationships
    group: Mapped[PermissionGroup] = relationship(back_populates="module_permissions")
