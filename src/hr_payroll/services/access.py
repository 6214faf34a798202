"""Users, permission groups and the module permission model.

A user's capability for (module, action) is the logical OR, across all
groups the user belongs to, of that group's flag for the module. A missing
(group, module) row grants nothing and there are no deny rules, so a user
without groups has no permissions anywhere.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.errors import DuplicateEntityError, EntityNotFoundError, PermissionDeniedError
from hr_payroll.models import (
    Action,
    Module,
    ModulePermission,
    PermissionGroup,
    User,
    UserGroup,
)
from hr_payroll.services.auth import hash_password
from hr_payroll.services.base import EntityService
from hr_payroll.services.cache import ENTITY_TTL, QueryCache

logger = logging.getLogger(__name__)

PERMISSION_FLAGS = ("can_read", "can_create", "can_update", "can_delete")


@dataclass(frozen=True)
class ModuleGrant:
    """Effective CRUD flags for one module."""

    can_read: bool = False
    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False

    def allows(self, action: Action | str) -> bool:
        return bool(getattr(self, f"can_{Action(action).value}"))

    def merge(self, other: Any) -> ModuleGrant:
        """OR this grant with another grant or permission row."""
        return ModuleGrant(
            **{flag: getattr(self, flag) or bool(getattr(other, flag)) for flag in PERMISSION_FLAGS}
        )


NO_GRANT = ModuleGrant()


def evaluate_permissions(rows: Iterable[Any]) -> dict[str, ModuleGrant]:
    """Fold permission rows of all of a user's groups into one grant per module.

    Every module is present in the result; modules without rows get NO_GRANT.
    """
    grants: dict[str, ModuleGrant] = {module.value: NO_GRANT for module in Module}
    for row in rows:
        module = Module(row.module).value
        grants[module] = grants[module].merge(row)
    return grants


class UserService(EntityService[User]):
    """System users. Passwords are hashed on write and never listed."""

    model = User
    entity = "users"
    label = "User"
    search_columns = (User.name, User.email, User.cpf)
    cascades_to = ("permissions",)

    def row_to_dict(self, row: Any) -> dict[str, Any]:
        data = row.to_dict()
        data.pop("password", None)
        return data

    async def _ensure_unique(self, values: dict[str, Any], current_id: str | None = None) -> None:
        for field, lookup in (("cpf", self.get_by_cpf), ("email", self.get_by_email)):
            value = values.get(field)
            if value is None:
                continue
            existing = await lookup(value)
            if existing is not None and existing.id != current_id:
                raise DuplicateEntityError(self.label, field, value)

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        await self._ensure_unique(values)
        values["password"] = hash_password(values["password"])
        return values

    async def prepare_update(self, obj: User, changes: dict[str, Any]) -> dict[str, Any]:
        await self._ensure_unique(changes, current_id=obj.id)
        if changes.get("password"):
            changes["password"] = hash_password(changes["password"])
        else:
            changes.pop("password", None)
        return changes

    async def update(self, entity_id: str, changes: dict[str, Any]) -> User:
        user = await super().update(entity_id, changes)
        if "active" in changes:
            self.cache.invalidate_entities("permissions")
        return user

    async def get_by_cpf(self, cpf: str) -> User | None:
        result = await self.session.execute(select(User).where(User.cpf == cpf))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


class PermissionGroupService(EntityService[PermissionGroup]):
    model = PermissionGroup
    entity = "permission_groups"
    label = "Permission group"
    search_columns = (PermissionGroup.name, PermissionGroup.description)
    cascades_to = ("permissions",)

    def order_clause(self) -> tuple[Any, ...]:
        return (PermissionGroup.name.asc(),)

    async def get_by_name(self, name: str) -> PermissionGroup | None:
        result = await self.session.execute(
            select(PermissionGroup).where(PermissionGroup.name == name)
        )
        return result.scalar_one_or_none()


class PermissionService:
    """Group membership, module permissions and permission evaluation."""

    def __init__(self, session: AsyncSession, cache: QueryCache):
        self.session = session
        self.cache = cache

    def _invalidate(self) -> None:
        self.cache.invalidate_entities("permissions")

    async def _require(self, model: type[Any], label: str, entity_id: str) -> Any:
        obj = await self.session.get(model, entity_id)
        if obj is None:
            raise EntityNotFoundError(label, entity_id)
        return obj

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def assign_user_to_group(self, user_id: str, group_id: str) -> UserGroup:
        """Add a user to a group. Assigning twice returns the existing link."""
        await self._require(User, "User", user_id)
        await self._require(PermissionGroup, "Permission group", group_id)

        existing = await self._get_link(user_id, group_id)
        if existing is not None:
            return existing

        link = UserGroup(user_id=user_id, group_id=group_id)
        self.session.add(link)
        await self.session.commit()
        await self.session.refresh(link)
        self._invalidate()
        logger.info("Assigned user %s to group %s", user_id, group_id)
        return link

    async def remove_user_from_group(self, user_id: str, group_id: str) -> None:
        link = await self._get_link(user_id, group_id)
        if link is None:
            raise EntityNotFoundError("User group", f"{user_id}/{group_id}")
        await self.session.delete(link)
        await self.session.commit()
        self._invalidate()
        logger.info("Removed user %s from group %s", user_id, group_id)

    async def _get_link(self, user_id: str, group_id: str) -> UserGroup | None:
        result = await self.session.execute(
            select(UserGroup).where(UserGroup.user_id == user_id, UserGroup.group_id == group_id)
        )
        return result.scalar_one_or_none()

    async def list_user_groups(self, user_id: str) -> list[dict[str, Any]]:
        """Groups of a user with their assignment time."""
        await self._require(User, "User", user_id)
        result = await self.session.execute(
            select(PermissionGroup, UserGroup.assigned_at)
            .join(UserGroup, UserGroup.group_id == PermissionGroup.id)
            .where(UserGroup.user_id == user_id)
            .order_by(PermissionGroup.name)
        )
        groups = []
        for group, assigned_at in result.all():
            data = group.to_dict()
            data["assigned_at"] = assigned_at
            groups.append(data)
        return groups

    # ------------------------------------------------------------------
    # Module permissions
    # ------------------------------------------------------------------

    async def list_group_permissions(self, group_id: str) -> list[ModulePermission]:
        await self._require(PermissionGroup, "Permission group", group_id)
        result = await self.session.execute(
            select(ModulePermission)
            .where(ModulePermission.group_id == group_id)
            .order_by(ModulePermission.module)
        )
        return list(result.scalars().all())

    async def set_module_permission(
        self,
        group_id: str,
        module: Module | str,
        **flags: bool,
    ) -> ModulePermission:
        """Create or replace the flags of a group for a module."""
        await self._require(PermissionGroup, "Permission group", group_id)
        module = Module(module).value

        result = await self.session.execute(
            select(ModulePermission).where(
                ModulePermission.group_id == group_id,
                ModulePermission.module == module,
            )
        )
        permission = result.scalar_one_or_none()
        if permission is None:
            permission = ModulePermission(group_id=group_id, module=module)
            self.session.add(permission)
        for flag in PERMISSION_FLAGS:
            setattr(permission, flag, bool(flags.get(flag, False)))

        await self.session.commit()
        await self.session.refresh(permission)
        self._invalidate()
        logger.info("Set %s permissions for group %s", module, group_id)
        return permission

    async def delete_module_permission(self, group_id: str, module: Module | str) -> None:
        module = Module(module).value
        result = await self.session.execute(
            select(ModulePermission).where(
                ModulePermission.group_id == group_id,
                ModulePermission.module == module,
            )
        )
        permission = result.scalar_one_or_none()
        if permission is None:
            raise EntityNotFoundError("Module permission", f"{group_id}/{module}")
        await self.session.delete(permission)
        await self.session.commit()
        self._invalidate()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def effective_permissions(self, user_id: str) -> dict[str, ModuleGrant]:
        """Effective grant per module for a user."""
        return await self.cache.get_or_set(
            f"permissions:user:{user_id}",
            lambda: self._fetch_effective(user_id),
            ttl=ENTITY_TTL["permissions"],
        )

    async def _fetch_effective(self, user_id: str) -> dict[str, ModuleGrant]:
        result = await self.session.execute(
            select(ModulePermission)
            .join(UserGroup, UserGroup.group_id == ModulePermission.group_id)
            .where(UserGroup.user_id == user_id)
        )
        return evaluate_permissions(result.scalars().all())

    async def check(self, user_id: str, module: Module | str, action: Action | str) -> bool:
        grants = await self.effective_permissions(user_id)
        return grants[Module(module).value].allows(action)

    async def require(self, user_id: str, module: Module | str, action: Action | str) -> None:
        """Raise PermissionDeniedError unless the user may perform action on module."""
        if not await self.check(user_id, module, action):
            raise PermissionDeniedError(Module(module).value, Action(action).value)

    @staticmethod
    def grants_as_dict(grants: dict[str, ModuleGrant]) -> dict[str, dict[str, bool]]:
        return {module: asdict(grant) for module, grant in grants.items()}
