"""Employee-owned records: vacations, terminations, advances and payroll entries."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, ClassVar

from sqlalchemy import Select, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.calculators import (
    DEDUCTION_FIELDS,
    EARNING_FIELDS,
    compute_advance_amount,
    compute_payroll_totals,
    quantize_money,
)
from hr_payroll.errors import EntityNotFoundError
from hr_payroll.models import (
    Advance,
    Employee,
    PaymentStatus,
    Payroll,
    Termination,
    Vacation,
    VacationStatus,
)
from hr_payroll.services.base import EntityService, ModelT
from hr_payroll.services.cache import ENTITY_TTL, QueryCache
from hr_payroll.services.state_machine import (
    PaymentStateMachine,
    StatusStateMachine,
    VacationStateMachine,
)

logger = logging.getLogger(__name__)

# Pending vacations whose enjoyment limit falls within this window are expiring
EXPIRING_WINDOW_DAYS = 30


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmployeeRecordService(EntityService[ModelT]):
    """Base for records owned by exactly one employee.

    List rows carry the owner's name and the free-text search matches it.
    When a state machine is set, status changes on update are validated
    against it unless strict transitions are disabled.
    """

    search_columns = (Employee.name,)
    state_machine: ClassVar[type[StatusStateMachine] | None] = None

    def __init__(
        self,
        session: AsyncSession,
        cache: QueryCache,
        strict_transitions: bool = True,
        actor_id: str | None = None,
    ):
        super().__init__(session, cache)
        self.strict_transitions = strict_transitions
        self.actor_id = actor_id

    def base_query(self) -> Select[Any]:
        return select(self.model, Employee.name).join(
            Employee, self.model.employee_id == Employee.id
        )

    def scalars_or_rows(self, result: Any) -> list[Any]:
        return list(result.all())

    def row_to_dict(self, row: Any) -> dict[str, Any]:
        record, employee_name = row
        data = record.to_dict()
        data["employee_name"] = employee_name
        return data

    async def list_for_employee(self, employee_id: str) -> list[dict[str, Any]]:
        """All records of one employee."""
        await self._require_employee(employee_id)
        return await self.cache.get_or_set(
            f"{self.entity}:employee:{employee_id}",
            lambda: self._fetch_for_employee(employee_id),
            ttl=ENTITY_TTL.get(self.entity),
        )

    def employee_order_clause(self) -> tuple[Any, ...]:
        return self.order_clause()

    async def _fetch_for_employee(self, employee_id: str) -> list[dict[str, Any]]:
        query = (
            self.base_query()
            .where(self.model.employee_id == employee_id)
            .order_by(*self.employee_order_clause())
        )
        result = await self.session.execute(query)
        return [self.row_to_dict(row) for row in self.scalars_or_rows(result)]

    async def _require_employee(self, employee_id: str) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise EntityNotFoundError("Employee", employee_id)
        return employee

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        await self._require_employee(values["employee_id"])
        return values

    async def prepare_update(self, obj: ModelT, changes: dict[str, Any]) -> dict[str, Any]:
        if "employee_id" in changes and changes["employee_id"] != obj.employee_id:
            await self._require_employee(changes["employee_id"])

        new_status = changes.get("status")
        if self.state_machine is not None and new_status is not None:
            if self.strict_transitions:
                self.state_machine.validate_transition(obj.status, new_status)
            if new_status != obj.status:
                logger.info(
                    "%s %s status %s -> %s", self.label, obj.id, obj.status, new_status
                )
                self.on_status_change(obj.status, new_status, changes)
        return changes

    def on_status_change(self, from_status: str | None, to_status: str, values: dict[str, Any]) -> None:
        """Hook for side effects of entering a status."""


class VacationService(EmployeeRecordService[Vacation]):
    """Vacations. Entering 'aprovado' stamps the approval time and approver."""

    model = Vacation
    entity = "vacations"
    label = "Vacation"
    state_machine = VacationStateMachine

    def employee_order_clause(self) -> tuple[Any, ...]:
        return (Vacation.acquisition_period_start.desc(),)

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        values = await super().prepare_create(values)
        values.setdefault("status", VacationStatus.PENDING.value)
        values.pop("approved_at", None)
        if values["status"] == VacationStatus.APPROVED.value:
            self.on_status_change(None, values["status"], values)
        return values

    def on_status_change(self, from_status: str | None, to_status: str, values: dict[str, Any]) -> None:
        if to_status == VacationStatus.APPROVED.value:
            values["approved_at"] = utcnow()
            if values.get("approved_by") is None and self.actor_id is not None:
                values["approved_by"] = self.actor_id

    async def stats(self) -> dict[str, int]:
        """Counts of pending, approved, in-progress and expiring vacations."""
        return await self.cache.get_or_set(
            "stats:vacations",
            self._fetch_stats,
            ttl=ENTITY_TTL["stats"],
        )

    async def _fetch_stats(self) -> dict[str, int]:
        expiring_before = date.today() + timedelta(days=EXPIRING_WINDOW_DAYS)

        def count_where(condition: Any) -> Any:
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        result = await self.session.execute(
            select(
                count_where(Vacation.status == VacationStatus.PENDING.value),
                count_where(Vacation.status == VacationStatus.APPROVED.value),
                count_where(Vacation.status == VacationStatus.IN_PROGRESS.value),
                count_where(
                    (Vacation.status == VacationStatus.PENDING.value)
                    & (Vacation.enjoyment_limit <= expiring_before)
                ),
            )
        )
        pending, approved, active, expiring = result.one()
        return {
            "pending": int(pending or 0),
            "approved": int(approved or 0),
            "active": int(active or 0),
            "expiring": int(expiring or 0),
        }


class TerminationService(EmployeeRecordService[Termination]):
    """Terminations. The three document flags are independent."""

    model = Termination
    entity = "terminations"
    label = "Termination"

    def employee_order_clause(self) -> tuple[Any, ...]:
        return (Termination.termination_date.desc(),)


class AdvanceService(EmployeeRecordService[Advance]):
    """Salary advances. The advance amount is always recomputed on write."""

    model = Advance
    entity = "advances"
    label = "Advance"
    state_machine = PaymentStateMachine

    def employee_order_clause(self) -> tuple[Any, ...]:
        return (Advance.year.desc(), Advance.month.desc())

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        employee = await self._require_employee(values["employee_id"])
        if values.get("base_amount") is None:
            values["base_amount"] = employee.base_salary
        if values.get("percentage") is None:
            values["percentage"] = employee.advance_percentage
        values.setdefault("status", PaymentStatus.PENDING.value)
        values["advance_amount"] = compute_advance_amount(
            values["base_amount"], values["percentage"]
        )
        return values

    async def prepare_update(self, obj: Advance, changes: dict[str, Any]) -> dict[str, Any]:
        changes = await super().prepare_update(obj, changes)
        changes.pop("advance_amount", None)
        base_amount = changes.get("base_amount", obj.base_amount)
        percentage = changes.get("percentage", obj.percentage)
        changes["advance_amount"] = compute_advance_amount(base_amount, percentage)
        return changes


class PayrollService(EmployeeRecordService[Payroll]):
    """Payroll entries. Gross and net amounts are always recomputed on write;
    entering 'processado' stamps the processing time."""

    model = Payroll
    entity = "payroll"
    label = "Payroll entry"
    state_machine = PaymentStateMachine

    def employee_order_clause(self) -> tuple[Any, ...]:
        return (Payroll.year.desc(), Payroll.month.desc())

    @staticmethod
    def _apply_totals(values: dict[str, Any], source: Any = None) -> None:
        merged: dict[str, Any] = {}
        for name in (*EARNING_FIELDS, *DEDUCTION_FIELDS):
            if name in values:
                merged[name] = values[name]
            elif source is not None:
                merged[name] = getattr(source, name)
        totals = compute_payroll_totals(merged)
        values["gross_amount"] = totals.gross
        values["net_amount"] = totals.net

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        values = await super().prepare_create(values)
        for name in (*EARNING_FIELDS, *DEDUCTION_FIELDS):
            values[name] = quantize_money(values.get(name))
        values.setdefault("status", PaymentStatus.PENDING.value)
        values.pop("processed_at", None)
        self._apply_totals(values)
        if values["status"] == PaymentStatus.PROCESSED.value:
            self.on_status_change(None, values["status"], values)
        return values

    async def prepare_update(self, obj: Payroll, changes: dict[str, Any]) -> dict[str, Any]:
        changes = await super().prepare_update(obj, changes)
        for name in (*EARNING_FIELDS, *DEDUCTION_FIELDS):
            if name in changes:
                changes[name] = quantize_money(changes[name])
        self._apply_totals(changes, source=obj)
        return changes

    def on_status_change(self, from_status: str | None, to_status: str, values: dict[str, Any]) -> None:
        if to_status == PaymentStatus.PROCESSED.value:
            values["processed_at"] = utcnow()

    async def stats(self, today: date | None = None) -> dict[str, Any]:
        """Current month totals: net amount sum, processed and pending counts."""
        today = today or date.today()
        return await self.cache.get_or_set(
            f"stats:payroll:{today.year}-{today.month:02d}",
            lambda: self._fetch_stats(today.month, today.year),
            ttl=ENTITY_TTL["stats"],
        )

    async def _fetch_stats(self, month: int, year: int) -> dict[str, Any]:
        def count_status(status: PaymentStatus) -> Any:
            return func.coalesce(func.sum(case((Payroll.status == status.value, 1), else_=0)), 0)

        result = await self.session.execute(
            select(
                func.coalesce(func.sum(Payroll.net_amount), 0),
                count_status(PaymentStatus.PROCESSED),
                count_status(PaymentStatus.PENDING),
            ).where(Payroll.month == month, Payroll.year == year)
        )
        total, processed, pending = result.one()
        return {
            "month": month,
            "year": year,
            "total_this_month": quantize_money(Decimal(str(total or 0))),
            "processed_this_month": int(processed or 0),
            "pending_this_month": int(pending or 0),
        }
