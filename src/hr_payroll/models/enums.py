"""Enumerations shared by models, services and API schemas."""

from __future__ import annotations

from enum import Enum


class EmployeeStatus(str, Enum):
    """Employee status values."""

    ACTIVE = "ativo"
    INACTIVE = "inativo"
    ON_LEAVE = "afastado"


class VacationStatus(str, Enum):
    """Vacation status values."""

    PENDING = "pendente"
    APPROVED = "aprovado"
    IN_PROGRESS = "em_gozo"
    COMPLETED = "concluido"
    REJECTED = "rejeitado"


class TerminationReason(str, Enum):
    """Reasons for an employee's contract end."""

    DISMISSAL = "demissao"
    RESCISSION = "rescisao"
    RETIREMENT = "aposentadoria"
    ABANDONMENT = "abandono"
    DEATH = "falecimento"


class PaymentStatus(str, Enum):
    """Status of advances and payroll entries."""

    PENDING = "pendente"
    PROCESSED = "processado"
    PAID = "pago"


class Module(str, Enum):
    """Functional areas used as the unit of permission granting."""

    DASHBOARD = "dashboard"
    EMPLOYEES = "employees"
    VACATIONS = "vacations"
    TERMINATIONS = "terminations"
    ADVANCES = "advances"
    PAYROLL = "payroll"
    PERMISSIONS = "permissions"
    BRANCHES = "branches"
    JOB_POSITIONS = "job_positions"


class Action(str, Enum):
    """CRUD actions checked against module permissions."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def check_values(enum_cls: type[Enum]) -> str:
    """Render enum values for a SQL ``IN`` check constraint."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
