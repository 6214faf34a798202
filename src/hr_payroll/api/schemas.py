"""Pydantic schemas for API request/response models.

JSON field names are camelCase; requests may use camelCase or snake_case.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from hr_payroll.models.enums import (
    EmployeeStatus,
    Module,
    PaymentStatus,
    TerminationReason,
    VacationStatus,
)

Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
Percent = Annotated[Decimal, Field(ge=0, le=100, max_digits=5, decimal_places=2)]
Month = Annotated[int, Field(ge=1, le=12)]
Year = Annotated[int, Field(ge=1900, le=2200)]
Name = Annotated[str, Field(min_length=1, max_length=200)]
Cpf = Annotated[str, Field(min_length=11, max_length=14)]
Password = Annotated[str, Field(min_length=6, max_length=72)]


class ApiModel(BaseModel):
    """Base schema: camelCase aliases, ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
        validate_default=True,
    )


# ============================================================================
# Branch schemas
# ============================================================================


class BranchCreate(ApiModel):
    """Schema for creating a branch."""

    fantasy_name: Name
    address: str = Field(min_length=1)
    phone: str | None = None
    email: str | None = None
    cnpj: str = Field(min_length=14, max_length=20)
    city: str = Field(min_length=1, max_length=120)
    state: str = Field(min_length=2, max_length=2)
    neighborhood: str = Field(min_length=1, max_length=120)
    zip_code: str = Field(min_length=8, max_length=10)
    active: bool = True


class BranchUpdate(ApiModel):
    """Schema for updating a branch. Only sent fields change."""

    fantasy_name: Name | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    cnpj: str | None = Field(default=None, min_length=14, max_length=20)
    city: str | None = None
    state: str | None = Field(default=None, min_length=2, max_length=2)
    neighborhood: str | None = None
    zip_code: str | None = Field(default=None, min_length=8, max_length=10)
    active: bool | None = None


class BranchResponse(ApiModel):
    id: str
    fantasy_name: str
    address: str
    phone: str | None = None
    email: str | None = None
    cnpj: str
    city: str
    state: str
    neighborhood: str
    zip_code: str
    active: bool
    created_at: datetime
    updated_at: datetime


# ============================================================================
# User and permission schemas
# ============================================================================


class UserCreate(ApiModel):
    name: Name
    email: str = Field(min_length=3, max_length=200)
    cpf: Cpf
    password: Password
    active: bool = True


class UserUpdate(ApiModel):
    name: Name | None = None
    email: str | None = Field(default=None, min_length=3, max_length=200)
    cpf: Cpf | None = None
    password: Password | None = None
    active: bool | None = None


class UserResponse(ApiModel):
    """User without the password hash."""

    id: str
    name: str
    email: str
    cpf: str
    active: bool
    created_at: datetime


class PermissionGroupCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None


class PermissionGroupUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None


class PermissionGroupResponse(ApiModel):
    id: str
    name: str
    description: str | None = None
    created_at: datetime


class UserGroupMembership(PermissionGroupResponse):
    """A group of a user, with the assignment time."""

    assigned_at: datetime


class UserGroupCreate(ApiModel):
    user_id: str
    group_id: str


class UserGroupResponse(ApiModel):
    id: str
    user_id: str
    group_id: str
    assigned_at: datetime


class ModulePermissionSet(ApiModel):
    """Schema for creating or replacing a group's flags for a module."""

    group_id: str
    module: Module
    can_read: bool = False
    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False


class ModulePermissionResponse(ApiModel):
    id: str
    group_id: str
    module: Module
    can_read: bool
    can_create: bool
    can_update: bool
    can_delete: bool


class ModuleGrantResponse(ApiModel):
    can_read: bool
    can_create: bool
    can_update: bool
    can_delete: bool


class EffectivePermissionsResponse(ApiModel):
    """Effective permissions of a user, one entry per module."""

    user_id: str
    permissions: dict[str, ModuleGrantResponse]


# ============================================================================
# Job position and employee schemas
# ============================================================================


class JobPositionCreate(ApiModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    base_salary: Money | None = None


class JobPositionUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    base_salary: Money | None = None


class JobPositionResponse(ApiModel):
    id: str
    name: str
    description: str | None = None
    base_salary: Decimal | None = None
    created_at: datetime


class EmployeeCreate(ApiModel):
    name: Name
    cpf: Cpf
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    branch_id: str
    position_id: str | None = None
    admission_date: date
    base_salary: Money
    agreed_salary: Money
    advance_percentage: Percent = Decimal("40.00")
    status: EmployeeStatus = EmployeeStatus.ACTIVE


class EmployeeUpdate(ApiModel):
    name: Name | None = None
    cpf: Cpf | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    branch_id: str | None = None
    position_id: str | None = None
    admission_date: date | None = None
    base_salary: Money | None = None
    agreed_salary: Money | None = None
    advance_percentage: Percent | None = None
    status: EmployeeStatus | None = None


class EmployeeResponse(ApiModel):
    id: str
    name: str
    cpf: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    branch_id: str
    position_id: str | None = None
    admission_date: date
    base_salary: Decimal
    agreed_salary: Decimal
    advance_percentage: Decimal
    status: EmployeeStatus
    created_at: datetime
    updated_at: datetime


class EmployeeStats(ApiModel):
    total: int
    active: int
    inactive: int
    on_leave: int


# ============================================================================
# Vacation and termination schemas
# ============================================================================


class VacationCreate(ApiModel):
    employee_id: str
    acquisition_period_start: date
    acquisition_period_end: date
    enjoyment_limit: date
    enjoyment_period_start: date | None = None
    enjoyment_period_end: date | None = None
    days: int = Field(default=30, gt=0, le=60)
    status: VacationStatus = VacationStatus.PENDING
    notes: str | None = None
    approved_by: str | None = None

    @model_validator(mode="after")
    def check_periods(self) -> "VacationCreate":
        if self.acquisition_period_end < self.acquisition_period_start:
            raise ValueError("acquisitionPeriodEnd must not precede acquisitionPeriodStart")
        if (
            self.enjoyment_period_start is not None
            and self.enjoyment_period_end is not None
            and self.enjoyment_period_end < self.enjoyment_period_start
        ):
            raise ValueError("enjoymentPeriodEnd must not precede enjoymentPeriodStart")
        return self


class VacationUpdate(ApiModel):
    employee_id: str | None = None
    acquisition_period_start: date | None = None
    acquisition_period_end: date | None = None
    enjoyment_limit: date | None = None
    enjoyment_period_start: date | None = None
    enjoyment_period_end: date | None = None
    days: int | None = Field(default=None, gt=0, le=60)
    status: VacationStatus | None = None
    notes: str | None = None
    approved_by: str | None = None


class VacationResponse(ApiModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    acquisition_period_start: date
    acquisition_period_end: date
    enjoyment_limit: date
    enjoyment_period_start: date | None = None
    enjoyment_period_end: date | None = None
    days: int
    status: VacationStatus
    notes: str | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    created_at: datetime


class VacationStats(ApiModel):
    pending: int
    approved: int
    active: int
    expiring: int


class TerminationCreate(ApiModel):
    employee_id: str
    termination_date: date
    reason: TerminationReason
    description: str | None = None
    receipt_issued: bool = False
    fgts_released: bool = False
    severance_processed: bool = False
    payment_date: date | None = None


class TerminationUpdate(ApiModel):
    employee_id: str | None = None
    termination_date: date | None = None
    reason: TerminationReason | None = None
    description: str | None = None
    receipt_issued: bool | None = None
    fgts_released: bool | None = None
    severance_processed: bool | None = None
    payment_date: date | None = None


class TerminationResponse(ApiModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    termination_date: date
    reason: TerminationReason
    description: str | None = None
    receipt_issued: bool
    fgts_released: bool
    severance_processed: bool
    payment_date: date | None = None
    created_at: datetime


# ============================================================================
# Advance and payroll schemas
# ============================================================================


class AdvanceCreate(ApiModel):
    """Schema for creating an advance.

    Base amount and percentage default to the employee's base salary and
    advance percentage. The advance amount is always computed server-side.
    """

    employee_id: str
    month: Month
    year: Year
    base_amount: Money | None = None
    percentage: Percent | None = None
    payment_date: date | None = None
    status: PaymentStatus = PaymentStatus.PENDING


class AdvanceUpdate(ApiModel):
    employee_id: str | None = None
    month: Month | None = None
    year: Year | None = None
    base_amount: Money | None = None
    percentage: Percent | None = None
    payment_date: date | None = None
    status: PaymentStatus | None = None


class AdvanceResponse(ApiModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    month: int
    year: int
    base_amount: Decimal
    percentage: Decimal
    advance_amount: Decimal
    payment_date: date | None = None
    status: PaymentStatus
    created_at: datetime


class PayrollComponents(ApiModel):
    """Earning and deduction components of a payroll entry."""

    night_shift_additional: Money = Decimal("0.00")
    night_shift_dsr: Money = Decimal("0.00")
    overtime: Money = Decimal("0.00")
    overtime_dsr: Money = Decimal("0.00")
    vacation_bonus: Money = Decimal("0.00")
    five_year_bonus: Money = Decimal("0.00")
    position_gratification: Money = Decimal("0.00")
    general_gratification: Money = Decimal("0.00")
    cashier_gratification: Money = Decimal("0.00")
    family_allowance: Money = Decimal("0.00")
    holiday_pay: Money = Decimal("0.00")
    unhealthiness: Money = Decimal("0.00")
    maternity_leave: Money = Decimal("0.00")
    tips: Money = Decimal("0.00")
    others: Money = Decimal("0.00")
    advance: Money = Decimal("0.00")
    vouchers: Money = Decimal("0.00")
    inss: Money = Decimal("0.00")
    inss_vacation: Money = Decimal("0.00")
    irpf: Money = Decimal("0.00")
    union_fee: Money = Decimal("0.00")
    absences: Money = Decimal("0.00")


class PayrollCreate(PayrollComponents):
    """Schema for creating a payroll entry. Gross and net are computed server-side."""

    employee_id: str
    month: Month
    year: Year
    base_salary: Money
    agreed_salary: Money = Decimal("0.00")
    absence_reason: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING


class PayrollUpdate(ApiModel):
    employee_id: str | None = None
    month: Month | None = None
    year: Year | None = None
    base_salary: Money | None = None
    agreed_salary: Money | None = None
    night_shift_additional: Money | None = None
    night_shift_dsr: Money | None = None
    overtime: Money | None = None
    overtime_dsr: Money | None = None
    vacation_bonus: Money | None = None
    five_year_bonus: Money | None = None
    position_gratification: Money | None = None
    general_gratification: Money | None = None
    cashier_gratification: Money | None = None
    family_allowance: Money | None = None
    holiday_pay: Money | None = None
    unhealthiness: Money | None = None
    maternity_leave: Money | None = None
    tips: Money | None = None
    others: Money | None = None
    advance: Money | None = None
    vouchers: Money | None = None
    inss: Money | None = None
    inss_vacation: Money | None = None
    irpf: Money | None = None
    union_fee: Money | None = None
    absences: Money | None = None
    absence_reason: str | None = None
    status: PaymentStatus | None = None


class PayrollResponse(ApiModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    month: int
    year: int
    base_salary: Decimal
    agreed_salary: Decimal
    night_shift_additional: Decimal
    night_shift_dsr: Decimal
    overtime: Decimal
    overtime_dsr: Decimal
    vacation_bonus: Decimal
    five_year_bonus: Decimal
    position_gratification: Decimal
    general_gratification: Decimal
    cashier_gratification: Decimal
    family_allowance: Decimal
    holiday_pay: Decimal
    unhealthiness: Decimal
    maternity_leave: Decimal
    tips: Decimal
    others: Decimal
    advance: Decimal
    vouchers: Decimal
    inss: Decimal
    inss_vacation: Decimal
    irpf: Decimal
    union_fee: Decimal
    absences: Decimal
    absence_reason: str | None = None
    gross_amount: Decimal
    net_amount: Decimal
    status: PaymentStatus
    processed_at: datetime | None = None
    created_at: datetime


class PayrollStats(ApiModel):
    month: int
    year: int
    total_this_month: Decimal
    processed_this_month: int
    pending_this_month: int


# ============================================================================
# Auth schemas
# ============================================================================


class LoginRequest(ApiModel):
    cpf: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshRequest(ApiModel):
    token: str = Field(min_length=1)


class AuthResponse(ApiModel):
    """Logged-in user and a signed session token."""

    user: UserResponse
    token: str
    expires_in: int


class CurrentUserResponse(ApiModel):
    user: UserResponse
    permissions: dict[str, ModuleGrantResponse]


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    request_id: str | None = None
    context: dict[str, Any] | None = None


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Schema for validation error response."""

    detail: str
    code: str
    errors: list[FieldError]
