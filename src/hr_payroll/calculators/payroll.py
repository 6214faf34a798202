"""Derived-amount computation for advances and payroll entries.

All amounts are fixed-point decimals with 2 fractional digits. Missing
components count as zero.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

# Components summed into the gross amount
EARNING_FIELDS: tuple[str, ...] = (
    "base_salary",
    "agreed_salary",
    "night_shift_additional",
    "night_shift_dsr",
    "overtime",
    "overtime_dsr",
    "vacation_bonus",
    "five_year_bonus",
    "position_gratification",
    "general_gratification",
    "cashier_gratification",
    "family_allowance",
    "holiday_pay",
    "unhealthiness",
    "maternity_leave",
    "tips",
    "others",
)

# Components subtracted from the gross amount
DEDUCTION_FIELDS: tuple[str, ...] = (
    "advance",
    "vouchers",
    "inss",
    "inss_vacation",
    "irpf",
    "union_fee",
    "absences",
)


def quantize_money(value: Any) -> Decimal:
    """Round a value to cents. None counts as zero."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_advance_amount(base_amount: Any, percentage: Any) -> Decimal:
    """Advance amount = base amount x percentage / 100, rounded to cents."""
    base = quantize_money(base_amount)
    pct = quantize_money(percentage)
    return quantize_money(base * pct / HUNDRED)


@dataclass(frozen=True)
class PayrollTotals:
    """Computed totals of a payroll entry."""

    gross: Decimal
    deductions: Decimal
    net: Decimal


def sum_components(values: Mapping[str, Any], fields: tuple[str, ...]) -> Decimal:
    """Sum the named components of a payroll entry."""
    total = ZERO
    for name in fields:
        total += quantize_money(values.get(name))
    return total


def compute_payroll_totals(values: Mapping[str, Any]) -> PayrollTotals:
    """Compute gross and net amounts from earning and deduction components."""
    gross = sum_components(values, EARNING_FIELDS)
    deductions = sum_components(values, DEDUCTION_FIELDS)
    return PayrollTotals(
        gross=quantize_money(gross),
        deductions=quantize_money(deductions),
        net=quantize_money(gross - deductions),
    )
