"""Payroll and advance calculators."""

from hr_payroll.calculators.payroll import (
    DEDUCTION_FIELDS,
    EARNING_FIELDS,
    PayrollTotals,
    compute_advance_amount,
    compute_payroll_totals,
    quantize_money,
)

__all__ = [
    "DEDUCTION_FIELDS",
    "EARNING_FIELDS",
    "PayrollTotals",
    "compute_advance_amount",
    "compute_payroll_totals",
    "quantize_money",
]
