"""Validation package."""

from finance_tracker.validation.validator import (
    FinanceValidationError,
    FinanceValidator,
    parse_amount,
)

__all__ = ["FinanceValidationError", "FinanceValidator", "parse_amount"]
