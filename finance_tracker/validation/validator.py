"""
Draft Validation

DESIGN DECISION: User input is checked BEFORE anything is persisted.
A rejected draft never reaches storage and leaves in-memory state untouched.

Checks fall into two groups:

FIELD CHECKS:
- Required field presence
- Amounts parse as finite, positive numbers
- Enumerated values (type, period) are recognised

CATALOG CHECKS:
- Category exists in the catalog
- Category type matches the transaction type
- Budgets only target expense categories, one budget per category

IMPORTANT: Validation NEVER silently fixes issues.
It reports every problem so the user can correct them in one pass.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from finance_tracker.models.categories import CategoryCatalog, get_default_catalog
from finance_tracker.models.finance import (
    Budget,
    BudgetDraft,
    BudgetPeriod,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


MAX_DESCRIPTION_LENGTH = 500


class FinanceValidationError(ValueError):
    """
    A draft was rejected.

    `str(error)` is the message to show the user.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.messages) or "Invalid input")

    @property
    def issues(self) -> list[ValidationIssue]:
        return list(self.result.issues)


def parse_amount(value) -> Optional[Decimal]:
    """
    Convert user input to a Decimal.

    Returns None when the value is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class FinanceValidator:
    """
    Validates transaction and budget drafts against the category catalog.
    """

    def __init__(self, catalog: Optional[CategoryCatalog] = None):
        self._catalog = catalog or get_default_catalog()

    @property
    def catalog(self) -> CategoryCatalog:
        return self._catalog

    def _check_amount(
        self,
        field: str,
        value,
        label: str,
    ) -> list[ValidationIssue]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            )]

        amount = parse_amount(value)
        if amount is None:
            return [ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"Please enter a valid {label.lower()}",
            )]
        if amount <= 0:
            return [ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} must be greater than zero",
            )]
        return []

    def validate_transaction(self, draft: TransactionDraft) -> ValidationResult:
        """
        Validate a transaction draft.

        Returns:
            ValidationResult listing every issue found
        """
        issues: list[ValidationIssue] = []

        # Type
        transaction_type: Optional[TransactionType] = None
        if _is_blank(draft.type):
            issues.append(ValidationIssue(
                field="type",
                issue_type="missing",
                message="Transaction type is required",
            ))
        else:
            try:
                transaction_type = TransactionType(draft.type)
            except ValueError:
                issues.append(ValidationIssue(
                    field="type",
                    issue_type="invalid_value",
                    message="Transaction type must be 'income' or 'expense'",
                ))

        # Amount
        issues.extend(self._check_amount("amount", draft.amount, "Amount"))

        # Category
        if _is_blank(draft.category):
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            ))
        else:
            category = self._catalog.get(draft.category)
            if category is None:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_category",
                    message=f"Unknown category: {draft.category}",
                ))
            elif transaction_type is not None and category.type != transaction_type:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="category_type_mismatch",
                    message=(
                        f"'{category.name}' is an {category.type.value} category "
                        f"and cannot be used for an {transaction_type.value}"
                    ),
                ))

        # Description
        if _is_blank(draft.description):
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
            ))
        elif len(draft.description) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
            ))

        return ValidationResult(entity_type="transaction", issues=issues)

    def validate_budget(
        self,
        draft: BudgetDraft,
        existing_budgets: Iterable[Budget] = (),
    ) -> ValidationResult:
        """
        Validate a budget draft.

        Args:
            draft: The submitted budget
            existing_budgets: Budgets already in the ledger (duplicate check)

        Returns:
            ValidationResult listing every issue found
        """
        issues: list[ValidationIssue] = []

        if _is_blank(draft.category):
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            ))
        else:
            category = self._catalog.get(draft.category)
            if category is None:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_category",
                    message=f"Unknown category: {draft.category}",
                ))
            elif category.type != TransactionType.EXPENSE:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="category_type_mismatch",
                    message=f"Budgets can only be set for expense categories, not '{category.name}'",
                ))
            elif any(b.category == draft.category for b in existing_budgets):
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="duplicate",
                    message=f"A budget already exists for {draft.category}",
                ))

        issues.extend(self._check_amount("limit", draft.limit, "Budget limit"))

        if _is_blank(draft.period):
            issues.append(ValidationIssue(
                field="period",
                issue_type="missing",
                message="Budget period is required",
            ))
        else:
            try:
                BudgetPeriod(draft.period)
            except ValueError:
                issues.append(ValidationIssue(
                    field="period",
                    issue_type="invalid_value",
                    message="Budget period must be 'weekly', 'monthly' or 'yearly'",
                ))

        return ValidationResult(entity_type="budget", issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-facing summary of validation results.
        """
        if result.is_valid:
            return "All checks passed."

        lines = ["Please fix the following:"]
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"   • {issue.message}")
        return "\n".join(lines)
