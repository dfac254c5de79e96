"""
Category Catalog

DESIGN DECISION: Categories are a fixed, predefined list rather than free
text. This keeps budgets and transactions pointing at the same names and
lets the validator reject typos before they reach storage.
"""

from typing import Iterable, Optional

from finance_tracker.models.finance import Category, TransactionType


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    # Expense categories
    Category(id="1", name="Food & Dining", icon="🍽️", color="#FF6B6B", type=TransactionType.EXPENSE),
    Category(id="2", name="Transportation", icon="🚗", color="#4ECDC4", type=TransactionType.EXPENSE),
    Category(id="3", name="Shopping", icon="🛍️", color="#45B7D1", type=TransactionType.EXPENSE),
    Category(id="4", name="Entertainment", icon="🎬", color="#96CEB4", type=TransactionType.EXPENSE),
    Category(id="5", name="Bills & Utilities", icon="💡", color="#FFEAA7", type=TransactionType.EXPENSE),
    Category(id="6", name="Healthcare", icon="🏥", color="#DDA0DD", type=TransactionType.EXPENSE),
    Category(id="7", name="Education", icon="📚", color="#98D8C8", type=TransactionType.EXPENSE),
    Category(id="8", name="Other", icon="📦", color="#A8A8A8", type=TransactionType.EXPENSE),
    # Income categories
    Category(id="9", name="Salary", icon="💰", color="#00B894", type=TransactionType.INCOME),
    Category(id="10", name="Freelance", icon="💻", color="#00A085", type=TransactionType.INCOME),
    Category(id="11", name="Investment", icon="📈", color="#00B894", type=TransactionType.INCOME),
    Category(id="12", name="Gift", icon="🎁", color="#55A3FF", type=TransactionType.INCOME),
    Category(id="13", name="Other Income", icon="💎", color="#6C5CE7", type=TransactionType.INCOME),
)

DEFAULT_COLOR = "#6366f1"
DEFAULT_ICON = "💰"


class CategoryCatalog:
    """
    Read-only lookup over a set of categories.

    Names are matched exactly; the catalog is the single source of truth
    for which names are valid.
    """

    def __init__(self, categories: Iterable[Category] = DEFAULT_CATEGORIES):
        self._categories = tuple(categories)
        self._by_name = {category.name: category for category in self._categories}

    def __iter__(self):
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[Category]:
        return self._by_name.get(name)

    def is_known(self, name: str) -> bool:
        return name in self._by_name

    def for_type(self, category_type: TransactionType) -> list[Category]:
        """Categories usable for one transaction type, in catalog order."""
        return [c for c in self._categories if c.type == category_type]

    def names(self, category_type: Optional[TransactionType] = None) -> list[str]:
        if category_type is None:
            return [c.name for c in self._categories]
        return [c.name for c in self.for_type(category_type)]

    def color_for(self, name: str, default: str = DEFAULT_COLOR) -> str:
        category = self.get(name)
        return category.color if category else default

    def icon_for(self, name: str, default: str = DEFAULT_ICON) -> str:
        category = self.get(name)
        return category.icon if category else default


def get_default_catalog() -> CategoryCatalog:
    return CategoryCatalog(DEFAULT_CATEGORIES)
