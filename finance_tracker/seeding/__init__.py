"""Sample data package."""

from finance_tracker.seeding.sample_data import (
    SAMPLE_BUDGETS,
    SAMPLE_TRANSACTIONS,
    SEED_FLAG_KEY,
    SampleDataSeeder,
    SeedResult,
    build_sample_budgets,
    build_sample_transactions,
)

__all__ = [
    "SAMPLE_BUDGETS",
    "SAMPLE_TRANSACTIONS",
    "SEED_FLAG_KEY",
    "SampleDataSeeder",
    "SeedResult",
    "build_sample_budgets",
    "build_sample_transactions",
]
