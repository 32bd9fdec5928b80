"""
BizDash Analytics - Mock Data Generators

Produces synthetic daily business records (one per day, going back
`days` days from a reference date) for the dashboard endpoints.
Pass a seed for reproducible output.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional

from bizdash.models.records import Record


REGIONS = ["North America", "Europe", "Asia Pacific", "Latin America", "Middle East & Africa"]
PRODUCTS = ["Product A", "Product B", "Product C", "Product D", "Product E"]
SALES_REPS = ["John Smith", "Jane Doe", "Bob Johnson", "Alice Williams", "Charlie Brown"]
PAYMENT_METHODS = ["Credit Card", "Debit Card", "PayPal", "UPI", "Cash on Delivery", "Bank Transfer"]
REVENUE_SEGMENTS = ["Enterprise", "SMB", "Consumer", "Government"]
EXPENSE_CATEGORIES = ["Salaries", "Marketing", "Operations", "R&D", "Infrastructure", "Administrative"]

DEFAULT_HISTORY_DAYS = 365


class MockDataGenerator:
    """
    Generates flat records for sales, performance, and financial payloads.

    Records carry ISO-8601 UTC date strings, like a parsed upstream API
    payload would.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        days: int = DEFAULT_HISTORY_DAYS,
        reference_date: Optional[datetime] = None
    ):
        """
        Initialize the generator.

        Args:
            seed: Random seed for reproducible data (None picks one at random)
            days: Number of daily records to generate
            reference_date: End of the generated range (default: now, UTC)
        """
        self.seed = seed if seed is not None else random.randrange(2 ** 32)
        self.days = days
        self.reference_date = reference_date or datetime.now(timezone.utc)

    def _rng(self, stream: str) -> random.Random:
        """Independent RNG per dataset so adding one dataset never shifts another."""
        return random.Random(f"{self.seed}:{stream}")

    def _dates(self) -> Iterator[str]:
        for offset in range(self.days, 0, -1):
            yield (self.reference_date - timedelta(days=offset)).isoformat()

    def iter_sales(self) -> Iterator[Record]:
        """Lazily yield daily sales records."""
        rng = self._rng("sales")
        for date in self._dates():
            yield {
                "date": date,
                "region": rng.choice(REGIONS),
                "product": rng.choice(PRODUCTS),
                "salesRep": rng.choice(SALES_REPS),
                "paymentMethod": rng.choice(PAYMENT_METHODS),
                "amount": rng.random() * 10000 + 5000,
                "orders": rng.randint(5, 24),
                "units": rng.randint(10, 59)
            }

    def generate_sales(self) -> List[Record]:
        """Daily sales records."""
        return list(self.iter_sales())

    def generate_performance(self) -> List[Record]:
        """Daily overall performance scores (80-90)."""
        rng = self._rng("performance")
        return [
            {"date": date, "overallScore": 80 + rng.random() * 10}
            for date in self._dates()
        ]

    def generate_financial(self) -> Dict[str, List[Record]]:
        """Daily revenue and expense records."""
        revenue_rng = self._rng("revenue")
        expense_rng = self._rng("expenses")

        revenue = []
        expenses = []
        for date in self._dates():
            revenue.append({
                "date": date,
                "segment": revenue_rng.choice(REVENUE_SEGMENTS),
                "amount": revenue_rng.random() * 50000 + 20000,
                "discount": revenue_rng.random() * 2000
            })
            expenses.append({
                "date": date,
                "category": expense_rng.choice(EXPENSE_CATEGORIES),
                "amount": expense_rng.random() * 30000 + 10000
            })

        return {"revenue": revenue, "expenses": expenses}
