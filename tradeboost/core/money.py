"""TradeBoost — Monetary Values.

Spend is carried as integer micros (1,000,000 per major unit) alongside its
currency code. Conversions to major units happen only through ``Money``.
"""

from pydantic import BaseModel, Field

MICROS_PER_UNIT = 1_000_000


class Money(BaseModel):
    """An amount in micros of ``currency_code``."""

    micros: int = 0
    currency_code: str = Field(default="GBP", min_length=3, max_length=3)

    model_config = {"frozen": True}

    @classmethod
    def from_major(cls, amount: float, currency_code: str) -> "Money":
        return cls(micros=round(amount * MICROS_PER_UNIT), currency_code=currency_code)

    @property
    def amount(self) -> float:
        """Value in major currency units (e.g. pounds)."""
        return self.micros / MICROS_PER_UNIT

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency_code != self.currency_code:
            raise ValueError(
                f"Cannot add {other.currency_code} to {self.currency_code}"
            )
        return Money(micros=self.micros + other.micros, currency_code=self.currency_code)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"
