"""
Public Stripe configuration (publishable key, webhook base URL and prices).

The data lives in a static JSON file keyed by environment name so that the
same build can target the test and live Stripe accounts. Secret keys are never
stored there; they come from the environment and are merged in by the config
loader.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import InvalidStripeEnvError, PriceNotFoundError


CURRENCY_SYMBOLS: dict[str, str] = {
    "EUR": "€",
    "GBP": "£",
    "USD": "$",
}


class StripePrice(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    account_type: int
    period: Literal["monthly", "yearly"]
    amount: str
    currency: str = "EUR"

    @property
    def formatted_amount(self) -> str:
        return f"{CURRENCY_SYMBOLS.get(self.currency, self.currency)}{self.amount}"

    @property
    def formatted_monthly_amount(self) -> str:
        """Amount per month, so that yearly plans can be compared with monthly ones."""
        if self.period == "monthly":
            return self.formatted_amount
        monthly = float(self.amount) / 12
        return f"{CURRENCY_SYMBOLS.get(self.currency, self.currency)}{monthly:.2f}"


class StripePublicConfig(BaseModel):
    publishable_key: str = ""
    webhook_base_url: str = ""
    prices: list[StripePrice] = Field(default_factory=list)


def load_stripe_config(env: str, path: Path) -> StripePublicConfig:
    """Load the public Stripe config for ``env`` from the JSON file at ``path``.

    Raises
    ------
    InvalidStripeEnvError
        If the file has no entry for ``env``.
    """
    with open(path, encoding="utf-8") as f:
        configs = json.load(f)

    data = configs.get(env)
    if data is None:
        raise InvalidStripeEnvError(env)
    return StripePublicConfig.model_validate(data)


def find_price(config: StripePublicConfig, account_type: int, period: str) -> StripePrice:
    for price in config.prices:
        if price.account_type == account_type and price.period == period:
            return price
    raise PriceNotFoundError(account_type, period)
